"""Stock repository."""
from __future__ import annotations

import logging
from decimal import Decimal

from backoffice.core.constants import EntityType
from backoffice.core.utils import utcnow
from backoffice.domain.entities import StockItem

from .base import BaseRepository

logger = logging.getLogger(__name__)


class StockRepository(BaseRepository[StockItem]):
    """Local stock collection.

    Quantity writers (``decrement``, ``set_quantity``) are
    reserved for the stock reconciler and the stock admin service.
    """

    entity_type = EntityType.STOCK_ITEMS
    entity_cls = StockItem

    def find_for_order_item(self, product_name: str, producer_id: str) -> StockItem | None:
        """Find stock by case-insensitive product name and producer id."""
        for item in self.list_all():
            if item.matches(product_name, producer_id):
                return item
        return None

    def by_producer(self, producer_id: str) -> list[StockItem]:
        return [item for item in self.list_all() if item.producer_id == producer_id]

    def decrement(self, stock_id: str, quantity: int) -> bool:
        """Subtract quantity if enough stock is on hand.

        Returns:
            True if applied, False if not found or insufficient
        """
        item = self.get(stock_id)
        if item is None or quantity <= 0 or item.quantity < quantity:
            return False
        item.quantity -= quantity
        item.updated_at = utcnow()
        return True

    def set_quantity(self, stock_id: str, quantity: int) -> StockItem | None:
        item = self.get(stock_id)
        if item is None:
            return None
        item.quantity = max(0, int(quantity))
        item.updated_at = utcnow()
        return item

    def low_stock(self) -> list[StockItem]:
        return [item for item in self.list_all() if item.is_low_stock]

    def total_value(self) -> Decimal:
        return sum((item.stock_value for item in self.list_all()), Decimal("0"))
