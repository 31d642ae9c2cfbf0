"""Admin stock operations behind the stock list (+/- buttons, delete)."""
from __future__ import annotations

from decimal import Decimal

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.core.exceptions import StockItemNotFoundException
from backoffice.domain.entities import StockItem
from backoffice.repositories.stock_repository import StockRepository
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger


class StockAdminService:
    def __init__(self, stock: StockRepository, queue: ReconciliationQueue):
        self.stock = stock
        self.queue = queue

    def _enqueue_quantity(self, item: StockItem) -> None:
        self.queue.enqueue(
            EntityType.STOCK_ITEMS,
            SyncOperation.UPDATE,
            item.id,
            {"quantity": item.quantity, "updated_at": item.to_remote()["updated_at"]},
        )

    def list_items(self, producer_id: str | None = None) -> list[StockItem]:
        items = self.stock.by_producer(producer_id) if producer_id else self.stock.list_all()
        return sorted(items, key=lambda item: (item.producer_name, item.product_name))

    def add_item(self, item: StockItem) -> StockItem:
        self.stock.add(item)
        self.queue.enqueue(EntityType.STOCK_ITEMS, SyncOperation.INSERT, item.id, item.to_remote())
        logger.info(f"Stock {item.id} added: {item.product_name} x{item.quantity}")
        return item

    def adjust_quantity(self, stock_id: str, delta: int) -> StockItem:
        """Add ``delta`` units, clamping the result at zero.

        Raises:
            StockItemNotFoundException: Unknown stock id
        """
        item = self.stock.get(stock_id)
        if item is None:
            raise StockItemNotFoundException(stock_id)

        new_quantity = max(0, item.quantity + int(delta))
        self.stock.set_quantity(stock_id, new_quantity)
        self._enqueue_quantity(item)
        logger.info(f"Stock {stock_id} adjusted by {delta}: now {item.quantity}")
        return item

    def set_quantity(self, stock_id: str, quantity: int) -> StockItem:
        item = self.stock.set_quantity(stock_id, quantity)
        if item is None:
            raise StockItemNotFoundException(stock_id)
        self._enqueue_quantity(item)
        return item

    def remove(self, stock_id: str) -> bool:
        if not self.stock.remove(stock_id):
            return False
        self.queue.enqueue(EntityType.STOCK_ITEMS, SyncOperation.DELETE, stock_id)
        logger.info(f"Stock {stock_id} removed")
        return True

    def low_stock_items(self) -> list[StockItem]:
        return self.stock.low_stock()

    def total_stock_value(self) -> Decimal:
        return self.stock.total_value()
