"""Order repository."""
from __future__ import annotations

from backoffice.core.constants import EntityType
from backoffice.core.exceptions import OrderNotFoundException
from backoffice.domain.entities import Order
from backoffice.domain.order import OrderStatus

from .base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Local orders collection."""

    entity_type = EntityType.ORDERS
    entity_cls = Order

    def require(self, order_id: str) -> Order:
        order = self.get(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    def list_recent(self) -> list[Order]:
        """All orders, newest first."""
        return sort_newest_first(self.list_all())

    def by_status(self, status: str) -> list[Order]:
        wanted = OrderStatus.normalize(status)
        return [order for order in self.list_recent() if order.status == wanted]

    def by_customer_email(self, email: str) -> list[Order]:
        wanted = (email or "").strip().lower()
        return [
            order
            for order in self.list_recent()
            if order.customer_info.email.strip().lower() == wanted
        ]

    def count_by_status(self) -> dict[str, int]:
        counts = {status: 0 for status in OrderStatus.ALL}
        for order in self.list_all():
            counts[order.status] = counts.get(order.status, 0) + 1
        return counts

    def awaiting_validation(self) -> list[Order]:
        """Orders whose payment has not been validated yet (excluding cancelled)."""
        return [
            order
            for order in self.list_recent()
            if not order.payment_validated and order.status != OrderStatus.CANCELLED
        ]


def sort_newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)
