"""Stock decrement owed when an order ships."""
from __future__ import annotations

from dataclasses import dataclass, field

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.core.metrics import metrics
from backoffice.domain.entities import Order, OrderItem
from backoffice.repositories.stock_repository import StockRepository
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger


class DecrementOutcome:
    APPLIED = "applied"
    NO_MATCH = "no_match"
    INSUFFICIENT = "insufficient"


@dataclass(slots=True)
class ItemDecrement:
    product_name: str
    producer_id: str
    quantity: int
    outcome: str
    stock_id: str | None = None
    remaining: int | None = None


@dataclass(slots=True)
class StockDecrementReport:
    order_id: str
    items: list[ItemDecrement] = field(default_factory=list)

    def _count(self, outcome: str) -> int:
        return sum(1 for item in self.items if item.outcome == outcome)

    @property
    def applied(self) -> int:
        return self._count(DecrementOutcome.APPLIED)

    @property
    def no_match(self) -> int:
        return self._count(DecrementOutcome.NO_MATCH)

    @property
    def insufficient(self) -> int:
        return self._count(DecrementOutcome.INSUFFICIENT)


class StockReconciler:
    """Applies order quantities to matching stock rows.

    A stock row matches an order item when the producer id is equal and the
    product name is equal ignoring case. Missing or insufficient stock is not
    an error: the item is skipped and reported.
    """

    def __init__(self, stock: StockRepository, queue: ReconciliationQueue):
        self.stock = stock
        self.queue = queue

    def _decrement_item(self, order_id: str, item: OrderItem) -> ItemDecrement:
        result = ItemDecrement(item.product_name, item.producer_id, item.quantity, DecrementOutcome.NO_MATCH)

        stock_item = self.stock.find_for_order_item(item.product_name, item.producer_id)
        if stock_item is None:
            logger.debug(f"Order {order_id}: no stock row for {item.product_name!r} ({item.producer_id})")
            return result

        result.stock_id = stock_item.id
        if not self.stock.decrement(stock_item.id, item.quantity):
            result.outcome = DecrementOutcome.INSUFFICIENT
            result.remaining = stock_item.quantity
            logger.debug(
                f"Order {order_id}: insufficient stock for {item.product_name!r} "
                f"({stock_item.quantity} < {item.quantity})"
            )
            return result

        result.outcome = DecrementOutcome.APPLIED
        result.remaining = stock_item.quantity
        self.queue.enqueue(
            EntityType.STOCK_ITEMS,
            SyncOperation.UPDATE,
            stock_item.id,
            {"quantity": stock_item.quantity, "updated_at": stock_item.to_remote()["updated_at"]},
        )
        return result

    def decrement_stock_for_order(self, order: Order) -> StockDecrementReport:
        report = StockDecrementReport(order_id=order.id)
        for item in order.items:
            decrement = self._decrement_item(order.id, item)
            metrics.stock_decrements.inc(outcome=decrement.outcome)
            report.items.append(decrement)

        logger.info(
            f"Stock decrement for order {order.id}: {report.applied} applied, "
            f"{report.no_match} unmatched, {report.insufficient} insufficient"
        )
        return report
