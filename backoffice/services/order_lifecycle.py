"""
Order lifecycle service.

Admins may set any of the five statuses at any time. Entering ``shipped``
from another status decrements stock for the order's items before the new
status is written. Every local change is then queued for the remote store;
a remote failure never reverts it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.core.exceptions import ValidationException
from backoffice.core.metrics import metrics
from backoffice.core.order_math import calc_order_totals
from backoffice.core.utils import datetime_to_json
from backoffice.domain.entities import CustomerInfo, Order, OrderItem
from backoffice.domain.order import OrderStatus
from backoffice.domain.order_fsm import validate_order_transition
from backoffice.repositories.order_repository import OrderRepository
from backoffice.services.stock_reconciler import StockDecrementReport, StockReconciler
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger


@dataclass
class OrderUpdateResult:
    ok: bool
    error_key: str | None = None
    order: Order | None = None
    previous_status: str | None = None
    stock_report: StockDecrementReport | None = None
    reason: str | None = None


def shows_tracking_field(order: Order) -> bool:
    """Tracking input is shown for shipped orders or when a number exists."""
    return order.status == OrderStatus.SHIPPED or bool(order.tracking_number)


class OrderLifecycleService:
    def __init__(
        self,
        orders: OrderRepository,
        stock_reconciler: StockReconciler,
        queue: ReconciliationQueue,
    ):
        self.orders = orders
        self.stock_reconciler = stock_reconciler
        self.queue = queue

    def _enqueue_update(self, order: Order, fields: dict[str, Any]) -> None:
        payload = {**fields, "updated_at": datetime_to_json(order.updated_at)}
        self.queue.enqueue(EntityType.ORDERS, SyncOperation.UPDATE, order.id, payload)

    def set_status(self, order_id: str, new_status: str) -> OrderUpdateResult:
        order = self.orders.get(order_id)
        if order is None:
            return OrderUpdateResult(False, "not_found")

        previous = order.status
        check = validate_order_transition(current_status=previous, target_status=new_status)
        if not check.allowed:
            logger.warning(f"Order {order_id}: rejected status change to {new_status!r}: {check.reason}")
            return OrderUpdateResult(False, "invalid_status", order=order, previous_status=previous, reason=check.reason)

        target = OrderStatus.normalize(new_status)
        stock_report = None
        if check.decrement_stock:
            stock_report = self.stock_reconciler.decrement_stock_for_order(order)

        order.status = target
        order.touch()
        metrics.status_changes.inc(status=target)
        if not check.conventional:
            logger.info(f"Order {order_id}: unconventional transition {previous} -> {target}")
        logger.info(f"Order {order_id} status: {previous} -> {target}")

        self._enqueue_update(order, {"status": target})
        return OrderUpdateResult(True, order=order, previous_status=previous, stock_report=stock_report)

    def set_tracking_number(self, order_id: str, tracking_number: str | None) -> OrderUpdateResult:
        order = self.orders.get(order_id)
        if order is None:
            return OrderUpdateResult(False, "not_found")

        order.tracking_number = tracking_number
        order.touch()
        self._enqueue_update(order, {"tracking_number": tracking_number})
        return OrderUpdateResult(True, order=order, previous_status=order.status)

    def set_notes(self, order_id: str, notes: str | None) -> OrderUpdateResult:
        order = self.orders.get(order_id)
        if order is None:
            return OrderUpdateResult(False, "not_found")

        order.notes = notes
        order.touch()
        self._enqueue_update(order, {"notes": notes})
        return OrderUpdateResult(True, order=order, previous_status=order.status)

    def delete(self, order_id: str) -> OrderUpdateResult:
        order = self.orders.get(order_id)
        if order is None:
            return OrderUpdateResult(False, "not_found")

        self.orders.remove(order_id)
        self.queue.enqueue(EntityType.ORDERS, SyncOperation.DELETE, order_id)
        logger.info(f"Order {order_id} deleted")
        return OrderUpdateResult(True, order=order, previous_status=order.status)

    def create_order(
        self,
        customer_info: CustomerInfo | dict,
        items: Iterable[OrderItem | dict],
        *,
        is_pro_order: bool = False,
        notes: str | None = None,
    ) -> Order:
        """Create a pending order from admin manual entry."""
        order_items = [
            item if isinstance(item, OrderItem) else OrderItem.model_validate(item) for item in items
        ]
        if not order_items:
            raise ValidationException("An order needs at least one item")
        info = (
            customer_info
            if isinstance(customer_info, CustomerInfo)
            else CustomerInfo.model_validate(customer_info)
        )
        totals = calc_order_totals(order_items)
        order = Order(
            status=OrderStatus.PENDING,
            customer_info=info,
            items=order_items,
            subtotal=totals.subtotal,
            shipping_fee=totals.shipping_fee,
            total=totals.total,
            tickets_earned=totals.tickets_earned,
            payment_validated=False,
            tickets_distributed=False,
            is_pro_order=is_pro_order,
            notes=notes,
        )
        self.orders.add(order)
        self.queue.enqueue(EntityType.ORDERS, SyncOperation.INSERT, order.id, order.to_remote())
        logger.info(f"Order {order.id} created: total {totals.total}, {totals.tickets_earned} tickets")
        return order
