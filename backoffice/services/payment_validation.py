"""Payment validation and ticket distribution flags."""
from __future__ import annotations

from dataclasses import dataclass

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.core.metrics import metrics
from backoffice.core.order_math import tickets_earned
from backoffice.core.utils import datetime_to_json, utcnow
from backoffice.domain.entities import Order
from backoffice.domain.order import OrderStatus
from backoffice.integrations.remote_store import RemoteStore
from backoffice.repositories.order_repository import OrderRepository
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger

STATUSES_PAID_ON_VALIDATION = (OrderStatus.PENDING, OrderStatus.PAYMENT_SENT)


@dataclass
class PaymentValidationResult:
    success: bool
    tickets_distributed: int = 0
    error_key: str | None = None
    order: Order | None = None


class PaymentValidationService:
    """Validates order payments once and records ticket distribution.

    Requires a configured remote store: validation is a shared fact that
    every client must see, so it is refused in local-only mode.
    """

    def __init__(self, orders: OrderRepository, store: RemoteStore, queue: ReconciliationQueue):
        self.orders = orders
        self.store = store
        self.queue = queue

    def validate_payment(self, order_id: str, validated_by: str | None = None) -> PaymentValidationResult:
        if not self.store.configured:
            logger.warning(f"Payment validation for order {order_id} refused: remote store not configured")
            return PaymentValidationResult(False, error_key="not_configured")

        order = self.orders.get(order_id)
        if order is None:
            return PaymentValidationResult(False, error_key="not_found")

        if order.payment_validated:
            return PaymentValidationResult(False, error_key="already_validated", order=order)

        tickets = tickets_earned(order.total)
        now = utcnow()
        order.payment_validated = True
        order.payment_validated_at = now
        order.payment_validated_by = validated_by
        order.tickets_earned = tickets
        if order.status in STATUSES_PAID_ON_VALIDATION:
            order.status = OrderStatus.PAID
            metrics.status_changes.inc(status=OrderStatus.PAID)
        order.touch()

        self.queue.enqueue(
            EntityType.ORDERS,
            SyncOperation.UPDATE,
            order.id,
            {
                "payment_validated": True,
                "payment_validated_at": datetime_to_json(now),
                "payment_validated_by": validated_by,
                "tickets_earned": tickets,
                "status": order.status,
                "updated_at": datetime_to_json(order.updated_at),
            },
        )
        metrics.payments_validated.inc()
        metrics.tickets_issued.inc(tickets)
        logger.info(f"Payment validated for order {order_id} by {validated_by or 'admin'}: {tickets} tickets")
        return PaymentValidationResult(True, tickets_distributed=tickets, order=order)

    def mark_tickets_distributed(self, order_id: str) -> PaymentValidationResult:
        order = self.orders.get(order_id)
        if order is None:
            return PaymentValidationResult(False, error_key="not_found")

        if not order.payment_validated:
            return PaymentValidationResult(False, error_key="payment_not_validated", order=order)

        if order.tickets_distributed:
            return PaymentValidationResult(True, tickets_distributed=order.tickets_earned, order=order)

        order.tickets_distributed = True
        order.touch()
        self.queue.enqueue(
            EntityType.ORDERS,
            SyncOperation.UPDATE,
            order.id,
            {"tickets_distributed": True, "updated_at": datetime_to_json(order.updated_at)},
        )
        logger.info(f"Tickets marked distributed for order {order_id}")
        return PaymentValidationResult(True, tickets_distributed=order.tickets_earned, order=order)
