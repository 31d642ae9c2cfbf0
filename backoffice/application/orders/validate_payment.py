"""Use case: validate an order payment and hand out its tickets."""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from logging_config import logger

GrantTickets = Callable[[Any, int], Awaitable[bool]]


@dataclass
class TicketDistributionResult:
    ok: bool
    error_key: str | None = None
    order: Any | None = None
    tickets: int = 0


async def validate_and_distribute_tickets(
    order_id: str,
    *,
    payments: Any,
    grant_tickets: GrantTickets | None,
    validated_by: str | None = None,
) -> TicketDistributionResult:
    if not grant_tickets:
        # Before validation: without a grant service the order stays unvalidated
        return TicketDistributionResult(False, "service_unavailable")

    validation = payments.validate_payment(order_id, validated_by=validated_by)
    if not validation.success:
        return TicketDistributionResult(False, validation.error_key, order=validation.order)

    order = validation.order
    tickets = validation.tickets_distributed
    if tickets <= 0:
        # Nothing to hand out; still counts as distributed
        payments.mark_tickets_distributed(order_id)
        return TicketDistributionResult(True, order=order, tickets=0)

    try:
        granted = await grant_tickets(order, tickets)
    except Exception as e:
        logger.error(f"Ticket grant failed for order {order_id}: {e}")
        granted = False

    if not granted:
        return TicketDistributionResult(False, "grant_failed", order=order, tickets=tickets)

    marked = payments.mark_tickets_distributed(order_id)
    if not marked.success:
        return TicketDistributionResult(False, marked.error_key, order=order, tickets=tickets)

    return TicketDistributionResult(True, order=order, tickets=tickets)
