"""Order status transition rules (single source of truth).

Admins may move an order to any status from any other status; the matrix
below documents the conventional flow and which statuses are terminal, but
only unknown statuses are rejected. The one side effect encoded here is the
stock decrement owed when an order enters ``shipped``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from backoffice.domain.order import OrderStatus

CONVENTIONAL_TRANSITIONS: Mapping[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAYMENT_SENT, OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_SENT: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None
    decrement_stock: bool = False
    conventional: bool = True


def is_conventional_transition(current: str | None, target: str) -> bool:
    if current is None or current == target:
        return True
    return target in CONVENTIONAL_TRANSITIONS.get(current, frozenset())


def validate_order_transition(
    *,
    current_status: str | None,
    target_status: str | None,
) -> TransitionValidationResult:
    """Validate the target status and report whether stock must be decremented."""
    if not target_status:
        return TransitionValidationResult(False, "New status is missing.")

    target = OrderStatus.normalize(target_status)
    current = OrderStatus.normalize(current_status) if current_status is not None else None

    if not OrderStatus.is_valid(target):
        return TransitionValidationResult(False, f"Unsupported status: {target}")

    if current is not None and not OrderStatus.is_valid(current):
        # Legacy rows may carry unknown statuses; overwriting them is allowed.
        current = None

    return TransitionValidationResult(
        True,
        decrement_stock=target == OrderStatus.SHIPPED and current != OrderStatus.SHIPPED,
        conventional=is_conventional_transition(current, target),
    )
