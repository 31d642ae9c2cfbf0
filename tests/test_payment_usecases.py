"""Tests for payment validation and ticket distribution."""
from __future__ import annotations

from dataclasses import dataclass

import pytest

from backoffice.application.orders.validate_payment import validate_and_distribute_tickets
from backoffice.core.constants import EntityType, SyncOperation
from backoffice.domain.entities import RemoteRecord
from backoffice.domain.order import OrderStatus


def test_validate_payment_sets_flags_and_tickets(container, pending_order) -> None:
    result = container.payments.validate_payment(pending_order.id, validated_by="admin@shop")

    assert result.success is True
    assert result.tickets_distributed == 2
    assert pending_order.payment_validated is True
    assert pending_order.payment_validated_at is not None
    assert pending_order.payment_validated_by == "admin@shop"
    assert pending_order.tickets_earned == 2
    assert pending_order.tickets_distributed is False


def test_validate_payment_is_idempotent(container, pending_order) -> None:
    first = container.payments.validate_payment(pending_order.id)
    validated_at = pending_order.payment_validated_at

    second = container.payments.validate_payment(pending_order.id)

    assert first.success is True
    assert second.success is False
    assert second.error_key == "already_validated"
    assert pending_order.payment_validated_at == validated_at


def test_validate_payment_moves_pending_to_paid(container, pending_order) -> None:
    container.payments.validate_payment(pending_order.id)
    assert pending_order.status == OrderStatus.PAID


def test_validate_payment_keeps_later_status(container, pending_order) -> None:
    container.lifecycle.set_status(pending_order.id, "shipped")

    container.payments.validate_payment(pending_order.id)

    assert pending_order.status == OrderStatus.SHIPPED


def test_validate_payment_recomputes_tickets_from_total(container, pending_order) -> None:
    pending_order.tickets_earned = 99

    result = container.payments.validate_payment(pending_order.id)

    assert result.tickets_distributed == 2
    assert pending_order.tickets_earned == 2


def test_validate_payment_unknown_order(container) -> None:
    result = container.payments.validate_payment("order-missing")
    assert result.success is False
    assert result.error_key == "not_found"


def test_validate_payment_requires_configured_remote(local_only_container, customer, item_factory) -> None:
    order = local_only_container.lifecycle.create_order(customer, [item_factory(quantity=3, unit_price="15")])

    result = local_only_container.payments.validate_payment(order.id)

    assert result.success is False
    assert result.error_key == "not_configured"
    assert order.payment_validated is False
    assert order.status == OrderStatus.PENDING


def test_tickets_cannot_be_distributed_before_validation(container, pending_order) -> None:
    result = container.payments.mark_tickets_distributed(pending_order.id)

    assert result.success is False
    assert result.error_key == "payment_not_validated"
    assert pending_order.tickets_distributed is False


def test_mark_tickets_distributed_after_validation(container, pending_order) -> None:
    container.payments.validate_payment(pending_order.id)

    first = container.payments.mark_tickets_distributed(pending_order.id)
    queued = len(container.queue.tasks)
    second = container.payments.mark_tickets_distributed(pending_order.id)

    assert first.success and second.success
    assert pending_order.tickets_distributed is True
    assert len(container.queue.tasks) == queued


@dataclass
class DummyTicketGrant:
    ok: bool = True
    raises: bool = False

    def __post_init__(self):
        self.granted: list[tuple[str, int]] = []

    async def __call__(self, order, tickets: int) -> bool:
        if self.raises:
            raise RuntimeError("rewards service down")
        self.granted.append((order.id, tickets))
        return self.ok


@pytest.mark.asyncio
async def test_validate_and_distribute_success(container, pending_order) -> None:
    grant = DummyTicketGrant(ok=True)

    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=grant
    )

    assert result.ok is True
    assert result.tickets == 2
    assert grant.granted == [(pending_order.id, 2)]
    assert pending_order.tickets_distributed is True


@pytest.mark.asyncio
async def test_failed_grant_leaves_tickets_undistributed(container, pending_order) -> None:
    grant = DummyTicketGrant(raises=True)

    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=grant
    )

    assert result.ok is False
    assert result.error_key == "grant_failed"
    assert pending_order.payment_validated is True
    assert pending_order.tickets_distributed is False


@pytest.mark.asyncio
async def test_validate_and_distribute_already_validated(container, pending_order) -> None:
    container.payments.validate_payment(pending_order.id)
    grant = DummyTicketGrant()

    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=grant
    )

    assert result.ok is False
    assert result.error_key == "already_validated"
    assert grant.granted == []


@pytest.mark.asyncio
async def test_validate_and_distribute_without_grant_service(container, pending_order) -> None:
    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=None
    )

    assert result.ok is False
    assert result.error_key == "service_unavailable"
    assert pending_order.payment_validated is False
    assert pending_order.tickets_distributed is False
    assert container.payments.validate_payment(pending_order.id).success is True


@pytest.mark.asyncio
async def test_grant_credits_matching_profile(container, remote, pending_order) -> None:
    profile = container.local.user_profiles.add(
        RemoteRecord(id="user-1", email=pending_order.customer_info.email.upper(), tickets=1)
    )

    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=container.ticket_grants.grant
    )

    assert result.ok is True
    assert profile.tickets == 3
    assert pending_order.tickets_distributed is True
    task = next(task for task in container.queue.tasks if task.entity_type == EntityType.USER_PROFILES)
    assert (task.operation, task.entity_id, task.payload["tickets"]) == (SyncOperation.UPSERT, "user-1", 3)

    await container.queue.drain()
    assert remote.tables[EntityType.USER_PROFILES]["user-1"]["tickets"] == 3


@pytest.mark.asyncio
async def test_grant_without_profile_fails(container, pending_order) -> None:
    result = await validate_and_distribute_tickets(
        pending_order.id, payments=container.payments, grant_tickets=container.ticket_grants.grant
    )

    assert result.ok is False
    assert result.error_key == "grant_failed"
    assert pending_order.payment_validated is True
    assert pending_order.tickets_distributed is False
