"""Tests for scope-keyed periodic refresh."""
from __future__ import annotations

import asyncio

import pytest

from backoffice.core.constants import EntityType, PollScope
from backoffice.services.polling import PollingScheduler


async def _wait_for(predicate, timeout: float = 1.0) -> None:
    for _ in range(int(timeout / 0.01)):
        if predicate():
            return
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_scope_refresh_pulls_orders(container, remote) -> None:
    remote.seed(EntityType.ORDERS, [{"id": "o1", "status": "paid"}])
    scheduler = PollingScheduler(container.bridge)

    scheduler.start(PollScope.ORDERS, interval=0.01)
    await _wait_for(lambda: "o1" in container.local.orders)
    scheduler.stop_all()

    assert "o1" in container.local.orders


@pytest.mark.asyncio
async def test_restarting_scope_cancels_previous_token(container) -> None:
    scheduler = PollingScheduler(container.bridge)

    first = scheduler.start(PollScope.CATALOG, interval=10)
    second = scheduler.start(PollScope.CATALOG, interval=10)
    await asyncio.sleep(0)

    assert first.cancelled
    assert not second.cancelled
    assert scheduler.token(PollScope.CATALOG) is second
    scheduler.stop(PollScope.CATALOG)
    await asyncio.sleep(0)
    assert not scheduler.is_running(PollScope.CATALOG)


@pytest.mark.asyncio
async def test_stop_does_not_abort_inflight_refresh(container) -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    finished: list[str] = []

    class SlowScheduler(PollingScheduler):
        async def refresh(self, scope: str) -> None:
            started.set()
            await release.wait()
            finished.append(scope)

    scheduler = SlowScheduler(container.bridge)
    token = scheduler.start(PollScope.USERS, interval=10)
    await asyncio.wait_for(started.wait(), timeout=1)

    scheduler.stop(PollScope.USERS)
    release.set()
    await _wait_for(lambda: finished)

    assert token.cancelled
    assert finished == [PollScope.USERS]


def test_default_intervals() -> None:
    scheduler = PollingScheduler(bridge=None)  # type: ignore[arg-type]
    assert scheduler.intervals == {
        PollScope.CATALOG: 5.0,
        PollScope.ORDERS: 30.0,
        PollScope.USERS: 60.0,
    }


@pytest.mark.asyncio
async def test_unknown_scope_rejected(container) -> None:
    scheduler = PollingScheduler(container.bridge)
    with pytest.raises(ValueError):
        scheduler.start("everything")
