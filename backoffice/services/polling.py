"""
Periodic remote refresh, keyed by scope.

Each scope (catalog, orders, users) owns one cancellable schedule. Starting a
scope again replaces its schedule. Stopping only prevents further cycles:
refreshes already running are left to finish, and a slow refresh may
overlap the next one.
"""
from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field

from backoffice.core.constants import DEFAULT_POLL_INTERVALS, EntityType, PollScope
from backoffice.services.sync_bridge import SyncBridge
from logging_config import logger

SCOPE_ENTITIES: dict[str, tuple[str, ...]] = {
    PollScope.CATALOG: EntityType.CATALOG + (EntityType.STOCK_ITEMS,),
    PollScope.ORDERS: (EntityType.ORDERS,),
    PollScope.USERS: (EntityType.USER_PROFILES,),
}


@dataclass
class ScheduleToken:
    scope: str
    interval: float
    cancelled: bool = False
    cycles: int = 0
    task: asyncio.Task | None = None
    refreshes: set[asyncio.Task] = field(default_factory=set)

    def cancel(self) -> None:
        self.cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


class PollingScheduler:
    def __init__(self, bridge: SyncBridge, intervals: Mapping[str, float] | None = None):
        self.bridge = bridge
        self.intervals = dict(DEFAULT_POLL_INTERVALS)
        if intervals:
            self.intervals.update(intervals)
        self._tokens: dict[str, ScheduleToken] = {}

    def token(self, scope: str) -> ScheduleToken | None:
        return self._tokens.get(scope)

    def is_running(self, scope: str) -> bool:
        token = self._tokens.get(scope)
        return token is not None and not token.cancelled

    async def refresh(self, scope: str) -> None:
        for entity_type in SCOPE_ENTITIES[scope]:
            result = await self.bridge.pull(entity_type)
            if result.errors:
                logger.warning(f"Poll {scope}: {entity_type} refresh had errors: {result.errors[0]}")

    def start(self, scope: str, interval: float | None = None) -> ScheduleToken:
        """Schedule periodic refreshes; replaces any schedule for the scope."""
        if scope not in SCOPE_ENTITIES:
            raise ValueError(f"Unknown poll scope: {scope}")

        previous = self._tokens.get(scope)
        if previous is not None:
            previous.cancel()

        token = ScheduleToken(scope, interval if interval is not None else self.intervals[scope])
        token.task = asyncio.create_task(self._schedule(token))
        self._tokens[scope] = token
        logger.info(f"Polling {scope} every {token.interval}s")
        return token

    def stop(self, scope: str) -> None:
        token = self._tokens.pop(scope, None)
        if token is not None:
            token.cancel()
            logger.info(f"Polling {scope} stopped")

    def start_all(self) -> None:
        for scope in SCOPE_ENTITIES:
            self.start(scope)

    def stop_all(self) -> None:
        for scope in list(self._tokens):
            self.stop(scope)

    async def _schedule(self, token: ScheduleToken) -> None:
        # Refreshes run as their own tasks so cancelling the schedule
        # does not abort them.
        try:
            while not token.cancelled:
                refresh = asyncio.create_task(self._run_refresh(token))
                token.refreshes.add(refresh)
                refresh.add_done_callback(token.refreshes.discard)
                token.cycles += 1
                await asyncio.sleep(token.interval)
        except asyncio.CancelledError:
            pass

    async def _run_refresh(self, token: ScheduleToken) -> None:
        try:
            await self.refresh(token.scope)
        except Exception as e:
            logger.error(f"Poll {token.scope} refresh failed: {e}")
