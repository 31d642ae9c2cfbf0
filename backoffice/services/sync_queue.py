"""
Reconciliation queue for local mutations.

Every local mutation is applied first and then recorded here as a
``SyncTask``. ``drain()`` replays pending tasks against the remote store in
enqueue order, retrying each one with exponential backoff. Tasks that
exhaust their attempts are marked failed, logged and reported to Sentry;
the local state is never rolled back.

Ordering is per entity: while an entity has a failed task, its later tasks
are held until ``retry_failed()`` re-queues the failed one. Enqueuing a
``DELETE`` drops every earlier unsent task for the same entity.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from backoffice.core.config import SyncConfig
from backoffice.core.constants import SyncOperation, SyncTaskStatus
from backoffice.core.metrics import metrics
from backoffice.core.retry import backoff_delay
from backoffice.core.utils import new_entity_id, utcnow
from backoffice.integrations.remote_store import RemoteStore, upsert_remote
from backoffice.integrations.sentry_integration import capture_exception
from logging_config import logger


@dataclass(slots=True)
class SyncTask:
    entity_type: str
    operation: str
    entity_id: str
    payload: dict[str, Any] | None = None
    id: str = field(default_factory=lambda: new_entity_id("sync"))
    status: str = SyncTaskStatus.PENDING
    attempts: int = 0
    last_error: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    synced_at: datetime | None = None


class ReconciliationQueue:
    """FIFO of remote writes owed by local mutations."""

    def __init__(self, store: RemoteStore, config: SyncConfig | None = None):
        self.store = store
        self.config = config or SyncConfig()
        self._tasks: list[SyncTask] = []
        self._drain_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None
        self._warned_unconfigured = False

    # ------------------------------------------------------------------
    # Enqueue
    # ------------------------------------------------------------------

    def enqueue(
        self,
        entity_type: str,
        operation: str,
        entity_id: str,
        payload: dict[str, Any] | None = None,
    ) -> SyncTask | None:
        """Record a remote write. Returns None when no remote is configured."""
        if not self.store.configured:
            if not self._warned_unconfigured:
                logger.warning("Remote store not configured, local changes will not be synced")
                self._warned_unconfigured = True
            return None

        if operation == SyncOperation.DELETE:
            self._drop_unsent(entity_type, entity_id)

        task = SyncTask(entity_type, operation, entity_id, payload)
        self._tasks.append(task)
        metrics.sync_tasks.inc(entity_type=entity_type, outcome="enqueued")
        self._update_depth()
        logger.debug(f"Queued {operation} {entity_type}/{entity_id}")
        return task

    def _drop_unsent(self, entity_type: str, entity_id: str) -> None:
        # An in-flight (syncing) task is left alone; the delete runs after it.
        unsent = (SyncTaskStatus.PENDING, SyncTaskStatus.FAILED)
        kept = [
            task
            for task in self._tasks
            if not (task.entity_type == entity_type and task.entity_id == entity_id and task.status in unsent)
        ]
        dropped = len(self._tasks) - len(kept)
        if dropped:
            self._tasks = kept
            logger.info(f"Dropped {dropped} unsent tasks for deleted {entity_type}/{entity_id}")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> list[SyncTask]:
        return list(self._tasks)

    @property
    def pending_count(self) -> int:
        return sum(1 for task in self._tasks if task.status == SyncTaskStatus.PENDING)

    @property
    def failed_count(self) -> int:
        return sum(1 for task in self._tasks if task.status == SyncTaskStatus.FAILED)

    def failed_tasks(self) -> list[SyncTask]:
        return [task for task in self._tasks if task.status == SyncTaskStatus.FAILED]

    def _update_depth(self) -> None:
        metrics.sync_queue_depth.set(self.pending_count, status=SyncTaskStatus.PENDING)
        metrics.sync_queue_depth.set(self.failed_count, status=SyncTaskStatus.FAILED)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _execute(self, task: SyncTask) -> None:
        table = task.entity_type
        if task.operation == SyncOperation.INSERT:
            await self.store.insert(table, task.payload or {"id": task.entity_id})
        elif task.operation == SyncOperation.UPDATE:
            await self.store.update(table, task.entity_id, task.payload or {})
        elif task.operation == SyncOperation.UPSERT:
            await upsert_remote(self.store, table, {"id": task.entity_id, **(task.payload or {})})
        elif task.operation == SyncOperation.DELETE:
            await self.store.delete(table, task.entity_id)
        else:
            raise ValueError(f"Unknown sync operation: {task.operation}")

    async def _run_task(self, task: SyncTask) -> bool:
        task.status = SyncTaskStatus.SYNCING
        while True:
            task.attempts += 1
            try:
                await self._execute(task)
            except Exception as e:
                task.last_error = str(e)
                if task.attempts >= self.config.max_attempts:
                    task.status = SyncTaskStatus.FAILED
                    metrics.sync_tasks.inc(entity_type=task.entity_type, outcome="failed")
                    logger.error(
                        f"Sync {task.operation} {task.entity_type}/{task.entity_id} failed "
                        f"after {task.attempts} attempts: {e}"
                    )
                    capture_exception(
                        e,
                        entity_type=task.entity_type,
                        entity_id=task.entity_id,
                        operation=task.operation,
                        attempts=task.attempts,
                    )
                    return False

                delay = backoff_delay(task.attempts, self.config.base_delay, self.config.max_delay)
                logger.warning(
                    f"Sync {task.operation} {task.entity_type}/{task.entity_id} failed "
                    f"(attempt {task.attempts}/{self.config.max_attempts}): {e}. Retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
                continue

            task.status = SyncTaskStatus.SYNCED
            task.synced_at = utcnow()
            task.last_error = None
            metrics.sync_tasks.inc(entity_type=task.entity_type, outcome="synced")
            return True

    async def drain(self) -> tuple[int, int]:
        """Run pending tasks in order.

        A pending task whose entity already has a failed task is held for a
        later pass so remote writes for one entity never overtake each other.

        Returns:
            (synced, failed) counts for this pass
        """
        synced = failed = 0
        async with self._drain_lock:
            blocked = {
                (task.entity_type, task.entity_id)
                for task in self._tasks
                if task.status == SyncTaskStatus.FAILED
            }
            for task in list(self._tasks):
                if task.status != SyncTaskStatus.PENDING or task not in self._tasks:
                    continue
                key = (task.entity_type, task.entity_id)
                if key in blocked:
                    continue
                if await self._run_task(task):
                    synced += 1
                else:
                    failed += 1
                    blocked.add(key)
            # Synced tasks are done; failed ones stay visible for retry_failed()
            self._tasks = [task for task in self._tasks if task.status != SyncTaskStatus.SYNCED]
            self._update_depth()

        if synced or failed:
            logger.info(f"Reconciliation pass: {synced} synced, {failed} failed")
        return synced, failed

    def retry_failed(self) -> int:
        """Move failed tasks back to pending with a fresh attempt budget."""
        count = 0
        for task in self._tasks:
            if task.status == SyncTaskStatus.FAILED:
                task.status = SyncTaskStatus.PENDING
                task.attempts = 0
                count += 1
        self._update_depth()
        if count:
            logger.info(f"Re-queued {count} failed sync tasks")
        return count

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._drain_loop())
        logger.info(f"Reconciliation queue started (every {self.config.drain_interval}s)")

    async def stop(self) -> None:
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
            logger.info("Reconciliation queue stopped")

    async def _drain_loop(self) -> None:
        while True:
            try:
                await self.drain()
                await asyncio.sleep(self.config.drain_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Reconciliation loop error: {e}")
                await asyncio.sleep(self.config.drain_interval)
