"""
Manual and scheduled transfers between local collections and the remote store.

Push upserts every local entity of a type, one at a time; a failure on one
entity does not stop the others. Pull fetches a remote collection and hands
it to a merge strategy; an empty remote collection never clears local data.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from backoffice.core.constants import EntityType
from backoffice.core.metrics import metrics
from backoffice.integrations.remote_store import RemoteStore, upsert_remote
from backoffice.integrations.sentry_integration import capture_exception, capture_message
from backoffice.repositories import BaseRepository, LocalStore
from backoffice.repositories.order_repository import sort_newest_first
from logging_config import logger


class MergeStrategy(Protocol):
    def merge(self, repository: BaseRepository, incoming: list) -> int:
        """Merge parsed remote entities into the local repository; returns local size."""
        ...


class ReplaceMergeStrategy:
    """Remote wins: the local collection is replaced wholesale."""

    def merge(self, repository: BaseRepository, incoming: list) -> int:
        return repository.replace_all(incoming)


@dataclass(slots=True)
class TransferResult:
    entity_type: str
    direction: str
    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    error_key: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.error_key is None


@dataclass(slots=True)
class SyncReport:
    direction: str
    results: list[TransferResult] = field(default_factory=list)
    error_key: str | None = None

    @property
    def succeeded(self) -> int:
        return sum(result.succeeded for result in self.results)

    @property
    def failed(self) -> int:
        return sum(result.failed for result in self.results)

    @property
    def ok(self) -> bool:
        return self.error_key is None and all(result.ok for result in self.results)

    def counts(self) -> dict[str, dict[str, int]]:
        return {
            result.entity_type: {"succeeded": result.succeeded, "failed": result.failed}
            for result in self.results
        }


class SyncBridge:
    def __init__(
        self,
        local: LocalStore,
        store: RemoteStore,
        merge_strategy: MergeStrategy | None = None,
    ):
        self.local = local
        self.store = store
        self.merge_strategy = merge_strategy or ReplaceMergeStrategy()

    @property
    def configured(self) -> bool:
        return self.store.configured

    async def push(self, entity_type: str) -> TransferResult:
        result = TransferResult(entity_type, "push")
        if not self.configured:
            result.error_key = "not_configured"
            return result

        repository = self.local.for_entity(entity_type)
        for entity in repository.list_all():
            try:
                await upsert_remote(self.store, entity_type, entity.to_remote())
                result.succeeded += 1
            except Exception as e:
                result.failed += 1
                result.errors.append(f"{entity.id}: {e}")
                logger.error(f"Push {entity_type}/{entity.id} failed: {e}")
                capture_exception(e, entity_type=entity_type, entity_id=entity.id, direction="push")

        metrics.transfers.inc(result.succeeded, direction="push", entity_type=entity_type)
        logger.info(f"Pushed {entity_type}: {result.succeeded} ok, {result.failed} failed")
        return result

    async def pull(self, entity_type: str) -> TransferResult:
        result = TransferResult(entity_type, "pull")
        if not self.configured:
            result.error_key = "not_configured"
            return result

        try:
            rows = await self.store.fetch_all(entity_type)
        except Exception as e:
            result.failed = 1
            result.errors.append(str(e))
            logger.error(f"Pull {entity_type} failed: {e}")
            capture_exception(e, entity_type=entity_type, direction="pull")
            return result

        if not rows:
            logger.debug(f"Pull {entity_type}: remote collection empty, local data kept")
            return result

        repository = self.local.for_entity(entity_type)
        entities = repository.from_remote_rows(rows)
        if not entities:
            result.failed = len(rows)
            result.errors.append("no valid rows in remote collection")
            logger.warning(f"Pull {entity_type}: {len(rows)} rows, none valid, local data kept")
            capture_message(f"Pull {entity_type}: no valid rows", level="warning", rows=len(rows))
            return result

        if entity_type == EntityType.ORDERS:
            entities = sort_newest_first(entities)

        self.merge_strategy.merge(repository, entities)
        result.succeeded = len(entities)
        result.failed = len(rows) - len(entities)
        metrics.transfers.inc(result.succeeded, direction="pull", entity_type=entity_type)
        logger.info(f"Pulled {entity_type}: {result.succeeded} entities")
        return result

    async def push_all(self, entity_types: Iterable[str] = EntityType.CATALOG) -> SyncReport:
        report = SyncReport("push")
        if not self.configured:
            report.error_key = "not_configured"
            return report
        for entity_type in entity_types:
            report.results.append(await self.push(entity_type))
        return report

    async def pull_all(self, entity_types: Iterable[str] = EntityType.CATALOG) -> SyncReport:
        report = SyncReport("pull")
        if not self.configured:
            report.error_key = "not_configured"
            return report
        results = await asyncio.gather(*(self.pull(entity_type) for entity_type in entity_types))
        report.results.extend(results)
        return report
