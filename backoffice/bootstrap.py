"""Application bootstrap wiring repositories, remote store and services."""
from __future__ import annotations

from dataclasses import dataclass

from backoffice.core.config import Settings
from backoffice.integrations.remote_store import RemoteStore, SupabaseRestStore
from backoffice.repositories import LocalStore
from backoffice.services.catalog_admin import CatalogAdminService
from backoffice.services.order_lifecycle import OrderLifecycleService
from backoffice.services.payment_validation import PaymentValidationService
from backoffice.services.polling import PollingScheduler
from backoffice.services.stock_admin import StockAdminService
from backoffice.services.stock_reconciler import StockReconciler
from backoffice.services.sync_bridge import SyncBridge
from backoffice.services.sync_queue import ReconciliationQueue
from backoffice.services.ticket_grant import TicketGrantService
from logging_config import logger


@dataclass
class Container:
    settings: Settings
    local: LocalStore
    store: RemoteStore
    queue: ReconciliationQueue
    stock_reconciler: StockReconciler
    stock_admin: StockAdminService
    catalog_admin: CatalogAdminService
    lifecycle: OrderLifecycleService
    payments: PaymentValidationService
    ticket_grants: TicketGrantService
    bridge: SyncBridge
    polling: PollingScheduler

    async def start(self) -> None:
        """Start background reconciliation and polling (remote configured only)."""
        if not self.store.configured:
            logger.warning("Remote store not configured, running in local-only mode")
            return
        await self.bridge.pull_all()
        await self.queue.start()
        self.polling.start_all()

    async def stop(self) -> None:
        self.polling.stop_all()
        await self.queue.stop()
        if self.store.configured:
            await self.queue.drain()
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()


def build_container(
    settings: Settings,
    *,
    store: RemoteStore | None = None,
    local: LocalStore | None = None,
) -> Container:
    """Create runtime components from configuration."""
    store = store if store is not None else SupabaseRestStore(settings.remote)
    local = local if local is not None else LocalStore()
    queue = ReconciliationQueue(store, settings.sync)
    stock_reconciler = StockReconciler(local.stock, queue)
    bridge = SyncBridge(local, store)

    return Container(
        settings=settings,
        local=local,
        store=store,
        queue=queue,
        stock_reconciler=stock_reconciler,
        stock_admin=StockAdminService(local.stock, queue),
        catalog_admin=CatalogAdminService(local, queue),
        lifecycle=OrderLifecycleService(local.orders, stock_reconciler, queue),
        payments=PaymentValidationService(local.orders, store, queue),
        ticket_grants=TicketGrantService(local.user_profiles, queue),
        bridge=bridge,
        polling=PollingScheduler(bridge, settings.sync.poll_intervals),
    )
