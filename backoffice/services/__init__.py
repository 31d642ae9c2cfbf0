"""Business services orchestrating domain logic."""

from .sync_queue import ReconciliationQueue, SyncTask
from .stock_reconciler import StockDecrementReport, StockReconciler
from .stock_admin import StockAdminService
from .payment_validation import PaymentValidationResult, PaymentValidationService
from .order_lifecycle import OrderLifecycleService, OrderUpdateResult, shows_tracking_field
from .sync_bridge import MergeStrategy, ReplaceMergeStrategy, SyncBridge, SyncReport, TransferResult
from .polling import PollingScheduler
from .catalog_admin import CatalogAdminService
from .ticket_grant import TicketGrantService

__all__ = [
    "CatalogAdminService",
    "MergeStrategy",
    "OrderLifecycleService",
    "OrderUpdateResult",
    "PaymentValidationResult",
    "PaymentValidationService",
    "PollingScheduler",
    "ReconciliationQueue",
    "ReplaceMergeStrategy",
    "StockAdminService",
    "StockDecrementReport",
    "StockReconciler",
    "SyncBridge",
    "SyncReport",
    "SyncTask",
    "TicketGrantService",
    "TransferResult",
    "shows_tracking_field",
]
