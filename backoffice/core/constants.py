"""Application-wide constants and configuration values.

Centralizes money rules, sync cadences and remote table names so the
checkout, the admin views and the sync layer share one definition.
"""
from decimal import Decimal

# ============== MONEY ==============
CURRENCY = "EUR"
FREE_SHIPPING_THRESHOLD = Decimal("50")
STANDARD_SHIPPING_FEE = Decimal("4.90")
DEFAULT_TVA_RATE = Decimal("20")
EUROS_PER_TICKET = Decimal("20")
MONEY_QUANTUM = Decimal("0.01")

# ============== REMOTE STORE ==============
REMOTE_TIMEOUT_SECONDS = 10
REMOTE_MAX_RETRIES = 3
REMOTE_BACKOFF_SECONDS = 1
REMOTE_MAX_BACKOFF_SECONDS = 30
REMOTE_BACKOFF_JITTER_SECONDS = 0.5


class EntityType:
    """Remote collections shared by every client (table names)."""

    ORDERS = "orders"
    STOCK_ITEMS = "stock_items"
    PRODUCERS = "producers"
    LOTS = "lots"
    PACKS = "packs"
    PROMO_PRODUCTS = "promo_products"
    APP_DATA = "app_data"
    USER_PROFILES = "user_profiles"

    ALL = (
        ORDERS,
        STOCK_ITEMS,
        PRODUCERS,
        LOTS,
        PACKS,
        PROMO_PRODUCTS,
        APP_DATA,
        USER_PROFILES,
    )

    # Collections moved by the manual "push all" / "pull all" action
    CATALOG = (PRODUCERS, LOTS, PACKS, PROMO_PRODUCTS)


class SyncOperation:
    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"


class SyncTaskStatus:
    PENDING = "pending"
    SYNCING = "syncing"
    SYNCED = "synced"
    FAILED = "failed"


# ============== POLLING (seconds) ==============
class PollScope:
    CATALOG = "catalog"
    ORDERS = "orders"
    USERS = "users"


DEFAULT_POLL_INTERVALS = {
    PollScope.CATALOG: 5.0,
    PollScope.ORDERS: 30.0,  # silent refresh, no busy indicator
    PollScope.USERS: 60.0,
}
