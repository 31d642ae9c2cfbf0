"""Domain package."""

from .entities import (
    CustomerInfo,
    Lot,
    LotItem,
    Order,
    OrderItem,
    Pack,
    PackItem,
    Producer,
    PromoProduct,
    RemoteRecord,
    StockItem,
)
from .order import ORDER_STATUS_CONFIG, OrderStatus
from .value_objects import RARITY_CONFIG, LotType, Rarity

__all__ = [
    # Entities
    "Order",
    "OrderItem",
    "CustomerInfo",
    "StockItem",
    "PromoProduct",
    "Lot",
    "LotItem",
    "Pack",
    "PackItem",
    "Producer",
    "RemoteRecord",
    # Value Objects
    "OrderStatus",
    "ORDER_STATUS_CONFIG",
    "Rarity",
    "RARITY_CONFIG",
    "LotType",
]
