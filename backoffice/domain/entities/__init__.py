"""Domain entities."""

from .lot import Lot, LotItem
from .order import CustomerInfo, Order, OrderItem
from .pack import Pack, PackItem
from .producer import Producer
from .promo import PromoProduct
from .record import RemoteRecord
from .stock import StockItem

__all__ = [
    "CustomerInfo",
    "Lot",
    "LotItem",
    "Order",
    "OrderItem",
    "Pack",
    "PackItem",
    "Producer",
    "PromoProduct",
    "RemoteRecord",
    "StockItem",
]
