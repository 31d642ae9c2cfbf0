"""Repository layer for local entity collections."""
from __future__ import annotations

from dataclasses import dataclass, field

from backoffice.core.constants import EntityType

from .base import BaseRepository
from .catalog_repository import (
    PackRepository,
    ProducerRepository,
    PromoRepository,
    RecordRepository,
)
from .lot_repository import LotRepository
from .order_repository import OrderRepository
from .stock_repository import StockRepository


@dataclass(slots=True)
class LocalStore:
    """One repository per entity type, injected into services."""

    orders: OrderRepository = field(default_factory=OrderRepository)
    stock: StockRepository = field(default_factory=StockRepository)
    producers: ProducerRepository = field(default_factory=ProducerRepository)
    lots: LotRepository = field(default_factory=LotRepository)
    packs: PackRepository = field(default_factory=PackRepository)
    promos: PromoRepository = field(default_factory=PromoRepository)
    app_data: RecordRepository = field(
        default_factory=lambda: RecordRepository(EntityType.APP_DATA)
    )
    user_profiles: RecordRepository = field(
        default_factory=lambda: RecordRepository(EntityType.USER_PROFILES)
    )

    def for_entity(self, entity_type: str) -> BaseRepository:
        repositories: dict[str, BaseRepository] = {
            EntityType.ORDERS: self.orders,
            EntityType.STOCK_ITEMS: self.stock,
            EntityType.PRODUCERS: self.producers,
            EntityType.LOTS: self.lots,
            EntityType.PACKS: self.packs,
            EntityType.PROMO_PRODUCTS: self.promos,
            EntityType.APP_DATA: self.app_data,
            EntityType.USER_PROFILES: self.user_profiles,
        }
        try:
            return repositories[entity_type]
        except KeyError:
            raise ValueError(f"Unknown entity type: {entity_type}") from None


__all__ = [
    "BaseRepository",
    "LocalStore",
    "LotRepository",
    "OrderRepository",
    "PackRepository",
    "ProducerRepository",
    "PromoRepository",
    "RecordRepository",
    "StockRepository",
]
