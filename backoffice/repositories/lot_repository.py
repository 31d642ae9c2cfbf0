"""Lot repository with the weighted rewards draw."""
from __future__ import annotations

import random
from decimal import Decimal

from backoffice.core.constants import EntityType
from backoffice.domain.entities import Lot
from backoffice.domain.value_objects import RARITY_CONFIG, Rarity

from .base import BaseRepository


class LotRepository(BaseRepository[Lot]):
    entity_type = EntityType.LOTS
    entity_cls = Lot

    def active(self) -> list[Lot]:
        return [lot for lot in self.list_all() if lot.active]

    def by_rarity(self, rarity: Rarity | str) -> list[Lot]:
        wanted = Rarity(rarity)
        return [lot for lot in self.list_all() if lot.rarity == wanted]

    def toggle_active(self, lot_id: str) -> Lot | None:
        lot = self.get(lot_id)
        if lot is None:
            return None
        lot.active = not lot.active
        return lot

    def draw_random(self, rng: random.Random | None = None) -> Lot | None:
        """Draw an active lot.

        A rarity is picked by cumulative probability weight, then a lot of
        that rarity; when none exists any active lot is drawn instead.
        """
        rng = rng or random.Random()
        active_lots = self.active()
        if not active_lots:
            return None

        roll = Decimal(str(rng.random() * 100))
        cumulative = Decimal("0")
        selected = Rarity.COMMON
        for rarity, tier in RARITY_CONFIG.items():
            cumulative += tier.probability
            if roll <= cumulative:
                selected = rarity
                break

        candidates = [lot for lot in active_lots if lot.rarity == selected]
        return rng.choice(candidates or active_lots)
