"""Value Objects for domain model."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Rarity(str, Enum):
    """Lot rarity tiers, ordered from most to least common."""

    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    PLATINUM = "platinum"
    LEGENDARY = "legendary"


@dataclass(frozen=True, slots=True)
class RarityTier:
    label: str
    color: str
    probability: Decimal  # percent
    odds: str


RARITY_CONFIG: dict[Rarity, RarityTier] = {
    Rarity.COMMON: RarityTier("Commun", "#9CA3AF", Decimal("97.87"), "~1/1"),
    Rarity.RARE: RarityTier("Rare", "#3B82F6", Decimal("1.33"), "1/75"),
    Rarity.EPIC: RarityTier("Épique", "#8B5CF6", Decimal("0.5"), "1/200"),
    Rarity.PLATINUM: RarityTier("Platinum", "#E5E4E2", Decimal("0.2"), "1/500"),
    Rarity.LEGENDARY: RarityTier("Légendaire", "#F59E0B", Decimal("0.1"), "1/1000"),
}


class LotType(str, Enum):
    """What a lot grants when drawn."""

    PRODUCT = "product"
    DISCOUNT = "discount"
