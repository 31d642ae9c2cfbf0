"""Promo product entity model."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backoffice.core.utils import (
    datetime_to_json,
    ensure_aware,
    get_field,
    money_to_json,
    new_entity_id,
    to_decimal,
    utcnow,
)


class PromoProduct(BaseModel):
    """Discounted catalog product.

    ``promo_price`` is stored as computed by the admin form; the calculator in
    ``backoffice.core.order_math.promo_price`` is the single formula used to
    produce it.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: new_entity_id("promo"))
    product_id: str = Field(..., description="Catalog product ID")
    producer_id: str = Field(..., description="Producer ID")
    product_name: str = Field("", description="Product name")
    producer_name: str = Field("", description="Producer name")
    original_price: Decimal = Field(..., ge=0)
    promo_price: Decimal = Field(..., ge=0)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    active: bool = True
    valid_until: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("valid_until", "created_at")
    @classmethod
    def make_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v)

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.producer_id)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.valid_until is None:
            return False
        return (now or utcnow()) > self.valid_until

    def to_remote(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "producer_id": self.producer_id,
            "product_name": self.product_name,
            "producer_name": self.producer_name,
            "original_price": money_to_json(self.original_price),
            "promo_price": money_to_json(self.promo_price),
            "discount_percent": money_to_json(self.discount_percent),
            "active": self.active,
            "valid_until": datetime_to_json(self.valid_until),
            "created_at": datetime_to_json(self.created_at),
        }

    @classmethod
    def from_remote(cls, row: dict) -> PromoProduct:
        data = {
            "id": str(row["id"]),
            "product_id": str(get_field(row, "product_id", "")),
            "producer_id": str(get_field(row, "producer_id", "")),
            "product_name": get_field(row, "product_name", ""),
            "producer_name": get_field(row, "producer_name", ""),
            "original_price": to_decimal(get_field(row, "original_price")),
            "promo_price": to_decimal(get_field(row, "promo_price")),
            "discount_percent": to_decimal(get_field(row, "discount_percent")),
            "active": bool(get_field(row, "active", True)),
            "valid_until": get_field(row, "valid_until"),
        }
        created_at = get_field(row, "created_at")
        if created_at is not None:
            data["created_at"] = created_at
        return cls(**data)
