"""Lot (rewards draw prize) entity model."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backoffice.core.utils import get_field, money_to_json, new_entity_id, to_decimal
from backoffice.domain.value_objects import RARITY_CONFIG, LotType, Rarity, RarityTier


class LotItem(BaseModel):
    """Product granted by a product-type lot."""

    model_config = ConfigDict(from_attributes=True)

    product_id: str
    producer_id: str
    product_name: str = ""
    producer_name: str = ""
    quantity: int = Field(1, gt=0)

    def to_remote(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_remote(cls, row: dict) -> LotItem:
        return cls(
            product_id=str(get_field(row, "product_id", "")),
            producer_id=str(get_field(row, "producer_id", "")),
            product_name=get_field(row, "product_name", ""),
            producer_name=get_field(row, "producer_name", ""),
            quantity=int(get_field(row, "quantity", 1)),
        )


class Lot(BaseModel):
    """Prize that can be won in the rewards draw.

    A product lot carries ``items``; a discount lot carries
    ``discount_percent`` (and optionally ``discount_amount`` and
    ``min_order_amount``) instead.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: new_entity_id("lot"))
    name: str = Field(..., min_length=1)
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    lot_type: LotType = LotType.PRODUCT
    items: list[LotItem] = Field(default_factory=list)
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    discount_amount: Optional[Decimal] = Field(None, ge=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    value: Decimal = Field(Decimal("0"), ge=0, description="Total value in euros")
    active: bool = True

    @field_validator("lot_type", mode="before")
    @classmethod
    def default_lot_type(cls, v: Any) -> Any:
        return LotType.PRODUCT if v in (None, "") else v

    @model_validator(mode="after")
    def check_variant(self) -> Lot:
        if self.lot_type == LotType.DISCOUNT:
            if self.discount_percent is None and self.discount_amount is None:
                raise ValueError("Discount lot needs discount_percent or discount_amount")
            if self.items:
                raise ValueError("Discount lot cannot contain items")
        return self

    @property
    def tier(self) -> RarityTier:
        return RARITY_CONFIG[self.rarity]

    def to_remote(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rarity": self.rarity.value,
            "lot_type": self.lot_type.value,
            "items": [item.to_remote() for item in self.items],
            "discount_percent": money_to_json(self.discount_percent),
            "discount_amount": money_to_json(self.discount_amount),
            "min_order_amount": money_to_json(self.min_order_amount),
            "value": money_to_json(self.value),
            "active": self.active,
        }

    @classmethod
    def from_remote(cls, row: dict) -> Lot:
        return cls(
            id=str(row["id"]),
            name=get_field(row, "name", ""),
            description=get_field(row, "description", ""),
            rarity=get_field(row, "rarity", Rarity.COMMON.value),
            lot_type=get_field(row, "lot_type"),
            items=[LotItem.from_remote(item) for item in get_field(row, "items", [])],
            discount_percent=to_decimal(get_field(row, "discount_percent"), default=None),
            discount_amount=to_decimal(get_field(row, "discount_amount"), default=None),
            min_order_amount=to_decimal(get_field(row, "min_order_amount"), default=None),
            value=to_decimal(get_field(row, "value")),
            active=bool(get_field(row, "active", True)),
        )
