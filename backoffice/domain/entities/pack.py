"""Pack entity model."""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.utils import get_field, money_to_json, new_entity_id, to_decimal


class PackItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    quantity: str = Field("", description="Free-form quantity label, e.g. '5g'")
    value: Decimal = Field(Decimal("0"), ge=0)
    producer_name: Optional[str] = None

    def to_remote(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "value": money_to_json(self.value),
            "producer_name": self.producer_name,
        }

    @classmethod
    def from_remote(cls, row: dict) -> PackItem:
        return cls(
            name=get_field(row, "name", ""),
            quantity=str(get_field(row, "quantity", "")),
            value=to_decimal(get_field(row, "value")),
            producer_name=get_field(row, "producer_name"),
        )


class Pack(BaseModel):
    """Bundle of products sold at a single price."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: new_entity_id("pack"))
    name: str = Field(..., min_length=1)
    description: str = ""
    items: list[PackItem] = Field(default_factory=list)
    price: Decimal = Field(..., ge=0)
    original_price: Decimal = Field(Decimal("0"), ge=0)
    color: str = "#10B981"
    tag: Optional[str] = None
    active: bool = True

    @property
    def contents_value(self) -> Decimal:
        """Sum of item values; informational only."""
        return sum((item.value for item in self.items), Decimal("0"))

    def to_remote(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "items": [item.to_remote() for item in self.items],
            "price": money_to_json(self.price),
            "original_price": money_to_json(self.original_price),
            "color": self.color,
            "tag": self.tag,
            "active": self.active,
        }

    @classmethod
    def from_remote(cls, row: dict) -> Pack:
        return cls(
            id=str(row["id"]),
            name=get_field(row, "name", ""),
            description=get_field(row, "description", ""),
            items=[PackItem.from_remote(item) for item in get_field(row, "items", [])],
            price=to_decimal(get_field(row, "price")),
            original_price=to_decimal(get_field(row, "original_price")),
            color=get_field(row, "color", "#10B981"),
            tag=get_field(row, "tag"),
            active=bool(get_field(row, "active", True)),
        )
