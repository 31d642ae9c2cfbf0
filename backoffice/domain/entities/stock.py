"""Stock item entity model."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backoffice.core.constants import DEFAULT_TVA_RATE
from backoffice.core.utils import (
    datetime_to_json,
    ensure_aware,
    get_field,
    money_to_json,
    new_entity_id,
    to_decimal,
    utcnow,
)


class StockItem(BaseModel):
    """Inventory row for one product of one producer."""

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: str = Field(default_factory=lambda: new_entity_id("stock"))
    product_id: str = Field("", description="Catalog product ID")
    producer_id: str = Field(..., description="Owning producer ID")
    product_name: str = Field(..., min_length=1, description="Product name, used for order matching")
    producer_name: str = Field("", description="Producer display name")
    product_type: str = Field("", description="Product category label")
    quantity: int = Field(0, ge=0, description="Units on hand")
    min_stock: int = Field(0, ge=0, description="Low stock threshold")
    price: Decimal = Field(Decimal("0"), ge=0, description="Sale price, VAT included")
    cost_price: Optional[Decimal] = Field(None, ge=0, description="Purchase price")
    tva_rate: Decimal = Field(DEFAULT_TVA_RATE, description="VAT rate in percent")
    unit: str = Field("unité", description="Unit label")
    visible: bool = True
    is_on_promo: bool = False
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("tva_rate", mode="before")
    @classmethod
    def default_tva_rate(cls, v: Any) -> Any:
        return DEFAULT_TVA_RATE if v is None else v

    @field_validator("created_at", "updated_at")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @property
    def is_low_stock(self) -> bool:
        """Check if quantity has reached the low stock threshold."""
        return self.quantity <= self.min_stock

    @property
    def stock_value(self) -> Decimal:
        return self.price * self.quantity

    def matches(self, product_name: str, producer_id: str) -> bool:
        """Case-insensitive product name plus exact producer match."""
        return (
            self.producer_id == producer_id
            and self.product_name.strip().lower() == str(product_name or "").strip().lower()
        )

    def to_remote(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "producer_id": self.producer_id,
            "product_name": self.product_name,
            "producer_name": self.producer_name,
            "product_type": self.product_type,
            "quantity": self.quantity,
            "min_stock": self.min_stock,
            "price": money_to_json(self.price),
            "cost_price": money_to_json(self.cost_price),
            "tva_rate": money_to_json(self.tva_rate),
            "unit": self.unit,
            "visible": self.visible,
            "is_on_promo": self.is_on_promo,
            "discount_percent": money_to_json(self.discount_percent),
            "created_at": datetime_to_json(self.created_at),
            "updated_at": datetime_to_json(self.updated_at),
        }

    @classmethod
    def from_remote(cls, row: dict) -> StockItem:
        data: dict[str, Any] = {
            "id": str(row["id"]),
            "product_id": str(get_field(row, "product_id", "")),
            "producer_id": str(get_field(row, "producer_id", "")),
            "product_name": get_field(row, "product_name", ""),
            "producer_name": get_field(row, "producer_name", ""),
            "product_type": get_field(row, "product_type", ""),
            "quantity": max(0, int(get_field(row, "quantity", 0))),
            "min_stock": int(get_field(row, "min_stock", 0)),
            "price": to_decimal(get_field(row, "price")),
            "cost_price": to_decimal(get_field(row, "cost_price"), default=None),
            "tva_rate": to_decimal(get_field(row, "tva_rate"), default=None),
            "unit": get_field(row, "unit", "unité"),
            "visible": bool(get_field(row, "visible", True)),
            "is_on_promo": bool(get_field(row, "is_on_promo", False)),
            "discount_percent": to_decimal(get_field(row, "discount_percent"), default=None),
        }
        for stamp in ("created_at", "updated_at"):
            value = get_field(row, stamp)
            if value is not None:
                data[stamp] = value
        return cls(**data)
