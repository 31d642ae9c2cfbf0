"""Order entity model."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

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
from backoffice.domain.order import OrderStatus


class CustomerInfo(BaseModel):
    """Customer contact block; opaque to the core, flattened remotely."""

    model_config = ConfigDict(from_attributes=True)

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class OrderItem(BaseModel):
    """Line of an order, priced tax-inclusive."""

    model_config = ConfigDict(from_attributes=True)

    product_id: str = Field(..., description="Catalog product ID")
    product_name: str = Field(..., description="Product name at order time")
    product_type: str = Field("", description="Product category label")
    producer_id: str = Field(..., description="Selling producer ID")
    producer_name: str = Field("", description="Selling producer name")
    quantity: int = Field(..., gt=0, description="Ordered units")
    unit_price: Decimal = Field(..., ge=0, description="Unit price, VAT included")
    total_price: Decimal | None = Field(None, description="quantity * unit_price")
    tva_rate: Decimal = Field(DEFAULT_TVA_RATE, description="VAT rate in percent")

    @field_validator("tva_rate", mode="before")
    @classmethod
    def default_tva_rate(cls, v: Any) -> Any:
        return DEFAULT_TVA_RATE if v is None else v

    @model_validator(mode="after")
    def fill_total_price(self) -> OrderItem:
        if self.total_price is None:
            self.total_price = self.unit_price * self.quantity
        return self

    def to_remote(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_type": self.product_type,
            "producer_id": self.producer_id,
            "producer_name": self.producer_name,
            "quantity": self.quantity,
            "unit_price": money_to_json(self.unit_price),
            "total_price": money_to_json(self.total_price),
            "tva_rate": money_to_json(self.tva_rate),
        }

    @classmethod
    def from_remote(cls, row: dict) -> OrderItem:
        return cls(
            product_id=str(get_field(row, "product_id", "")),
            product_name=get_field(row, "product_name", ""),
            product_type=get_field(row, "product_type", ""),
            producer_id=str(get_field(row, "producer_id", "")),
            producer_name=get_field(row, "producer_name", ""),
            quantity=int(get_field(row, "quantity", 1)),
            unit_price=to_decimal(get_field(row, "unit_price")),
            total_price=to_decimal(get_field(row, "total_price"), default=None),
            tva_rate=to_decimal(get_field(row, "tva_rate"), default=None),
        )


class Order(BaseModel):
    """Order entity with payment-validation and rewards fields."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: new_entity_id("order"))
    status: str = Field(OrderStatus.PENDING, description="One of OrderStatus.ALL")
    customer_info: CustomerInfo = Field(default_factory=CustomerInfo)
    items: list[OrderItem] = Field(default_factory=list)

    subtotal: Decimal = Field(Decimal("0"), ge=0)
    shipping_fee: Decimal = Field(Decimal("0"), ge=0)
    total: Decimal = Field(Decimal("0"), ge=0)

    payment_validated: bool = False
    payment_validated_at: datetime | None = None
    payment_validated_by: str | None = None
    tickets_earned: int = Field(0, ge=0)
    tickets_distributed: bool = False

    tracking_number: str | None = None
    notes: str | None = None
    is_pro_order: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        return OrderStatus.normalize(v) or OrderStatus.PENDING

    @field_validator("created_at", "updated_at", "payment_validated_at")
    @classmethod
    def make_aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_remote(self) -> dict:
        """Convert to the remote ``orders`` row format."""
        info = self.customer_info
        return {
            "id": self.id,
            "customer_first_name": info.first_name,
            "customer_last_name": info.last_name,
            "customer_email": info.email,
            "customer_phone": info.phone,
            "customer_address": info.address,
            "customer_city": info.city,
            "customer_postal_code": info.postal_code,
            "items": [item.to_remote() for item in self.items],
            "subtotal": money_to_json(self.subtotal),
            "shipping_fee": money_to_json(self.shipping_fee),
            "total": money_to_json(self.total),
            "status": self.status,
            "tracking_number": self.tracking_number,
            "notes": self.notes,
            "is_pro_order": self.is_pro_order,
            "payment_validated": self.payment_validated,
            "payment_validated_at": datetime_to_json(self.payment_validated_at),
            "payment_validated_by": self.payment_validated_by,
            "tickets_distributed": self.tickets_distributed,
            "tickets_earned": self.tickets_earned,
            "created_at": datetime_to_json(self.created_at),
            "updated_at": datetime_to_json(self.updated_at),
        }

    @classmethod
    def from_remote(cls, row: dict) -> Order:
        """Create Order from a remote ``orders`` row."""
        data: dict[str, Any] = {
            "id": str(row["id"]),
            "status": get_field(row, "status", OrderStatus.PENDING),
            "customer_info": CustomerInfo(
                first_name=get_field(row, "customer_first_name", ""),
                last_name=get_field(row, "customer_last_name", ""),
                email=get_field(row, "customer_email", ""),
                phone=get_field(row, "customer_phone", ""),
                address=get_field(row, "customer_address", ""),
                city=get_field(row, "customer_city", ""),
                postal_code=get_field(row, "customer_postal_code", ""),
            ),
            "items": [OrderItem.from_remote(item) for item in get_field(row, "items", [])],
            "subtotal": to_decimal(get_field(row, "subtotal")),
            "shipping_fee": to_decimal(get_field(row, "shipping_fee")),
            "total": to_decimal(get_field(row, "total")),
            "tracking_number": get_field(row, "tracking_number"),
            "notes": get_field(row, "notes"),
            "is_pro_order": bool(get_field(row, "is_pro_order", False)),
            "payment_validated": bool(get_field(row, "payment_validated", False)),
            "payment_validated_at": get_field(row, "payment_validated_at"),
            "payment_validated_by": get_field(row, "payment_validated_by"),
            "tickets_distributed": bool(get_field(row, "tickets_distributed", False)),
            "tickets_earned": int(get_field(row, "tickets_earned", 0)),
        }
        for stamp in ("created_at", "updated_at"):
            value = get_field(row, stamp)
            if value is not None:
                data[stamp] = value
        return cls(**data)
