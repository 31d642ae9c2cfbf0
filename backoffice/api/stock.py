"""Admin stock API: list, create, +/- adjustments, quantity overwrite, delete."""
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backoffice.api.common import get_container
from backoffice.bootstrap import Container
from backoffice.core.exceptions import StockItemNotFoundException
from backoffice.domain.entities import StockItem

router = APIRouter(prefix="/api/v1/admin/stock", tags=["admin-stock"])


class QuantityAdjust(BaseModel):
    delta: int


class QuantitySet(BaseModel):
    quantity: int = Field(..., ge=0)


class StockCreate(BaseModel):
    product_name: str = Field(..., min_length=1)
    producer_id: str
    producer_name: str = ""
    product_id: str = ""
    product_type: str = ""
    quantity: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    price: Decimal = Field(Decimal("0"), ge=0)
    cost_price: Decimal | None = Field(None, ge=0)
    tva_rate: Decimal | None = None
    unit: str = "unité"


def serialize_stock(item: StockItem) -> dict:
    data = item.to_remote()
    data["is_low_stock"] = item.is_low_stock
    return data


@router.get("")
async def list_stock(
    low_only: bool = False,
    producer_id: str | None = None,
    container: Container = Depends(get_container),
):
    service = container.stock_admin
    items = service.low_stock_items() if low_only else service.list_items(producer_id)
    return {
        "items": [serialize_stock(item) for item in items],
        "low_stock_count": len(service.low_stock_items()),
        "total_value": float(service.total_stock_value()),
    }


@router.post("", status_code=201)
async def create_stock(body: StockCreate, container: Container = Depends(get_container)):
    item = container.stock_admin.add_item(StockItem(**body.model_dump()))
    return serialize_stock(item)


@router.post("/{stock_id}/adjust")
async def adjust_stock(stock_id: str, body: QuantityAdjust, container: Container = Depends(get_container)):
    try:
        item = container.stock_admin.adjust_quantity(stock_id, body.delta)
    except StockItemNotFoundException as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return serialize_stock(item)


@router.put("/{stock_id}/quantity")
async def set_stock_quantity(stock_id: str, body: QuantitySet, container: Container = Depends(get_container)):
    try:
        item = container.stock_admin.set_quantity(stock_id, body.quantity)
    except StockItemNotFoundException as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return serialize_stock(item)


@router.delete("/{stock_id}")
async def delete_stock(stock_id: str, container: Container = Depends(get_container)):
    if not container.stock_admin.remove(stock_id):
        raise HTTPException(status_code=404, detail=f"Stock item {stock_id} not found")
    return {"deleted": stock_id}
