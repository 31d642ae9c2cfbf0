"""
Admin order API.

Order list, status changes (with stock decrement on shipping), tracking
number, notes, delete, payment validation and ticket distribution (flag only,
or validation plus crediting the buyer's profile).
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backoffice.api.common import get_container, raise_for_error_key
from backoffice.application.orders.validate_payment import validate_and_distribute_tickets
from backoffice.bootstrap import Container
from backoffice.core.order_math import calc_order_totals, order_vat, round_money, tickets_earned
from backoffice.core.utils import money_to_json
from backoffice.domain.entities import Order
from backoffice.domain.order import ORDER_STATUS_CONFIG, OrderStatus
from backoffice.services.order_lifecycle import shows_tracking_field

router = APIRouter(prefix="/api/v1/admin/orders", tags=["admin-orders"])


# ==================== MODELS ====================


class StatusChange(BaseModel):
    status: str = Field(..., description="One of pending, payment_sent, paid, shipped, cancelled")


class TrackingUpdate(BaseModel):
    tracking_number: str | None = None


class NotesUpdate(BaseModel):
    notes: str | None = None


class PaymentValidationRequest(BaseModel):
    validated_by: str | None = None


# ==================== HELPERS ====================


def serialize_order(order: Order) -> dict[str, Any]:
    """Order row plus display fields; money figures come from order_math, not the stored row."""
    data = order.to_remote()
    if order.items:
        totals = calc_order_totals(order.items)
        data["subtotal"] = money_to_json(totals.subtotal)
        data["shipping_fee"] = money_to_json(totals.shipping_fee)
        data["total"] = money_to_json(totals.total)
        data["tickets_earned"] = totals.tickets_earned
        vat = totals.vat
    else:
        data["tickets_earned"] = tickets_earned(order.total)
        vat = order_vat(order)
    display = ORDER_STATUS_CONFIG.get(order.status)
    data["status_label"] = display.label if display else order.status
    data["status_color"] = display.color if display else None
    data["vat"] = float(round_money(vat))
    data["show_tracking"] = shows_tracking_field(order)
    data["item_count"] = order.item_count
    return data


# ==================== ROUTES ====================


@router.get("")
async def list_orders(
    status: str | None = None,
    email: str | None = None,
    awaiting_validation: bool = False,
    container: Container = Depends(get_container),
):
    orders = container.local.orders
    if awaiting_validation:
        items = orders.awaiting_validation()
    elif email:
        items = orders.by_customer_email(email)
    elif status:
        items = orders.by_status(status)
    else:
        items = orders.list_recent()
    return {
        "orders": [serialize_order(order) for order in items],
        "counts": orders.count_by_status(),
        "total": len(items),
    }


@router.get("/statuses")
async def list_statuses():
    statuses = []
    for status in OrderStatus.ALL:
        display = ORDER_STATUS_CONFIG[status]
        statuses.append(
            {"status": status, "label": display.label, "color": display.color, "step": display.step}
        )
    return statuses


@router.get("/{order_id}")
async def get_order(order_id: str, container: Container = Depends(get_container)):
    return serialize_order(container.local.orders.require(order_id))


@router.post("/{order_id}/status")
async def change_status(order_id: str, body: StatusChange, container: Container = Depends(get_container)):
    result = container.lifecycle.set_status(order_id, body.status)
    raise_for_error_key(result.error_key, result.reason)

    response: dict[str, Any] = {
        "order": serialize_order(result.order),
        "previous_status": result.previous_status,
    }
    if result.stock_report is not None:
        response["stock"] = {
            "applied": result.stock_report.applied,
            "no_match": result.stock_report.no_match,
            "insufficient": result.stock_report.insufficient,
        }
    return response


@router.put("/{order_id}/tracking")
async def update_tracking(order_id: str, body: TrackingUpdate, container: Container = Depends(get_container)):
    result = container.lifecycle.set_tracking_number(order_id, body.tracking_number)
    raise_for_error_key(result.error_key)
    return serialize_order(result.order)


@router.put("/{order_id}/notes")
async def update_notes(order_id: str, body: NotesUpdate, container: Container = Depends(get_container)):
    result = container.lifecycle.set_notes(order_id, body.notes)
    raise_for_error_key(result.error_key)
    return serialize_order(result.order)


@router.delete("/{order_id}")
async def delete_order(order_id: str, container: Container = Depends(get_container)):
    result = container.lifecycle.delete(order_id)
    raise_for_error_key(result.error_key)
    return {"deleted": order_id}


@router.post("/{order_id}/validate-payment")
async def validate_payment(
    order_id: str,
    body: PaymentValidationRequest | None = None,
    container: Container = Depends(get_container),
):
    validated_by = body.validated_by if body else None
    result = container.payments.validate_payment(order_id, validated_by=validated_by)
    raise_for_error_key(result.error_key)
    return {
        "success": result.success,
        "tickets_distributed": result.tickets_distributed,
        "order": serialize_order(result.order),
    }


@router.post("/{order_id}/tickets-distributed")
async def mark_tickets_distributed(order_id: str, container: Container = Depends(get_container)):
    result = container.payments.mark_tickets_distributed(order_id)
    raise_for_error_key(result.error_key)
    return {"success": result.success, "order": serialize_order(result.order)}


@router.post("/{order_id}/validate-and-distribute")
async def validate_and_distribute(
    order_id: str,
    body: PaymentValidationRequest | None = None,
    container: Container = Depends(get_container),
):
    """Validate the payment and credit the tickets to the buyer's profile in one step."""
    result = await validate_and_distribute_tickets(
        order_id,
        payments=container.payments,
        grant_tickets=container.ticket_grants.grant,
        validated_by=body.validated_by if body else None,
    )
    raise_for_error_key(result.error_key)
    return {"success": result.ok, "tickets_distributed": result.tickets, "order": serialize_order(result.order)}
