"""Shared helpers for order totals, VAT, promos and tickets."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from backoffice.core.constants import (
    DEFAULT_TVA_RATE,
    EUROS_PER_TICKET,
    FREE_SHIPPING_THRESHOLD,
    MONEY_QUANTUM,
    STANDARD_SHIPPING_FEE,
)
from backoffice.core.utils import get_field, to_decimal

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal
    vat: Decimal
    tickets_earned: int


def round_money(value: Decimal | int | float | str) -> Decimal:
    """Round to cents, half-up. Display only; stored amounts stay exact."""
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def shipping_fee(subtotal: Decimal | int | float | str) -> Decimal:
    if to_decimal(subtotal) >= FREE_SHIPPING_THRESHOLD:
        return _ZERO
    return STANDARD_SHIPPING_FEE


def calc_line_total(unit_price: Decimal | int | float | str, quantity: int) -> Decimal:
    return to_decimal(unit_price) * int(quantity)


def _line_total(item: Any) -> Decimal:
    total = to_decimal(get_field(item, "total_price"), default=None)
    if total is not None:
        return total
    return calc_line_total(get_field(item, "unit_price", 0), get_field(item, "quantity", 1))


def calc_items_total(items: Iterable[Any]) -> Decimal:
    return sum((_line_total(item) for item in items), _ZERO)


def item_vat(item: Any) -> Decimal:
    """VAT contained in a tax-inclusive line total."""
    total = _line_total(item)
    rate = to_decimal(get_field(item, "tva_rate"), default=DEFAULT_TVA_RATE)
    return total - total / (1 + rate / _HUNDRED)


def order_vat(order_or_items: Any) -> Decimal:
    items = get_field(order_or_items, "items", None)
    if items is None:
        items = order_or_items
    return sum((item_vat(item) for item in items), _ZERO)


def promo_price(
    original_price: Decimal | int | float | str,
    discount_percent: Decimal | int | float | str,
) -> Decimal:
    return to_decimal(original_price) * (1 - to_decimal(discount_percent) / _HUNDRED)


def discount_percent(
    original_price: Decimal | int | float | str,
    promo: Decimal | int | float | str,
) -> Decimal:
    original = to_decimal(original_price)
    if original <= 0:
        return _ZERO
    return (original - to_decimal(promo)) / original * _HUNDRED


def tickets_earned(total: Decimal | int | float | str) -> int:
    amount = to_decimal(total)
    if amount <= 0:
        return 0
    return int((amount / EUROS_PER_TICKET).to_integral_value(rounding=ROUND_FLOOR))


def calc_order_totals(items: Iterable[Any]) -> OrderTotals:
    items = list(items)
    subtotal = calc_items_total(items)
    fee = shipping_fee(subtotal)
    total = subtotal + fee
    return OrderTotals(
        subtotal=subtotal,
        shipping_fee=fee,
        total=total,
        vat=order_vat(items),
        tickets_earned=tickets_earned(total),
    )
