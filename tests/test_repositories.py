"""Local repository and entity conversion tests."""
from __future__ import annotations

import random
from decimal import Decimal

import pytest
from pydantic import ValidationError

from backoffice.core.config import load_settings
from backoffice.core.constants import EntityType, PollScope
from backoffice.core.exceptions import EntityNotFoundException
from backoffice.domain.entities import Lot, Order, PromoProduct
from backoffice.domain.value_objects import Rarity
from backoffice.repositories import LocalStore
from backoffice.repositories.lot_repository import LotRepository
from backoffice.repositories.stock_repository import StockRepository


def _promo(promo_id: str, product_id: str, active: bool = True) -> PromoProduct:
    return PromoProduct(
        id=promo_id,
        product_id=product_id,
        producer_id="prod-1",
        original_price=Decimal("10"),
        promo_price=Decimal("8"),
        active=active,
    )


class TestStockRepository:
    def test_match_ignores_case_but_not_producer(self, stock_factory):
        repo = StockRepository([stock_factory("Amnesia Haze", stock_id="s1")])

        assert repo.find_for_order_item("AMNESIA haze", "prod-1").id == "s1"
        assert repo.find_for_order_item("Amnesia Haze", "prod-2") is None

    def test_decrement_refuses_to_go_negative(self, stock_factory):
        repo = StockRepository([stock_factory(quantity=2, stock_id="s1")])

        assert not repo.decrement("s1", 3)
        assert repo.get("s1").quantity == 2
        assert repo.decrement("s1", 2)
        assert repo.get("s1").quantity == 0

    def test_negative_quantity_rejected_on_entity(self, stock_factory):
        item = stock_factory(quantity=1)
        with pytest.raises(ValidationError):
            item.quantity = -1

    def test_low_stock_and_value(self, stock_factory):
        repo = StockRepository(
            [
                stock_factory("A", quantity=1, min_stock=2, price="5", stock_id="a"),
                stock_factory("B", quantity=4, min_stock=2, price="2.50", stock_id="b"),
            ]
        )

        assert [item.id for item in repo.low_stock()] == ["a"]
        assert repo.total_value() == Decimal("15")


class TestLotRepository:
    def test_draw_falls_back_to_any_active_lot(self):
        repo = LotRepository(
            [
                Lot(id="legend", name="Legend", rarity=Rarity.LEGENDARY),
                Lot(id="off", name="Off", rarity=Rarity.COMMON, active=False),
            ]
        )

        assert repo.draw_random(random.Random(1)).id == "legend"

    def test_draw_without_active_lots(self):
        repo = LotRepository([Lot(id="off", name="Off", active=False)])
        assert repo.draw_random() is None

    def test_toggle(self):
        repo = LotRepository([Lot(id="lot-1", name="Box")])
        assert repo.toggle_active("lot-1").active is False
        assert repo.toggle_active("missing") is None


def test_promo_duplicates_only_count_active():
    local = LocalStore()
    for promo in (_promo("a", "p1"), _promo("b", "p1"), _promo("c", "p1", active=False), _promo("d", "p2")):
        local.promos.add(promo)

    duplicates = local.promos.find_duplicates()

    assert list(duplicates) == [("p1", "prod-1")]
    assert [promo.id for promo in duplicates[("p1", "prod-1")]] == ["a", "b"]


def test_local_store_lookup():
    local = LocalStore()

    assert local.for_entity(EntityType.ORDERS) is local.orders
    assert local.for_entity(EntityType.APP_DATA).entity_type == EntityType.APP_DATA
    with pytest.raises(ValueError):
        local.for_entity("unknown")
    with pytest.raises(EntityNotFoundException):
        local.orders.require("missing")


def test_order_from_remote_flattened_customer():
    order = Order.from_remote(
        {
            "id": "o1",
            "customer_first_name": "Camille",
            "customer_last_name": "Martin",
            "customer_email": "camille@example.com",
            "items": [{"product_name": "Fleur", "producer_id": "prod-1", "quantity": 2, "unit_price": "7.5"}],
            "subtotal": 15,
            "shipping_fee": 4.9,
            "total": 19.9,
            "status": "PAID",
            "created_at": "2024-02-01T10:00:00",
        }
    )

    assert order.customer_info.full_name == "Camille Martin"
    assert order.status == "paid"
    assert order.total == Decimal("19.9")
    assert order.items[0].total_price == Decimal("15.0")
    assert order.items[0].tva_rate == Decimal("20")
    assert order.created_at.tzinfo is not None
    assert order.to_remote()["customer_email"] == "camille@example.com"


def test_malformed_rows_are_skipped():
    repo = LotRepository()

    lots = repo.from_remote_rows([{"id": "ok", "name": "Box"}, {"id": "bad", "name": "Bad", "rarity": "mythic"}])

    assert [lot.id for lot in lots] == ["ok"]


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("POLL_ORDERS_SECONDS", "12")
    monkeypatch.setenv("SYNC_MAX_ATTEMPTS", "not-a-number")

    settings = load_settings()

    assert settings.remote.url == "https://demo.supabase.co"
    assert settings.remote_configured
    assert settings.sync.poll_intervals[PollScope.ORDERS] == 12.0
    assert settings.sync.max_attempts == 5
