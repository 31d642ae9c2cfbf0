"""Shared pytest fixtures: in-memory remote store and wired services."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from backoffice.bootstrap import Container, build_container
from backoffice.core.config import ApiConfig, RemoteConfig, Settings, SyncConfig
from backoffice.core.exceptions import NetworkException
from backoffice.domain.entities import CustomerInfo, Order, OrderItem, StockItem


class FakeRemoteStore:
    """Dict-backed RemoteStore with failure injection."""

    def __init__(self, configured: bool = True):
        self._configured = configured
        self.tables: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple[str, str, str | None]] = []
        # table -> number of upcoming calls that raise
        self.fail_next: dict[str, int] = {}
        self.fail_ids: set[str] = set()

    @property
    def configured(self) -> bool:
        return self._configured

    def seed(self, table: str, rows: list[dict]) -> None:
        self.tables.setdefault(table, {})
        for row in rows:
            self.tables[table][str(row["id"])] = dict(row)

    def rows(self, table: str) -> list[dict]:
        return list(self.tables.get(table, {}).values())

    def _maybe_fail(self, table: str, entity_id: str | None = None) -> None:
        if entity_id is not None and entity_id in self.fail_ids:
            raise NetworkException(f"{table}/{entity_id} unreachable", is_offline=True)
        remaining = self.fail_next.get(table, 0)
        if remaining:
            self.fail_next[table] = remaining - 1
            raise NetworkException(f"{table} unreachable", is_offline=True)

    async def fetch_all(self, table: str, filters: dict[str, Any] | None = None) -> list[dict]:
        self.calls.append(("fetch_all", table, None))
        self._maybe_fail(table)
        rows = self.rows(table)
        for column, value in (filters or {}).items():
            rows = [row for row in rows if row.get(column) == value]
        return [dict(row) for row in rows]

    async def fetch_one(self, table: str, entity_id: str) -> dict | None:
        self.calls.append(("fetch_one", table, entity_id))
        self._maybe_fail(table, entity_id)
        row = self.tables.get(table, {}).get(entity_id)
        return dict(row) if row is not None else None

    async def insert(self, table: str, row: dict) -> dict:
        self.calls.append(("insert", table, str(row["id"])))
        self._maybe_fail(table, str(row["id"]))
        self.tables.setdefault(table, {})[str(row["id"])] = dict(row)
        return dict(row)

    async def update(self, table: str, entity_id: str, partial: dict) -> None:
        self.calls.append(("update", table, entity_id))
        self._maybe_fail(table, entity_id)
        self.tables.setdefault(table, {}).setdefault(entity_id, {"id": entity_id}).update(partial)

    async def delete(self, table: str, entity_id: str) -> None:
        self.calls.append(("delete", table, entity_id))
        self._maybe_fail(table, entity_id)
        self.tables.get(table, {}).pop(entity_id, None)


def make_settings(configured: bool = True) -> Settings:
    return Settings(
        remote=RemoteConfig(
            url="https://example.supabase.co" if configured else "",
            anon_key="anon-key" if configured else "",
        ),
        sync=SyncConfig(max_attempts=3, base_delay=0.0, max_delay=0.0, drain_interval=0.01),
        api=ApiConfig(host="127.0.0.1", port=8080, debug=True),
        environment="test",
    )


def make_item(
    name: str = "Amnesia Haze",
    *,
    producer_id: str = "prod-1",
    quantity: int = 1,
    unit_price: str = "10",
    tva_rate: str | None = "20",
) -> OrderItem:
    return OrderItem(
        product_id=f"p-{name.lower().replace(' ', '-')}",
        product_name=name,
        product_type="fleur",
        producer_id=producer_id,
        producer_name="Ferme du Sud",
        quantity=quantity,
        unit_price=Decimal(unit_price),
        tva_rate=Decimal(tva_rate) if tva_rate is not None else None,
    )


def make_stock(
    name: str = "Amnesia Haze",
    *,
    producer_id: str = "prod-1",
    quantity: int = 10,
    min_stock: int = 2,
    price: str = "10",
    stock_id: str | None = None,
) -> StockItem:
    data: dict[str, Any] = {
        "product_name": name,
        "producer_id": producer_id,
        "producer_name": "Ferme du Sud",
        "quantity": quantity,
        "min_stock": min_stock,
        "price": Decimal(price),
    }
    if stock_id:
        data["id"] = stock_id
    return StockItem(**data)


def make_customer() -> CustomerInfo:
    return CustomerInfo(
        first_name="Camille",
        last_name="Martin",
        email="camille@example.com",
        phone="0600000000",
        address="1 rue des Lilas",
        city="Lyon",
        postal_code="69001",
    )


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def unconfigured_remote() -> FakeRemoteStore:
    return FakeRemoteStore(configured=False)


@pytest.fixture()
def container(remote: FakeRemoteStore) -> Container:
    return build_container(make_settings(), store=remote)


@pytest.fixture()
def local_only_container(unconfigured_remote: FakeRemoteStore) -> Container:
    return build_container(make_settings(configured=False), store=unconfigured_remote)


@pytest.fixture()
def pending_order(container: Container) -> Order:
    """45 EUR order (fee 4.90, total 49.90) for 3 units of stocked product."""
    return container.lifecycle.create_order(
        make_customer(),
        [make_item(quantity=3, unit_price="15")],
    )


@pytest.fixture()
def item_factory():
    return make_item


@pytest.fixture()
def stock_factory():
    return make_stock


@pytest.fixture()
def customer() -> CustomerInfo:
    return make_customer()


@pytest.fixture()
async def aiohttp_server_url():
    """Start aiohttp apps on a local port without the pytest-aiohttp dependency."""
    servers: list[object] = []

    async def _start(app) -> str:
        from aiohttp.test_utils import TestServer

        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("")).rstrip("/")

    try:
        yield _start
    finally:
        for server in servers:
            await server.close()
