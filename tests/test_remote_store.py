"""Tests for the PostgREST client against a local aiohttp app."""
from __future__ import annotations

import pytest
from aiohttp import web

from backoffice.core.config import RemoteConfig
from backoffice.core.exceptions import (
    RemoteNotConfiguredException,
    RemoteServerException,
    RemoteStoreException,
)
from backoffice.integrations.remote_store import SupabaseRestStore, upsert_remote


class PostgrestStub:
    """Tiny PostgREST look-alike keeping rows per table."""

    def __init__(self):
        self.tables: dict[str, dict[str, dict]] = {"orders": {}}
        self.failures_left = 0
        self.requests: list[tuple[str, str]] = []
        self.headers: list[dict[str, str]] = []

    def _id_filter(self, request: web.Request) -> str | None:
        raw = request.query.get("id")
        return raw[3:] if raw and raw.startswith("eq.") else None

    async def handle(self, request: web.Request) -> web.Response:
        table = request.match_info["table"]
        self.requests.append((request.method, table))
        self.headers.append(dict(request.headers))

        if self.failures_left:
            self.failures_left -= 1
            return web.json_response({"message": "upstream unavailable"}, status=503)
        if table == "forbidden":
            return web.json_response({"message": "permission denied"}, status=403)
        if table not in self.tables:
            return web.json_response(
                {"code": "42P01", "message": f'relation "public.{table}" does not exist'}, status=404
            )
        if table == "orders" and request.query.get("status") == "eq.invalid":
            return web.json_response({"message": "bad filter"}, status=400)

        rows = self.tables[table]
        entity_id = self._id_filter(request)
        if request.method == "GET":
            result = list(rows.values())
            if entity_id is not None:
                result = [row for row in result if row["id"] == entity_id]
            return web.json_response(result)
        if request.method == "POST":
            row = await request.json()
            rows[row["id"]] = row
            return web.json_response([row], status=201)
        if request.method == "PATCH":
            partial = await request.json()
            if entity_id in rows:
                rows[entity_id].update(partial)
                return web.json_response([rows[entity_id]])
            return web.json_response([])
        if request.method == "DELETE":
            rows.pop(entity_id, None)
            return web.Response(status=204)
        return web.Response(status=405)


@pytest.fixture()
async def stub_store(aiohttp_server_url):
    stub = PostgrestStub()
    app = web.Application()
    app.router.add_route("*", "/rest/v1/{table}", stub.handle)
    base_url = await aiohttp_server_url(app)

    store = SupabaseRestStore(RemoteConfig(url=base_url, anon_key="anon", timeout=5, max_retries=3, backoff=0.0))
    try:
        yield stub, store
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_crud_round_trip(stub_store) -> None:
    stub, store = stub_store

    inserted = await store.insert("orders", {"id": "o1", "status": "pending"})
    assert inserted == {"id": "o1", "status": "pending"}

    await store.update("orders", "o1", {"status": "paid"})
    assert (await store.fetch_one("orders", "o1"))["status"] == "paid"
    assert len(await store.fetch_all("orders")) == 1

    await store.delete("orders", "o1")
    assert await store.fetch_one("orders", "o1") is None


@pytest.mark.asyncio
async def test_auth_headers_sent(stub_store) -> None:
    stub, store = stub_store

    await store.fetch_all("orders")

    headers = stub.headers[-1]
    assert headers["apikey"] == "anon"
    assert headers["Authorization"] == "Bearer anon"
    assert headers["Prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_server_errors_are_retried(stub_store) -> None:
    stub, store = stub_store
    stub.failures_left = 2

    rows = await store.fetch_all("orders")

    assert rows == []
    assert len(stub.requests) == 3


@pytest.mark.asyncio
async def test_server_errors_exhaust_retries(stub_store) -> None:
    stub, store = stub_store
    stub.failures_left = 10

    with pytest.raises(RemoteServerException) as exc:
        await store.insert("orders", {"id": "o1"})

    assert exc.value.status == 503
    assert len(stub.requests) == 3


@pytest.mark.asyncio
async def test_missing_table_and_forbidden_fetch_as_empty(stub_store) -> None:
    stub, store = stub_store

    assert await store.fetch_all("user_profiles") == []
    assert await store.fetch_all("forbidden") == []
    assert len(stub.requests) == 2


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(stub_store) -> None:
    stub, store = stub_store

    with pytest.raises(RemoteStoreException) as exc:
        await store.fetch_all("orders", filters={"status": "invalid"})

    assert exc.value.status == 400
    assert len(stub.requests) == 1


@pytest.mark.asyncio
async def test_upsert_remote_inserts_then_updates(stub_store) -> None:
    stub, store = stub_store

    assert await upsert_remote(store, "orders", {"id": "o1", "status": "pending"}) == "insert"
    assert await upsert_remote(store, "orders", {"id": "o1", "status": "shipped"}) == "update"
    assert stub.tables["orders"]["o1"]["status"] == "shipped"


@pytest.mark.asyncio
async def test_unconfigured_store_raises() -> None:
    store = SupabaseRestStore(RemoteConfig(url="", anon_key=""))

    assert not store.configured
    with pytest.raises(RemoteNotConfiguredException):
        await store.fetch_all("orders")
