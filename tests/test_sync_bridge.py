"""Tests for push/pull between local repositories and the remote store."""
from __future__ import annotations

from decimal import Decimal

import pytest

from backoffice.core.constants import EntityType
from backoffice.domain.entities import Lot, Pack, PackItem, Producer, PromoProduct
from backoffice.repositories import BaseRepository
from backoffice.services.sync_bridge import SyncBridge


def _promo(promo_id: str, product_id: str = "p1") -> PromoProduct:
    return PromoProduct(
        id=promo_id,
        product_id=product_id,
        producer_id="prod-1",
        original_price=Decimal("100"),
        promo_price=Decimal("80"),
        discount_percent=Decimal("20"),
    )


@pytest.mark.asyncio
async def test_pull_empty_collection_keeps_local(container) -> None:
    container.local.promos.add(_promo("promo-local"))

    result = await container.bridge.pull(EntityType.PROMO_PRODUCTS)

    assert result.ok
    assert result.succeeded == 0
    assert [p.id for p in container.local.promos.list_all()] == ["promo-local"]


@pytest.mark.asyncio
async def test_pull_non_empty_collection_replaces_local(container, remote) -> None:
    container.local.promos.add(_promo("promo-local"))
    remote.seed(
        EntityType.PROMO_PRODUCTS,
        [
            {"id": "promo-a", "product_id": "p1", "producer_id": "prod-1", "original_price": 10, "promo_price": 8},
            {"id": "promo-b", "product_id": "p2", "producer_id": "prod-1", "original_price": 20.5, "promo_price": 16.4},
        ],
    )

    result = await container.bridge.pull(EntityType.PROMO_PRODUCTS)

    assert result.succeeded == 2
    assert sorted(p.id for p in container.local.promos.list_all()) == ["promo-a", "promo-b"]
    assert container.local.promos.get("promo-b").original_price == Decimal("20.5")


@pytest.mark.asyncio
async def test_pull_orders_sorted_newest_first(container, remote) -> None:
    remote.seed(
        EntityType.ORDERS,
        [
            {"id": "o-old", "status": "paid", "created_at": "2024-01-01T10:00:00+00:00"},
            {"id": "o-new", "status": "pending", "created_at": "2024-03-01T10:00:00+00:00"},
            {"id": "o-mid", "status": "shipped", "created_at": "2024-02-01T10:00:00"},
        ],
    )

    await container.bridge.pull(EntityType.ORDERS)

    assert [o.id for o in container.local.orders.list_all()] == ["o-new", "o-mid", "o-old"]


@pytest.mark.asyncio
async def test_pull_failure_keeps_local(container, remote) -> None:
    container.local.promos.add(_promo("promo-local"))
    remote.seed(EntityType.PROMO_PRODUCTS, [{"id": "promo-a", "product_id": "p1", "producer_id": "x"}])
    remote.fail_next[EntityType.PROMO_PRODUCTS] = 1

    result = await container.bridge.pull(EntityType.PROMO_PRODUCTS)

    assert not result.ok
    assert [p.id for p in container.local.promos.list_all()] == ["promo-local"]


@pytest.mark.asyncio
async def test_pull_with_only_malformed_rows_keeps_local(container, remote) -> None:
    container.local.lots.add(Lot(id="lot-local", name="Local"))
    remote.seed(EntityType.LOTS, [{"id": "lot-bad", "name": "Bad", "rarity": "mythic"}])

    result = await container.bridge.pull(EntityType.LOTS)

    assert result.failed == 1
    assert [lot.id for lot in container.local.lots.list_all()] == ["lot-local"]


@pytest.mark.asyncio
async def test_push_upserts_each_entity(container, remote) -> None:
    remote.seed(EntityType.PROMO_PRODUCTS, [{"id": "promo-a", "product_id": "p1", "producer_id": "prod-1"}])
    container.local.promos.add(_promo("promo-a"))
    container.local.promos.add(_promo("promo-b", product_id="p2"))

    result = await container.bridge.push(EntityType.PROMO_PRODUCTS)

    assert (result.succeeded, result.failed) == (2, 0)
    operations = [(op, entity_id) for op, table, entity_id in remote.calls if op in ("update", "insert")]
    assert operations == [("update", "promo-a"), ("insert", "promo-b")]
    assert remote.tables[EntityType.PROMO_PRODUCTS]["promo-a"]["promo_price"] == 80.0


@pytest.mark.asyncio
async def test_push_partial_failure_keeps_going(container, remote) -> None:
    container.local.promos.add(_promo("promo-a"))
    container.local.promos.add(_promo("promo-b"))
    container.local.promos.add(_promo("promo-c"))
    remote.fail_ids.add("promo-b")

    result = await container.bridge.push(EntityType.PROMO_PRODUCTS)

    assert (result.succeeded, result.failed) == (2, 1)
    assert "promo-b" in result.errors[0]
    assert set(remote.tables[EntityType.PROMO_PRODUCTS]) == {"promo-a", "promo-c"}


@pytest.mark.asyncio
async def test_push_all_and_pull_all_report_counts(container, remote) -> None:
    container.local.producers.add(Producer(id="prod-1", name="Ferme du Sud", region="Occitanie"))
    container.local.lots.add(Lot(id="lot-1", name="Box", rarity="rare"))
    container.local.packs.add(
        Pack(id="pack-1", name="Découverte", price=Decimal("29.90"), items=[PackItem(name="Fleur", value=Decimal("12"))])
    )
    container.local.promos.add(_promo("promo-a"))

    pushed = await container.bridge.push_all()

    assert pushed.ok
    assert pushed.counts() == {
        EntityType.PRODUCERS: {"succeeded": 1, "failed": 0},
        EntityType.LOTS: {"succeeded": 1, "failed": 0},
        EntityType.PACKS: {"succeeded": 1, "failed": 0},
        EntityType.PROMO_PRODUCTS: {"succeeded": 1, "failed": 0},
    }

    for repository in (container.local.producers, container.local.lots, container.local.packs, container.local.promos):
        repository.clear()

    pulled = await container.bridge.pull_all()

    assert pulled.succeeded == 4
    assert container.local.packs.get("pack-1").contents_value == Decimal("12")
    assert container.local.lots.get("lot-1").rarity.value == "rare"


@pytest.mark.asyncio
async def test_unconfigured_bridge_is_a_no_op(local_only_container) -> None:
    local_only_container.local.promos.add(_promo("promo-a"))

    push = await local_only_container.bridge.push_all()
    pull = await local_only_container.bridge.pull(EntityType.PROMO_PRODUCTS)

    assert push.error_key == "not_configured"
    assert pull.error_key == "not_configured"
    assert len(local_only_container.local.promos) == 1


class KeepLocalMergeStrategy:
    def merge(self, repository: BaseRepository, incoming: list) -> int:
        for entity in incoming:
            if entity.id not in repository:
                repository.add(entity)
        return len(repository)


@pytest.mark.asyncio
async def test_custom_merge_strategy(container, remote) -> None:
    container.local.promos.add(_promo("promo-local"))
    remote.seed(EntityType.PROMO_PRODUCTS, [{"id": "promo-a", "product_id": "p1", "producer_id": "prod-1"}])
    bridge = SyncBridge(container.local, remote, merge_strategy=KeepLocalMergeStrategy())

    await bridge.pull(EntityType.PROMO_PRODUCTS)

    assert sorted(p.id for p in container.local.promos.list_all()) == ["promo-a", "promo-local"]
