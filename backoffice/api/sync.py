"""Admin sync API: manual push/pull, queue status and lot, pack and promo actions."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backoffice.api.common import get_container, raise_for_error_key
from backoffice.bootstrap import Container
from backoffice.domain.entities import Lot
from backoffice.services.sync_bridge import SyncReport

router = APIRouter(prefix="/api/v1/admin", tags=["admin-sync"])


def _report_payload(report: SyncReport) -> dict:
    return {
        "direction": report.direction,
        "ok": report.ok,
        "succeeded": report.succeeded,
        "failed": report.failed,
        "counts": report.counts(),
        "errors": [error for result in report.results for error in result.errors],
    }


def _lot_payload(lot: Lot) -> dict:
    data = lot.to_remote()
    data["rarity_label"] = lot.tier.label
    data["odds"] = lot.tier.odds
    return data


@router.post("/sync/push")
async def push_all(container: Container = Depends(get_container)):
    report = await container.bridge.push_all()
    raise_for_error_key(report.error_key)
    return _report_payload(report)


@router.post("/sync/pull")
async def pull_all(container: Container = Depends(get_container)):
    report = await container.bridge.pull_all()
    raise_for_error_key(report.error_key)
    return _report_payload(report)


@router.get("/sync/queue")
async def queue_status(container: Container = Depends(get_container)):
    queue = container.queue
    return {
        "pending": queue.pending_count,
        "failed": queue.failed_count,
        "failed_tasks": [
            {
                "entity_type": task.entity_type,
                "operation": task.operation,
                "entity_id": task.entity_id,
                "attempts": task.attempts,
                "error": task.last_error,
            }
            for task in queue.failed_tasks()
        ],
    }


@router.post("/sync/retry-failed")
async def retry_failed(container: Container = Depends(get_container)):
    return {"requeued": container.queue.retry_failed()}


@router.get("/lots")
async def list_lots(rarity: str | None = None, container: Container = Depends(get_container)):
    lots = container.local.lots
    try:
        items = lots.by_rarity(rarity) if rarity else lots.list_all()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown rarity: {rarity}") from e
    return [_lot_payload(lot) for lot in items]


@router.post("/lots/draw")
async def draw_lot(container: Container = Depends(get_container)):
    lot = container.catalog_admin.draw_lot()
    if lot is None:
        raise HTTPException(status_code=404, detail="No active lot")
    return _lot_payload(lot)


@router.post("/lots/{lot_id}/toggle")
async def toggle_lot(lot_id: str, container: Container = Depends(get_container)):
    active = container.catalog_admin.toggle_lot(lot_id)
    if active is None:
        raise HTTPException(status_code=404, detail=f"Lot {lot_id} not found")
    return {"id": lot_id, "active": active}


@router.delete("/lots/{lot_id}")
async def delete_lot(lot_id: str, container: Container = Depends(get_container)):
    if not container.catalog_admin.delete_lot(lot_id):
        raise HTTPException(status_code=404, detail=f"Lot {lot_id} not found")
    return {"deleted": lot_id}


@router.post("/promos/{promo_id}/toggle")
async def toggle_promo(promo_id: str, container: Container = Depends(get_container)):
    active = container.catalog_admin.toggle_promo(promo_id)
    if active is None:
        raise HTTPException(status_code=404, detail=f"Promo {promo_id} not found")
    return {"id": promo_id, "active": active}


@router.delete("/promos/{promo_id}")
async def delete_promo(promo_id: str, container: Container = Depends(get_container)):
    if not container.catalog_admin.delete_promo(promo_id):
        raise HTTPException(status_code=404, detail=f"Promo {promo_id} not found")
    return {"deleted": promo_id}


@router.post("/packs/{pack_id}/toggle")
async def toggle_pack(pack_id: str, container: Container = Depends(get_container)):
    active = container.catalog_admin.toggle_pack(pack_id)
    if active is None:
        raise HTTPException(status_code=404, detail=f"Pack {pack_id} not found")
    return {"id": pack_id, "active": active}


@router.delete("/packs/{pack_id}")
async def delete_pack(pack_id: str, container: Container = Depends(get_container)):
    if not container.catalog_admin.delete_pack(pack_id):
        raise HTTPException(status_code=404, detail=f"Pack {pack_id} not found")
    return {"deleted": pack_id}


@router.get("/promos/duplicates")
async def promo_duplicates(container: Container = Depends(get_container)):
    duplicates = container.catalog_admin.promo_duplicates()
    return [
        {"product_id": product_id, "producer_id": producer_id, "promo_ids": [p.id for p in promos]}
        for (product_id, producer_id), promos in duplicates.items()
    ]
