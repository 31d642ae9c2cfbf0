"""Admin actions on lots, packs and promos (toggle, delete, draw)."""
from __future__ import annotations

import random

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.domain.entities import Lot, PromoProduct
from backoffice.repositories import LocalStore
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger


class CatalogAdminService:
    def __init__(self, local: LocalStore, queue: ReconciliationQueue):
        self.local = local
        self.queue = queue

    def _toggle(self, entity_type: str, entity_id: str) -> bool | None:
        repository = self.local.for_entity(entity_type)
        entity = repository.toggle_active(entity_id)
        if entity is None:
            return None
        self.queue.enqueue(entity_type, SyncOperation.UPDATE, entity_id, {"active": entity.active})
        logger.info(f"{entity_type}/{entity_id} active={entity.active}")
        return entity.active

    def _delete(self, entity_type: str, entity_id: str) -> bool:
        if not self.local.for_entity(entity_type).remove(entity_id):
            return False
        self.queue.enqueue(entity_type, SyncOperation.DELETE, entity_id)
        logger.info(f"{entity_type}/{entity_id} deleted")
        return True

    def toggle_lot(self, lot_id: str) -> bool | None:
        """Flip a lot's active flag. Returns the new flag, None if unknown."""
        return self._toggle(EntityType.LOTS, lot_id)

    def delete_lot(self, lot_id: str) -> bool:
        return self._delete(EntityType.LOTS, lot_id)

    def draw_lot(self, rng: random.Random | None = None) -> Lot | None:
        return self.local.lots.draw_random(rng)

    def toggle_pack(self, pack_id: str) -> bool | None:
        return self._toggle(EntityType.PACKS, pack_id)

    def delete_pack(self, pack_id: str) -> bool:
        return self._delete(EntityType.PACKS, pack_id)

    def toggle_promo(self, promo_id: str) -> bool | None:
        return self._toggle(EntityType.PROMO_PRODUCTS, promo_id)

    def delete_promo(self, promo_id: str) -> bool:
        return self._delete(EntityType.PROMO_PRODUCTS, promo_id)

    def promo_duplicates(self) -> dict[tuple[str, str], list[PromoProduct]]:
        duplicates = self.local.promos.find_duplicates()
        for (product_id, producer_id), promos in duplicates.items():
            logger.warning(
                f"{len(promos)} active promos for product {product_id} of producer {producer_id}"
            )
        return duplicates
