"""Catalog-side repositories: producers, packs, promos and generic records."""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from backoffice.core.constants import EntityType
from backoffice.domain.entities import Pack, Producer, PromoProduct, RemoteRecord

from .base import BaseRepository


class ProducerRepository(BaseRepository[Producer]):
    entity_type = EntityType.PRODUCERS
    entity_cls = Producer


class PackRepository(BaseRepository[Pack]):
    entity_type = EntityType.PACKS
    entity_cls = Pack

    def active(self) -> list[Pack]:
        return [pack for pack in self.list_all() if pack.active]

    def toggle_active(self, pack_id: str) -> Pack | None:
        pack = self.get(pack_id)
        if pack is None:
            return None
        pack.active = not pack.active
        return pack


class PromoRepository(BaseRepository[PromoProduct]):
    entity_type = EntityType.PROMO_PRODUCTS
    entity_cls = PromoProduct

    def active(self) -> list[PromoProduct]:
        return [promo for promo in self.list_all() if promo.active]

    def toggle_active(self, promo_id: str) -> PromoProduct | None:
        promo = self.get(promo_id)
        if promo is None:
            return None
        promo.active = not promo.active
        return promo

    def find_duplicates(self) -> dict[tuple[str, str], list[PromoProduct]]:
        """Group active promos sharing a (product_id, producer_id) key.

        Only keys with more than one active promo are returned.
        """
        groups: dict[tuple[str, str], list[PromoProduct]] = defaultdict(list)
        for promo in self.active():
            groups[promo.key].append(promo)
        return {key: promos for key, promos in groups.items() if len(promos) > 1}


class RecordRepository(BaseRepository[RemoteRecord]):
    """Generic rows (app key/value data, user profiles)."""

    entity_cls = RemoteRecord

    def __init__(self, entity_type: str, items: Iterable[RemoteRecord] | None = None) -> None:
        super().__init__(items)
        self.entity_type = entity_type
