"""Base repository with common local collection operations."""
from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Iterator, Protocol, TypeVar

from backoffice.core.exceptions import EntityNotFoundException

logger = logging.getLogger(__name__)


class RemoteEntity(Protocol):
    """Protocol for entities that travel to and from the remote store."""

    id: str

    def to_remote(self) -> dict: ...

    @classmethod
    def from_remote(cls, row: dict) -> Any: ...


EntityT = TypeVar("EntityT", bound=RemoteEntity)


class BaseRepository(Generic[EntityT]):
    """Base repository class with common CRUD operations.

    Entities are kept in insertion order keyed by id. Services mutate single
    entities; only the sync bridge calls :meth:`replace_all`.
    """

    entity_type: str = ""
    entity_cls: type[EntityT]

    def __init__(self, items: Iterable[EntityT] | None = None) -> None:
        """Initialize repository with optional seed entities.

        Args:
            items: Entities to load, later ids win on duplicates
        """
        self._items: dict[str, EntityT] = {}
        for item in items or ():
            self._items[item.id] = item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[EntityT]:
        return iter(list(self._items.values()))

    def get(self, entity_id: str) -> EntityT | None:
        return self._items.get(entity_id)

    def require(self, entity_id: str) -> EntityT:
        """Get entity or raise.

        Raises:
            EntityNotFoundException: If no entity has this id
        """
        entity = self._items.get(entity_id)
        if entity is None:
            raise EntityNotFoundException(self.entity_type or type(self).__name__, entity_id)
        return entity

    def list_all(self) -> list[EntityT]:
        return list(self._items.values())

    def add(self, entity: EntityT) -> EntityT:
        self._items[entity.id] = entity
        return entity

    def update(self, entity_id: str, **fields: Any) -> EntityT | None:
        """Apply field updates to an entity.

        Args:
            entity_id: Entity ID
            **fields: Attribute values to set

        Returns:
            Updated entity or None if not found
        """
        entity = self._items.get(entity_id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        return entity

    def remove(self, entity_id: str) -> bool:
        return self._items.pop(entity_id, None) is not None

    def clear(self) -> None:
        self._items.clear()

    def replace_all(self, entities: Iterable[EntityT]) -> int:
        """Overwrite the whole collection. Returns the new size."""
        self._items = {entity.id: entity for entity in entities}
        logger.debug(f"Replaced local {self.entity_type} collection with {len(self._items)} entities")
        return len(self._items)

    def from_remote_rows(self, rows: Iterable[dict]) -> list[EntityT]:
        """Parse remote rows, skipping rows that fail validation."""
        entities: list[EntityT] = []
        for row in rows:
            try:
                entities.append(self.entity_cls.from_remote(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {self.entity_type} row {row.get('id')!r}: {e}")
        return entities
