from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from ..common.datetime_utils import now_local
from ..core.enums import Collection
from ..core.exceptions import NotFoundError
from .repository import ENTITY_SPECS, Predicate, RecordStore, entity_id, new_id, stamp_new


class InMemoryRecordStore(RecordStore):
    """Process-lifetime store: one insertion-ordered dict per collection."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = new_id,
    ):
        self._clock = clock
        self._id_factory = id_factory
        self._collections: dict[Collection, dict[str, Any]] = {c: {} for c in Collection}

    def insert(self, collection: Collection, entity: Any) -> Any:
        stored = stamp_new(collection, entity, id_factory=self._id_factory, clock=self._clock)
        self._collections[collection][entity_id(collection, stored)] = stored
        return stored

    def get_by_id(self, collection: Collection, entity_id: str) -> Optional[Any]:
        return self._collections[collection].get(entity_id)

    def update_by_id(self, collection: Collection, entity_id: str, **changes: Any) -> Any:
        items = self._collections[collection]
        current = items.get(entity_id)
        if current is None:
            raise NotFoundError(f"{collection.value} {entity_id} not found")

        id_field = ENTITY_SPECS[collection].id_field
        changes.pop(id_field, None)
        # Re-assigning an existing key keeps its insertion position.
        items[entity_id] = updated = replace(current, **changes)
        return updated

    def scan(self, collection: Collection, predicate: Optional[Predicate] = None) -> Iterator[Any]:
        for entity in list(self._collections[collection].values()):
            if predicate is None or predicate(entity):
                yield entity
