from __future__ import annotations

import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Protocol

from ..attendance.model import AttendanceRecord
from ..core.enums import Collection
from ..expenses.model import Expense
from ..locations.model import LocationPing
from ..users.model import User

Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class EntitySpec:
    """How a collection's entities are identified and stamped."""

    entity_type: type
    id_field: str
    timestamp_field: Optional[str] = None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self.entity_type))


ENTITY_SPECS: dict[Collection, EntitySpec] = {
    Collection.USERS: EntitySpec(User, "user_id", "created_at"),
    Collection.ATTENDANCE: EntitySpec(AttendanceRecord, "attendance_id"),
    Collection.EXPENSES: EntitySpec(Expense, "expense_id", "created_at"),
    Collection.LOCATION_PINGS: EntitySpec(LocationPing, "ping_id", "recorded_at"),
}


def new_id() -> str:
    return uuid.uuid4().hex


def entity_id(collection: Collection, entity: Any) -> str:
    return getattr(entity, ENTITY_SPECS[collection].id_field)


def stamp_new(collection: Collection, entity: Any, *, id_factory: Callable[[], str], clock: Callable[[], datetime]):
    """Assign the identifier and server-side timestamp of a new entity."""

    spec = ENTITY_SPECS[collection]
    if not isinstance(entity, spec.entity_type):
        raise TypeError(f"{collection.value} stores {spec.entity_type.__name__}, got {type(entity).__name__}")

    changes: dict[str, Any] = {spec.id_field: id_factory()}
    if spec.timestamp_field and getattr(entity, spec.timestamp_field) is None:
        changes[spec.timestamp_field] = clock()
    return replace(entity, **changes)


class RecordStore(Protocol):
    """Storage interface shared by every service.

    Note (DIP): services depend on this interface, never on a concrete backend.
    """

    def insert(self, collection: Collection, entity: Any) -> Any:
        raise NotImplementedError

    def get_by_id(self, collection: Collection, entity_id: str) -> Optional[Any]:
        raise NotImplementedError

    def update_by_id(self, collection: Collection, entity_id: str, **changes: Any) -> Any:
        """Merge ``changes`` into the stored entity; NotFoundError if absent."""

        raise NotImplementedError

    def scan(self, collection: Collection, predicate: Optional[Predicate] = None) -> Iterator[Any]:
        """Lazily yield matching entities in insertion order."""

        raise NotImplementedError
