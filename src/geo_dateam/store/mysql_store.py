from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterator, Optional

import mysql.connector

from ..common.datetime_utils import now_local
from ..core.enums import Collection, ExpenseStatus, Role
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import ENTITY_SPECS, Predicate, RecordStore, new_id, stamp_new

# Columns whose values are enums in the domain and plain strings in MySQL.
_ENUM_COLUMNS: dict[str, type[Enum]] = {
    "role": Role,
    "status": ExpenseStatus,
}

_DECIMAL_COLUMNS = {"latitude", "longitude", "amount"}


def entity_to_row(collection: Collection, entity: Any) -> dict[str, Any]:
    row = {}
    for name in ENTITY_SPECS[collection].field_names:
        value = getattr(entity, name)
        row[name] = value.value if isinstance(value, Enum) else value
    return row


def row_to_entity(collection: Collection, row: dict[str, Any]) -> Any:
    spec = ENTITY_SPECS[collection]
    values: dict[str, Any] = {}
    for name in spec.field_names:
        value = row.get(name)
        if value is not None and name in _ENUM_COLUMNS:
            value = _ENUM_COLUMNS[name](value)
        elif value is not None and name in _DECIMAL_COLUMNS and not isinstance(value, Decimal):
            value = Decimal(str(value))
        values[name] = value
    return spec.entity_type(**values)


def insert_sql(collection: Collection) -> str:
    columns = ENTITY_SPECS[collection].field_names
    placeholders = ",".join(["%s"] * len(columns))
    return f"INSERT INTO {collection.value}({', '.join(columns)}) VALUES({placeholders})"


def select_sql(collection: Collection) -> str:
    columns = ", ".join(ENTITY_SPECS[collection].field_names)
    return f"SELECT {columns} FROM {collection.value}"


class MySQLRecordStore(RecordStore):
    """Durable store: one table per collection, see database/schema.sql."""

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = new_id,
    ):
        self._conn_factory = conn_factory
        self._clock = clock
        self._id_factory = id_factory

    def insert(self, collection: Collection, entity: Any) -> Any:
        stored = stamp_new(collection, entity, id_factory=self._id_factory, clock=self._clock)
        row = entity_to_row(collection, stored)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(insert_sql(collection), tuple(row.values()))
        except mysql.connector.IntegrityError as e:
            raise DuplicateRecordError(f"Duplicate {collection.value} record") from e
        except mysql.connector.DataError as e:
            raise ValidationError(f"Value out of range for {collection.value}") from e
        return stored

    def get_by_id(self, collection: Collection, entity_id: str) -> Optional[Any]:
        id_field = ENTITY_SPECS[collection].id_field
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{select_sql(collection)} WHERE {id_field}=%s", (entity_id,))
            r = fetchone(cur)
        return row_to_entity(collection, r) if r else None

    def update_by_id(self, collection: Collection, entity_id: str, **changes: Any) -> Any:
        id_field = ENTITY_SPECS[collection].id_field
        changes.pop(id_field, None)

        current = self.get_by_id(collection, entity_id)
        if current is None:
            raise NotFoundError(f"{collection.value} {entity_id} not found")
        updated = replace(current, **changes)
        if not changes:
            return updated

        row = entity_to_row(collection, updated)
        assignments = ", ".join(f"{name}=%s" for name in changes)
        params = tuple(row[name] for name in changes) + (entity_id,)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE {collection.value} SET {assignments} WHERE {id_field}=%s", params)
        except mysql.connector.DataError as e:
            raise ValidationError(f"Value out of range for {collection.value}") from e
        return updated

    def scan(self, collection: Collection, predicate: Optional[Predicate] = None) -> Iterator[Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{select_sql(collection)} ORDER BY seq ASC")
            rows = fetchall(cur)

        for r in rows:
            entity = row_to_entity(collection, r)
            if predicate is None or predicate(entity):
                yield entity
