from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..common.validators import parse_coordinates
from ..core.constants import DEFAULT_PING_LIMIT
from ..core.enums import Collection
from ..core.exceptions import ValidationError
from ..store.repository import RecordStore
from .model import LocationPing


class LocationService:
    def __init__(self, store: RecordStore):
        self._store = store

    def record_ping(self, user_id: str, latitude: Any, longitude: Any, *, now: Optional[datetime] = None) -> LocationPing:
        lat, lng = parse_coordinates(latitude, longitude)
        if lat is None:
            raise ValidationError("Latitude and longitude are required")
        return self._store.insert(
            Collection.LOCATION_PINGS,
            LocationPing(ping_id="", user_id=user_id, latitude=lat, longitude=lng, recorded_at=now),
        )

    def list_for_user(self, user_id: str, *, limit: int = DEFAULT_PING_LIMIT) -> list[LocationPing]:
        pings = list(self._store.scan(Collection.LOCATION_PINGS, lambda p: p.user_id == user_id))
        pings.reverse()
        return pings[: int(limit)]
