from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Optional

import structlog

from ..common.datetime_utils import business_day, now_local
from ..common.validators import parse_coordinates
from ..core.enums import Collection
from ..core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    DuplicateRecordError,
    NoOpenRecordError,
)
from ..store.repository import RecordStore
from .model import AttendanceRecord, WorkingDuration

logger = structlog.get_logger(__name__)


def working_duration(record: AttendanceRecord, now: Optional[datetime] = None) -> WorkingDuration:
    """Elapsed time from clock-in to clock-out, or to ``now`` while still open.

    Floored to whole minutes. A record without clock-in counts as zero.
    """

    if record.clock_in is None:
        return WorkingDuration(0, 0)
    end = record.clock_out or now or now_local()
    minutes = max(int((end - record.clock_in).total_seconds() // 60), 0)
    return WorkingDuration(minutes // 60, minutes % 60)


class AttendanceService:
    """Clock-in/out lifecycle per (user, business day)."""

    def __init__(self, store: RecordStore):
        self._store = store
        # Serialises the check-then-write sequences; Flask serves requests on threads.
        self._lock = threading.Lock()

    def get_today(self, user_id: str, work_date: str) -> Optional[AttendanceRecord]:
        return next(
            self._store.scan(
                Collection.ATTENDANCE,
                lambda r: r.user_id == user_id and r.work_date == work_date,
            ),
            None,
        )

    def clock_in(
        self,
        user_id: str,
        *,
        latitude: Any = None,
        longitude: Any = None,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        work_date = business_day(now)
        lat, lng = parse_coordinates(latitude, longitude)
        label = (location or "").strip() or None

        with self._lock:
            if self.get_today(user_id, work_date):
                raise AlreadyClockedInError("Already clocked in today")
            try:
                record = self._store.insert(
                    Collection.ATTENDANCE,
                    AttendanceRecord(
                        attendance_id="",
                        user_id=user_id,
                        work_date=work_date,
                        clock_in=now,
                        latitude=lat,
                        longitude=lng,
                        location=label,
                    ),
                )
            except DuplicateRecordError:
                raise AlreadyClockedInError("Already clocked in today")

        logger.info("clock_in", user_id=user_id, work_date=work_date, has_location=lat is not None)
        return record

    def clock_out(self, user_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        work_date = business_day(now)

        with self._lock:
            record = self.get_today(user_id, work_date)
            if not record:
                raise NoOpenRecordError("No clock-in record found for today")
            if record.clock_out is not None:
                raise AlreadyClockedOutError("Already clocked out today")
            updated = self._store.update_by_id(Collection.ATTENDANCE, record.attendance_id, clock_out=now)

        logger.info("clock_out", user_id=user_id, work_date=work_date, worked=str(working_duration(updated)))
        return updated

    def list_history(
        self,
        user_id: str,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        def matches(r: AttendanceRecord) -> bool:
            if r.user_id != user_id:
                return False
            if start and r.work_date < start:
                return False
            if end and r.work_date > end:
                return False
            return True

        records = list(self._store.scan(Collection.ATTENDANCE, matches))
        records.sort(key=lambda r: r.work_date, reverse=True)
        return records

    def list_for_date(self, work_date: str) -> list[AttendanceRecord]:
        return list(self._store.scan(Collection.ATTENDANCE, lambda r: r.work_date == work_date))
