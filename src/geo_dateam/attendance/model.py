from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one workday presence window of a user."""

    attendance_id: str
    user_id: str
    work_date: str
    clock_in: Optional[datetime]
    clock_out: Optional[datetime] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    location: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


@dataclass(frozen=True)
class WorkingDuration:
    hours: int
    minutes: int

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"
