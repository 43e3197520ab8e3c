from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import PresenceStatus
from ..users.model import User


@dataclass(frozen=True)
class AdminStats:
    total_employees: int
    present_today: int
    pending_expense_count: int
    total_expense_amount: Decimal


@dataclass(frozen=True)
class TeamMemberStatus:
    """Read-model: one employee with today's record and its classification."""

    user: User
    attendance: Optional[AttendanceRecord]
    status: PresenceStatus

    @property
    def is_present(self) -> bool:
        return self.attendance is not None

    @property
    def is_clocked_in(self) -> bool:
        return self.status == PresenceStatus.ACTIVE


@dataclass
class ReminderResult:
    notified: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.notified:
            text = f"Notifications sent to {len(self.notified)} user(s)"
        else:
            text = "No notification sent"
        if self.failed:
            text += f" ({len(self.failed)} failure(s))"
        return text


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
