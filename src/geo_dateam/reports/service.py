from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ..attendance.model import AttendanceRecord, WorkingDuration
from ..attendance.service import working_duration
from ..core.enums import Collection, ExpenseStatus, PresenceStatus, Role
from ..notifications.email_sender import EmailSender
from ..store.repository import RecordStore
from ..users.model import User
from .model import AdminStats, ReminderResult, ReportData, TeamMemberStatus

logger = structlog.get_logger(__name__)


def classify(record: Optional[AttendanceRecord]) -> PresenceStatus:
    if record is None:
        return PresenceStatus.ABSENT
    if record.clock_out is None:
        return PresenceStatus.ACTIVE
    return PresenceStatus.COMPLETED


class ReportService:
    """Read-side aggregates composed across collections. Recomputed per call."""

    def __init__(self, store: RecordStore, email_sender: EmailSender):
        self._store = store
        self._email = email_sender

    def team_members(self) -> list[User]:
        employees = list(self._store.scan(Collection.USERS, lambda u: u.role == Role.EMPLOYEE))
        employees.sort(key=lambda u: u.name.casefold())
        return employees

    def _records_by_user(self, work_date: str) -> dict[str, AttendanceRecord]:
        by_user: dict[str, AttendanceRecord] = {}
        for r in self._store.scan(Collection.ATTENDANCE, lambda r: r.work_date == work_date):
            # First match wins, same as the per-user lookup.
            by_user.setdefault(r.user_id, r)
        return by_user

    def admin_stats(self, today: str) -> AdminStats:
        employees = sum(1 for _ in self._store.scan(Collection.USERS, lambda u: u.role == Role.EMPLOYEE))
        # Records of every role count, admins included.
        present = sum(1 for _ in self._store.scan(Collection.ATTENDANCE, lambda r: r.work_date == today))

        pending = 0
        total = Decimal("0")
        for e in self._store.scan(Collection.EXPENSES):
            total += e.amount
            if e.status == ExpenseStatus.PENDING:
                pending += 1

        return AdminStats(
            total_employees=employees,
            present_today=present,
            pending_expense_count=pending,
            total_expense_amount=total,
        )

    def team_attendance_status(self, today: str) -> list[TeamMemberStatus]:
        by_user = self._records_by_user(today)
        out = []
        for u in self.team_members():
            record = by_user.get(u.user_id)
            out.append(TeamMemberStatus(user=u, attendance=record, status=classify(record)))
        return out

    def users_not_clocked_in(self, today: str) -> list[User]:
        return [s.user for s in self.team_attendance_status(today) if s.status == PresenceStatus.ABSENT]

    def send_reminders(self, user_ids: Iterable[str]) -> ReminderResult:
        """Send one reminder per known user; failures are collected, never raised."""

        result = ReminderResult()
        for user_id in user_ids:
            user = self._store.get_by_id(Collection.USERS, user_id)
            if not user:
                result.skipped.append(user_id)
                continue
            try:
                sent = self._email.send_attendance_reminder(user.email, user.name)
            except Exception:
                logger.exception("reminder_send_error", user_id=user.user_id)
                sent = False
            (result.notified if sent else result.failed).append(user.name)

        logger.info(
            "reminders_sent",
            notified=len(result.notified),
            failed=len(result.failed),
            skipped=len(result.skipped),
        )
        return result

    def attendance_report(self, *, start: str, end: str, user_id: Optional[str] = None) -> ReportData:
        users = {u.user_id: u for u in self._store.scan(Collection.USERS)}

        def matches(r: AttendanceRecord) -> bool:
            if not (start <= r.work_date <= end):
                return False
            return user_id is None or r.user_id == user_id

        def owner_name(r: AttendanceRecord) -> str:
            owner = users.get(r.user_id)
            return owner.name.casefold() if owner else ""

        # Newest day first, names ascending within a day.
        records = sorted(self._store.scan(Collection.ATTENDANCE, matches), key=owner_name)
        records.sort(key=lambda r: r.work_date, reverse=True)

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in records:
            owner = users.get(r.user_id)
            # Open records have not produced worked time yet.
            worked = working_duration(r) if r.clock_out else WorkingDuration(0, 0)

            out_rows.append(
                {
                    "work_date": r.work_date,
                    "user_id": r.user_id,
                    "name": owner.name if owner else "-",
                    "email": owner.email if owner else "-",
                    "clock_in": r.clock_in.strftime("%H:%M") if r.clock_in else "-",
                    "clock_out": r.clock_out.strftime("%H:%M") if r.clock_out else "-",
                    "worked_hours": str(worked),
                    "location": r.location or "",
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "name": owner.name if owner else "-",
                    "total_minutes": 0,
                    "days": 0,
                }
                summary_map[r.user_id] = s
            s["total_minutes"] += worked.total_minutes
            s["days"] += 1

        summary = []
        for s in sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True):
            total = WorkingDuration(s["total_minutes"] // 60, s["total_minutes"] % 60)
            summary.append(
                {
                    "user_id": s["user_id"],
                    "name": s["name"],
                    "days": s["days"],
                    "total_hours": str(total),
                }
            )

        return ReportData(rows=out_rows, summary=summary)
