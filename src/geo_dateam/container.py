from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .expenses.service import ExpenseService
from .locations.service import LocationService
from .notifications.email_sender import EmailSender, LoggingEmailSender, SmtpEmailSender, SmtpSettings
from .receipts.storage import LocalReceiptStorage, ReceiptStorage
from .reports.service import ReportService
from .store.memory_store import InMemoryRecordStore
from .store.mysql_store import MySQLRecordStore
from .store.repository import RecordStore
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    store: RecordStore
    receipts: ReceiptStorage
    email_sender: EmailSender

    user_service: UserService
    auth_service: AuthService
    attendance_service: AttendanceService
    expense_service: ExpenseService
    location_service: LocationService
    report_service: ReportService


def build_store(settings: dict) -> RecordStore:
    backend = str(settings.get("STORE_BACKEND", "memory")).lower()
    if backend == "mysql":
        return MySQLRecordStore(DatabaseConnection(DBConfig.from_dict(settings["DB_CONFIG"])))
    if backend == "memory":
        return InMemoryRecordStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_email_sender(settings: dict) -> EmailSender:
    host = settings.get("SMTP_HOST")
    if not host:
        return LoggingEmailSender()
    return SmtpEmailSender(
        SmtpSettings(
            host=str(host),
            port=int(settings.get("SMTP_PORT", 587)),
            username=settings.get("SMTP_USERNAME") or None,
            password=settings.get("SMTP_PASSWORD") or None,
            use_tls=bool(settings.get("SMTP_USE_TLS", True)),
            mail_from=str(settings.get("MAIL_FROM") or "noreply@geodateam.com"),
        )
    )


def build_container(
    settings: dict,
    *,
    store: Optional[RecordStore] = None,
    receipts: Optional[ReceiptStorage] = None,
    email_sender: Optional[EmailSender] = None,
) -> Container:
    store = store or build_store(settings)
    receipts = receipts or LocalReceiptStorage(settings.get("UPLOAD_DIR", "var/uploads"))
    email_sender = email_sender or build_email_sender(settings)

    user_service = UserService(store)
    auth_service = AuthService(user_service)
    attendance_service = AttendanceService(store)
    expense_service = ExpenseService(store, receipts)
    location_service = LocationService(store)
    report_service = ReportService(store, email_sender)

    return Container(
        store=store,
        receipts=receipts,
        email_sender=email_sender,
        user_service=user_service,
        auth_service=auth_service,
        attendance_service=attendance_service,
        expense_service=expense_service,
        location_service=location_service,
        report_service=report_service,
    )
