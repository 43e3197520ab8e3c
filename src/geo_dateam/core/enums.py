from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for route guards."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class ExpenseStatus(str, Enum):
    """Review lifecycle of an expense claim."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PresenceStatus(str, Enum):
    """Classification of an employee's attendance for one day."""

    ABSENT = "absent"
    ACTIVE = "active"
    COMPLETED = "completed"


class Collection(str, Enum):
    """Record store collections."""

    USERS = "users"
    ATTENDANCE = "attendance_records"
    EXPENSES = "expenses"
    LOCATION_PINGS = "location_pings"
