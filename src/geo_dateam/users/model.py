from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account.

    Note: plain data object, no storage access.
    """

    user_id: str
    email: str
    password_hash: str
    name: str
    role: Role
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    email: str
    name: str
    role: Role
