from __future__ import annotations

import threading
from typing import Optional

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Collection, Role
from ..core.exceptions import AuthenticationError, DuplicateRecordError, ValidationError
from ..store.repository import RecordStore
from .model import SessionUser, User

logger = structlog.get_logger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class UserService:
    """Use case: accounts (registration, lookups)."""

    def __init__(self, store: RecordStore):
        self._store = store
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[User]:
        return self._store.get_by_id(Collection.USERS, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        return next(self._store.scan(Collection.USERS, lambda u: u.email == email), None)

    def register(self, *, email: str, password: str, name: str, role: Role | str = Role.EMPLOYEE) -> User:
        email = normalize_email(email)
        if "@" not in email:
            raise ValidationError("Email is invalid")
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("Role is invalid")

        with self._lock:
            if self.get_by_email(email):
                raise ValidationError("Email already registered")
            try:
                user = self._store.insert(
                    Collection.USERS,
                    User(
                        user_id="",
                        email=email,
                        password_hash=generate_password_hash(password),
                        name=name,
                        role=role,
                    ),
                )
            except DuplicateRecordError:
                raise ValidationError("Email already registered")

        logger.info("user_registered", user_id=user.user_id, role=user.role.value)
        return user

    def ensure_admin(self, *, email: str, password: str, name: str = "Admin") -> User:
        """Create the bootstrap admin account unless the email already exists."""

        existing = self.get_by_email(email)
        if existing:
            return existing
        return self.register(email=email, password=password, name=name, role=Role.ADMIN)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserService):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(user_id=user.user_id, email=user.email, name=user.name, role=user.role)
