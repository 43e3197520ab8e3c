from __future__ import annotations

from datetime import datetime

import pytest

from geo_dateam.container import build_container
from geo_dateam.core.enums import Role
from geo_dateam.main import create_app
from geo_dateam.store.memory_store import InMemoryRecordStore

WORK_DAY = "2024-03-04"
MORNING = datetime(2024, 3, 4, 9, 0)
EVENING = datetime(2024, 3, 4, 17, 30)

ADMIN_EMAIL = "admin@geodateam.test"
ADMIN_PASSWORD = "admin123"


class RecordingEmailSender:
    """Collects reminders; addresses listed in ``failing`` report a failed send."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent: list[tuple[str, str]] = []

    def send_attendance_reminder(self, email: str, name: str) -> bool:
        if email in self.failing:
            return False
        self.sent.append((email, name))
        return True


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def container(store, email_sender, tmp_path):
    return build_container(
        {"UPLOAD_DIR": str(tmp_path / "uploads")},
        store=store,
        email_sender=email_sender,
    )


@pytest.fixture
def make_user(container):
    def _make(name: str, *, role: Role = Role.EMPLOYEE, password: str = "secret1"):
        email = f"{name.lower().replace(' ', '.')}@geodateam.test"
        return container.user_service.register(email=email, password=password, name=name, role=role)

    return _make


@pytest.fixture
def app(monkeypatch, tmp_path, email_sender):
    monkeypatch.setenv("APP_ENV", "testing")
    store = InMemoryRecordStore()
    settings = {
        "STORE_BACKEND": "memory",
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "SEED_ADMIN_EMAIL": ADMIN_EMAIL,
        "SEED_ADMIN_PASSWORD": ADMIN_PASSWORD,
    }
    container = build_container(settings, store=store, email_sender=email_sender)
    app = create_app(settings, container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email: str, password: str):
    return client.post("/api/login", json={"email": email, "password": password})


def signup(client, name: str, password: str = "secret1"):
    email = f"{name.lower()}@geodateam.test"
    resp = client.post("/api/register", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()
