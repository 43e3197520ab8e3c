from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, list_tables
from .expenses.controller import register as register_expenses
from .locations.controller import register as register_locations
from .logging import setup_logging
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = structlog.get_logger(__name__)


def load_settings(overrides: Optional[dict] = None) -> dict:
    """Upper-case names of the active settings module, with ``overrides`` on top."""

    settings_module = importlib.import_module(get_settings_module())
    settings = {name: getattr(settings_module, name) for name in dir(settings_module) if name.isupper()}
    settings.update(overrides or {})
    return settings


def create_app(overrides: Optional[dict] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings(overrides)
    setup_logging(settings.get("LOG_LEVEL"))

    app = Flask(__name__)
    app.config.update(settings)
    app.secret_key = settings["SECRET_KEY"]
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    backend = str(settings.get("STORE_BACKEND", "memory")).lower()
    if backend == "mysql" and settings.get("AUTO_INIT_DB"):
        db_config = settings["DB_CONFIG"]
        schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema_ready", tables=len(list_tables(db_config)))

    container = container or build_container(settings)
    app.extensions["geo_dateam"] = container

    if settings.get("SEED_ADMIN_EMAIL") and settings.get("SEED_ADMIN_PASSWORD"):
        admin = container.user_service.ensure_admin(
            email=settings["SEED_ADMIN_EMAIL"],
            password=settings["SEED_ADMIN_PASSWORD"],
        )
        logger.info("admin_ready", user_id=admin.user_id)

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_expenses(app, container)
    register_locations(app, container)
    register_reports(app, container)

    logger.info("app_created", backend=backend, debug=bool(settings.get("DEBUG")))
    return app
