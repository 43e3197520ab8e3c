"""Create the bootstrap admin account in the MySQL store.

Usage: SEED_ADMIN_EMAIL=... SEED_ADMIN_PASSWORD=... python scripts/seed_db.py
"""

from __future__ import annotations

from dotenv import load_dotenv

from geo_dateam.container import build_container
from geo_dateam.main import load_settings


def main() -> None:
    load_dotenv(override=False)
    settings = load_settings({"STORE_BACKEND": "mysql"})
    email = settings.get("SEED_ADMIN_EMAIL")
    password = settings.get("SEED_ADMIN_PASSWORD")
    if not email or not password:
        raise SystemExit("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set")

    container = build_container(settings)
    admin = container.user_service.ensure_admin(email=email, password=password)
    print(f"OK: admin ready -> {admin.email} ({admin.user_id})")


if __name__ == "__main__":
    main()
