from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.constants import DATE_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def require_iso_date(value: Optional[str], field_name: str) -> str:
    """Return ``value`` stripped if it is a valid YYYY-MM-DD date string."""
    v = (value or "").strip()
    try:
        parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")
    return v


def optional_iso_date(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return require_iso_date(value, field_name)


def business_day(moment: datetime) -> str:
    """Business-day key of a timestamp."""
    return moment.strftime(DATE_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> str:
    return business_day(now_local())
