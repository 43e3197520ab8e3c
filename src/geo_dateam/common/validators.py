from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from ..core.constants import COORDINATE_PLACES
from ..core.exceptions import ValidationError

_COORDINATE_STEP = Decimal(1).scaleb(-COORDINATE_PLACES)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse text or numbers into a finite Decimal.

    Floats go through ``str`` so the shortest repr is kept instead of the
    binary expansion.
    """

    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return result


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_coordinates(latitude: Any, longitude: Any) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """Return both coordinates as Decimal, or ``(None, None)`` if both are absent."""

    if _is_blank(latitude) and _is_blank(longitude):
        return None, None
    if _is_blank(latitude) or _is_blank(longitude):
        raise ValidationError("Latitude and longitude must be given together")
    return _coordinate(latitude, "Latitude", 90), _coordinate(longitude, "Longitude", 180)


def _coordinate(value: Any, field_name: str, limit: int) -> Decimal:
    result = parse_decimal(value, field_name)
    if abs(result) > limit:
        raise ValidationError(f"{field_name} must be between -{limit} and {limit}")
    # Extra precision is rounded; shorter values keep their own exponent.
    if result.as_tuple().exponent < -COORDINATE_PLACES:
        result = result.quantize(_COORDINATE_STEP, rounding=ROUND_HALF_UP)
    return result
