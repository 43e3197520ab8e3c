from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from geo_dateam.common.datetime_utils import business_day, optional_iso_date, require_iso_date
from geo_dateam.common.validators import parse_coordinates, parse_decimal
from geo_dateam.common.web import jsonable
from geo_dateam.core.enums import Role
from geo_dateam.core.exceptions import ValidationError
from geo_dateam.users.model import User


def test_parse_decimal_keeps_float_repr():
    assert parse_decimal(2.3522, "x") == Decimal("2.3522")
    assert parse_decimal(" 10.5 ", "x") == Decimal("10.5")
    assert parse_decimal(Decimal("1.25"), "x") == Decimal("1.25")


@pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "Infinity"])
def test_parse_decimal_rejects(value):
    with pytest.raises(ValidationError):
        parse_decimal(value, "x")


def test_parse_coordinates():
    assert parse_coordinates(None, "") == (None, None)
    assert parse_coordinates("48.8566", 2.3522) == (Decimal("48.8566"), Decimal("2.3522"))
    with pytest.raises(ValidationError):
        parse_coordinates(None, 2.3522)


def test_iso_dates():
    assert require_iso_date(" 2024-03-04 ", "Date") == "2024-03-04"
    assert optional_iso_date("", "Date") is None
    assert business_day(datetime(2024, 3, 4, 23, 59)) == "2024-03-04"
    with pytest.raises(ValidationError):
        require_iso_date("2024-02-30", "Date")


def test_jsonable_hides_password_hash():
    user = User(
        user_id="u1",
        email="a@example.com",
        password_hash="secret-hash",
        name="A",
        role=Role.ADMIN,
        created_at=datetime(2024, 3, 4, 9, 0),
    )

    assert jsonable(user) == {
        "user_id": "u1",
        "email": "a@example.com",
        "name": "A",
        "role": "admin",
        "created_at": "2024-03-04T09:00:00",
    }


def test_jsonable_nested_values():
    @dataclass
    class Box:
        amount: Decimal
        day: date

    assert jsonable({"items": [Box(Decimal("1.50"), date(2024, 3, 4))]}) == {
        "items": [{"amount": "1.50", "day": "2024-03-04"}]
    }


@pytest.mark.parametrize("lat,lng", [("90.0001", "0"), ("-91", "0"), ("0", "180.5"), ("0", "-181")])
def test_parse_coordinates_out_of_range(lat, lng):
    with pytest.raises(ValidationError):
        parse_coordinates(lat, lng)


def test_parse_coordinates_rounds_to_column_scale():
    lat, lng = parse_coordinates("48.856613999999", "-180")

    assert lat == Decimal("48.85661400")
    assert lat.as_tuple().exponent == -8
    assert lng == Decimal("-180")
