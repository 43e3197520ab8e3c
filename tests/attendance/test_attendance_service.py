from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from geo_dateam.attendance.model import AttendanceRecord
from geo_dateam.attendance.service import AttendanceService, working_duration
from geo_dateam.core.enums import Collection
from geo_dateam.core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    NoOpenRecordError,
    ValidationError,
)

from conftest import EVENING, MORNING, WORK_DAY


@pytest.fixture
def service(store):
    return AttendanceService(store)


def test_full_day_with_coordinates(service):
    record = service.clock_in("u1", latitude=48.8566, longitude=2.3522, location="Paris", now=MORNING)

    today = service.get_today("u1", WORK_DAY)
    assert today == record
    assert today.is_open
    assert today.latitude == Decimal("48.8566")
    assert today.longitude == Decimal("2.3522")
    assert today.location == "Paris"

    closed = service.clock_out("u1", now=EVENING)
    worked = working_duration(closed)
    assert (worked.hours, worked.minutes) == (8, 30)
    assert str(worked) == "08:30"
    assert not service.get_today("u1", WORK_DAY).is_open


def test_second_clock_in_same_day_is_rejected(service, store):
    service.clock_in("u1", now=MORNING)

    with pytest.raises(AlreadyClockedInError):
        service.clock_in("u1", now=MORNING + timedelta(hours=2))

    assert len(list(store.scan(Collection.ATTENDANCE))) == 1


def test_clock_in_next_day_opens_new_record(service):
    service.clock_in("u1", now=MORNING)
    service.clock_in("u1", now=MORNING + timedelta(days=1))

    assert [r.work_date for r in service.list_history("u1")] == ["2024-03-05", "2024-03-04"]


def test_clock_out_without_clock_in(service):
    with pytest.raises(NoOpenRecordError):
        service.clock_out("u1", now=EVENING)


def test_clock_out_twice(service):
    service.clock_in("u1", now=MORNING)
    service.clock_out("u1", now=EVENING)

    with pytest.raises(AlreadyClockedOutError):
        service.clock_out("u1", now=EVENING + timedelta(minutes=5))
    assert service.get_today("u1", WORK_DAY).clock_out == EVENING


def test_single_coordinate_is_rejected(service):
    with pytest.raises(ValidationError):
        service.clock_in("u1", latitude="48.8566", now=MORNING)


def test_blank_location_is_stored_as_none(service):
    record = service.clock_in("u1", location="   ", now=MORNING)
    assert record.location is None
    assert record.latitude is None


def test_working_duration_never_decreases_while_open():
    record = AttendanceRecord(attendance_id="a", user_id="u1", work_date=WORK_DAY, clock_in=MORNING)

    previous = -1
    for minutes in (0, 1, 59, 60, 61, 600, 601):
        current = working_duration(record, MORNING + timedelta(minutes=minutes)).total_minutes
        assert current >= previous
        previous = current


def test_working_duration_edge_cases():
    no_start = AttendanceRecord(attendance_id="a", user_id="u1", work_date=WORK_DAY, clock_in=None)
    assert working_duration(no_start, EVENING).total_minutes == 0

    skewed = AttendanceRecord(
        attendance_id="b", user_id="u1", work_date=WORK_DAY, clock_in=EVENING, clock_out=MORNING
    )
    assert working_duration(skewed).total_minutes == 0

    partial = AttendanceRecord(attendance_id="c", user_id="u1", work_date=WORK_DAY, clock_in=MORNING)
    assert working_duration(partial, MORNING + timedelta(seconds=119)).total_minutes == 1


def test_history_filters_by_user_and_range(service):
    for day in range(4, 8):
        service.clock_in("u1", now=datetime(2024, 3, day, 9, 0))
    service.clock_in("u2", now=MORNING)

    history = service.list_history("u1", start="2024-03-05", end="2024-03-06")

    assert [r.work_date for r in history] == ["2024-03-06", "2024-03-05"]
    assert {r.user_id for r in service.list_for_date(WORK_DAY)} == {"u1", "u2"}
