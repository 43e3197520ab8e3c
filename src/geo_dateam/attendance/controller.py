from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import business_day, now_local, optional_iso_date
from ..common.web import current_role, current_user_id, json_response, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .service import working_duration


def register(app: Flask, container: Container) -> None:
    def _target_user_id() -> str:
        """Employees only see their own records; admins may pass ``userId``."""

        requested = request.args.get("userId")
        if not requested or requested == current_user_id():
            return current_user_id()
        if current_role() != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        return requested

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.clock_in(
            current_user_id(),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            location=data.get("location"),
        )
        return json_response(record, 201)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        record = container.attendance_service.clock_out(current_user_id())
        return json_response(record)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        records = container.attendance_service.list_history(
            _target_user_id(),
            start=optional_iso_date(request.args.get("startDate"), "Start date"),
            end=optional_iso_date(request.args.get("endDate"), "End date"),
        )
        return json_response(records)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        now = now_local()
        record = container.attendance_service.get_today(current_user_id(), business_day(now))
        if record is None:
            return json_response({"record": None, "worked": None, "isClockedIn": False})
        return json_response(
            {
                "record": record,
                "worked": str(working_duration(record, now)),
                "isClockedIn": record.is_open,
            }
        )
