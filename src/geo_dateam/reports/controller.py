from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.datetime_utils import require_iso_date, today_local
from ..common.web import admin_required, json_response
from ..container import Container
from ..core.exceptions import ValidationError

REPORT_FIELDS = [
    "work_date",
    "user_id",
    "name",
    "email",
    "clock_in",
    "clock_out",
    "worked_hours",
    "location",
]


def register(app: Flask, container: Container) -> None:
    def _write_report_csv(*, data, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    def admin_stats():
        return json_response(container.report_service.admin_stats(today_local()))

    @app.route("/api/admin/team", methods=["GET"], endpoint="admin_team")
    @admin_required
    def admin_team():
        return json_response(container.report_service.team_members())

    @app.route("/api/admin/pending-expenses", methods=["GET"], endpoint="admin_pending_expenses")
    @admin_required
    def admin_pending_expenses():
        return json_response(container.expense_service.list_pending_with_owner())

    @app.route("/api/admin/team-attendance", methods=["GET"], endpoint="admin_team_attendance")
    @admin_required
    def admin_team_attendance():
        statuses = container.report_service.team_attendance_status(today_local())
        return json_response(
            [
                {
                    "user": s.user,
                    "attendance": s.attendance,
                    "status": s.status,
                    "isPresent": s.is_present,
                    "isClockedIn": s.is_clocked_in,
                }
                for s in statuses
            ]
        )

    @app.route("/api/admin/users-not-clocked", methods=["GET"], endpoint="admin_users_not_clocked")
    @admin_required
    def admin_users_not_clocked():
        return json_response(container.report_service.users_not_clocked_in(today_local()))

    @app.route("/api/admin/send-reminder", methods=["POST"], endpoint="admin_send_reminder")
    @admin_required
    def admin_send_reminder():
        data = request.get_json(silent=True) or {}
        user_ids = data.get("userIds")
        if not isinstance(user_ids, list) or not user_ids:
            raise ValidationError("userIds must be a non-empty list")

        result = container.report_service.send_reminders([str(u) for u in user_ids])
        return json_response(
            {
                "message": result.message,
                "notified": result.notified,
                "failed": result.failed,
                "skipped": result.skipped,
            }
        )

    def _report_range() -> tuple[str, str]:
        start = require_iso_date(request.args.get("start"), "Start date")
        end = require_iso_date(request.args.get("end"), "End date")
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return start, end

    @app.route("/api/admin/report", methods=["GET"], endpoint="admin_report")
    @admin_required
    def admin_report():
        start, end = _report_range()
        data = container.report_service.attendance_report(
            start=start,
            end=end,
            user_id=request.args.get("userId") or None,
        )
        return json_response({"start": start, "end": end, "rows": data.rows, "summary": data.summary})

    @app.route("/api/admin/report.csv", methods=["GET"], endpoint="admin_report_csv")
    @admin_required
    def admin_report_csv():
        start, end = _report_range()
        data = container.report_service.attendance_report(
            start=start,
            end=end,
            user_id=request.args.get("userId") or None,
        )
        filename = f"attendance_report_{start.replace('-', '')}_{end.replace('-', '')}.csv"
        return _write_report_csv(data=data, filename=filename)
