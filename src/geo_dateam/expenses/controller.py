from __future__ import annotations

import mimetypes

from flask import Flask, request, send_file

from ..common.web import admin_required, current_role, current_user_id, json_response, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/expenses", methods=["POST"], endpoint="submit_expense")
    @login_required
    def submit_expense():
        # Multipart form when a receipt is attached, JSON otherwise.
        data = request.form if request.form else (request.get_json(silent=True) or {})

        upload = request.files.get("receipt")
        receipt = (upload.stream, upload.filename) if upload and upload.filename else None

        expense = container.expense_service.submit(
            current_user_id(),
            expense_date=data.get("date", ""),
            amount=data.get("amount"),
            category=data.get("category", ""),
            description=data.get("description", ""),
            receipt=receipt,
        )
        return json_response(expense, 201)

    @app.route("/api/expenses", methods=["GET"], endpoint="list_expenses")
    @login_required
    def list_expenses():
        user_id = request.args.get("userId") or current_user_id()
        if user_id != current_user_id() and current_role() != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        expenses = container.expense_service.list_for_user(
            user_id,
            start=request.args.get("startDate"),
            end=request.args.get("endDate"),
            category=request.args.get("category") or None,
            status=request.args.get("status") or None,
        )
        return json_response(expenses)

    @app.route("/api/expenses/<expense_id>/status", methods=["PATCH"], endpoint="set_expense_status")
    @admin_required
    def set_expense_status(expense_id: str):
        data = request.get_json(silent=True) or {}
        expense = container.expense_service.set_status(expense_id, data.get("status", ""))
        return json_response(expense)

    @app.route("/api/expenses/<expense_id>/receipt", methods=["GET"], endpoint="expense_receipt")
    @login_required
    def expense_receipt(expense_id: str):
        stream, ref = container.expense_service.open_receipt(
            expense_id,
            requester_id=current_user_id(),
            requester_role=current_role(),
        )
        mimetype = mimetypes.guess_type(ref)[0] or "application/octet-stream"
        return send_file(stream, mimetype=mimetype, download_name=ref)
