from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_PING_LIMIT
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/location", methods=["POST"], endpoint="record_location")
    @login_required
    def record_location():
        data = request.get_json(silent=True) or {}
        ping = container.location_service.record_ping(
            current_user_id(),
            data.get("latitude"),
            data.get("longitude"),
        )
        return json_response(ping, 201)

    @app.route("/api/location", methods=["GET"], endpoint="list_locations")
    @login_required
    def list_locations():
        try:
            limit = int(request.args.get("limit", DEFAULT_PING_LIMIT))
        except ValueError:
            raise ValidationError("Limit must be an integer")
        if limit <= 0:
            raise ValidationError("Limit must be positive")
        return json_response(container.location_service.list_for_user(current_user_id(), limit=limit))
