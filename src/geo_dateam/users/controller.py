from __future__ import annotations

from flask import Flask, request, session

from ..common.web import current_user_id, json_response, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import SessionUser


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user: SessionUser, *, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_user():
        data = request.get_json(silent=True) or {}
        role = data.get("role") or Role.EMPLOYEE.value
        if role == Role.ADMIN.value and not app.config.get("ALLOW_ADMIN_SIGNUP", False):
            raise AuthorizationError("Admin accounts cannot be self-registered")

        user = container.user_service.register(
            email=data.get("email", ""),
            password=data.get("password", ""),
            name=data.get("name", ""),
            role=role,
        )
        _start_session(
            SessionUser(user_id=user.user_id, email=user.email, name=user.name, role=user.role),
            remember=False,
        )
        return json_response(user, 201)

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _start_session(s_user, remember=bool(data.get("remember")))
        return json_response(s_user)

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return "", 204

    @app.route("/api/user", methods=["GET"], endpoint="current_user")
    @login_required
    def current_user():
        user = container.user_service.get(current_user_id())
        if not user:
            session.clear()
            raise NotFoundError("User not found")
        return json_response(user)
