from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.decorators import current_user_id, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Role must be student or faculty")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_user():
        data = request.get_json(silent=True) or {}
        user = container.user_service.create_user(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=_parse_role(data.get("role")),
            department=data.get("department", ""),
            student_class=data.get("class"),
            roll_number=data.get("rollNumber"),
        )
        return jsonify({"success": True, "user": user.to_public_dict()}), 201

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        user = container.auth_service.authenticate(
            data.get("email", ""),
            data.get("password", ""),
            _parse_role(data.get("role")),
        )

        session.permanent = bool(data.get("remember"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = user.user_id
        session["name"] = user.name
        session["role"] = user.role.value
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = container.user_service.get_user(current_user_id())
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/api/me/notifications", methods=["GET"], endpoint="my_notifications")
    @login_required
    def my_notifications():
        items = container.query_service.notifications_for(current_user_id())
        return jsonify({"success": True, "notifications": [n.to_dict() for n in items]})
