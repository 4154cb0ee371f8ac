from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def faculty_required(view):
    """Allow only faculty: course creation, roster imports, marking and editing attendance."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401

        if session.get("role") != Role.FACULTY.value:
            return jsonify({"success": False, "message": "You are not authorized to do this"}), 403

        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])
