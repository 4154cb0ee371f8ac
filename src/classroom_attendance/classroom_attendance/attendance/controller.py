from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.decorators import faculty_required
from ..container import Container
from ..core.exceptions import ValidationError


def _flag(value, label: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"Presence for {label} must be true or false")
    return value


def _parse_marks(value) -> dict[str, bool]:
    """Accept {"studentId": true} or [{"studentId": ..., "isPresent": ...}]."""

    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): _flag(v, str(k)) for k, v in value.items()}
    if isinstance(value, list):
        try:
            return {str(m["studentId"]): _flag(m["isPresent"], str(m["studentId"])) for m in value}
        except (KeyError, TypeError):
            raise ValidationError("Each mark needs studentId and isPresent")
    raise ValidationError("Marks must be an object or a list")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/courses/<course_id>/lectures", methods=["POST"], endpoint="submit_lecture")
    @faculty_required
    def submit_lecture(course_id: str):
        data = request.get_json(silent=True) or {}
        report = container.attendance_service.submit_lecture(
            course_id,
            data.get("class"),
            data.get("date"),
            data.get("timeSlot"),
            _parse_marks(data.get("marks")),
        )
        return jsonify({"success": True, "report": report.to_dict()}), 201

    @app.route("/api/courses/<course_id>/attendance", methods=["GET"], endpoint="course_attendance")
    @faculty_required
    def course_attendance(course_id: str):
        records = container.query_service.course_attendance(course_id)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/courses/<course_id>/attendance", methods=["PATCH"], endpoint="edit_attendance")
    @faculty_required
    def edit_attendance(course_id: str):
        data = request.get_json(silent=True) or {}
        changes = data.get("changes")
        if not isinstance(changes, dict):
            raise ValidationError("changes must map record ids to true/false")
        updated = container.attendance_service.edit_records(course_id, {str(k): _flag(v, str(k)) for k, v in changes.items()})
        return jsonify({"success": True, "records": [r.to_dict() for r in updated]})
