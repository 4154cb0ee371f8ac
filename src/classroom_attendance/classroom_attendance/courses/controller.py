from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.decorators import current_user_id, faculty_required, login_required
from ..container import Container
from ..core.enums import CourseType, Role
from ..core.exceptions import ValidationError
from .service import time_slots_for


def register(app: Flask, container: Container) -> None:
    @app.route("/api/courses", methods=["GET"], endpoint="courses")
    @login_required
    def courses():
        if session.get("role") == Role.FACULTY.value:
            items = container.course_service.courses_for_faculty(current_user_id())
        else:
            user = container.user_service.get_user(current_user_id())
            items = container.course_service.courses_for_class(user.student_class or "")

        course_type = request.args.get("type")
        if course_type:
            items = [c for c in items if c.course_type.value == course_type]
        return jsonify({"success": True, "courses": [c.to_dict() for c in items]})

    @app.route("/api/courses", methods=["POST"], endpoint="create_course")
    @faculty_required
    def create_course():
        data = request.get_json(silent=True) or {}
        course = container.course_service.create_course(
            faculty_id=current_user_id(),
            name=data.get("name", ""),
            course_code=data.get("courseCode", ""),
            classes=data.get("classes") or data.get("class") or [],
            total_lectures=data.get("totalLectures", 0),
            description=data.get("description", ""),
            course_type=data.get("type", CourseType.THEORY.value),
        )
        return jsonify({"success": True, "course": course.to_dict()}), 201

    @app.route("/api/courses/<course_id>", methods=["GET"], endpoint="course_detail")
    @login_required
    def course_detail(course_id: str):
        course = container.course_service.get_course(course_id)
        return jsonify({"success": True, "course": course.to_dict(), "timeSlots": list(time_slots_for(course))})

    @app.route("/api/courses/<course_id>/students", methods=["GET"], endpoint="course_roster")
    @login_required
    def course_roster(course_id: str):
        roster = container.roster_service.get_roster(course_id)
        return jsonify({"success": True, "students": [s.to_dict() for s in roster]})

    @app.route("/api/courses/<course_id>/students", methods=["POST"], endpoint="add_students")
    @faculty_required
    def add_students(course_id: str):
        upload = request.files.get("file")
        if upload is not None:
            result = container.roster_service.import_spreadsheet(
                course_id,
                upload.stream,
                filename=upload.filename,
                class_name=request.form.get("class"),
            )
            return jsonify({"success": True, **result.to_dict()})

        data = request.get_json(silent=True) or {}
        if "rows" in data:
            result = container.roster_service.import_rows(course_id, data["rows"], class_name=data.get("class"))
        elif "text" in data:
            result = container.roster_service.import_manual(course_id, data["text"], class_name=data.get("class"))
        else:
            raise ValidationError("Send pasted text, rows or a spreadsheet file")
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/courses/<course_id>/history", methods=["GET"], endpoint="course_history")
    @login_required
    def course_history(course_id: str):
        history = container.query_service.course_history(course_id, viewer_id=current_user_id())
        return jsonify({"success": True, **history.to_dict()})
