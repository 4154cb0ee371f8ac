from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.decorators import current_user_id, faculty_required, login_required
from ..container import Container
from ..core.enums import Role
from .aggregation import attendance_percentage


def register(app: Flask, container: Container) -> None:
    queries = container.query_service

    @app.route("/api/reports", methods=["GET"], endpoint="reports")
    @faculty_required
    def reports():
        items = queries.get_reports(faculty_id=current_user_id())
        return jsonify({"success": True, "reports": [r.to_dict() for r in items]})

    @app.route("/api/reports/<report_id>", methods=["GET"], endpoint="report_detail")
    @faculty_required
    def report_detail(report_id: str):
        return jsonify({"success": True, "report": queries.get_report(report_id).to_dict()})

    @app.route("/api/reports/<report_id>/export", methods=["GET"], endpoint="report_export")
    @faculty_required
    def report_export(report_id: str):
        csv_bytes = queries.export_report_csv(report_id).encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={report_id}.csv"},
        )

    @app.route("/api/students/<student_id>/attendance", methods=["GET"], endpoint="student_attendance")
    @login_required
    def student_attendance(student_id: str):
        if session.get("role") == Role.STUDENT.value and student_id != current_user_id():
            return jsonify({"success": False, "message": "You are not authorized to view this page"}), 403

        items = queries.student_attendance(student_id)
        return jsonify(
            {
                "success": True,
                "courses": [
                    {**ca.to_dict(), "percentage": round(attendance_percentage(ca.records), 1)} for ca in items
                ],
            }
        )

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        user_id = current_user_id()
        if session.get("role") == Role.FACULTY.value:
            return jsonify({"success": True, "dashboard": queries.faculty_dashboard(user_id).to_dict()})

        last = queries.last_absence(user_id)
        return jsonify(
            {
                "success": True,
                "dashboard": {
                    "overallPercentage": round(queries.overall_percentage(user_id), 1),
                    "courses": [row.to_dict() for row in queries.course_summary(user_id)],
                    "lastAbsence": last.to_dict() if last else None,
                },
            }
        )
