from __future__ import annotations

import csv
import io
from dataclasses import replace
from datetime import date, datetime

import pytest

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord, Notification
from src.classroom_attendance.classroom_attendance.attendance.service import AttendanceService
from src.classroom_attendance.classroom_attendance.core.enums import CourseType, Role
from src.classroom_attendance.classroom_attendance.core.exceptions import NotFoundError
from src.classroom_attendance.classroom_attendance.reports.service import AttendanceQueryService
from src.classroom_attendance.classroom_attendance.users.model import User

SLOT = "10:15 - 11:15"


@pytest.fixture
def queries(course_store):
    return AttendanceQueryService(course_store)


def _submit(store, day: str, marks: dict, *, now: datetime):
    return AttendanceService(store).submit_lecture("c1", None, day, SLOT, marks, now=now)


def test_end_to_end_lecture_then_queries(course_store, queries, fixed_now):
    report = _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)

    assert [(r.student_id, r.is_present) for r in report.attendance] == [("S1", True), ("S2", False)]
    assert len(queries.course_attendance("c1")) == 2

    s2 = queries.student_attendance("S2")
    assert [ca.course.course_id for ca in s2] == ["c1"]
    assert [(r.lecture_date, r.is_present) for r in s2[0].records] == [(date(2024, 5, 1), False)]


def test_student_without_enrolment_sees_nothing(course_store, queries, fixed_now):
    _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)
    assert queries.student_attendance("nobody") == []
    assert queries.overall_percentage("nobody") == 0.0
    assert queries.last_absence("nobody") is None


def test_course_serving_the_users_class_is_included(course_store, queries):
    users = course_store.list_users()
    users.append(
        User(
            user_id="user7",
            name="Uma",
            email="uma@example.com",
            password="x",
            role=Role.STUDENT,
            department="CS",
            student_class="SY CSE A",
        )
    )
    course_store.replace_users(users)

    result = queries.student_attendance("user7")
    assert [ca.course.course_id for ca in result] == ["c1"]
    assert result[0].records == ()


def test_percentages_and_last_absence(course_store, queries, fixed_now):
    _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)
    _submit(course_store, "2024-05-02", {"S1": False}, now=fixed_now)
    _submit(course_store, "2024-05-03", {"S1": True}, now=fixed_now)
    _submit(course_store, "2024-05-04", {"S1": True}, now=fixed_now)

    assert queries.overall_percentage("S1") == 75.0
    summary = queries.course_summary("S1")
    assert [(row.course_id, row.total) for row in summary] == [("c1", 4)]
    assert summary[0].to_dict()["percentage"] == 75.0

    last = queries.last_absence("S1")
    assert last.course_name == "Course c1"
    assert last.lecture_date == date(2024, 5, 2)


def test_course_history_grid(course_store, queries, fixed_now):
    _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)
    _submit(course_store, "2024-05-03", {"S2": True}, now=fixed_now)

    history = queries.course_history("c1")

    assert history.dates == (date(2024, 5, 3), date(2024, 5, 1))
    cells = {row.student.student_id: [c.is_present for c in row.cells] for row in history.rows}
    assert cells == {"S1": [False, True], "S2": [True, False]}


def test_course_history_uses_first_record_of_the_day(course_store, queries, fixed_now):
    first = _submit(course_store, "2024-05-01", {"S1": False}, now=fixed_now)
    _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)

    history = queries.course_history("c1")
    assert history.dates == (date(2024, 5, 1),)
    cell = history.rows[0].cells[0]
    assert cell.record_id == f"{first.report_id}-S1"
    assert cell.is_present is False
    assert queries.overall_percentage("S1") == 50.0


def test_course_history_missing_cell_is_none(course_store, queries):
    course_store.append_attendance(
        [AttendanceRecord("x1", "c1", "S1", date(2024, 5, 1), True, "SY CSE A")]
    )
    history = queries.course_history("c1")
    rows = {row.student.student_id: row.cells for row in history.rows}
    assert rows["S2"] == (None,)


def test_course_history_for_student_viewer_shows_only_their_row(course_store, queries):
    users = course_store.list_users()
    users.append(
        User(user_id="S2", name="Two", email="two@example.com", password="x", role=Role.STUDENT, department="CS", student_class="SY CSE A")
    )
    course_store.replace_users(users)

    history = queries.course_history("c1", viewer_id="S2")
    assert [row.student.student_id for row in history.rows] == ["S2"]


def test_course_history_unknown_course(queries):
    with pytest.raises(NotFoundError):
        queries.course_history("missing")


def test_faculty_dashboard_counts(course_store, queries):
    course = course_store.get_course("c1")
    course_store.replace_courses(
        [
            course,
            replace(course, course_id="c2", course_type=CourseType.PRACTICAL, classes=("SY CSE B",)),
            replace(course, course_id="c3", faculty_id="someone-else"),
        ]
    )

    dashboard = queries.faculty_dashboard("f1")

    assert dashboard.total_courses == 2
    assert dashboard.theory_courses == 1
    assert dashboard.practical_courses == 1
    assert dashboard.total_students == 2
    assert dashboard.department == "Computer Science"


def test_faculty_dashboard_unknown_faculty(queries):
    with pytest.raises(NotFoundError):
        queries.faculty_dashboard("ghost")


def test_reports_newest_lecture_first_and_filtered_by_faculty(course_store, queries, fixed_now):
    older = _submit(course_store, "2024-04-01", {}, now=fixed_now)
    newer = _submit(course_store, "2024-05-01", {}, now=fixed_now)

    assert [r.report_id for r in queries.get_reports()] == [newer.report_id, older.report_id]
    assert len(queries.get_reports(faculty_id="f1")) == 2
    assert queries.get_reports(faculty_id="other") == []


def test_get_report_unknown(queries):
    with pytest.raises(NotFoundError):
        queries.get_report("report-0")


def test_export_report_csv(course_store, queries, fixed_now):
    report = _submit(course_store, "2024-05-01", {"S1": True}, now=fixed_now)

    rows = list(csv.DictReader(io.StringIO(queries.export_report_csv(report.report_id))))

    assert [(r["rollNumber"], r["studentName"], r["status"]) for r in rows] == [
        ("01", "Student One", "Present"),
        ("02", "Student Two", "Absent"),
    ]
    assert rows[0]["date"] == "2024-05-01"
    assert rows[0]["timeSlot"] == SLOT


def test_notifications_newest_first(course_store, queries):
    course_store.append_notifications(
        [
            Notification("S1", datetime(2024, 5, 1, 9, 0), {"type": "absence"}),
            Notification("S2", datetime(2024, 5, 2, 9, 0), {"type": "absence"}),
            Notification("S1", datetime(2024, 5, 3, 9, 0), {"type": "absence"}),
        ]
    )
    items = queries.notifications_for("S1")
    assert [n.timestamp.day for n in items] == [3, 1]
