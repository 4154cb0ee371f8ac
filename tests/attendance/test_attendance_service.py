from __future__ import annotations

import threading
import time
from dataclasses import replace
from datetime import date

import pytest

from src.classroom_attendance.classroom_attendance.attendance import service as attendance_service
from src.classroom_attendance.classroom_attendance.attendance.service import AttendanceService
from src.classroom_attendance.classroom_attendance.core.exceptions import NotFoundError, ValidationError
from src.classroom_attendance.classroom_attendance.courses.model import Student
from src.classroom_attendance.classroom_attendance.store.entity_store import EntityStore
from src.classroom_attendance.classroom_attendance.store.memory_backend import InMemoryBackend

SLOT = "10:15 - 11:15"


def test_submit_creates_report_and_one_record_per_student(course_store, fixed_now):
    svc = AttendanceService(course_store)
    report = svc.submit_lecture("c1", None, "2024-05-01", SLOT, {"S1": True, "S2": False}, now=fixed_now)

    assert report.report_id == f"report-{int(fixed_now.timestamp() * 1000)}"
    assert report.student_class == "SY CSE A"
    assert report.lecture_date == date(2024, 5, 1)
    assert [(r.student_id, r.is_present) for r in report.attendance] == [("S1", True), ("S2", False)]

    records = course_store.list_attendance()
    assert [(r.record_id, r.is_present) for r in records] == [
        (f"{report.report_id}-S1", True),
        (f"{report.report_id}-S2", False),
    ]
    assert course_store.get_report(report.report_id) == report


def test_missing_marks_are_recorded_absent(course_store, fixed_now):
    roster = course_store.get_roster("c1")
    course_store.set_roster("c1", [*roster, Student("S3", "03", "Student Three", "SY CSE A")])

    report = AttendanceService(course_store).submit_lecture("c1", None, date(2024, 5, 1), SLOT, {"S2": True}, now=fixed_now)

    assert len(report.attendance) == 3
    assert [r.student_id for r in report.attendance if not r.is_present] == ["S1", "S3"]
    assert report.present_count == 1


def test_report_rows_keep_submission_time_names(course_store, fixed_now):
    svc = AttendanceService(course_store)
    report = svc.submit_lecture("c1", None, "2024-05-01", SLOT, {}, now=fixed_now)
    course_store.set_roster("c1", [Student("S1", "01", "Renamed", "SY CSE A")])

    assert course_store.get_report(report.report_id).attendance[0].student_name == "Student One"


def test_report_ids_stay_unique_within_same_millisecond(course_store, fixed_now):
    svc = AttendanceService(course_store)
    first = svc.submit_lecture("c1", None, "2024-05-01", SLOT, {}, now=fixed_now)
    second = svc.submit_lecture("c1", None, "2024-05-01", SLOT, {}, now=fixed_now)

    assert first.report_id != second.report_id
    assert len(course_store.list_attendance()) == 4


@pytest.mark.parametrize(
    "lecture_date, slot",
    [
        (None, SLOT),
        ("", SLOT),
        ("01/05/2024", SLOT),
        ("2024-05-01", None),
        ("2024-05-01", "10:15 - 12:15"),
    ],
)
def test_submit_rejects_bad_date_or_slot(course_store, fixed_now, lecture_date, slot):
    with pytest.raises(ValidationError):
        AttendanceService(course_store).submit_lecture("c1", None, lecture_date, slot, {}, now=fixed_now)
    assert course_store.list_reports() == []


def test_submit_rejects_empty_roster(course_store, fixed_now):
    course_store.set_roster("c1", [])
    with pytest.raises(ValidationError):
        AttendanceService(course_store).submit_lecture("c1", None, "2024-05-01", SLOT, {}, now=fixed_now)


def test_submit_rejects_marks_for_students_not_on_roster(course_store, fixed_now):
    with pytest.raises(ValidationError):
        AttendanceService(course_store).submit_lecture("c1", None, "2024-05-01", SLOT, {"ghost": True}, now=fixed_now)
    assert course_store.list_attendance() == []


def test_submit_unknown_course(course_store, fixed_now):
    with pytest.raises(NotFoundError):
        AttendanceService(course_store).submit_lecture("zzz", None, "2024-05-01", SLOT, {}, now=fixed_now)


def test_submit_for_a_class_filters_the_roster(course_store, fixed_now):
    course = course_store.get_course("c1")

    course_store.replace_courses([replace(course, classes=("SY CSE A", "SY CSE B"))])
    roster = course_store.get_roster("c1")
    course_store.set_roster("c1", [*roster, Student("B1", "31", "Bee", "SY CSE B")])

    report = AttendanceService(course_store).submit_lecture("c1", "SY CSE B", "2024-05-01", SLOT, {"B1": True}, now=fixed_now)

    assert report.student_class == "SY CSE B"
    assert [r.student_id for r in report.attendance] == ["B1"]


def test_edit_records_updates_only_the_records(course_store, fixed_now):
    svc = AttendanceService(course_store)
    report = svc.submit_lecture("c1", None, "2024-05-01", SLOT, {"S1": False, "S2": False}, now=fixed_now)

    updated = svc.edit_records("c1", {f"{report.report_id}-S1": True})

    assert [r.is_present for r in updated] == [True]
    by_id = {r.record_id: r.is_present for r in course_store.list_attendance()}
    assert by_id == {f"{report.report_id}-S1": True, f"{report.report_id}-S2": False}
    assert course_store.get_report(report.report_id).present_count == 0


def test_edit_records_rejects_foreign_or_unknown_ids(course_store, fixed_now):
    svc = AttendanceService(course_store)
    svc.submit_lecture("c1", None, "2024-05-01", SLOT, {}, now=fixed_now)

    with pytest.raises(ValidationError):
        svc.edit_records("c1", {"nope": True})


class SlowReportStore(EntityStore):
    """Pauses after each report read so two submissions overlap."""

    def list_reports(self):
        reports = super().list_reports()
        time.sleep(0.05)
        return reports


def test_concurrent_submissions_get_distinct_report_ids(course_store, fixed_now):
    store = SlowReportStore(InMemoryBackend())
    store.replace_courses(course_store.list_courses())
    store.set_roster("c1", course_store.get_roster("c1"))
    svc = AttendanceService(store)
    reports = []

    def submit():
        reports.append(svc.submit_lecture("c1", None, "2024-05-01", SLOT, {"S1": True}, now=fixed_now))

    threads = [threading.Thread(target=submit) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len({r.report_id for r in reports}) == 2
    assert len(store.list_reports()) == 2
    assert len({r.record_id for r in store.list_attendance()}) == 4


def test_submit_without_now_reads_the_local_clock(course_store, fixed_now, monkeypatch):
    monkeypatch.setattr(attendance_service, "now_local", lambda: fixed_now)

    report = AttendanceService(course_store).submit_lecture("c1", None, "2024-05-01", SLOT, {})

    assert report.report_id == f"report-{int(fixed_now.timestamp() * 1000)}"
