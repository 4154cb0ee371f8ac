from __future__ import annotations

from datetime import date

import pytest

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord, AttendanceReport, ReportRow
from src.classroom_attendance.classroom_attendance.core.constants import SCHEMA_VERSION
from src.classroom_attendance.classroom_attendance.core.enums import CourseType, Role
from src.classroom_attendance.classroom_attendance.core.exceptions import NotFoundError, PersistenceError
from src.classroom_attendance.classroom_attendance.courses.model import Course, Student
from src.classroom_attendance.classroom_attendance.store.entity_store import EntityStore
from src.classroom_attendance.classroom_attendance.store.memory_backend import InMemoryBackend
from src.classroom_attendance.classroom_attendance.store.snapshot import Snapshot
from src.classroom_attendance.classroom_attendance.users.model import User


def make_user(user_id: str) -> User:
    return User(
        user_id=user_id,
        name=user_id,
        email=f"{user_id}@example.com",
        password="x",
        role=Role.STUDENT,
        department="CS",
        student_class="SY CSE A",
    )


def make_course(course_id: str) -> Course:
    return Course(
        course_id=course_id,
        name="Course",
        course_code="CS",
        faculty_id="f1",
        faculty_name="F",
        classes=("SY CSE A",),
        total_lectures=40,
        description="Store test course",
        course_type=CourseType.THEORY,
    )


class FailingBackend(InMemoryBackend):
    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, snapshot):
        if self.fail:
            raise PersistenceError("quota exceeded")
        super().save(snapshot)


def _record(record_id: str, *, present: bool = True, day: date = date(2024, 1, 1)) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=record_id,
        course_id="c1",
        student_id="S1",
        lecture_date=day,
        is_present=present,
        student_class="SY CSE A",
    )


def test_set_roster_then_get_roster_preserves_order(store):
    roster = [
        Student(student_id="b", roll_number="02", name="B", student_class="X"),
        Student(student_id="a", roll_number="01", name="A", student_class="X"),
        Student(student_id="c", roll_number="03", name="C", student_class="X"),
    ]
    store.set_roster("c1", roster)
    assert store.get_roster("c1") == roster


def test_get_roster_of_unknown_course_is_empty(store):
    assert store.get_roster("nope") == []


def test_replace_users_is_full_replace(store):
    store.replace_users([make_user("u1"), make_user("u2")])
    store.replace_users([make_user("u3")])
    assert [u.user_id for u in store.list_users()] == ["u3"]


def test_append_attendance_does_not_dedup(store):
    store.append_attendance([_record("a1")])
    store.append_attendance([_record("a2")])
    assert len(store.list_attendance()) == 2


def test_every_mutation_persists_full_snapshot(backend, store):
    before = backend.save_count
    store.replace_courses([make_course("c1")])
    saved = backend.load()
    assert backend.save_count == before + 1
    assert saved["schemaVersion"] == SCHEMA_VERSION
    assert set(saved) >= {"users", "courses", "courseStudents", "attendance", "attendanceReports"}
    assert saved["courses"][0]["id"] == "c1"


def test_append_lecture_writes_report_and_records_once(backend, store):
    report = AttendanceReport(
        report_id="r1",
        course_id="c1",
        course_name="C",
        course_code="CS",
        student_class="SY CSE A",
        lecture_date=date(2024, 1, 1),
        time_slot="10:15 - 11:15",
        attendance=(ReportRow("S1", "One", "01", True),),
    )
    before = backend.save_count
    store.append_lecture(report, [_record("r1-S1")])

    assert backend.save_count == before + 1
    assert store.get_report("r1") == report
    assert [r.record_id for r in store.list_attendance()] == ["r1-S1"]


def test_update_attendance_unknown_id_raises(store):
    store.append_attendance([_record("a1")])
    with pytest.raises(NotFoundError):
        store.update_attendance([_record("missing")])


def test_init_is_idempotent_and_seeds_once():
    calls = []

    def seeder():
        calls.append(1)
        return Snapshot(users=[make_user("u1")])

    store = EntityStore(InMemoryBackend(), seeder=seeder)
    store.init()
    store.init()

    assert len(calls) == 1
    assert len(store.list_users()) == 1


def test_init_loads_existing_snapshot_instead_of_seeding(backend):
    first = EntityStore(backend, seeder=lambda: Snapshot(users=[make_user("u1")]))
    first.replace_users([make_user("u1"), make_user("u2")])

    second = EntityStore(backend, seeder=lambda: Snapshot(users=[make_user("seed")]))
    assert [u.user_id for u in second.list_users()] == ["u1", "u2"]


def test_reads_do_not_reload_backend(backend, store):
    store.replace_users([make_user("u1")])
    backend.clear()
    assert [u.user_id for u in store.list_users()] == ["u1"]


def test_reset_drops_memory_and_reinitializes(backend, store):
    store.replace_users([make_user("u1")])
    store.reset()
    assert not store.initialized
    assert [u.user_id for u in store.list_users()] == ["u1"]
    assert store.initialized


def test_failed_save_keeps_in_memory_state_and_raises():
    backend = FailingBackend()
    store = EntityStore(backend)
    store.init()
    backend.fail = True

    with pytest.raises(PersistenceError):
        store.replace_users([make_user("u1")])

    assert [u.user_id for u in store.list_users()] == ["u1"]


def test_newer_schema_version_is_rejected():
    store = EntityStore(InMemoryBackend({"schemaVersion": SCHEMA_VERSION + 1}))
    with pytest.raises(PersistenceError):
        store.init()


def test_legacy_snapshot_without_version_loads():
    legacy = {
        "users": [],
        "courses": [
            {
                "id": "course1",
                "name": "Data Structures",
                "courseCode": "CS201",
                "facultyId": "faculty1",
                "facultyName": "Dr. Evelyn Reed",
                "class": "SY CSE A",
                "totalLectures": 40,
                "description": "Legacy course",
                "type": "Theory",
            }
        ],
        "attendance": [
            {"id": "att1", "courseId": "course1", "studentId": "student1", "date": "2024-01-01", "isPresent": True}
        ],
    }
    store = EntityStore(InMemoryBackend(legacy))

    course = store.get_course("course1")
    assert course.classes == ("SY CSE A",)
    assert store.list_attendance()[0].lecture_date == date(2024, 1, 1)
    assert store.list_reports() == []
