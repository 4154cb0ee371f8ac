from __future__ import annotations

from datetime import datetime

import pytest

from src.classroom_attendance.classroom_attendance.core.enums import CourseType, Role
from src.classroom_attendance.classroom_attendance.courses.model import Course, Student
from src.classroom_attendance.classroom_attendance.store.entity_store import EntityStore
from src.classroom_attendance.classroom_attendance.store.memory_backend import InMemoryBackend
from src.classroom_attendance.classroom_attendance.users.model import User

CLASS_A = "SY CSE A"


def make_user(user_id: str, role: Role = Role.STUDENT, *, student_class: str | None = CLASS_A, roll_number=None) -> User:
    return User(
        user_id=user_id,
        name=user_id.title(),
        email=f"{user_id}@example.com",
        password="not-a-hash",
        role=role,
        department="Computer Science",
        student_class=student_class if role == Role.STUDENT else None,
        roll_number=roll_number,
    )


def make_course(course_id: str = "c1", *, faculty_id: str = "f1", classes=(CLASS_A,), course_type=CourseType.THEORY) -> Course:
    return Course(
        course_id=course_id,
        name=f"Course {course_id}",
        course_code=f"CS-{course_id}",
        faculty_id=faculty_id,
        faculty_name="Dr. F",
        classes=tuple(classes),
        total_lectures=40,
        description="A course used in tests.",
        course_type=course_type,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 10, 20, 0)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend) -> EntityStore:
    s = EntityStore(backend)
    s.init()
    return s


@pytest.fixture
def s1() -> Student:
    return Student(student_id="S1", roll_number="01", name="Student One", student_class=CLASS_A)


@pytest.fixture
def s2() -> Student:
    return Student(student_id="S2", roll_number="02", name="Student Two", student_class=CLASS_A)


@pytest.fixture
def course_store(store, s1, s2) -> EntityStore:
    """Faculty f1 teaching course c1 with roster [S1, S2]."""

    store.replace_users([make_user("f1", Role.FACULTY)])
    store.replace_courses([make_course("c1")])
    store.set_roster("c1", [s1, s2])
    return store
