"""Deterministic demo dataset used when storage is empty."""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from typing import Optional

from werkzeug.security import generate_password_hash

from ..attendance.model import AttendanceRecord, Notification
from ..common.datetime_utils import now_local
from ..core.constants import DEMO_ATTENDANCE_DAYS, DEMO_PRESENT_PROBABILITY, DEFAULT_TOTAL_LECTURES
from ..core.enums import CourseType, Role
from ..courses.model import Course, Student
from ..users.model import User
from .snapshot import Snapshot

DEMO_CLASS = "SY CSE A"
DEMO_DEPARTMENT = "Computer Science"
DEMO_PASSWORD = "password123"

_DEMO_USERS = (
    ("student1", "Alice Johnson", "alice@example.com", Role.STUDENT, "S01"),
    ("student2", "Bob Williams", "bob@example.com", Role.STUDENT, "S02"),
    ("student3", "Charlie Brown", "charlie@example.com", Role.STUDENT, "S03"),
    ("faculty1", "Dr. Evelyn Reed", "evelyn@example.com", Role.FACULTY, None),
)


def demo_users() -> list[User]:
    password_hash = generate_password_hash(DEMO_PASSWORD)
    users = []
    for user_id, name, email, role, roll_number in _DEMO_USERS:
        is_student = role == Role.STUDENT
        users.append(
            User(
                user_id=user_id,
                name=name,
                email=email,
                password=password_hash,
                role=role,
                department=DEMO_DEPARTMENT,
                student_class=DEMO_CLASS if is_student else None,
                roll_number=roll_number,
            )
        )
    return users


def demo_course(faculty: User) -> Course:
    return Course(
        course_id="course1",
        name="Data Structures",
        course_code="CS201",
        faculty_id=faculty.user_id,
        faculty_name=faculty.name,
        classes=(DEMO_CLASS,),
        total_lectures=DEFAULT_TOTAL_LECTURES,
        description="Arrays, linked lists, trees, graphs and their algorithms.",
        course_type=CourseType.THEORY,
    )


def roster_for(course: Course, users: list[User]) -> list[Student]:
    return [Student.from_user(u) for u in users if u.is_student and course.serves(u.student_class)]


def generate_demo_attendance(
    course: Course,
    roster: list[Student],
    *,
    anchor: date,
    rng: random.Random,
    days: int = DEMO_ATTENDANCE_DAYS,
) -> tuple[list[AttendanceRecord], list[Notification]]:
    """Random history for the `days` days before `anchor`.

    Legacy rule: the first roster student's most recent day is always
    absent, so the sample data shows at least one absence, and that
    student gets a notification about it.
    """

    dates = [anchor - timedelta(days=i) for i in range(days, 0, -1)]
    records: list[AttendanceRecord] = []
    for student in roster:
        for day in dates:
            records.append(
                AttendanceRecord(
                    record_id=f"att{len(records) + 1}",
                    course_id=course.course_id,
                    student_id=student.student_id,
                    lecture_date=day,
                    is_present=rng.random() < DEMO_PRESENT_PROBABILITY,
                    student_class=student.student_class,
                )
            )

    notifications: list[Notification] = []
    if roster and dates:
        flagged = roster[0]
        latest = dates[-1]
        records = [
            AttendanceRecord(
                record_id=r.record_id,
                course_id=r.course_id,
                student_id=r.student_id,
                lecture_date=r.lecture_date,
                is_present=False,
                student_class=r.student_class,
            )
            if r.student_id == flagged.student_id and r.lecture_date == latest
            else r
            for r in records
        ]
        notifications.append(
            Notification(
                student_id=flagged.student_id,
                timestamp=datetime.combine(anchor, datetime.min.time()),
                payload={
                    "type": "absence",
                    "courseId": course.course_id,
                    "courseName": course.name,
                    "date": latest.isoformat(),
                    "message": f"You were marked absent in {course.name} on {latest.isoformat()}.",
                },
            )
        )
    return records, notifications


def build_demo_snapshot(
    *,
    with_attendance: bool = False,
    anchor: Optional[date] = None,
    seed: int = 42,
) -> Snapshot:
    users = demo_users()
    faculty = next(u for u in users if u.role == Role.FACULTY)
    course = demo_course(faculty)
    roster = roster_for(course, users)

    snapshot = Snapshot(users=users, courses=[course], course_students={course.course_id: roster})
    if with_attendance:
        records, notifications = generate_demo_attendance(
            course,
            roster,
            anchor=anchor or now_local().date(),
            rng=random.Random(seed),
        )
        snapshot.attendance = records
        snapshot.notifications = notifications
    return snapshot
