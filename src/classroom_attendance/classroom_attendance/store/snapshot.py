from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..attendance.model import AttendanceRecord, AttendanceReport, Notification
from ..core.constants import (
    KEY_ATTENDANCE,
    KEY_ATTENDANCE_REPORTS,
    KEY_COURSE_STUDENTS,
    KEY_COURSES,
    KEY_NOTIFICATIONS,
    KEY_SCHEMA_VERSION,
    KEY_USERS,
    SCHEMA_VERSION,
)
from ..core.exceptions import PersistenceError
from ..courses.model import Course, Student
from ..users.model import User


@dataclass
class Snapshot:
    """Full state of the entity store, the unit of every save/load."""

    users: list[User] = field(default_factory=list)
    courses: list[Course] = field(default_factory=list)
    course_students: dict[str, list[Student]] = field(default_factory=dict)
    attendance: list[AttendanceRecord] = field(default_factory=list)
    attendance_reports: list[AttendanceReport] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_SCHEMA_VERSION: SCHEMA_VERSION,
            KEY_USERS: [u.to_dict() for u in self.users],
            KEY_COURSES: [c.to_dict() for c in self.courses],
            KEY_COURSE_STUDENTS: {
                course_id: [s.to_dict() for s in roster] for course_id, roster in self.course_students.items()
            },
            KEY_ATTENDANCE: [r.to_dict() for r in self.attendance],
            KEY_ATTENDANCE_REPORTS: [r.to_dict() for r in self.attendance_reports],
            KEY_NOTIFICATIONS: [n.to_dict() for n in self.notifications],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        # Legacy snapshots carry no version field and load as version 1.
        version = data.get(KEY_SCHEMA_VERSION, 1)
        if not isinstance(version, int) or version > SCHEMA_VERSION:
            raise PersistenceError(f"Unsupported snapshot schema version: {version!r}")

        try:
            return cls(
                users=[User.from_dict(u) for u in data.get(KEY_USERS) or []],
                courses=[Course.from_dict(c) for c in data.get(KEY_COURSES) or []],
                course_students={
                    str(course_id): [Student.from_dict(s) for s in roster or []]
                    for course_id, roster in (data.get(KEY_COURSE_STUDENTS) or {}).items()
                },
                attendance=[AttendanceRecord.from_dict(r) for r in data.get(KEY_ATTENDANCE) or []],
                attendance_reports=[AttendanceReport.from_dict(r) for r in data.get(KEY_ATTENDANCE_REPORTS) or []],
                notifications=[Notification.from_dict(n) for n in data.get(KEY_NOTIFICATIONS) or []],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Corrupt snapshot: {exc}") from exc
