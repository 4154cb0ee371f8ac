from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..core.enums import CourseType
from ..users.model import User


@dataclass(frozen=True)
class Course:
    """Domain entity: a course taught by one faculty member to one or more classes.

    `faculty_name` is a snapshot taken at creation time; it does not follow
    later edits of the faculty User.
    """

    course_id: str
    name: str
    course_code: str
    faculty_id: str
    faculty_name: str
    classes: tuple[str, ...]
    total_lectures: int
    description: str
    course_type: CourseType

    def serves(self, class_name: str | None) -> bool:
        return bool(class_name) and class_name in self.classes

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.course_id,
            "name": self.name,
            "courseCode": self.course_code,
            "facultyId": self.faculty_id,
            "facultyName": self.faculty_name,
            "classes": list(self.classes),
            "totalLectures": self.total_lectures,
            "description": self.description,
            "type": self.course_type.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Course":
        classes = data.get("classes")
        if classes is None:
            # Early snapshots stored a single class name.
            classes = [data["class"]] if data.get("class") else []
        return cls(
            course_id=str(data["id"]),
            name=data["name"],
            course_code=data["courseCode"],
            faculty_id=str(data["facultyId"]),
            faculty_name=data.get("facultyName", ""),
            classes=tuple(classes),
            total_lectures=int(data.get("totalLectures", 0)),
            description=data.get("description", ""),
            course_type=CourseType(data.get("type", CourseType.THEORY.value)),
        )


@dataclass(frozen=True)
class Student:
    """Roster entry of a course. Roll numbers are unique within one roster only."""

    student_id: str
    roll_number: str
    name: str
    student_class: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.student_id,
            "rollNumber": self.roll_number,
            "name": self.name,
            "class": self.student_class,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Student":
        return cls(
            student_id=str(data["id"]),
            roll_number=str(data["rollNumber"]),
            name=data["name"],
            student_class=data.get("class", ""),
        )

    @classmethod
    def from_user(cls, user: User) -> "Student":
        """Roster entry for a registered student; keeps the user's id."""

        return cls(
            student_id=user.user_id,
            roll_number=user.roll_number or user.user_id,
            name=user.name,
            student_class=user.student_class or "",
        )

    @classmethod
    def imported(cls, *, course_id: str, roll_number: str, name: str, student_class: str) -> "Student":
        """Roster entry added by a faculty import.

        The id only depends on course and roll number, so importing the same
        student again maps onto the same id.
        """

        return cls(
            student_id=f"student-{course_id}-{roll_number}",
            roll_number=roll_number,
            name=name,
            student_class=student_class,
        )