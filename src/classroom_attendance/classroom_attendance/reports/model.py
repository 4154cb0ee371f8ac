from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..courses.model import Course, Student


@dataclass(frozen=True)
class CourseAttendance:
    """Read-model: one course and the records of one student in it (unordered)."""

    course: Course
    records: tuple[AttendanceRecord, ...]

    def to_dict(self) -> dict:
        return {"course": self.course.to_dict(), "records": [r.to_dict() for r in self.records]}


@dataclass(frozen=True)
class LastAbsence:
    course_name: str
    lecture_date: date

    def to_dict(self) -> dict:
        return {"courseName": self.course_name, "date": self.lecture_date.isoformat()}


@dataclass(frozen=True)
class CourseSummaryRow:
    course_id: str
    course_name: str
    percentage: float
    total: int

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "courseName": self.course_name,
            "percentage": round(self.percentage, 1),
            "total": self.total,
        }


@dataclass(frozen=True)
class HistoryRow:
    student: Student
    cells: tuple[Optional[AttendanceRecord], ...]


@dataclass(frozen=True)
class CourseHistory:
    """Read-model for the student x date attendance table of a course."""

    course: Course
    dates: tuple[date, ...]
    rows: tuple[HistoryRow, ...]

    def to_dict(self) -> dict:
        return {
            "course": self.course.to_dict(),
            "dates": [d.isoformat() for d in self.dates],
            "rows": [
                {
                    "student": row.student.to_dict(),
                    "cells": [
                        None if cell is None else {"id": cell.record_id, "isPresent": cell.is_present}
                        for cell in row.cells
                    ],
                }
                for row in self.rows
            ],
        }


@dataclass(frozen=True)
class FacultyDashboard:
    total_courses: int
    theory_courses: int
    practical_courses: int
    total_students: int
    department: str

    def to_dict(self) -> dict:
        return {
            "totalCourses": self.total_courses,
            "theoryCourses": self.theory_courses,
            "practicalCourses": self.practical_courses,
            "totalStudents": self.total_students,
            "department": self.department,
        }
