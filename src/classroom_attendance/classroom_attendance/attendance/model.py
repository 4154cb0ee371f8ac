from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from ..common.datetime_utils import parse_iso_date


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: presence of one student in one course on one day.

    The store appends records without deduplicating on
    (course_id, student_id, lecture_date).
    """

    record_id: str
    course_id: str
    student_id: str
    lecture_date: date
    is_present: bool
    student_class: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "courseId": self.course_id,
            "studentId": self.student_id,
            "date": self.lecture_date.isoformat(),
            "isPresent": self.is_present,
            "class": self.student_class,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceRecord":
        return cls(
            record_id=str(data["id"]),
            course_id=str(data["courseId"]),
            student_id=str(data["studentId"]),
            lecture_date=parse_iso_date(data["date"]),
            is_present=bool(data["isPresent"]),
            student_class=data.get("class", ""),
        )


@dataclass(frozen=True)
class ReportRow:
    """One roster student in a submitted report.

    `student_name` and `roll_number` are snapshots; they keep the values
    from submission time.
    """

    student_id: str
    student_name: str
    roll_number: str
    is_present: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "rollNumber": self.roll_number,
            "isPresent": self.is_present,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportRow":
        return cls(
            student_id=str(data["studentId"]),
            student_name=data.get("studentName", ""),
            roll_number=str(data.get("rollNumber", "")),
            is_present=bool(data["isPresent"]),
        )


@dataclass(frozen=True)
class AttendanceReport:
    """Summary of one "Submit Attendance" action. Immutable once stored."""

    report_id: str
    course_id: str
    course_name: str
    course_code: str
    student_class: str
    lecture_date: date
    time_slot: str
    attendance: tuple[ReportRow, ...] = field(default_factory=tuple)

    @property
    def present_count(self) -> int:
        return sum(1 for row in self.attendance if row.is_present)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.report_id,
            "courseId": self.course_id,
            "courseName": self.course_name,
            "courseCode": self.course_code,
            "class": self.student_class,
            "date": self.lecture_date.isoformat(),
            "timeSlot": self.time_slot,
            "attendance": [row.to_dict() for row in self.attendance],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceReport":
        return cls(
            report_id=str(data["id"]),
            course_id=str(data["courseId"]),
            course_name=data.get("courseName", ""),
            course_code=data.get("courseCode", ""),
            student_class=data.get("class", ""),
            lecture_date=parse_iso_date(data["date"]),
            time_slot=data.get("timeSlot", ""),
            attendance=tuple(ReportRow.from_dict(r) for r in data.get("attendance", [])),
        )


@dataclass(frozen=True)
class Notification:
    """Message shown to a student; produced by anomaly detection."""

    student_id: str
    timestamp: datetime
    payload: dict

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "payload": dict(self.payload),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Notification":
        return cls(
            student_id=str(data["studentId"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            payload=dict(data.get("payload") or {}),
        )
