from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional, Union

from ..common.datetime_utils import coerce_date
from ..core.enums import SessionState
from ..core.exceptions import ValidationError
from ..courses.model import Course, Student
from .model import AttendanceReport

if TYPE_CHECKING:
    from .service import AttendanceService


@dataclass
class LectureSession:
    """Client-held marking state for one lecture, nothing is stored before submit.

    EMPTY -> EDITING (marks set) -> VALIDATED (date, slot, roster checked)
    -> SUBMITTED, after which the session starts over as EMPTY.
    Unmarked students only become absent at submit time.
    """

    course: Course
    class_name: str
    roster: list[Student]
    slots: tuple[str, ...]
    state: SessionState = SessionState.EMPTY
    marks: dict[str, bool] = field(default_factory=dict)
    lecture_date: Optional[date] = None
    time_slot: Optional[str] = None
    last_report: Optional[AttendanceReport] = None

    def mark(self, student_id: str, is_present: bool) -> None:
        if student_id not in {s.student_id for s in self.roster}:
            raise ValidationError(f"Student {student_id} is not on this roster")
        self.marks[student_id] = bool(is_present)
        self.state = SessionState.EDITING

    def mark_all(self, is_present: bool) -> None:
        self.marks = {s.student_id: bool(is_present) for s in self.roster}
        self.state = SessionState.EDITING if self.marks else SessionState.EMPTY

    def set_date(self, value: Union[date, str, None]) -> None:
        self.lecture_date = coerce_date(value, "Lecture date") if value else None
        self._back_to_editing()

    def set_time_slot(self, slot: Optional[str]) -> None:
        self.time_slot = slot or None
        self._back_to_editing()

    def unmarked(self) -> list[Student]:
        return [s for s in self.roster if s.student_id not in self.marks]

    def validate(self) -> None:
        if not self.lecture_date or not self.time_slot:
            raise ValidationError("Please select a date and time slot for the lecture")
        if self.time_slot not in self.slots:
            raise ValidationError(f"{self.time_slot!r} is not a {self.course.course_type.value} time slot")
        if not self.roster:
            raise ValidationError("No students have been added to this course yet")
        self.state = SessionState.VALIDATED

    def submit(self, service: "AttendanceService", *, now: Optional[datetime] = None) -> AttendanceReport:
        """Validate, store, and reset. A failed submit keeps the marks for a retry."""

        self.validate()
        report = service.submit_lecture(
            self.course.course_id,
            self.class_name if self.class_name in self.course.classes else None,
            self.lecture_date,
            self.time_slot,
            dict(self.marks),
            now=now,
        )
        self.state = SessionState.SUBMITTED
        self.last_report = report
        self.reset()
        return report

    def reset(self) -> None:
        self.marks = {}
        self.lecture_date = None
        self.time_slot = None
        self.state = SessionState.EMPTY

    def _back_to_editing(self) -> None:
        if self.state == SessionState.VALIDATED:
            self.state = SessionState.EDITING if self.marks else SessionState.EMPTY
