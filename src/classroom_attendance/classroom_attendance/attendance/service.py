from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Mapping, Optional, Union

from ..common.datetime_utils import coerce_date, now_local
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.model import Course, Student
from ..courses.service import time_slots_for
from ..store.entity_store import EntityStore
from .model import AttendanceRecord, AttendanceReport, ReportRow
from .session import LectureSession

logger = logging.getLogger(__name__)


class AttendanceService:
    """Turns one "mark attendance" action into a report plus per-student records."""

    def __init__(self, store: EntityStore):
        self._store = store

    def start_session(self, course_id: str, *, class_name: Optional[str] = None) -> LectureSession:
        course = self._get_course(course_id)
        label, roster = self._lecture_roster(course, class_name)
        return LectureSession(course=course, class_name=label, roster=roster, slots=time_slots_for(course))

    def submit_lecture(
        self,
        course_id: str,
        class_name: Optional[str],
        lecture_date: Union[date, str, None],
        time_slot: Optional[str],
        marks: Mapping[str, bool],
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceReport:
        """Store one lecture's attendance.

        Every roster student gets exactly one row and one record. Students
        without an entry in `marks` are recorded as absent.
        """

        course = self._get_course(course_id)
        lecture_date = coerce_date(lecture_date, "Lecture date")
        if not time_slot or time_slot not in time_slots_for(course):
            raise ValidationError("Please select a valid time slot for the lecture")

        with self._store.atomic():
            label, roster = self._lecture_roster(course, class_name)
            if not roster:
                raise ValidationError("No students have been added to this course yet")

            roster_ids = {s.student_id for s in roster}
            unknown = sorted(set(marks) - roster_ids)
            if unknown:
                raise ValidationError(f"Unknown student(s) in attendance marks: {', '.join(unknown)}")

            report_id = self._next_report_id(now or now_local())
            rows = tuple(
                ReportRow(
                    student_id=s.student_id,
                    student_name=s.name,
                    roll_number=s.roll_number,
                    is_present=bool(marks.get(s.student_id, False)),
                )
                for s in roster
            )
            report = AttendanceReport(
                report_id=report_id,
                course_id=course.course_id,
                course_name=course.name,
                course_code=course.course_code,
                student_class=label,
                lecture_date=lecture_date,
                time_slot=time_slot,
                attendance=rows,
            )
            classes = {s.student_id: s.student_class for s in roster}
            records = [
                AttendanceRecord(
                    record_id=f"{report_id}-{row.student_id}",
                    course_id=course.course_id,
                    student_id=row.student_id,
                    lecture_date=lecture_date,
                    is_present=row.is_present,
                    student_class=classes[row.student_id] or label,
                )
                for row in rows
            ]

            self._store.append_lecture(report, records)
        logger.info(
            "Lecture %s submitted for %s on %s (%d/%d present)",
            report_id,
            course.course_id,
            lecture_date.isoformat(),
            report.present_count,
            len(rows),
        )
        return report

    def edit_records(self, course_id: str, changes: Mapping[str, bool]) -> list[AttendanceRecord]:
        """Faculty correction of stored records; the original reports are left as submitted."""

        self._get_course(course_id)
        if not changes:
            return []

        with self._store.atomic():
            by_id = {r.record_id: r for r in self._store.list_attendance()}
            updated = []
            for record_id, is_present in changes.items():
                record = by_id.get(record_id)
                if not record or record.course_id != course_id:
                    raise ValidationError(f"Attendance record {record_id} does not belong to course {course_id}")
                updated.append(replace(record, is_present=bool(is_present)))

            self._store.update_attendance(updated)
        logger.info("Edited %d attendance record(s) of %s", len(updated), course_id)
        return updated

    def _get_course(self, course_id: str) -> Course:
        course = self._store.get_course(course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def _lecture_roster(self, course: Course, class_name: Optional[str]) -> tuple[str, list[Student]]:
        roster = self._store.get_roster(course.course_id)
        if not class_name or not class_name.strip():
            return ", ".join(course.classes), roster

        class_name = class_name.strip()
        if not course.serves(class_name):
            raise ValidationError(f"Course {course.course_code} does not serve class {class_name}")
        # Entries without a class were added before classes were tracked.
        return class_name, [s for s in roster if s.student_class in (class_name, "")]

    def _next_report_id(self, now: datetime) -> str:
        taken = {r.report_id for r in self._store.list_reports()}
        stamp = int(now.timestamp() * 1000)
        report_id = f"report-{stamp}"
        while report_id in taken:
            stamp += 1
            report_id = f"report-{stamp}"
        return report_id
