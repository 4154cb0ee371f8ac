from __future__ import annotations

import csv
import io
from typing import Optional

from ..attendance.model import AttendanceRecord, AttendanceReport, Notification
from ..core.enums import CourseType, Role
from ..core.exceptions import NotFoundError
from ..courses.model import Course
from ..store.entity_store import EntityStore
from .aggregation import attendance_percentage, canonical_record, latest_absence, unique_sorted_dates
from .model import (
    CourseAttendance,
    CourseHistory,
    CourseSummaryRow,
    FacultyDashboard,
    HistoryRow,
    LastAbsence,
)

REPORT_CSV_FIELDS = ["date", "timeSlot", "courseCode", "courseName", "class", "rollNumber", "studentName", "status"]


class AttendanceQueryService:
    """Read-side views over the entity store. Nothing here mutates state."""

    def __init__(self, store: EntityStore):
        self._store = store

    def student_attendance(self, student_id: str) -> list[CourseAttendance]:
        """Records per course the student is enrolled in.

        A course counts when its roster lists the student or when it serves
        the class of the matching student user.
        """

        user = self._store.get_user(student_id)
        student_class = user.student_class if user else None
        rosters = self._store.all_rosters()
        records = self._store.list_attendance()

        out = []
        for course in self._store.list_courses():
            on_roster = any(s.student_id == student_id for s in rosters.get(course.course_id, []))
            if not on_roster and not course.serves(student_class):
                continue
            out.append(
                CourseAttendance(
                    course=course,
                    records=tuple(r for r in records if r.student_id == student_id and r.course_id == course.course_id),
                )
            )
        return out

    def course_attendance(self, course_id: str) -> list[AttendanceRecord]:
        return [r for r in self._store.list_attendance() if r.course_id == course_id]

    def overall_percentage(self, student_id: str) -> float:
        return attendance_percentage(r for ca in self.student_attendance(student_id) for r in ca.records)

    def course_summary(self, student_id: str) -> list[CourseSummaryRow]:
        return [
            CourseSummaryRow(
                course_id=ca.course.course_id,
                course_name=ca.course.name,
                percentage=attendance_percentage(ca.records),
                total=len(ca.records),
            )
            for ca in self.student_attendance(student_id)
        ]

    def last_absence(self, student_id: str) -> Optional[LastAbsence]:
        names: dict[str, str] = {}
        records: list[AttendanceRecord] = []
        for ca in self.student_attendance(student_id):
            names[ca.course.course_id] = ca.course.name
            records.extend(ca.records)

        record = latest_absence(records)
        if record is None:
            return None
        return LastAbsence(course_name=names[record.course_id], lecture_date=record.lecture_date)

    def course_history(self, course_id: str, *, viewer_id: Optional[str] = None) -> CourseHistory:
        """Student x date grid; a student viewer only gets their own row."""

        course = self._get_course(course_id)
        records = self.course_attendance(course_id)
        dates = unique_sorted_dates(records)

        roster = self._store.get_roster(course_id)
        viewer = self._store.get_user(viewer_id) if viewer_id else None
        if viewer is not None and viewer.role == Role.STUDENT:
            roster = [s for s in roster if s.student_id == viewer.user_id]

        rows = tuple(
            HistoryRow(
                student=s,
                cells=tuple(canonical_record(records, student_id=s.student_id, lecture_date=d) for d in dates),
            )
            for s in roster
        )
        return CourseHistory(course=course, dates=tuple(dates), rows=rows)

    def faculty_dashboard(self, faculty_id: str) -> FacultyDashboard:
        faculty = self._store.get_user(faculty_id)
        if not faculty:
            raise NotFoundError(f"User {faculty_id} not found")

        courses = [c for c in self._store.list_courses() if c.faculty_id == faculty_id]
        classes = {name for c in courses for name in c.classes}
        rosters = self._store.all_rosters()

        students = {s.student_id for c in courses for s in rosters.get(c.course_id, [])}
        students.update(u.user_id for u in self._store.list_users() if u.is_student and u.student_class in classes)

        return FacultyDashboard(
            total_courses=len(courses),
            theory_courses=sum(1 for c in courses if c.course_type == CourseType.THEORY),
            practical_courses=sum(1 for c in courses if c.course_type == CourseType.PRACTICAL),
            total_students=len(students),
            department=faculty.department,
        )

    def get_reports(self, *, faculty_id: Optional[str] = None) -> list[AttendanceReport]:
        """Submitted reports, most recent lecture date first."""

        reports = self._store.list_reports()
        if faculty_id is not None:
            owned = {c.course_id for c in self._store.list_courses() if c.faculty_id == faculty_id}
            reports = [r for r in reports if r.course_id in owned]
        return sorted(reports, key=lambda r: r.lecture_date, reverse=True)

    def get_report(self, report_id: str) -> AttendanceReport:
        report = self._store.get_report(report_id)
        if not report:
            raise NotFoundError(f"Report {report_id} not found")
        return report

    def notifications_for(self, student_id: str) -> list[Notification]:
        return sorted(self._store.list_notifications(student_id), key=lambda n: n.timestamp, reverse=True)

    def export_report_csv(self, report_id: str) -> str:
        report = self.get_report(report_id)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS)
        writer.writeheader()
        for row in report.attendance:
            writer.writerow(
                {
                    "date": report.lecture_date.isoformat(),
                    "timeSlot": report.time_slot,
                    "courseCode": report.course_code,
                    "courseName": report.course_name,
                    "class": report.student_class,
                    "rollNumber": row.roll_number,
                    "studentName": row.student_name,
                    "status": "Present" if row.is_present else "Absent",
                }
            )
        return out.getvalue()

    def _get_course(self, course_id: str) -> Course:
        course = self._store.get_course(course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course
