from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Optional, Sequence

from ..attendance.model import AttendanceRecord, AttendanceReport, Notification
from ..core.exceptions import NotFoundError, PersistenceError
from ..courses.model import Course, Student
from ..users.model import User
from .backend import StorageBackend
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


class EntityStore:
    """In-memory tables for every entity, persisted as one snapshot.

    Reads are served from memory. Every mutating call writes the full
    snapshot to the backend under one lock; when that write fails the
    in-memory change is kept and PersistenceError is raised.

    Users, courses and rosters use full-replace semantics (last writer
    wins). Attendance, reports and notifications are append-only.
    """

    def __init__(self, backend: StorageBackend, *, seeder: Optional[Callable[[], Snapshot]] = None):
        self._backend = backend
        self._seeder = seeder
        self._lock = threading.RLock()
        self._data = Snapshot()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    def init(self) -> None:
        """Load the saved snapshot, or seed and save one when storage is empty.

        Calling init again is a no-op.
        """

        with self._lock:
            if self._initialized:
                return

            raw = self._backend.load()
            if raw is None:
                self._data = self._seeder() if self._seeder else Snapshot()
                self._initialized = True
                logger.info(
                    "Entity store seeded (users=%d, courses=%d)", len(self._data.users), len(self._data.courses)
                )
                self._persist()
                return

            self._data = Snapshot.from_dict(raw)
            self._initialized = True
            logger.info(
                "Entity store loaded (users=%d, courses=%d, records=%d)",
                len(self._data.users),
                len(self._data.courses),
                len(self._data.attendance),
            )

    def reset(self) -> None:
        """Drop all in-memory tables; the next access runs init again."""

        with self._lock:
            self._data = Snapshot()
            self._initialized = False

    @contextmanager
    def atomic(self) -> Iterator["EntityStore"]:
        """Hold the store lock across a read-compute-write cycle.

        Commands that read a collection and write back a changed copy run
        inside this block so concurrent commands cannot overwrite each other.
        """

        with self._lock:
            self._ensure_init()
            yield self

    def export_snapshot(self) -> dict:
        with self._lock:
            self._ensure_init()
            return self._data.to_dict()

    # Users

    def list_users(self) -> list[User]:
        with self._lock:
            self._ensure_init()
            return list(self._data.users)

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.list_users() if u.user_id == user_id), None)

    def replace_users(self, users: Sequence[User]) -> None:
        with self._lock:
            self._ensure_init()
            self._data.users = list(users)
            self._persist()

    # Courses

    def list_courses(self) -> list[Course]:
        with self._lock:
            self._ensure_init()
            return list(self._data.courses)

    def get_course(self, course_id: str) -> Optional[Course]:
        return next((c for c in self.list_courses() if c.course_id == course_id), None)

    def replace_courses(self, courses: Sequence[Course]) -> None:
        with self._lock:
            self._ensure_init()
            self._data.courses = list(courses)
            self._persist()

    # Rosters

    def get_roster(self, course_id: str) -> list[Student]:
        """Roster in insertion order; unknown courses have an empty roster."""

        with self._lock:
            self._ensure_init()
            return list(self._data.course_students.get(course_id, []))

    def set_roster(self, course_id: str, students: Sequence[Student]) -> None:
        with self._lock:
            self._ensure_init()
            self._data.course_students[course_id] = list(students)
            self._persist()

    def all_rosters(self) -> dict[str, list[Student]]:
        with self._lock:
            self._ensure_init()
            return {course_id: list(roster) for course_id, roster in self._data.course_students.items()}

    # Attendance records

    def list_attendance(self) -> list[AttendanceRecord]:
        with self._lock:
            self._ensure_init()
            return list(self._data.attendance)

    def append_attendance(self, records: Iterable[AttendanceRecord]) -> None:
        with self._lock:
            self._ensure_init()
            self._data.attendance.extend(records)
            self._persist()

    def update_attendance(self, records: Iterable[AttendanceRecord]) -> None:
        """Replace stored records that share an id with the given ones."""

        with self._lock:
            self._ensure_init()
            updates = {r.record_id: r for r in records}
            known = {r.record_id for r in self._data.attendance}
            missing = sorted(set(updates) - known)
            if missing:
                raise NotFoundError(f"Attendance record not found: {', '.join(missing)}")
            self._data.attendance = [updates.get(r.record_id, r) for r in self._data.attendance]
            self._persist()

    # Reports

    def list_reports(self) -> list[AttendanceReport]:
        with self._lock:
            self._ensure_init()
            return list(self._data.attendance_reports)

    def get_report(self, report_id: str) -> Optional[AttendanceReport]:
        return next((r for r in self.list_reports() if r.report_id == report_id), None)

    def append_report(self, report: AttendanceReport) -> None:
        with self._lock:
            self._ensure_init()
            self._data.attendance_reports.append(report)
            self._persist()

    def append_lecture(self, report: AttendanceReport, records: Sequence[AttendanceRecord]) -> None:
        """Store a report and its derived records with a single snapshot write."""

        with self._lock:
            self._ensure_init()
            self._data.attendance_reports.append(report)
            self._data.attendance.extend(records)
            self._persist()

    # Notifications

    def list_notifications(self, student_id: Optional[str] = None) -> list[Notification]:
        with self._lock:
            self._ensure_init()
            items = list(self._data.notifications)
        if student_id is None:
            return items
        return [n for n in items if n.student_id == student_id]

    def append_notifications(self, notifications: Iterable[Notification]) -> None:
        with self._lock:
            self._ensure_init()
            self._data.notifications.extend(notifications)
            self._persist()

    def _ensure_init(self) -> None:
        if not self._initialized:
            self.init()

    def _persist(self) -> None:
        try:
            self._backend.save(self._data.to_dict())
        except PersistenceError:
            logger.warning("Snapshot write failed; in-memory state kept", exc_info=True)
            raise
