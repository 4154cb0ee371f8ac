from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Iterable, Mapping, Optional, Sequence, Union

import pandas as pd

from ..core.enums import SkipReason
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.model import Course, Student
from ..store.entity_store import EntityStore

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[\s,]+")

ROLL_COLUMNS = ("rollnumber", "rollno", "roll", "rollnum")
NAME_COLUMNS = ("name", "studentname", "fullname")


@dataclass(frozen=True)
class RosterEntry:
    roll_number: str
    name: str


@dataclass(frozen=True)
class SkippedEntry:
    position: int
    roll_number: str
    reason: SkipReason

    def to_dict(self) -> dict:
        return {"position": self.position, "rollNumber": self.roll_number, "reason": self.reason.value}


@dataclass(frozen=True)
class ImportResult:
    added_students: tuple[Student, ...] = ()
    skipped: tuple[SkippedEntry, ...] = field(default_factory=tuple)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> dict:
        return {
            "addedStudents": [s.to_dict() for s in self.added_students],
            "skippedCount": self.skipped_count,
            "skipped": [s.to_dict() for s in self.skipped],
        }


def parse_manual_entry(text: str) -> list[RosterEntry]:
    """Parse pasted "RollNumber Name" lines (space or comma separated).

    Raises ValidationError for empty input or for the first line that does
    not have both a roll number and a name.
    """

    lines = [line for line in (text or "").strip().splitlines() if line.strip()]
    if not lines:
        raise ValidationError("Please enter student roll numbers and names")

    entries = []
    for line in lines:
        parts = [p for p in _TOKEN_SPLIT.split(line.strip()) if p]
        if len(parts) < 2:
            raise ValidationError(f'The line "{line.strip()}" is not in the correct format (RollNumber Name)')
        entries.append(RosterEntry(roll_number=parts[0], name=" ".join(parts[1:])))
    return entries


def _normalize_column(name: Any) -> str:
    return re.sub(r"[\s_\-.]+", "", str(name)).lower()


def _cell(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


class RosterService:
    """Reconcile course rosters with incoming student lists."""

    def __init__(self, store: EntityStore):
        self._store = store

    def get_roster(self, course_id: str) -> list[Student]:
        return self._store.get_roster(course_id)

    def set_roster(self, course_id: str, students: Sequence[Student]) -> None:
        self._store.set_roster(course_id, students)

    def students_for_class(self, class_name: str) -> list[Student]:
        """Registered student users of a class, as roster entries."""

        return [Student.from_user(u) for u in self._store.list_users() if u.is_student and u.student_class == class_name]

    def import_manual(self, course_id: str, text: str, *, class_name: Optional[str] = None) -> ImportResult:
        """Add pasted students; any bad line or duplicate roll number rejects the whole batch."""

        course = self._get_course(course_id)
        student_class = self._resolve_class(course, class_name)
        entries = parse_manual_entry(text)

        with self._store.atomic():
            existing = self._store.get_roster(course_id)
            seen = {s.roll_number for s in existing}
            added = []
            for entry in entries:
                if entry.roll_number in seen:
                    raise ValidationError(f"Student with roll number {entry.roll_number} is already in this course")
                seen.add(entry.roll_number)
                added.append(
                    Student.imported(
                        course_id=course_id,
                        roll_number=entry.roll_number,
                        name=entry.name,
                        student_class=student_class,
                    )
                )

            self._store.set_roster(course_id, [*existing, *added])
        logger.info("Added %d student(s) to %s", len(added), course_id)
        return ImportResult(added_students=tuple(added))

    def import_rows(
        self,
        course_id: str,
        rows: Iterable[Union[Mapping[str, Any], Sequence[Any]]],
        *,
        class_name: Optional[str] = None,
    ) -> ImportResult:
        """Bulk import; duplicates and incomplete rows are skipped and reported."""

        course = self._get_course(course_id)
        student_class = self._resolve_class(course, class_name)

        rows = [self._row_values(row) for row in rows]
        added: list[Student] = []
        skipped: list[SkippedEntry] = []

        with self._store.atomic():
            existing = self._store.get_roster(course_id)
            seen = {s.roll_number for s in existing}

            for position, (roll_number, name) in enumerate(rows, start=1):
                if not roll_number or not name:
                    skipped.append(SkippedEntry(position=position, roll_number=roll_number, reason=SkipReason.INVALID))
                    continue
                if roll_number in seen:
                    skipped.append(SkippedEntry(position=position, roll_number=roll_number, reason=SkipReason.DUPLICATE))
                    continue
                seen.add(roll_number)
                added.append(
                    Student.imported(
                        course_id=course_id,
                        roll_number=roll_number,
                        name=name,
                        student_class=student_class,
                    )
                )

            if added:
                self._store.set_roster(course_id, [*existing, *added])
        logger.info("Imported %d student(s) into %s, skipped %d", len(added), course_id, len(skipped))
        return ImportResult(added_students=tuple(added), skipped=tuple(skipped))

    def import_spreadsheet(
        self,
        course_id: str,
        source: Union[str, Path, IO],
        *,
        filename: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> ImportResult:
        """Import a .csv or .xlsx sheet with roll number and name columns."""

        frame = self._read_sheet(source, filename=filename)
        columns = {_normalize_column(c): c for c in frame.columns}
        roll_col = next((columns[c] for c in ROLL_COLUMNS if c in columns), None)
        name_col = next((columns[c] for c in NAME_COLUMNS if c in columns), None)
        if roll_col is None or name_col is None:
            raise ValidationError("The sheet needs a roll number column and a name column")

        rows = [(r[roll_col], r[name_col]) for r in frame.to_dict(orient="records")]
        return self.import_rows(course_id, rows, class_name=class_name)

    def _read_sheet(self, source: Union[str, Path, IO], *, filename: Optional[str]) -> pd.DataFrame:
        name = filename or (str(source) if isinstance(source, (str, Path)) else getattr(source, "name", ""))
        suffix = Path(str(name)).suffix.lower()
        try:
            if suffix == ".csv":
                return pd.read_csv(source, dtype=str, keep_default_na=False)
            if suffix in (".xlsx", ".xls"):
                return pd.read_excel(source, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as exc:
            raise ValidationError(f"Could not read the sheet: {exc}") from exc
        raise ValidationError("Only .csv and .xlsx files can be imported")

    def _get_course(self, course_id: str) -> Course:
        course = self._store.get_course(course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    @staticmethod
    def _resolve_class(course: Course, class_name: Optional[str]) -> str:
        if class_name and class_name.strip():
            class_name = class_name.strip()
            if not course.serves(class_name):
                raise ValidationError(f"Course {course.course_code} does not serve class {class_name}")
            return class_name
        return course.classes[0] if course.classes else ""

    @staticmethod
    def _row_values(row: Union[Mapping[str, Any], Sequence[Any]]) -> tuple[str, str]:
        if isinstance(row, Mapping):
            return _cell(row.get("rollNumber", row.get("roll_number"))), _cell(row.get("name"))
        values = list(row)
        if len(values) < 2:
            return (_cell(values[0]) if values else ""), ""
        return _cell(values[0]), _cell(values[1])
