from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord


def attendance_percentage(records: Iterable[AttendanceRecord]) -> float:
    """100 * present / total, and 0.0 when there is nothing to count."""

    total = 0
    present = 0
    for r in records:
        total += 1
        if r.is_present:
            present += 1
    if total == 0:
        return 0.0
    return 100.0 * present / total


def unique_sorted_dates(records: Iterable[AttendanceRecord]) -> list[date]:
    """Distinct lecture dates, most recent first."""

    return sorted({r.lecture_date for r in records}, reverse=True)


def latest_absence(records: Sequence[AttendanceRecord]) -> Optional[AttendanceRecord]:
    """Absent record with the greatest date.

    The sort is stable, so among records of the same day the one that came
    first in `records` wins.
    """

    absent = [r for r in records if not r.is_present]
    if not absent:
        return None
    absent.sort(key=lambda r: r.lecture_date, reverse=True)
    return absent[0]


def canonical_record(records: Iterable[AttendanceRecord], *, student_id: str, lecture_date: date) -> Optional[AttendanceRecord]:
    """Record shown for one student on one day: the first one stored.

    Later records of the same day stay in the store and still count for
    percentages; history cells and cell edits use this one.
    """

    return next((r for r in records if r.student_id == student_id and r.lecture_date == lecture_date), None)
