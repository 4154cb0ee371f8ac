from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role, checked at the controller boundary."""

    STUDENT = "student"
    FACULTY = "faculty"


class CourseType(str, Enum):
    """Course type decides which lecture time slots apply."""

    THEORY = "Theory"
    PRACTICAL = "Practical"


class SessionState(str, Enum):
    """Lifecycle of a lecture-marking session."""

    EMPTY = "EMPTY"
    EDITING = "EDITING"
    VALIDATED = "VALIDATED"
    SUBMITTED = "SUBMITTED"


class SkipReason(str, Enum):
    DUPLICATE = "duplicate"
    INVALID = "invalid"
