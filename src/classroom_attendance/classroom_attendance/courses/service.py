from __future__ import annotations

import logging
from typing import Iterable, Union

from ..common.validators import require_min_length, require_positive_int
from ..core.constants import TIME_SLOTS
from ..core.enums import CourseType, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..store.entity_store import EntityStore
from ..users.service import next_numbered_id
from .model import Course

logger = logging.getLogger(__name__)


def time_slots_for(course: Course) -> tuple[str, ...]:
    return TIME_SLOTS[course.course_type]


class CourseService:
    def __init__(self, store: EntityStore):
        self._store = store

    def create_course(
        self,
        *,
        faculty_id: str,
        name: str,
        course_code: str,
        classes: Union[str, Iterable[str]],
        total_lectures: int,
        description: str,
        course_type: Union[CourseType, str],
    ) -> Course:
        faculty = self._store.get_user(faculty_id)
        if not faculty:
            raise NotFoundError(f"Faculty {faculty_id} not found")
        if faculty.role != Role.FACULTY:
            raise ValidationError("Only faculty members can create courses")

        name = require_min_length(name, "Course name", 3)
        course_code = require_min_length(course_code, "Course code", 3)
        description = require_min_length(description, "Description", 10)
        total_lectures = require_positive_int(total_lectures, "Total lectures")

        try:
            course_type = CourseType(course_type)
        except ValueError:
            raise ValidationError("Course type must be Theory or Practical")

        if isinstance(classes, str):
            classes = [classes]
        class_names: list[str] = []
        for c in classes:
            c = require_min_length(c, "Class", 2)
            if c not in class_names:
                class_names.append(c)
        if not class_names:
            raise ValidationError("A course must serve at least one class")

        with self._store.atomic():
            courses = self._store.list_courses()
            course = Course(
                course_id=next_numbered_id("course", (c.course_id for c in courses)),
                name=name,
                course_code=course_code,
                faculty_id=faculty.user_id,
                faculty_name=faculty.name,
                classes=tuple(class_names),
                total_lectures=total_lectures,
                description=description,
                course_type=course_type,
            )
            self._store.replace_courses([*courses, course])
        logger.info("Course %s (%s) created by %s", course.course_id, course.course_code, faculty.user_id)
        return course

    def get_courses(self) -> list[Course]:
        return self._store.list_courses()

    def get_course(self, course_id: str) -> Course:
        course = self._store.get_course(course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def courses_for_faculty(self, faculty_id: str, *, course_type: CourseType | None = None) -> list[Course]:
        return [
            c
            for c in self._store.list_courses()
            if c.faculty_id == faculty_id and (course_type is None or c.course_type == course_type)
        ]

    def courses_for_class(self, class_name: str) -> list[Course]:
        return [c for c in self._store.list_courses() if c.serves(class_name)]
