"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import CourseType

SCHEMA_VERSION = 1

THEORY_TIME_SLOTS = (
    "10:15 - 11:15",
    "11:15 - 12:15",
    "1:15 - 2:15",
    "2:15 - 3:15",
    "3:30 - 4:30",
    "4:30 - 5:30",
)

PRACTICAL_TIME_SLOTS = (
    "10:15 - 12:15",
    "1:15 - 3:15",
    "3:30 - 5:30",
)

TIME_SLOTS = {
    CourseType.THEORY: THEORY_TIME_SLOTS,
    CourseType.PRACTICAL: PRACTICAL_TIME_SLOTS,
}

DEFAULT_TOTAL_LECTURES = 40
DEFAULT_AVATAR_URL = "https://placehold.co/100x100.png"

DEMO_ATTENDANCE_DAYS = 10
DEMO_PRESENT_PROBABILITY = 0.85

# Top-level keys of the persisted snapshot.
KEY_SCHEMA_VERSION = "schemaVersion"
KEY_USERS = "users"
KEY_COURSES = "courses"
KEY_COURSE_STUDENTS = "courseStudents"
KEY_ATTENDANCE = "attendance"
KEY_ATTENDANCE_REPORTS = "attendanceReports"
KEY_NOTIFICATIONS = "notifications"

SNAPSHOT_KEYS = (
    KEY_USERS,
    KEY_COURSES,
    KEY_COURSE_STUDENTS,
    KEY_ATTENDANCE,
    KEY_ATTENDANCE_REPORTS,
    KEY_NOTIFICATIONS,
)
