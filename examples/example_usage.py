"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

from datetime import date

from src.classroom_attendance.classroom_attendance.container import build_container
from src.classroom_attendance.classroom_attendance.store.memory_backend import InMemoryBackend


class DemoSettings:
    SEED_DEMO_DATA = True
    SEED_DEMO_ATTENDANCE = True
    DEMO_SEED = 7


def main():
    container = build_container(settings=DemoSettings, backend=InMemoryBackend())

    session = container.attendance_service.start_session("course1")
    session.mark("student1", True)
    session.set_date(date.today())
    session.set_time_slot("10:15 - 11:15")
    report = session.submit(container.attendance_service)

    print(report.to_dict())
    print(container.query_service.overall_percentage("student2"))
    print(container.query_service.last_absence("student1"))


if __name__ == "__main__":
    main()
