from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any

from .attendance.service import AttendanceService
from .courses.service import CourseService
from .database.bootstrap import apply_schema
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceQueryService
from .roster.service import RosterService
from .store.backend import StorageBackend
from .store.entity_store import EntityStore
from .store.json_file_backend import JsonFileBackend
from .store.memory_backend import InMemoryBackend
from .store.mysql_backend import MySQLKeyValueBackend
from .store.seed import build_demo_snapshot
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    store: EntityStore

    auth_service: AuthService
    user_service: UserService
    course_service: CourseService
    roster_service: RosterService
    attendance_service: AttendanceService
    query_service: AttendanceQueryService


def build_backend(settings: Any) -> StorageBackend:
    kind = str(getattr(settings, "STORAGE_BACKEND", "memory")).lower()
    if kind == "memory":
        return InMemoryBackend()
    if kind == "json":
        return JsonFileBackend(getattr(settings, "STORAGE_PATH"))
    if kind == "mysql":
        db_config = dict(getattr(settings, "DB_CONFIG"))
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
        return MySQLKeyValueBackend(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    raise ValueError(f"Unknown STORAGE_BACKEND: {kind!r}")


def build_container(*, settings: Any, backend: StorageBackend | None = None) -> Container:
    seeder = None
    if bool(getattr(settings, "SEED_DEMO_DATA", False)):
        seeder = partial(
            build_demo_snapshot,
            with_attendance=bool(getattr(settings, "SEED_DEMO_ATTENDANCE", False)),
            seed=int(getattr(settings, "DEMO_SEED", 42)),
        )

    store = EntityStore(backend or build_backend(settings), seeder=seeder)

    return Container(
        store=store,
        auth_service=AuthService(store),
        user_service=UserService(store),
        course_service=CourseService(store),
        roster_service=RosterService(store),
        attendance_service=AttendanceService(store),
        query_service=AttendanceQueryService(store),
    )
