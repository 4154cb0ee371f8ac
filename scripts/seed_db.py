from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.container import build_backend
from src.classroom_attendance.classroom_attendance.store.seed import build_demo_snapshot


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    backend = build_backend(settings)

    snapshot = build_demo_snapshot(
        with_attendance=bool(getattr(settings, "SEED_DEMO_ATTENDANCE", True)),
        seed=int(getattr(settings, "DEMO_SEED", 42)),
    )
    backend.save(snapshot.to_dict())

    print(
        f"OK: Seeded {settings.STORAGE_BACKEND} storage "
        f"(users={len(snapshot.users)}, courses={len(snapshot.courses)}, records={len(snapshot.attendance)})"
    )


if __name__ == "__main__":
    main()
