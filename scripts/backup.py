"""Backup the stored snapshot to backups/<timestamp>.json.

Works for every storage backend because it goes through the backend's load().
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.container import build_backend


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    snapshot = build_backend(settings).load()
    if snapshot is None:
        raise SystemExit("Nothing to back up: storage is empty.")

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"classroom_attendance_{ts}.json"
    out_file.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
