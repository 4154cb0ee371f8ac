from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from ..core.exceptions import PersistenceError
from .backend import StorageBackend

logger = logging.getLogger(__name__)


class JsonFileBackend(StorageBackend):
    """Keeps the whole snapshot in one JSON file.

    Writes go to a temp file in the same folder and are moved into place
    with os.replace, so readers never see a half-written file.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[dict[str, Any]]:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Failed to read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"Failed to read {self._path}: snapshot is not a JSON object")
        return data

    def save(self, snapshot: dict[str, Any]) -> None:
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".snapshot-", suffix=".json", dir=self._path.parent)
            try:
                f = os.fdopen(fd, "w", encoding="utf-8")
            except OSError:
                os.close(fd)
                raise
            with f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed to write {self._path}: {exc}") from exc
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
        logger.debug("Snapshot written to %s", self._path)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Failed to remove {self._path}: {exc}") from exc
