from __future__ import annotations

import copy
from typing import Any, Optional

from .backend import StorageBackend


class InMemoryBackend(StorageBackend):
    """Process-scoped storage. Data is lost on restart."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data = copy.deepcopy(initial) if initial is not None else None
        self.save_count = 0

    def load(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None

    def save(self, snapshot: dict[str, Any]) -> None:
        self._data = copy.deepcopy(snapshot)
        self.save_count += 1

    def clear(self) -> None:
        self._data = None
