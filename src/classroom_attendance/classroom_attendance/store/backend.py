from __future__ import annotations

from typing import Any, Optional, Protocol


class StorageBackend(Protocol):
    """Where the entity store persists its snapshot.

    Note (DIP): the store depends on this interface, not on a concrete
    storage. Implementations raise PersistenceError and never write a
    partial snapshot.
    """

    def load(self) -> Optional[dict[str, Any]]:
        """Return the last saved snapshot, or None when nothing was saved yet."""

        raise NotImplementedError

    def save(self, snapshot: dict[str, Any]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
