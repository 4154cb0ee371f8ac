from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Optional

import mysql.connector

from ..core.constants import KEY_SCHEMA_VERSION, SNAPSHOT_KEYS
from ..core.exceptions import PersistenceError
from ..database.bootstrap import STATE_TABLE
from ..database.connection import DatabaseConnection
from .backend import StorageBackend

logger = logging.getLogger(__name__)

UPSERT_SQL = f"""
INSERT INTO `{STATE_TABLE}` (state_key, state_value)
VALUES (%s, %s)
ON DUPLICATE KEY UPDATE state_value=VALUES(state_value)
"""


class MySQLKeyValueBackend(StorageBackend):
    """One `app_state` row per snapshot key, all rows written in a single transaction."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def _transaction(self, action: str):
        try:
            conn = self._conn_factory.connect()
        except mysql.connector.Error as exc:
            raise PersistenceError(f"Failed to {action}: {exc}") from exc
        try:
            cur = conn.cursor(dictionary=True)
            yield cur
            conn.commit()
        except mysql.connector.Error as exc:
            conn.rollback()
            raise PersistenceError(f"Failed to {action}: {exc}") from exc
        finally:
            conn.close()

    def load(self) -> Optional[dict[str, Any]]:
        with self._transaction("load snapshot from MySQL") as cur:
            cur.execute(f"SELECT state_key, state_value FROM `{STATE_TABLE}`")
            rows = list(cur.fetchall() or [])

        if not rows:
            return None

        snapshot: dict[str, Any] = {}
        for r in rows:
            try:
                snapshot[r["state_key"]] = json.loads(r["state_value"])
            except json.JSONDecodeError as exc:
                raise PersistenceError(f"Corrupt value for key {r['state_key']!r}: {exc}") from exc
        return snapshot

    def save(self, snapshot: dict[str, Any]) -> None:
        keys = (KEY_SCHEMA_VERSION,) + SNAPSHOT_KEYS
        try:
            params = [(key, json.dumps(snapshot.get(key), ensure_ascii=False)) for key in keys]
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Snapshot is not JSON-serializable: {exc}") from exc

        with self._transaction("save snapshot to MySQL") as cur:
            cur.executemany(UPSERT_SQL, params)
        logger.debug("Snapshot saved to MySQL (%d keys)", len(params))

    def clear(self) -> None:
        with self._transaction("clear MySQL state") as cur:
            cur.execute(f"DELETE FROM `{STATE_TABLE}`")
