"""Create the MySQL database and the `app_state` key-value table."""

from __future__ import annotations

import logging

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

STATE_TABLE = "app_state"

STATE_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS `{STATE_TABLE}` (
    state_key VARCHAR(64) NOT NULL PRIMARY KEY,
    state_value LONGTEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci
"""


def _run(target: DBConfig, statement: str, *, with_database: bool = True) -> list[tuple]:
    conn = mysql.connector.connect(**target.connect_kwargs(with_database=with_database), use_pure=True)
    try:
        cur = conn.cursor()
        cur.execute(statement)
        rows = cur.fetchall() if cur.with_rows else []
        conn.commit()
        return rows
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    _run(
        target,
        f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci",
        with_database=False,
    )


def apply_schema(db_config: dict) -> None:
    """Idempotent: both statements use IF NOT EXISTS."""

    ensure_database_exists(db_config)
    _run(DBConfig.from_dict(db_config), STATE_TABLE_DDL)
    logger.info("Schema applied to %s", db_config.get("database"))


def list_tables(db_config: dict) -> list[str]:
    return [row[0] for row in _run(DBConfig.from_dict(db_config), "SHOW TABLES")]
