"""
Database schema initialization for Historian.

One table: ``local_storage``, a string-keyed store of JSON text values.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from historian.observability.logging import get_logger

logger = get_logger(__name__)

EXPECTED_TABLES = frozenset({"local_storage"})


def init_database(db_path: Path) -> None:
    """
    Initialize database with schema (idempotent)

    Args:
        db_path: Path to the database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS local_storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()
    finally:
        conn.close()

    logger.info("Database schema initialized at %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Validate database has expected tables

    Raises:
        ValueError: If tables are missing
    """
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    present = {row[0] for row in rows}
    missing = EXPECTED_TABLES - present
    if missing:
        raise ValueError(f"Missing tables: {sorted(missing)}")
    return True
