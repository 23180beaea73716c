"""
Tests for the database layer under local storage

Lock-retry decorator, environment-aware path, schema validation and pool stats.
"""

from __future__ import annotations

import sqlite3

import pytest

from historian.infrastructure import database
from historian.infrastructure.database import (
    DatabaseConnectionPool,
    db_transaction,
    get_db_connection,
    get_db_path,
    get_pool_stats,
    retry_on_db_lock,
)
from historian.infrastructure.database_schema import validate_schema


def test_retry_decorator_recovers_from_lock():
    """Test retry decorator recovers from database lock errors"""
    call_count = [0]

    @retry_on_db_lock(max_retries=3, base_delay=0.01, max_delay=0.05)
    def flaky_operation():
        call_count[0] += 1
        if call_count[0] < 3:
            raise sqlite3.OperationalError("database is locked")
        return "success"

    assert flaky_operation() == "success"
    assert call_count[0] == 3, "Should retry twice before success"


def test_retry_decorator_fails_after_max_retries():
    call_count = [0]

    @retry_on_db_lock(max_retries=2, base_delay=0.01, max_delay=0.02)
    def always_locked():
        call_count[0] += 1
        raise sqlite3.OperationalError("database is busy")

    with pytest.raises(sqlite3.OperationalError):
        always_locked()
    assert call_count[0] == 3


def test_retry_decorator_does_not_retry_other_errors():
    call_count = [0]

    @retry_on_db_lock(max_retries=3, base_delay=0.01)
    def broken_sql():
        call_count[0] += 1
        raise sqlite3.OperationalError("no such table: nowhere")

    with pytest.raises(sqlite3.OperationalError):
        broken_sql()
    assert call_count[0] == 1


def test_db_path_follows_environment(tmp_path):
    assert get_db_path() == tmp_path / "historian.db"


def test_transaction_rolls_back_on_error():
    with pytest.raises(RuntimeError), db_transaction() as conn:
        conn.execute("INSERT INTO local_storage (key, value) VALUES ('k', 'v')")
        raise RuntimeError("abort")

    with get_db_connection() as conn:
        assert conn.execute("SELECT COUNT(*) FROM local_storage").fetchone()[0] == 0


def test_schema_is_valid_after_init():
    with get_db_connection() as conn:
        assert validate_schema(conn) is True


def test_validate_schema_reports_missing_table():
    conn = sqlite3.connect(":memory:")
    try:
        with pytest.raises(ValueError, match="local_storage"):
            validate_schema(conn)
    finally:
        conn.close()


def test_pool_stats_when_idle():
    with get_db_connection():
        pass
    stats = get_pool_stats()
    assert stats["in_use"] == 0
    assert stats["closed"] is False


def test_pool_opens_connections_lazily(tmp_path):
    pool = DatabaseConnectionPool(tmp_path / "historian.db", pool_size=2)
    try:
        assert pool.opened == 0
        conn = pool.get_connection()
        assert pool.opened == 1
        assert pool.in_use() == 1
        pool.return_connection(conn)
        assert pool.get_connection() is conn
        pool.return_connection(conn)
        assert pool.opened == 1
    finally:
        pool.close_all()


def test_pool_exhaustion_raises_instead_of_overflowing(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_POOL_TIMEOUT", 0.01)
    pool = DatabaseConnectionPool(tmp_path / "historian.db", pool_size=1)
    conn = pool.get_connection()
    try:
        with pytest.raises(RuntimeError, match="exhausted"):
            pool.get_connection()
        assert pool.opened == 1
    finally:
        pool.return_connection(conn)
        pool.close_all()
