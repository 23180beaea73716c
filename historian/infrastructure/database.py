"""Centralized database configuration

**DATABASE POLICY**: Historian uses ONE SQLite database: historian/data/historian.db

It stands in for the browser's local storage: every persisted collection
(timeline entries, learning records, enrichment cache, access credential)
lives as a JSON string under a named key in the ``local_storage`` table.

Provides:
- Connection pooling (reuses connections)
- Single source of truth for database path
- Lock-retry decorator for SQLITE_BUSY
- Transaction context manager (commit on success, rollback on error)
"""

from __future__ import annotations

import atexit
import os
import random
import sqlite3
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from functools import lru_cache, wraps
from pathlib import Path
from queue import Empty, Queue
from threading import Lock
from typing import Any, TypeVar

from historian.config import (
    DB_CONNECT_TIMEOUT,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_RETRY_BASE_DELAY,
    DB_RETRY_JITTER,
    DB_RETRY_MAX,
    DB_RETRY_MAX_DELAY,
)
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter, log_event

F = TypeVar("F", bound=Callable[..., Any])

DB_PATH = Path(__file__).parent.parent / "data" / "historian.db"

logger = get_logger(__name__)


def _is_lock_error(error: sqlite3.OperationalError) -> bool:
    text = str(error).lower()
    return "locked" in text or "busy" in text


def retry_on_db_lock(
    max_retries: int = DB_RETRY_MAX,
    base_delay: float = DB_RETRY_BASE_DELAY,
    max_delay: float = DB_RETRY_MAX_DELAY,
) -> Callable[[F], F]:
    """
    Retry a write on SQLITE_BUSY / "database is locked" with jittered backoff.

    Other OperationalErrors propagate immediately; the last lock error is
    re-raised once max_retries retries are used up.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    if not _is_lock_error(e) or attempt >= max_retries:
                        if attempt:
                            logger.error("%s still locked after %d retries: %s", func.__name__, attempt, e)
                        raise
                    delay = min(base_delay * (2**attempt), max_delay)
                    delay += random.uniform(0, delay * DB_RETRY_JITTER)
                    attempt += 1
                    counter("database.lock_retry")
                    logger.warning("%s hit a locked database, retry %d/%d in %.2fs", func.__name__, attempt, max_retries, delay)
                    time.sleep(delay)

        return wrapper  # type: ignore[return-value]

    return decorator


class DatabaseConnectionPool:
    """
    Fixed-size SQLite connection pool shared by every LocalStorage instance.

    Connections are opened lazily up to ``pool_size``; when all are checked
    out, callers wait up to DB_POOL_TIMEOUT and then get a RuntimeError.
    Each connection uses WAL journaling and the Row factory.
    """

    def __init__(self, db_path: Path, pool_size: int = DB_POOL_SIZE) -> None:
        self.db_path = db_path
        self.pool_size = pool_size
        self.pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self.lock = Lock()
        self.opened = 0
        self.closed = False

        atexit.register(self.close_all)

    def _open(self) -> sqlite3.Connection:
        """
        Raises:
            RuntimeError: If the database file fails its integrity check
        """
        conn = sqlite3.connect(str(self.db_path), timeout=DB_CONNECT_TIMEOUT, check_same_thread=False)
        try:
            status = conn.execute("PRAGMA quick_check(1)").fetchone()[0]
        except sqlite3.DatabaseError as e:
            status = str(e)
        if status != "ok":
            conn.close()
            logger.critical("Database integrity check failed for %s: %s", self.db_path, status)
            counter("database.corruption_detected")
            raise RuntimeError(f"Database corruption detected: {status}")

        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.row_factory = sqlite3.Row
        return conn

    def get_connection(self) -> sqlite3.Connection:
        """
        Check out a connection, opening a new one while under pool_size.

        Raises:
            RuntimeError: If the pool is closed or stays exhausted past the timeout
        """
        if self.closed:
            raise RuntimeError("Connection pool has been closed")

        try:
            return self.pool.get_nowait()
        except Empty:
            pass

        with self.lock:
            can_open = self.opened < self.pool_size
            if can_open:
                self.opened += 1
        if can_open:
            try:
                return self._open()
            except Exception:
                with self.lock:
                    self.opened -= 1
                raise

        try:
            return self.pool.get(block=True, timeout=DB_POOL_TIMEOUT)
        except Empty:
            log_event("database.pool_exhausted", pool_size=self.pool_size)
            raise RuntimeError(
                f"Database connection pool exhausted (pool_size={self.pool_size})"
            ) from None

    def return_connection(self, conn: sqlite3.Connection) -> None:
        if self.closed:
            conn.close()
            return
        self.pool.put_nowait(conn)

    def in_use(self) -> int:
        return self.opened - self.pool.qsize()

    def close_all(self) -> None:
        """Close every idle connection; checked-out ones close on return."""
        self.closed = True
        while True:
            try:
                self.pool.get_nowait().close()
            except Empty:
                break


@lru_cache(maxsize=1)
def get_pool() -> DatabaseConnectionPool:
    """
    Get or create global connection pool (thread-safe singleton via @lru_cache)

    Side Effects:
        - Opens pooled connections to historian.db on first call
        - Registers atexit cleanup handler
    """
    db_path = get_db_path()
    return DatabaseConnectionPool(db_path, pool_size=DB_POOL_SIZE)


def reset_pool() -> None:
    """
    Close and forget the global pool.

    Needed when HISTORIAN_DB_PATH changes (tests point each case at a fresh file).
    """
    if get_pool.cache_info().currsize:
        get_pool().close_all()
    get_pool.cache_clear()


def get_db_path() -> Path:
    """
    Get database path (environment-aware)

    Checks HISTORIAN_DB_PATH environment variable first,
    falls back to default location.
    """
    if env_path := os.getenv("HISTORIAN_DB_PATH"):
        return Path(env_path)

    return DB_PATH


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Get pooled database connection (context manager)

    Raises:
        FileNotFoundError: If database doesn't exist (call init_database first)
    """
    db_path = get_db_path()

    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}\nRun init_database() first")

    pool = get_pool()
    conn = pool.get_connection()
    try:
        yield conn
    finally:
        pool.return_connection(conn)


@contextmanager
def db_transaction() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database transactions

    Automatically commits on success, rolls back on error.
    """
    with get_db_connection() as conn:
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise e


def get_pool_stats() -> dict[str, Any]:
    """
    Get connection pool health metrics
    """
    pool = get_pool()
    in_use = pool.in_use()
    usage_percent = (in_use / pool.pool_size) * 100 if pool.pool_size > 0 else 0

    return {
        "pool_size": pool.pool_size,
        "open": pool.opened,
        "in_use": in_use,
        "usage_percent": round(usage_percent, 1),
        "closed": pool.closed,
    }


def init_database() -> None:
    """
    Initialize database with schema (idempotent)

    Side Effects:
    - Creates historian.db and its parent directory if needed
    - Creates the local_storage table if it doesn't exist
    """
    from historian.infrastructure.database_schema import init_database as _init_database

    _init_database(get_db_path())
