"""Primary note store connection management.

The primary store is a single SQLite database. A ``Database`` object owns the
path and hands out configured connections; the process entry point constructs
it and passes it to the repository, so tests can point it at ``tmp_path``.

Provides:
- Connection setup with WAL, row factory and a quick integrity check
- Transaction context manager (commit on success, rollback on error)
- ``retry_on_db_lock`` for SQLITE_BUSY contention
- Schema initialization and validation
"""

from __future__ import annotations

import random
import sqlite3
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

from qbonotes.config import (
    DB_CONNECT_TIMEOUT,
    DB_RETRY_BASE_DELAY,
    DB_RETRY_JITTER,
    DB_RETRY_MAX,
    DB_RETRY_MAX_DELAY,
)
from qbonotes.infrastructure.database_schema import REQUIRED_COLUMNS, init_schema
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)


def retry_on_db_lock(
    max_retries: int = DB_RETRY_MAX,
    base_delay: float = DB_RETRY_BASE_DELAY,
    max_delay: float = DB_RETRY_MAX_DELAY,
) -> Callable[[F], F]:
    """
    Decorator to retry database operations on SQLITE_BUSY errors

    Implements exponential backoff with jitter. Any other OperationalError is
    re-raised immediately.

    Usage:
        @retry_on_db_lock()
        def insert(...):
            with database.transaction() as conn:
                conn.execute("INSERT INTO ...")
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_error = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)

                except sqlite3.OperationalError as e:
                    last_error = e

                    if "locked" not in str(e).lower() and "busy" not in str(e).lower():
                        raise

                    if attempt >= max_retries:
                        logger.error(
                            "Database lock retry exhausted after %d attempts: %s",
                            max_retries,
                            e,
                        )
                        raise

                    delay = min(base_delay * (2**attempt), max_delay)
                    jitter = random.uniform(0, delay * DB_RETRY_JITTER)
                    sleep_time = delay + jitter

                    logger.warning(
                        "Database locked (attempt %d/%d), retrying in %.2fs: %s",
                        attempt + 1,
                        max_retries,
                        sleep_time,
                        e,
                    )

                    time.sleep(sleep_time)

            raise last_error  # type: ignore[misc]

        return wrapper  # type: ignore[return-value]

    return decorator


class Database:
    """
    Handle on the SQLite primary store.

    Connections are short-lived: one per ``connect()`` block. SQLite opens are
    cheap and request volume is low.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    def _create_connection(self) -> sqlite3.Connection:
        """
        Create a configured SQLite connection

        Raises:
            RuntimeError: If the quick integrity check fails
        """
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=DB_CONNECT_TIMEOUT,
            check_same_thread=False,
        )

        try:
            result = conn.execute("PRAGMA quick_check(1)").fetchone()
            if result[0] != "ok":
                conn.close()
                logger.critical("Database corruption detected: %s", result[0])
                counter("database.corruption_detected")
                raise RuntimeError(f"Database corruption detected: {result[0]}")
        except sqlite3.DatabaseError as e:
            conn.close()
            logger.critical("Database corruption or error during integrity check: %s", e)
            counter("database.corruption_detected")
            raise RuntimeError(f"Database corruption detected: {e}") from e

        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the database file and schema if missing (idempotent)."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.transaction() as conn:
            init_schema(conn)
        logger.info("Database schema ready at %s", self.db_path)

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Open a connection for the duration of the block.

        Raises:
            FileNotFoundError: If the database file has not been initialized
        """
        if not self.db_path.exists():
            raise FileNotFoundError(f"Database not found: {self.db_path}")

        conn = self._create_connection()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database transactions

        Automatically commits on success, rolls back on error.
        """
        if not self.db_path.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db_path.touch()

        conn = self._create_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def validate_schema(self) -> bool:
        """
        Validate the notes table has the expected columns.

        Raises:
            ValueError: If the table or a column is missing
        """
        with self.connect() as conn:
            rows = conn.execute("PRAGMA table_info(notes)").fetchall()

        if not rows:
            raise ValueError("Missing table: notes")

        columns = {row["name"] for row in rows}
        missing = REQUIRED_COLUMNS - columns
        if missing:
            raise ValueError(f"notes table missing columns: {sorted(missing)}")
        return True
