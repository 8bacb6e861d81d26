"""
Note Repository - persistence for the notes table.

Follows the database patterns in qbonotes/infrastructure/database.py.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime

from qbonotes.infrastructure.database import Database, retry_on_db_lock
from qbonotes.notes.errors import StorageError
from qbonotes.notes.models import NoteRecord
from qbonotes.observability.logging import get_logger
from qbonotes.utils.timestamps import format_utc

logger = get_logger(__name__)


class NoteRepository:
    """
    Repository for the primary (sqlite) note store.

    Every sqlite failure surfaces as StorageError so callers can decide on
    fallback without knowing the driver.
    """

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @retry_on_db_lock()
    def _insert(self, record: NoteRecord) -> None:
        with self.database.transaction() as conn:
            conn.execute(
                """
                INSERT INTO notes (
                    id, transaction_url, transaction_id, transaction_type, date,
                    amount, customer_vendor, invoice_number, note, created_by,
                    status, created_at
                ) VALUES (
                    :id, :transaction_url, :transaction_id, :transaction_type, :date,
                    :amount, :customer_vendor, :invoice_number, :note, :created_by,
                    :status, :created_at
                )
                """,
                record.to_db_dict(),
            )

    def insert(self, record: NoteRecord) -> NoteRecord:
        """
        Insert a note.

        Side Effects:
            - Inserts row into notes table
            - Commits transaction

        Raises:
            StorageError: If the write fails
        """
        try:
            self._insert(record)
        except (sqlite3.Error, OSError, RuntimeError) as e:
            logger.error("Failed to insert note %s: %s", record.id, e)
            raise StorageError(f"Database insert failed: {e}") from e

        logger.info("Stored note %s (%s)", record.id, record.transaction_type)
        return record

    def list_created_between(self, start: datetime, end: datetime) -> list[NoteRecord]:
        """
        Notes with start <= created_at < end, ascending by created_at.

        Raises:
            StorageError: If the read fails
        """
        try:
            with self.database.connect() as conn:
                rows = conn.execute(
                    """
                    SELECT * FROM notes
                    WHERE created_at >= ? AND created_at < ?
                    ORDER BY created_at ASC
                    """,
                    (format_utc(start), format_utc(end)),
                ).fetchall()
        except (sqlite3.Error, OSError, RuntimeError) as e:
            raise StorageError(f"Database query failed: {e}") from e

        return [NoteRecord.from_db_row(dict(row)) for row in rows]

    def count(self) -> int:
        try:
            with self.database.connect() as conn:
                row = conn.execute("SELECT COUNT(*) FROM notes").fetchone()
        except (sqlite3.Error, OSError, RuntimeError) as e:
            raise StorageError(f"Database query failed: {e}") from e
        return int(row[0])

    def ping(self) -> bool:
        """True when the store answers a trivial query."""
        try:
            with self.database.connect() as conn:
                conn.execute("SELECT 1").fetchone()
        except (sqlite3.Error, OSError, RuntimeError) as e:
            logger.warning("Database ping failed: %s", e)
            return False
        return True
