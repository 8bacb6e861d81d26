"""
Database schema for the notes primary store.
"""

from __future__ import annotations

import sqlite3

REQUIRED_COLUMNS = frozenset(
    {
        "id",
        "transaction_url",
        "transaction_id",
        "transaction_type",
        "date",
        "amount",
        "customer_vendor",
        "invoice_number",
        "note",
        "created_by",
        "status",
        "created_at",
    }
)


def init_schema(conn: sqlite3.Connection) -> None:
    """
    Create the notes table and its indexes (idempotent).

    created_at holds a fixed-width UTC ISO-8601 string, so lexical order is
    chronological order and range scans use the index.
    """
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS notes (
            id TEXT PRIMARY KEY,
            transaction_url TEXT NOT NULL,
            transaction_id TEXT NOT NULL DEFAULT '',
            transaction_type TEXT NOT NULL,
            date TEXT NOT NULL DEFAULT '',
            amount REAL NOT NULL,
            customer_vendor TEXT NOT NULL DEFAULT '',
            invoice_number TEXT NOT NULL DEFAULT '',
            note TEXT NOT NULL,
            created_by TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'Open',
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_notes_created_at ON notes(created_at);
        CREATE INDEX IF NOT EXISTS idx_notes_transaction_type ON notes(transaction_type);
    """)
