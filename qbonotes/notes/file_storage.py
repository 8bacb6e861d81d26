"""
Append-only JSONL note store.

Used when the primary store is disabled or unavailable. Each line is one
NoteRecord in storage form. Records written here are never migrated back into
the database.
"""

from __future__ import annotations

import json
import random
import string
import time
from pathlib import Path
from typing import Any

from qbonotes.config import DEFAULT_STORAGE_DIR, FALLBACK_DATA_FILE
from qbonotes.notes.errors import StorageError
from qbonotes.notes.models import NotePayload, NoteRecord
from qbonotes.observability.logging import get_logger
from qbonotes.reports.windowing import in_civil_date

logger = get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _file_note_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"file-{int(time.time() * 1000)}-{suffix}"


class FileNoteStorage:
    def __init__(self, storage_dir: Path | str = DEFAULT_STORAGE_DIR, filename: str = FALLBACK_DATA_FILE):
        self.storage_dir = Path(storage_dir)
        self.path = self.storage_dir / filename

    def store(self, payload: NotePayload) -> NoteRecord:
        """
        Append a note and return the stored record.

        Raises:
            StorageError: If the file cannot be written
        """
        record = NoteRecord.from_payload(_file_note_id(), payload)
        line = json.dumps(record.to_db_dict(), ensure_ascii=False)
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error("File storage write failed: %s", e)
            raise StorageError(f"File storage write failed: {e}") from e

        logger.info("Stored note %s to file", record.id)
        return record

    def get_all(self) -> list[NoteRecord]:
        """All readable records. Corrupt or malformed lines are skipped."""
        if not self.path.exists():
            return []

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"File storage read failed: {e}") from e

        records: list[NoteRecord] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(NoteRecord.from_db_row(json.loads(line)))
            except (ValueError, TypeError) as e:
                logger.warning("Skipping unreadable line %d in %s: %s", lineno, self.path, e)

        logger.debug("Loaded %d notes from file storage", len(records))
        return records

    def get_for_date(self, report_date: str, tz_name: str) -> list[NoteRecord]:
        """Notes whose creation instant falls on report_date in tz_name, oldest first."""
        notes = [n for n in self.get_all() if in_civil_date(n.created_at, report_date, tz_name)]
        notes.sort(key=lambda n: n.created_at)
        return notes

    def clear_all(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.info("Cleared file storage at %s", self.path)

    def stats(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"total_transactions": 0, "file_size_kb": 0}
        try:
            size = self.path.stat().st_size
            total = len(self.get_all())
        except (OSError, StorageError) as e:
            logger.warning("Could not read file storage stats: %s", e)
            return {"total_transactions": 0, "file_size_kb": 0}
        return {"total_transactions": total, "file_size_kb": round(size / 1024)}
