"""Notes service layer - facade between the intake route and the stores.

Owns the write policy: primary store first, file store when the primary is
disabled or failing (if fallback is on), then a best-effort Slack notification.
"""

from __future__ import annotations

from typing import Protocol

from qbonotes.notes.errors import StorageError
from qbonotes.notes.file_storage import FileNoteStorage
from qbonotes.notes.models import NotePayload, NoteRecord
from qbonotes.notes.repository import NoteRepository
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)


class Notifier(Protocol):
    def notify(self, payload: NotePayload) -> None: ...


class NoteIntakeService:
    def __init__(
        self,
        repository: NoteRepository | None,
        file_storage: FileNoteStorage | None,
        notifier: Notifier | None = None,
        write_fallback: bool = True,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.notifier = notifier
        self.write_fallback = write_fallback

    def _persist(self, payload: NotePayload) -> NoteRecord:
        if self.repository is not None:
            record = NoteRecord.from_payload(NoteRepository.new_id(), payload)
            try:
                return self.repository.insert(record)
            except StorageError as e:
                counter("notes.db_write_failed")
                if not (self.write_fallback and self.file_storage is not None):
                    raise
                logger.warning("Primary store failed, writing note to file storage: %s", e)

        if self.file_storage is None:
            raise StorageError("No note store is available")

        counter("notes.file_write")
        return self.file_storage.store(payload)

    def create_note(self, payload: NotePayload) -> str:
        """
        Persist a validated note and notify Slack.

        Returns:
            The new note id

        Raises:
            StorageError: If no store accepted the note

        Side Effects:
            - Writes to the primary store or the file store
            - Posts to Slack (failures are logged, never raised)
        """
        with time_block("notes.create"):
            record = self._persist(payload)

        counter("notes.created")
        log_event(
            "notes.created",
            note_id=record.id,
            transaction_type=record.transaction_type,
        )

        if self.notifier is not None:
            try:
                self.notifier.notify(payload)
            except Exception as e:
                counter("notes.slack_failed")
                logger.error("Slack notification failed for note %s: %s", record.id, e)

        return record.id
