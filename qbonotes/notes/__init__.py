"""
Transaction notes - intake validation, storage and the write policy.
"""

from qbonotes.notes.errors import StorageError
from qbonotes.notes.file_storage import FileNoteStorage
from qbonotes.notes.models import NotePayload, NoteRecord, NoteStatus, TransactionType
from qbonotes.notes.repository import NoteRepository
from qbonotes.notes.service import NoteIntakeService
from qbonotes.notes.validation import ValidationResult, validate_note_payload

__all__ = [
    # Models
    "NotePayload",
    "NoteRecord",
    "NoteStatus",
    "TransactionType",
    # Validation
    "ValidationResult",
    "validate_note_payload",
    # Storage
    "FileNoteStorage",
    "NoteRepository",
    "StorageError",
    # Service
    "NoteIntakeService",
]
