"""Notes storage exceptions."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Raised when a note cannot be written to or read from a store."""
