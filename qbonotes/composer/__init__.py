"""Note composer: form state, backend client and local auth cache."""

from qbonotes.composer.auth import AuthCache, AuthCacheStore, AuthService
from qbonotes.composer.client import NotesClient, NotesClientError
from qbonotes.composer.composer import NoteComposer

__all__ = [
    "AuthCache",
    "AuthCacheStore",
    "AuthService",
    "NoteComposer",
    "NotesClient",
    "NotesClientError",
]
