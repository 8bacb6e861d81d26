"""HTTP client for the notes intake endpoint."""

from __future__ import annotations

from typing import Any

import requests

from qbonotes.config import HTTP_TIMEOUT_SECONDS, QBONOTES_API_URL
from qbonotes.observability.logging import get_logger

logger = get_logger(__name__)


class NotesClientError(RuntimeError):
    """Raised when the backend rejects or cannot receive a note."""


class NotesClient:
    def __init__(
        self,
        base_url: str = QBONOTES_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def create_note(self, payload: dict[str, Any]) -> str:
        """
        POST a note payload.

        Returns:
            The id the backend assigned

        Raises:
            NotesClientError: On transport failure or a non-2xx answer
        """
        try:
            response = self.session.post(
                f"{self.base_url}/notes", json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Could not reach notes backend: %s", e)
            raise NotesClientError(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get("error") if isinstance(body, dict) else None
            raise NotesClientError(message or f"HTTP {response.status_code}")

        note_id = body.get("id") if isinstance(body, dict) else None
        if not note_id:
            raise NotesClientError("Backend response did not include a note id")
        return str(note_id)
