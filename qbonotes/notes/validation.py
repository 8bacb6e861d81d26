"""Intake validation for submitted note payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from qbonotes.notes.models import NotePayload


@dataclass
class ValidationResult:
    success: bool
    data: NotePayload | None = None
    errors: list[str] = field(default_factory=list)


def _format_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "body"
    message = str(error.get("msg", "Invalid value"))
    # Custom validators surface as "Value error, <text>"
    message = message.removeprefix("Value error, ")
    return f"{location}: {message}"


def validate_note_payload(data: Any) -> ValidationResult:
    """
    Validate an untrusted request body against NotePayload.

    Returns a ValidationResult with either the parsed payload or one
    "field: message" string per problem. Never raises.
    """
    if not isinstance(data, dict):
        return ValidationResult(success=False, errors=["body: Invalid payload format"])

    try:
        payload = NotePayload.model_validate(data)
    except ValidationError as e:
        return ValidationResult(success=False, errors=[_format_error(err) for err in e.errors()])

    return ValidationResult(success=True, data=payload)
