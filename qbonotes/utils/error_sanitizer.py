"""
Error message sanitization utility.

Keeps file paths, SQL driver text, credentials and internal module names out of
error details returned to clients.
"""

from __future__ import annotations

import re

from qbonotes.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.(py|db|jsonl)",
    r"[A-Za-z]:\\[^\s]+",
    # Stack trace indicators
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # Database errors
    r"sqlite3?\.",
    r"UNIQUE constraint",
    r"no such table",
    r"no such column",
    # Credentials
    r"xox[abprs]-[A-Za-z0-9-]+",
    r"-----BEGIN [A-Z ]*PRIVATE KEY-----",
    r"Bearer [A-Za-z0-9._-]+",
    r"hooks\.slack\.com/[^\s]+",
    # Internal module names
    r"qbonotes\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    404: "Resource not found.",
    422: "Invalid data format.",
    429: "Too many requests. Please try again later.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}


def sanitize_error_message(
    message: str,
    status_code: int = 500,
    allow_field_names: bool = True,
) -> str:
    """
    Sanitize an error message to prevent information leakage.

    Args:
        message: The original error message
        status_code: HTTP status code (used to select generic fallback)
        allow_field_names: Whether short client-error messages may pass through

    Returns:
        Sanitized error message safe for client consumption
    """
    if not message:
        return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    if (
        status_code < 500
        and allow_field_names
        and len(message) < 200
        and not any(c in message for c in ["{", "}", "\n"])
    ):
        return message

    return GENERIC_MESSAGES.get(status_code, "An error occurred.")


def get_safe_error_detail(
    error: Exception,
    status_code: int = 500,
    context: str | None = None,
) -> str:
    """
    Get a safe error detail string for HTTP responses.

    In development the raw message is returned when it carries nothing sensitive.
    """
    from qbonotes.infrastructure.settings import is_development

    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, str(error))

    if is_development():
        sanitized = sanitize_error_message(str(error), 400)
        if sanitized != GENERIC_MESSAGES[400]:
            return sanitized

    if context and status_code >= 500:
        return context
    return sanitize_error_message(str(error), status_code)
