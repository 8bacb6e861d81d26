"""UTC timestamp helpers shared by the stores and the report windowing.

Stored timestamps are fixed-width ``YYYY-MM-DDTHH:MM:SS.mmmZ`` strings so that
string comparison and chronological comparison agree.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def format_utc(moment: datetime) -> str:
    """Render an instant as a millisecond-precision UTC string with a Z suffix.

    Naive datetimes are taken to already be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_utc(value: str | datetime) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts the Z suffix, explicit offsets and naive strings (read as UTC).

    Raises:
        ValueError: If the string is not ISO-8601
    """
    if isinstance(value, datetime):
        moment = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
