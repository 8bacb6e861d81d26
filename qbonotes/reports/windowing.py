"""
Civil-date windowing for daily reports.

A note belongs to report day D in zone Z iff its UTC creation instant,
converted into Z, falls on calendar date D. Membership is decided by comparing
civil date strings after conversion, so daylight-saving transitions need no
special casing.

The UTC bounds produced here are only a coarse prefilter for range queries;
``in_civil_date`` makes the final decision.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from qbonotes.utils.timestamps import parse_utc, utc_now

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA zone name.

    Raises:
        ValueError: If the zone is unknown
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz_name}") from e


def parse_report_date(value: str) -> date:
    """
    Parse a strict ``YYYY-MM-DD`` report date.

    Raises:
        ValueError: If the format is wrong or the day does not exist
    """
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError("Invalid date format. Use YYYY-MM-DD") from e


def default_report_date(tz_name: str, now: datetime | None = None) -> str:
    """Yesterday's civil date in the report zone."""
    moment = parse_utc(now) if now is not None else utc_now()
    local_today = moment.astimezone(get_zone(tz_name)).date()
    return (local_today - timedelta(days=1)).isoformat()


def today_in(tz_name: str, now: datetime | None = None) -> str:
    moment = parse_utc(now) if now is not None else utc_now()
    return moment.astimezone(get_zone(tz_name)).date().isoformat()


def civil_date_of(timestamp: str | datetime, tz_name: str) -> str:
    """Calendar date (``YYYY-MM-DD``) an instant falls on in the given zone."""
    return parse_utc(timestamp).astimezone(get_zone(tz_name)).date().isoformat()


def in_civil_date(timestamp: str | datetime, report_date: str, tz_name: str) -> bool:
    return civil_date_of(timestamp, tz_name) == report_date


def utc_bounds_for(report_date: str, tz_name: str) -> tuple[datetime, datetime]:
    """
    Padded UTC range that surely contains every instant of the civil day.

    Local midnight of the day before and of the day after are converted to UTC.
    Any real zone offset (under 26 hours) is covered.
    """
    day = parse_report_date(report_date)
    zone = get_zone(tz_name)
    start = datetime.combine(day - timedelta(days=1), time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=2), time.min, tzinfo=zone)
    return parse_utc(start), parse_utc(end)


def format_created_at(timestamp: str | datetime, tz_name: str) -> str:
    """Human display of a creation instant, e.g. ``Mar 10, 2024, 01:59 AM``."""
    local = parse_utc(timestamp).astimezone(get_zone(tz_name))
    return f"{local:%b} {local.day}, {local:%Y, %I:%M %p}"
