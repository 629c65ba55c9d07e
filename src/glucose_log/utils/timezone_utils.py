"""
Timezone and datetime utilities.

Provides utilities for handling timezone-aware datetime operations.
"""

from datetime import datetime

import pytz
from dateutil import parser


def make_timezone_aware(
    dt: datetime, timezone_str: str = "UTC", assume_local: bool = False
) -> datetime:
    """
    Make a datetime object timezone-aware.

    Args:
        dt: Datetime object (may be naive or aware).
        timezone_str: Timezone string (e.g., "Europe/Copenhagen").
        assume_local: If True and dt is naive, assume it's in timezone_str.

    Returns:
        Timezone-aware datetime object.
    """
    tz = pytz.timezone(timezone_str)

    if dt.tzinfo is None:
        if assume_local:
            return tz.localize(dt)
        else:
            return pytz.utc.localize(dt).astimezone(tz)
    else:
        return dt.astimezone(tz)


def parse_timestamp(
    value: str, timezone_str: str = "UTC", assume_local: bool = True, iso_only: bool = False
) -> datetime:
    """
    Parse an ISO-8601 (or similar) string into a timezone-aware datetime.

    Offsets present in the string are preserved; naive strings are placed
    in timezone_str.

    Args:
        value: Timestamp string.
        timezone_str: Timezone assigned to naive timestamps.
        assume_local: If True, naive timestamps are wall-clock time in timezone_str,
            otherwise they are taken as UTC.
        iso_only: If True, only ISO-8601 is accepted. Otherwise free-form input is
            parsed as well, with missing fields filled from the current date.

    Returns:
        Timezone-aware datetime object.

    Raises:
        ValueError: If the string is not a valid timestamp or its UTC offset is
            out of range.
    """
    if not value or not value.strip():
        raise ValueError("Empty timestamp")

    text = value.strip()
    try:
        dt = parser.isoparse(text)
    except ValueError:
        if iso_only:
            raise
        dt = parser.parse(text)

    try:
        dt.utcoffset()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid UTC offset in {text!r}: {e}") from e

    if dt.tzinfo is not None:
        return dt

    return make_timezone_aware(dt, timezone_str, assume_local=assume_local)


def now(timezone_str: str = "UTC") -> datetime:
    """
    Current instant in the given timezone.

    Args:
        timezone_str: Timezone string.

    Returns:
        Timezone-aware datetime object.
    """
    return datetime.now(pytz.timezone(timezone_str))


def format_timestamp(dt: datetime) -> str:
    """
    Serialize an aware datetime as ISO-8601, using "Z" for UTC.

    Args:
        dt: Timezone-aware datetime.

    Returns:
        ISO-8601 string.
    """
    text = dt.isoformat()
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text
