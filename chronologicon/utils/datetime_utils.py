"""Utility functions for working with dates and times."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any


__all__ = [
    "get_current_timestamp",
    "parse_timestamp",
    "format_timestamp",
    "duration_minutes",
    "truncate_to_milliseconds",
]


def get_current_timestamp() -> datetime:
    """Return the current UTC datetime with micro-second precision.

    This object can be stored directly in MongoDB where it will be written as
    a BSON Date. When you need a human-readable version, pass the datetime
    to ``format_timestamp``.
    """
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse *value* into a UTC-aware datetime.

    Accepts ISO 8601 strings (a trailing ``Z`` included), ``datetime``
    instances and numbers, which are read as milliseconds since the epoch.
    Naive values are taken to be UTC.

    Raises
    ------
    ValueError
        If *value* cannot be interpreted as a point in time.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"Not a timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        # e.g. 0001-01-01T00:00:00+01:00 falls before datetime.min in UTC
        raise ValueError(f"Timestamp out of range: {value!r}") from exc


def format_timestamp(value: datetime | None) -> str | None:
    """Render *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def truncate_to_milliseconds(value: datetime) -> datetime:
    """Drop sub-millisecond precision, which BSON dates cannot hold."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from *start* to *end*, rounded up."""
    return math.ceil((end - start).total_seconds() / 60)
