"""Utility functions for the chronologicon project.

Re-exports the datetime helpers so that imports like
`from ..utils import parse_timestamp` work as expected.
"""

from .datetime_utils import (  # noqa: F401
    duration_minutes,
    format_timestamp,
    get_current_timestamp,
    parse_timestamp,
    truncate_to_milliseconds,
)


__all__ = [
    "get_current_timestamp",
    "parse_timestamp",
    "format_timestamp",
    "duration_minutes",
    "truncate_to_milliseconds",
]
