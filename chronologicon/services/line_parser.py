"""Format-tolerant decoding of one input line into a validated :class:`Event`.

A line is offered to each decoder in ``DECODERS`` in turn; the first one that
accepts it produces a raw record, which ``validate_event`` then turns into an
event. Decoders return ``None`` to pass and raise :class:`LineError` when they
accept a line but cannot make sense of it.
"""

from __future__ import annotations

import csv
import json
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Sequence

from ..errors import LineError
from ..models.event import Event
from ..utils.datetime_utils import duration_minutes, parse_timestamp, truncate_to_milliseconds

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Local parsing settings
# ---------------------------------------------------------------------------
DELIMITERS: Sequence[str] = (",", "|", "\t", ";")
DEFAULT_DELIMITER: str = ","
HEADER_TOKENS: Sequence[str] = ("eventid", "event_id", "eventname", "event_name")
COMMENT_PREFIX: str = "#"

RICH_LAYOUT_FIELDS: int = 7
MINIMAL_LAYOUT_FIELDS: int = 4

RawRecord = Dict[str, Any]
Decoder = Callable[[str, str], "RawRecord | None"]


# ---------------------------------------------------------------------------
# File-level helpers
# ---------------------------------------------------------------------------

def detect_delimiter(lines: Iterable[str]) -> str:
    """Pick the delimiter that splits the first non-comment line into the most fields."""
    sample = next(
        (line for line in lines if line.strip() and not line.startswith(COMMENT_PREFIX)),
        None,
    )
    if sample is None:
        return DEFAULT_DELIMITER

    best, max_fields = DEFAULT_DELIMITER, 0
    for delimiter in DELIMITERS:
        fields = len(sample.split(delimiter))
        if fields > max_fields:
            best, max_fields = delimiter, fields
    return best


def is_header_line(line: str) -> bool:
    """Column-name row test; a JSON object line is never a header."""
    if line.lstrip().startswith("{"):
        return False
    lowered = line.lower()
    return any(token in lowered for token in HEADER_TOKENS)


def split_fields(line: str, delimiter: str) -> List[str]:
    """Split a delimited row, honouring quotes, and strip each field."""
    try:
        fields = next(csv.reader([line], delimiter=delimiter), [])
    except csv.Error as exc:
        raise LineError(f"Malformed delimited row: {exc}") from exc
    return [field.strip().strip('"').strip() for field in fields]


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def decode_structured(line: str, delimiter: str) -> RawRecord | None:
    """Accept one JSON object per line."""
    try:
        parsed = json.loads(line)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def decode_rich_row(line: str, delimiter: str) -> RawRecord | None:
    """eventId, eventName, startDate, endDate, parentId, researchValue, description."""
    fields = split_fields(line, delimiter)
    if len(fields) < RICH_LAYOUT_FIELDS:
        return None

    event_id, name, start, end, parent, research_value, description = fields[:RICH_LAYOUT_FIELDS]
    return {
        "eventId": event_id or None,
        "eventName": name,
        "startDate": start,
        "endDate": end,
        "parentEventId": _optional_reference(parent),
        "description": description or None,
        "metadata": {"research_value": _lenient_int(research_value)} if research_value else {},
    }


def decode_minimal_row(line: str, delimiter: str) -> RawRecord | None:
    """eventName, description, startDate, endDate[, parentId[, metadata JSON]]."""
    fields = split_fields(line, delimiter)
    if len(fields) < MINIMAL_LAYOUT_FIELDS:
        raise LineError(
            f"Invalid format. Expected at least {MINIMAL_LAYOUT_FIELDS} fields, got {len(fields)}"
        )

    name, description, start, end = fields[:MINIMAL_LAYOUT_FIELDS]
    parent = fields[4] if len(fields) > 4 else ""
    raw_metadata = fields[5] if len(fields) > 5 else ""

    metadata = None
    if raw_metadata:
        try:
            metadata = json.loads(raw_metadata)
        except json.JSONDecodeError as exc:
            raise LineError(f"Invalid metadata JSON: {exc.msg}") from exc

    return {
        "eventName": name,
        "description": description or None,
        "startDate": start,
        "endDate": end,
        "parentEventId": _optional_reference(parent),
        "metadata": metadata,
    }


DECODERS: Sequence[Decoder] = (decode_structured, decode_rich_row, decode_minimal_row)


def decode_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> RawRecord:
    """Run *line* through ``DECODERS`` and return the first accepted record."""
    for decoder in DECODERS:
        record = decoder(line, delimiter)
        if record is not None:
            return record
    raise LineError("Unrecognised line format")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_event(record: RawRecord) -> Event:
    """Check required fields and build the normalised :class:`Event`."""
    name = record.get("eventName")
    if not isinstance(name, str) or not name.strip():
        raise LineError("Event name is required and must be a string")

    start_raw, end_raw = record.get("startDate"), record.get("endDate")
    if start_raw in (None, "") or end_raw in (None, ""):
        raise LineError("Start date and end date are required")

    try:
        start = truncate_to_milliseconds(parse_timestamp(start_raw))
        end = truncate_to_milliseconds(parse_timestamp(end_raw))
    except ValueError:
        raise LineError("Invalid date format. Use ISO 8601 format.") from None

    if start >= end:
        raise LineError("Start date must be before end date")

    metadata = record.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise LineError("Metadata must be an object")

    description = record.get("description")
    if description is not None:
        description = str(description).strip() or None

    event_id = record.get("eventId")
    event_id = str(event_id).strip() if event_id not in (None, "") else ""

    return Event(
        event_id=event_id or str(uuid.uuid4()),
        event_name=name.strip(),
        description=description,
        start_date=start,
        end_date=end,
        duration_minutes=duration_minutes(start, end),
        parent_event_id=_optional_reference(record.get("parentEventId") or record.get("parentId")),
        metadata=metadata,
    )


def parse_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> Event:
    """Decode and validate one line; raises :class:`LineError` on failure."""
    return validate_event(decode_line(line.strip(), delimiter))


# ---------------------------------------------------------------------------
# Local helpers
# ---------------------------------------------------------------------------

def _optional_reference(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "NULL":
        return None
    return text


def _lenient_int(value: str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


__all__ = [
    "DELIMITERS",
    "DECODERS",
    "detect_delimiter",
    "is_header_line",
    "split_fields",
    "decode_structured",
    "decode_rich_row",
    "decode_minimal_row",
    "decode_line",
    "validate_event",
    "parse_line",
]
