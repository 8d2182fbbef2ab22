"""Definition of the `Event` dataclass used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from ..utils.datetime_utils import format_timestamp


@dataclass(slots=True)
class Event:
    """One historical record with a time interval and optional parent link."""

    event_id: str
    event_name: str
    start_date: datetime
    end_date: datetime
    duration_minutes: int
    description: str | None = None
    parent_event_id: str | None = None
    metadata: Dict[str, Any] | None = None

    def to_document(self) -> Dict[str, Any]:
        """Return the MongoDB document for this event (``_id`` = event id)."""
        return {
            "_id": self.event_id,
            "event_name": self.event_name,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "duration_minutes": self.duration_minutes,
            "parent_event_id": self.parent_event_id,
            "metadata": self.metadata,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Event":
        return cls(
            event_id=doc["_id"],
            event_name=doc["event_name"],
            description=doc.get("description"),
            start_date=doc["start_date"],
            end_date=doc["end_date"],
            duration_minutes=doc.get("duration_minutes", 0),
            parent_event_id=doc.get("parent_event_id"),
            metadata=doc.get("metadata"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation with ISO 8601 timestamps."""
        return {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "description": self.description,
            "start_date": format_timestamp(self.start_date),
            "end_date": format_timestamp(self.end_date),
            "duration_minutes": self.duration_minutes,
            "parent_event_id": self.parent_event_id,
            "metadata": self.metadata,
        }

    def summary(self) -> Dict[str, Any]:
        """Identifier, name and interval only."""
        return {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "start_date": format_timestamp(self.start_date),
            "end_date": format_timestamp(self.end_date),
        }


__all__ = ["Event"]
