"""Result structures returned by the hierarchy, analytics and search services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ..utils.datetime_utils import format_timestamp
from .event import Event


@dataclass(slots=True)
class TimelineNode:
    """An event plus its children ordered by start time."""

    event: Event
    children: List["TimelineNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.event.to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(slots=True)
class OverlapGroup:
    """Two events whose intervals intersect, plus the intersection."""

    events: tuple[Event, Event]
    overlap_start: datetime
    overlap_end: datetime

    @property
    def overlap_duration_minutes(self) -> int:
        return int((self.overlap_end - self.overlap_start).total_seconds() // 60)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": [event.summary() for event in self.events],
            "overlap_start": format_timestamp(self.overlap_start),
            "overlap_end": format_timestamp(self.overlap_end),
            "overlap_duration_minutes": self.overlap_duration_minutes,
        }


@dataclass(slots=True)
class TemporalGap:
    gap_start: datetime
    gap_end: datetime
    gap_duration_minutes: int
    preceding_event: Event
    following_event: Event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gap_start": format_timestamp(self.gap_start),
            "gap_end": format_timestamp(self.gap_end),
            "gap_duration_minutes": self.gap_duration_minutes,
            "preceding_event": {
                "event_id": self.preceding_event.event_id,
                "event_name": self.preceding_event.event_name,
            },
            "following_event": {
                "event_id": self.following_event.event_id,
                "event_name": self.following_event.event_name,
            },
        }


@dataclass(slots=True)
class GapReport:
    """All positive gaps in a window, largest first."""

    largest_gap: TemporalGap | None = None
    all_gaps: List[TemporalGap] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "largest_gap": self.largest_gap.to_dict() if self.largest_gap else None,
            "all_gaps": [gap.to_dict() for gap in self.all_gaps],
        }


@dataclass(slots=True)
class InfluencePath:
    """Shortest parent/child chain between two events."""

    source_event_id: str
    target_event_id: str
    path: List[Event]

    @property
    def hop_count(self) -> int:
        return len(self.path) - 1

    @property
    def total_duration_minutes(self) -> int:
        return sum(event.duration_minutes for event in self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_event_id": self.source_event_id,
            "target_event_id": self.target_event_id,
            "shortest_path": [
                {
                    "event_id": event.event_id,
                    "event_name": event.event_name,
                    "duration_minutes": event.duration_minutes,
                }
                for event in self.path
            ],
            "hop_count": self.hop_count,
            "total_duration_minutes": self.total_duration_minutes,
        }


@dataclass(slots=True)
class SearchPage:
    """One page of search results plus pagination counters."""

    events: List[Event]
    current_page: int
    items_per_page: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_items // self.items_per_page)

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": [event.to_dict() for event in self.events],
            "pagination": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "total_items": self.total_items,
                "items_per_page": self.items_per_page,
                "has_next_page": self.has_next_page,
                "has_previous_page": self.has_previous_page,
            },
        }


__all__ = [
    "TimelineNode",
    "OverlapGroup",
    "TemporalGap",
    "GapReport",
    "InfluencePath",
    "SearchPage",
]
