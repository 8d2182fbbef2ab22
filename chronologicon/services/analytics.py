"""Temporal insights over the event set: overlaps, gaps and influence paths."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Tuple

from ..config import INFLUENCE_MAX_HOPS
from ..errors import NotFoundError, ValidationError
from ..models.event import Event
from ..models.insights import GapReport, InfluencePath, OverlapGroup, TemporalGap
from ..utils.datetime_utils import parse_timestamp
from .event_store import EventStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def parse_window(window_start: Any, window_end: Any) -> Tuple[datetime, datetime]:
    """Validate a query window; raises :class:`ValidationError`."""
    if window_start in (None, "") or window_end in (None, ""):
        raise ValidationError("Both startDate and endDate are required")
    try:
        start = parse_timestamp(window_start)
        end = parse_timestamp(window_end)
    except ValueError:
        raise ValidationError("Invalid date format. Use ISO 8601 format.") from None
    if start >= end:
        raise ValidationError("Start date must be before end date")
    return start, end


# ---------------------------------------------------------------------------
# Overlaps
# ---------------------------------------------------------------------------

def overlapping_pairs(events: List[Event]) -> List[OverlapGroup]:
    """Every unordered pair of intersecting intervals, ordered by overlap start.

    Sweeps events by start time keeping the ones still open; intervals that
    merely touch count as overlapping.
    """
    ordered = sorted(events, key=lambda event: (event.start_date, event.event_id))
    active: List[Event] = []
    seen = set()
    groups: List[OverlapGroup] = []

    for current in ordered:
        active = [event for event in active if event.end_date >= current.start_date]
        for other in active:
            first, second = sorted((other, current), key=lambda event: event.event_id)
            key = (first.event_id, second.event_id)
            if first.event_id == second.event_id or key in seen:
                continue
            seen.add(key)
            groups.append(
                OverlapGroup(
                    events=(first, second),
                    overlap_start=max(first.start_date, second.start_date),
                    overlap_end=min(first.end_date, second.end_date),
                )
            )
        active.append(current)

    groups.sort(key=lambda group: (group.overlap_start, group.events[0].event_id, group.events[1].event_id))
    return groups


def find_overlaps(event_store: EventStore, window_start: Any, window_end: Any) -> List[OverlapGroup]:
    """Overlapping pairs among the events fully inside the window."""
    start, end = parse_window(window_start, window_end)
    groups = overlapping_pairs(event_store.find_in_window(start, end))
    logger.info("Found %d overlapping pairs between %s and %s", len(groups), start, end)
    return groups


# ---------------------------------------------------------------------------
# Gaps
# ---------------------------------------------------------------------------

def temporal_gaps(events: List[Event]) -> List[TemporalGap]:
    """Positive gaps between consecutive events in start order, largest first."""
    ordered = sorted(events, key=lambda event: (event.start_date, event.event_id))
    gaps: List[TemporalGap] = []
    for preceding, following in zip(ordered, ordered[1:]):
        if following.start_date <= preceding.end_date:
            continue
        minutes = (following.start_date - preceding.end_date).total_seconds() / 60
        gaps.append(
            TemporalGap(
                gap_start=preceding.end_date,
                gap_end=following.start_date,
                gap_duration_minutes=round(minutes),
                preceding_event=preceding,
                following_event=following,
            )
        )
    gaps.sort(key=lambda gap: (-(gap.gap_end - gap.gap_start), gap.gap_start))
    return gaps


def find_gaps(event_store: EventStore, window_start: Any, window_end: Any) -> GapReport:
    """Largest and all temporal gaps in the window; empty report when there are none."""
    start, end = parse_window(window_start, window_end)
    gaps = temporal_gaps(event_store.find_in_window(start, end))
    if not gaps:
        logger.info("No temporal gaps between %s and %s", start, end)
        return GapReport()
    return GapReport(largest_gap=gaps[0], all_gaps=gaps)


# ---------------------------------------------------------------------------
# Influence path
# ---------------------------------------------------------------------------

def find_influence_path(
    event_store: EventStore,
    source_event_id: str,
    target_event_id: str,
    max_hops: int | None = None,
) -> InfluencePath:
    """Shortest chain of parent/child links from source to target.

    Breadth-first over the undirected parent/child graph, one store round
    trip per level. For each event its parent is explored before its
    children (by start time). Paths longer than *max_hops* links are not
    explored.
    """
    if not source_event_id or not target_event_id:
        raise ValidationError("Both source and target event IDs are required")
    if source_event_id == target_event_id:
        raise ValidationError("Source and target events cannot be the same")
    max_hops = INFLUENCE_MAX_HOPS if max_hops is None else max_hops

    source = event_store.get(source_event_id)
    if source is None:
        raise NotFoundError("Source event not found")

    events: Dict[str, Event] = {source.event_id: source}
    came_from: Dict[str, str | None] = {source.event_id: None}
    frontier = [source.event_id]

    for _ in range(max_hops):
        if not frontier:
            break

        children_of: Dict[str, List[Event]] = defaultdict(list)
        for child in event_store.find_children(frontier):
            children_of[child.parent_event_id].append(child)
        parents = event_store.get_many(
            events[event_id].parent_event_id
            for event_id in frontier
            if events[event_id].parent_event_id and events[event_id].parent_event_id not in came_from
        )

        next_frontier: List[str] = []
        for event_id in frontier:
            parent_id = events[event_id].parent_event_id
            neighbours = ([parents[parent_id]] if parent_id in parents else []) + children_of[event_id]
            for neighbour in neighbours:
                if neighbour.event_id in came_from:
                    continue
                came_from[neighbour.event_id] = event_id
                events[neighbour.event_id] = neighbour
                if neighbour.event_id == target_event_id:
                    return InfluencePath(
                        source_event_id=source_event_id,
                        target_event_id=target_event_id,
                        path=_walk_back(target_event_id, came_from, events),
                    )
                next_frontier.append(neighbour.event_id)
        frontier = next_frontier

    raise NotFoundError("No influence path found between the specified events")


def _walk_back(target_id: str, came_from: Dict[str, str | None], events: Dict[str, Event]) -> List[Event]:
    path: List[Event] = []
    current: str | None = target_id
    while current is not None:
        path.append(events[current])
        current = came_from[current]
    path.reverse()
    return path


__all__ = [
    "parse_window",
    "overlapping_pairs",
    "find_overlaps",
    "temporal_gaps",
    "find_gaps",
    "find_influence_path",
]
