"""Domain models used across the project."""

from .event import Event  # noqa: F401
from .insights import (  # noqa: F401
    GapReport,
    InfluencePath,
    OverlapGroup,
    SearchPage,
    TemporalGap,
    TimelineNode,
)
from .job import TERMINAL_STATUSES, IngestionJob, JobStatus  # noqa: F401


__all__ = [
    "Event",
    "IngestionJob",
    "JobStatus",
    "TERMINAL_STATUSES",
    "TimelineNode",
    "OverlapGroup",
    "TemporalGap",
    "GapReport",
    "InfluencePath",
    "SearchPage",
]
