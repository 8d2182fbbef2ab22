"""Service layer modules grouping business logic by concern.

This module provides convenience re-exports so that callers can simply do for
example `from chronologicon.services import build_tree` without having to
know which underlying module provides the symbol.
"""

from .analytics import find_gaps, find_influence_path, find_overlaps  # noqa: F401
from .event_store import EventStore, get_event_store  # noqa: F401
from .hierarchy import build_tree  # noqa: F401
from .ingestion import get_ingestion_job, initiate_file_ingestion, process_ingestion_job  # noqa: F401
from .job_store import JobStore, get_job_store  # noqa: F401
from .line_parser import parse_line  # noqa: F401
from .search import search_events  # noqa: F401


__all__ = [
    "EventStore",
    "get_event_store",
    "JobStore",
    "get_job_store",
    "parse_line",
    "initiate_file_ingestion",
    "get_ingestion_job",
    "process_ingestion_job",
    "build_tree",
    "find_overlaps",
    "find_gaps",
    "find_influence_path",
    "search_events",
]
