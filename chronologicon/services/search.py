"""Filtered, sorted and paginated event search."""

from __future__ import annotations

import logging
from typing import Any

from ..config import SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT
from ..errors import ValidationError
from ..models.insights import SearchPage
from ..utils.datetime_utils import parse_timestamp
from .event_store import EventStore

# ---------------------------------------------------------------------------
# Local search settings
# ---------------------------------------------------------------------------
SORT_FIELDS = ("start_date", "end_date", "event_name", "duration_minutes")
SORT_ORDERS = ("asc", "desc")

logger = logging.getLogger(__name__)


def search_events(
    event_store: EventStore,
    name: str | None = None,
    start_date: Any = None,
    end_date: Any = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: Any = 1,
    limit: Any = SEARCH_DEFAULT_LIMIT,
) -> SearchPage:
    """Return one page of events matching the given filters.

    Unknown sort fields or orders fall back to ``start_date``/``asc``; the page
    is at least 1 and the limit is clamped to ``1..SEARCH_MAX_LIMIT``.
    """
    page = max(1, _as_int(page, 1))
    limit = min(SEARCH_MAX_LIMIT, max(1, _as_int(limit, SEARCH_DEFAULT_LIMIT)))
    sort_by = sort_by if sort_by in SORT_FIELDS else "start_date"
    sort_order = sort_order if sort_order in SORT_ORDERS else "asc"

    try:
        start = parse_timestamp(start_date) if start_date not in (None, "") else None
        end = parse_timestamp(end_date) if end_date not in (None, "") else None
    except ValueError:
        raise ValidationError("Invalid date format. Use ISO 8601 format.") from None

    events, total = event_store.search(
        name=name or None,
        start_date=start,
        end_date=end,
        sort_by=sort_by,
        descending=sort_order == "desc",
        skip=(page - 1) * limit,
        limit=limit,
    )
    logger.info("Search matched %d events (page %d, limit %d)", total, page, limit)
    return SearchPage(events=events, current_page=page, items_per_page=limit, total_items=total)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


__all__ = ["search_events", "SORT_FIELDS"]
