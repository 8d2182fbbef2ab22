"""Persistence layer for historical events (MongoDB ``historical_events``)."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from bson.errors import InvalidDocument
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..clients.mongodb_client import get_database, store_errors
from ..config import EVENTS_COLLECTION
from ..errors import DuplicateEventError, StoreError, UnencodableEventError
from ..models.event import Event

logger = logging.getLogger(__name__)

_BY_START = [("start_date", ASCENDING), ("_id", ASCENDING)]


class EventStore:
    """Append/read access to events; the collection handle is injected."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def ensure_indexes(self) -> None:
        """Create the indexes used by window, hierarchy and search queries."""
        with store_errors("create event indexes"):
            self._collection.create_index([("start_date", ASCENDING)])
            self._collection.create_index([("end_date", ASCENDING)])
            self._collection.create_index([("parent_event_id", ASCENDING)])
        logger.info("Ensured indexes on %s", self._collection.name)

    def insert(self, event: Event) -> None:
        """Store *event*.

        Raises :class:`DuplicateEventError` if its id is taken and
        :class:`UnencodableEventError` if it cannot be encoded as BSON.
        """
        try:
            self._collection.insert_one(event.to_document())
        except DuplicateKeyError as exc:
            raise DuplicateEventError(event.event_id) from exc
        except (InvalidDocument, OverflowError) as exc:
            # raised by BSON encoding before anything reaches the server
            raise UnencodableEventError(event.event_id, str(exc)) from exc
        except PyMongoError as exc:
            logger.error("Failed to insert event %s: %s", event.event_id, exc)
            raise StoreError("Failed to insert event") from exc
        logger.debug("Stored event %s (%s)", event.event_id, event.event_name)

    def get(self, event_id: str) -> Event | None:
        with store_errors("retrieve event details"):
            doc = self._collection.find_one({"_id": event_id})
        return Event.from_document(doc) if doc else None

    def get_many(self, event_ids: Iterable[str]) -> Dict[str, Event]:
        """Return the stored events among *event_ids*, keyed by id."""
        ids = list(dict.fromkeys(event_ids))
        if not ids:
            return {}
        with store_errors("retrieve events"):
            docs = list(self._collection.find({"_id": {"$in": ids}}))
        return {doc["_id"]: Event.from_document(doc) for doc in docs}

    def find_children(self, parent_ids: Iterable[str]) -> List[Event]:
        """Events whose parent is one of *parent_ids*, ordered by start time."""
        ids = list(dict.fromkeys(parent_ids))
        if not ids:
            return []
        with store_errors("retrieve child events"):
            docs = list(self._collection.find({"parent_event_id": {"$in": ids}}).sort(_BY_START))
        return [Event.from_document(doc) for doc in docs]

    def find_in_window(self, window_start: datetime, window_end: datetime) -> List[Event]:
        """Events fully contained in ``[window_start, window_end]``, ordered by start time."""
        query = {"start_date": {"$gte": window_start}, "end_date": {"$lte": window_end}}
        with store_errors("retrieve events in window"):
            docs = list(self._collection.find(query).sort(_BY_START))
        return [Event.from_document(doc) for doc in docs]

    def search(
        self,
        *,
        name: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        sort_by: str = "start_date",
        descending: bool = False,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Event], int]:
        """Return one page of matching events and the total match count."""
        query: Dict[str, Any] = {}
        if name:
            query["event_name"] = {"$regex": re.escape(name), "$options": "i"}
        if start_date is not None:
            query["start_date"] = {"$gte": start_date}
        if end_date is not None:
            query["end_date"] = {"$lte": end_date}

        direction = DESCENDING if descending else ASCENDING
        with store_errors("search events"):
            total = self._collection.count_documents(query)
            cursor = (
                self._collection.find(query)
                .sort([(sort_by, direction), ("_id", ASCENDING)])
                .skip(skip)
                .limit(limit)
            )
            docs = list(cursor)
        return [Event.from_document(doc) for doc in docs], total


def get_event_store() -> EventStore:
    """Return an :class:`EventStore` over the configured collection."""
    return EventStore(get_database()[EVENTS_COLLECTION])


__all__ = ["EventStore", "get_event_store"]
