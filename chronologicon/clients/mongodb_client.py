"""Singleton accessor for the MongoDB client."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..config import MONGODB_DATABASE, MONGODB_URI
from ..errors import StoreError

logger = logging.getLogger(__name__)

_client: MongoClient | None = None


def get_mongo_client() -> MongoClient:
    """Return a singleton :class:`pymongo.MongoClient`.

    ``tz_aware`` is enabled so stored dates come back as UTC-aware datetimes.
    """
    global _client
    if _client is None:
        _client = MongoClient(MONGODB_URI, tz_aware=True)
    return _client


def get_database(name: str | None = None) -> Database:
    """Return the configured database handle."""
    return get_mongo_client()[name or MONGODB_DATABASE]


def ping() -> None:
    """Round-trip to the server; raises :class:`StoreError` on failure."""
    with store_errors("connect to MongoDB"):
        get_mongo_client().admin.command("ping")
    logger.info("MongoDB connection established")


def close_mongo_client() -> None:
    """Close the singleton client, if one was opened."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise any :class:`PyMongoError` raised inside the block as :class:`StoreError`."""
    try:
        yield
    except PyMongoError as exc:
        logger.error("Failed to %s: %s", action, exc)
        raise StoreError(f"Failed to {action}") from exc


__all__ = ["get_mongo_client", "get_database", "ping", "close_mongo_client", "store_errors"]
