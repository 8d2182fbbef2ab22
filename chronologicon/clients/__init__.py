"""Convenience re-exports for singleton SDK accessors."""

from .mongodb_client import (  # noqa: F401
    close_mongo_client,
    get_database,
    get_mongo_client,
    ping,
    store_errors,
)


__all__ = [
    "get_mongo_client",
    "get_database",
    "ping",
    "close_mongo_client",
    "store_errors",
]
