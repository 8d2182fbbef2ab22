"""Centralised configuration for chronologicon.

Environment variables are loaded once and all related constants are
grouped by concern for easier maintenance.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load environment variables from `.env` (if present)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# MongoDB
# ---------------------------------------------------------------------------
MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "chronologicon")
EVENTS_COLLECTION: str = os.getenv("EVENTS_COLLECTION", "historical_events")
JOBS_COLLECTION: str = os.getenv("JOBS_COLLECTION", "ingestion_jobs")

# ---------------------------------------------------------------------------
# Ingestion worker
# ---------------------------------------------------------------------------
# seconds between claim attempts when the queue is empty
WORKER_POLLING_INTERVAL: float = float(os.getenv("WORKER_POLLING_INTERVAL", "5"))
UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")

# ---------------------------------------------------------------------------
# Analytics and search
# ---------------------------------------------------------------------------
INFLUENCE_MAX_HOPS: int = int(os.getenv("INFLUENCE_MAX_HOPS", "10"))
SEARCH_DEFAULT_LIMIT: int = 20
SEARCH_MAX_LIMIT: int = 100

# ---------------------------------------------------------------------------
# Miscellaneous
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# Re-exported names
# ---------------------------------------------------------------------------
__all__ = [
    # mongodb
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "EVENTS_COLLECTION",
    "JOBS_COLLECTION",
    # worker
    "WORKER_POLLING_INTERVAL",
    "UPLOAD_DIR",
    # analytics
    "INFLUENCE_MAX_HOPS",
    "SEARCH_DEFAULT_LIMIT",
    "SEARCH_MAX_LIMIT",
    # misc
    "LOG_LEVEL",
]
