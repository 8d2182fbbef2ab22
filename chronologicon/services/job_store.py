"""Persistence layer for ingestion jobs (MongoDB ``ingestion_jobs``).

Every state change is a single-document update, so transitions are atomic
per job. Claiming uses ``find_one_and_update``: two workers racing for the
same PENDING job cannot both match it, and a worker that loses the race
matches the next candidate instead of waiting on a lock.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List

from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection

from ..clients.mongodb_client import get_database, store_errors
from ..config import JOBS_COLLECTION
from ..errors import NotFoundError
from ..models.job import TERMINAL_STATUSES, IngestionJob, JobStatus
from ..utils.datetime_utils import get_current_timestamp

logger = logging.getLogger(__name__)

_NOT_TERMINAL = {"$nin": [status.value for status in TERMINAL_STATUSES]}


class JobStore:
    """Durable job queue; the collection handle is injected."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def ensure_indexes(self) -> None:
        with store_errors("create job indexes"):
            self._collection.create_index([("status", ASCENDING), ("created_at", ASCENDING)])
        logger.info("Ensured indexes on %s", self._collection.name)

    def create(self, source_location: str, metadata: Dict[str, Any] | None = None) -> IngestionJob:
        """Insert a new PENDING job for *source_location*."""
        doc = {
            "_id": str(uuid.uuid4()),
            "source_location": source_location,
            "status": JobStatus.PENDING.value,
            "total_lines": None,
            "processed_lines": 0,
            "error_lines": 0,
            "errors": [],
            "start_time": None,
            "end_time": None,
            "claimed_by": None,
            "claimed_at": None,
            "metadata": metadata or None,
            "created_at": get_current_timestamp(),
        }
        with store_errors("create ingestion job"):
            self._collection.insert_one(doc)
        logger.info("Created ingestion job %s for %s", doc["_id"], source_location)
        return IngestionJob.from_document(doc)

    def claim_next(self, worker_id: str) -> IngestionJob | None:
        """Atomically claim the oldest unclaimed PENDING job, or return ``None``."""
        with store_errors("find available job"):
            doc = self._collection.find_one_and_update(
                {"status": JobStatus.PENDING.value, "claimed_by": None},
                {"$set": {"claimed_by": worker_id, "claimed_at": get_current_timestamp()}},
                sort=[("created_at", ASCENDING)],
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            return None
        logger.info("Worker %s claimed job %s", worker_id, doc["_id"])
        return IngestionJob.from_document(doc)

    def set_status(self, job_id: str, status: JobStatus, errors: List[str] | None = None) -> None:
        """Transition *job_id* to *status*, appending *errors* if given.

        Terminal jobs are never moved again; such a request is logged and
        ignored.
        """
        now = get_current_timestamp()
        update: Dict[str, Any] = {"$set": {"status": status.value}}
        if status is JobStatus.PROCESSING:
            update["$set"]["start_time"] = now
        elif status in TERMINAL_STATUSES:
            update["$set"]["end_time"] = now

        if errors:
            update["$push"] = {"errors": {"$each": list(errors)}}
            update["$inc"] = {"error_lines": len(errors)}

        with store_errors("update job status"):
            result = self._collection.update_one({"_id": job_id, "status": _NOT_TERMINAL}, update)
            if result.matched_count == 0:
                exists = self._collection.count_documents({"_id": job_id}, limit=1)
        if result.matched_count == 0:
            if not exists:
                raise NotFoundError(f"Job {job_id} not found")
            logger.warning("Job %s is already terminal; ignoring transition to %s", job_id, status.value)
            return
        logger.info("Job %s -> %s", job_id, status.value)

    def update_progress(
        self,
        job_id: str,
        processed_lines: int,
        errors: List[str],
        total_lines: int | None = None,
    ) -> None:
        """Overwrite the progress counters of *job_id*.

        Repeating a call with the same arguments leaves the record unchanged.
        """
        fields: Dict[str, Any] = {
            "processed_lines": processed_lines,
            "errors": list(errors),
            "error_lines": len(errors),
        }
        if total_lines is not None:
            fields["total_lines"] = total_lines
        with store_errors("update job progress"):
            self._collection.update_one({"_id": job_id}, {"$set": fields})
        logger.debug(
            "Job %s progress: processed=%d errors=%d total=%s",
            job_id,
            processed_lines,
            len(errors),
            total_lines,
        )

    def get(self, job_id: str) -> IngestionJob | None:
        with store_errors("retrieve job status"):
            doc = self._collection.find_one({"_id": job_id})
        return IngestionJob.from_document(doc) if doc else None


def get_job_store() -> JobStore:
    """Return a :class:`JobStore` over the configured collection."""
    return JobStore(get_database()[JOBS_COLLECTION])


__all__ = ["JobStore", "get_job_store"]
