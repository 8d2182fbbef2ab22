"""Ingestion worker: poll the job store, claim one job at a time, process it."""

from __future__ import annotations

import logging
import os
import signal
import socket
import threading

from ..logging_config import logging as _  # noqa: F401  # ensure config applied early
from ..clients.mongodb_client import close_mongo_client, ping
from ..config import WORKER_POLLING_INTERVAL
from ..errors import StoreError
from ..models.job import JobStatus
from ..services.event_store import EventStore, get_event_store
from ..services.ingestion import process_ingestion_job
from ..services.job_store import JobStore, get_job_store

logger = logging.getLogger(__name__)


def default_worker_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class IngestionWorker:
    """Polling loop with a shutdown flag checked at every suspension point.

    Workers share no memory; running several against the same job store is
    safe because each claim is atomic.
    """

    def __init__(
        self,
        job_store: JobStore,
        event_store: EventStore,
        poll_interval: float = WORKER_POLLING_INTERVAL,
        worker_id: str | None = None,
    ) -> None:
        self._job_store = job_store
        self._event_store = event_store
        self.poll_interval = poll_interval
        self.worker_id = worker_id or default_worker_id()
        self._shutdown = threading.Event()

    @property
    def stopping(self) -> bool:
        return self._shutdown.is_set()

    def stop(self) -> None:
        """Ask the loop to exit after the current job."""
        self._shutdown.set()

    def run_once(self) -> bool:
        """Claim and process at most one job; return ``True`` if one was processed."""
        try:
            job = self._job_store.claim_next(self.worker_id)
            if job is None:
                return False

            logger.info("Found job %s for file: %s", job.job_id, job.source_location)
            try:
                self._job_store.set_status(job.job_id, JobStatus.PROCESSING)
            except StoreError as exc:
                # claimed_by is already set, so no worker will pick this job up again
                logger.error(
                    "Job %s claimed by %s but could not be marked PROCESSING; "
                    "it stays PENDING until claimed_by is reset: %s",
                    job.job_id,
                    self.worker_id,
                    exc,
                )
                return False

            try:
                process_ingestion_job(job, self._job_store, self._event_store)
            except Exception as exc:
                logger.error("Job %s failed: %s", job.job_id, exc)
                self._job_store.set_status(job.job_id, JobStatus.FAILED, [str(exc)])
            else:
                self._job_store.set_status(job.job_id, JobStatus.COMPLETED)
                logger.info("Job %s completed", job.job_id)
            return True
        except StoreError as exc:
            logger.error("Error in job processing cycle: %s", exc)
            return False

    def run(self) -> None:
        """Loop until :meth:`stop` is called."""
        logger.info("Worker %s started (poll interval %.1fs)", self.worker_id, self.poll_interval)
        while not self._shutdown.is_set():
            try:
                processed = self.run_once()
            except Exception:
                logger.exception("Unexpected error in worker loop")
                self._shutdown.wait(self.poll_interval * 2)
                continue
            if not processed:
                self._shutdown.wait(self.poll_interval)
        logger.info("Worker %s stopped", self.worker_id)


def _install_signal_handlers(worker: IngestionWorker) -> None:
    def _handle(signum, _frame) -> None:
        logger.info("%s received. Finishing current job before shutdown…", signal.Signals(signum).name)
        worker.stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def run(poll_interval: float | None = None) -> None:
    """Start a worker against the configured MongoDB and block until signalled."""
    ping()
    job_store, event_store = get_job_store(), get_event_store()
    job_store.ensure_indexes()
    event_store.ensure_indexes()

    worker = IngestionWorker(
        job_store,
        event_store,
        poll_interval=WORKER_POLLING_INTERVAL if poll_interval is None else poll_interval,
    )
    _install_signal_handlers(worker)
    try:
        worker.run()
    finally:
        close_mongo_client()


__all__ = ["IngestionWorker", "default_worker_id", "run"]
