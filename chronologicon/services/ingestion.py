"""File ingestion: job creation (trigger side) and job processing (worker side)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..errors import FatalIngestionError, LineError, NotFoundError, RejectedEventError, StoreError, ValidationError
from ..models.job import IngestionJob
from .event_store import EventStore
from .job_store import JobStore
from .line_parser import detect_delimiter, is_header_line, parse_line

logger = logging.getLogger(__name__)

NumberedLine = Tuple[int, str]


def initiate_file_ingestion(
    job_store: JobStore,
    file_path: str,
    metadata: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Create a PENDING job for *file_path* once it is known to be readable."""
    if not file_path or not isinstance(file_path, str):
        raise ValidationError("Valid file path is required")
    path = Path(file_path)
    if not path.is_file() or not os.access(path, os.R_OK):
        raise ValidationError(f"File not accessible: {file_path}")

    metadata = dict(metadata or {})
    job = job_store.create(str(path), metadata)
    return {
        "job_id": job.job_id,
        "message": "Ingestion job created successfully",
        "original_file_name": metadata.get("original_name") or path.name,
        "file_size": metadata.get("file_size", path.stat().st_size),
    }


def get_ingestion_job(job_store: JobStore, job_id: str) -> IngestionJob:
    """Return the job for status polling; raises :class:`NotFoundError`."""
    job = job_store.get(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return job


def read_source_lines(source_location: str) -> List[NumberedLine]:
    """Return ``(physical line number, text)`` for every non-blank line."""
    try:
        with open(source_location, encoding="utf-8-sig") as handle:
            content = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FatalIngestionError(f"Could not read source file {source_location}: {exc}") from exc
    return [
        (number, line)
        for number, line in enumerate(content.split("\n"), start=1)
        if line.strip()
    ]


def process_ingestion_job(job: IngestionJob, job_store: JobStore, event_store: EventStore) -> None:
    """Ingest every line of the job's file, recording per-line errors.

    Line failures never abort the job. Anything that prevents the file from
    being processed at all surfaces as :class:`FatalIngestionError`. The source
    file is removed on every path.
    """
    job_id, source = job.job_id, job.source_location
    logger.info("Processing ingestion job %s for file: %s", job_id, source)

    try:
        lines = read_source_lines(source)
        job_store.update_progress(job_id, 0, [], total_lines=max(len(lines) - 1, 0))

        delimiter = detect_delimiter(text for _, text in lines)
        errors: List[str] = []
        processed = 0

        for index, (line_number, text) in enumerate(lines):
            line = text.strip()
            if index == 0 and is_header_line(line):
                logger.info("Skipping header line: %s", line)
                continue

            try:
                event = parse_line(line, delimiter)
                event_store.insert(event)
            except (LineError, RejectedEventError) as exc:
                message = f"Line {line_number}: {exc.message}"
                errors.append(message)
                logger.warning("Job %s: %s", job_id, message)
                continue

            processed += 1
            job_store.update_progress(job_id, processed, errors)

        job_store.update_progress(job_id, processed, errors)
        logger.info("Job %s finished. Processed: %d, Errors: %d", job_id, processed, len(errors))
    except StoreError as exc:
        raise FatalIngestionError(exc.message) from exc
    finally:
        _remove_source(source)


def _remove_source(source_location: str) -> None:
    try:
        os.remove(source_location)
        logger.info("Cleaned up processed file: %s", source_location)
    except OSError as exc:
        logger.warning("Could not clean up file %s: %s", source_location, exc)


__all__ = [
    "initiate_file_ingestion",
    "get_ingestion_job",
    "read_source_lines",
    "process_ingestion_job",
]
