"""Ingestion job record and its status state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from ..utils.datetime_utils import format_timestamp


class JobStatus(str, Enum):
    """PENDING -> PROCESSING -> {COMPLETED, FAILED}."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


@dataclass(slots=True)
class IngestionJob:
    """A unit of ingestion work referencing one input file."""

    job_id: str
    source_location: str
    status: JobStatus
    created_at: datetime
    total_lines: int | None = None
    processed_lines: int = 0
    error_lines: int = 0
    errors: List[str] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    claimed_by: str | None = None
    claimed_at: datetime | None = None
    metadata: Dict[str, Any] | None = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "IngestionJob":
        return cls(
            job_id=doc["_id"],
            source_location=doc["source_location"],
            status=JobStatus(doc["status"]),
            created_at=doc["created_at"],
            total_lines=doc.get("total_lines"),
            processed_lines=doc.get("processed_lines") or 0,
            error_lines=doc.get("error_lines") or 0,
            errors=list(doc.get("errors") or []),
            start_time=doc.get("start_time"),
            end_time=doc.get("end_time"),
            claimed_by=doc.get("claimed_by"),
            claimed_at=doc.get("claimed_at"),
            metadata=doc.get("metadata"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Status-polling view of the job."""
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "source_location": self.source_location,
            "total_lines": self.total_lines,
            "processed_lines": self.processed_lines,
            "error_lines": self.error_lines,
            "errors": list(self.errors),
            "start_time": format_timestamp(self.start_time),
            "end_time": format_timestamp(self.end_time),
            "created_at": format_timestamp(self.created_at),
        }


__all__ = ["JobStatus", "TERMINAL_STATUSES", "IngestionJob"]
