"""Error taxonomy shared by the ingestion pipeline and the analytics engine."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Stable error codes a presentation layer can map to responses."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    LINE_ERROR = "LINE_ERROR"
    FATAL_INGESTION_ERROR = "FATAL_INGESTION_ERROR"
    STORE_ERROR = "STORE_ERROR"


class ChronologiconError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(ChronologiconError):
    """Malformed or missing input at the query boundary."""

    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(ChronologiconError):
    """A referenced job or event, or a path between events, does not exist."""

    code = ErrorCode.NOT_FOUND


class LineError(ChronologiconError):
    """One input line failed to decode or validate."""

    code = ErrorCode.LINE_ERROR

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class FatalIngestionError(ChronologiconError):
    """The job cannot continue; it is marked FAILED and never retried."""

    code = ErrorCode.FATAL_INGESTION_ERROR


class StoreError(ChronologiconError):
    """Underlying MongoDB failure."""

    code = ErrorCode.STORE_ERROR


class RejectedEventError(StoreError):
    """The store refused one event; the connection and other writes are unaffected."""


class DuplicateEventError(RejectedEventError):
    """An event with the same identifier is already stored."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} already exists")
        self.event_id = event_id


class UnencodableEventError(RejectedEventError):
    """The event cannot be encoded as a BSON document (oversized ints, bad keys)."""

    def __init__(self, event_id: str, reason: str) -> None:
        super().__init__(f"Event {event_id} cannot be stored: {reason}")
        self.event_id = event_id


__all__ = [
    "ErrorCode",
    "ChronologiconError",
    "ValidationError",
    "NotFoundError",
    "LineError",
    "FatalIngestionError",
    "StoreError",
    "RejectedEventError",
    "DuplicateEventError",
    "UnencodableEventError",
]
