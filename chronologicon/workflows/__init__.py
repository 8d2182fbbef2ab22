"""Long-running workflows."""

from .worker import IngestionWorker, run  # noqa: F401


__all__ = ["IngestionWorker", "run"]
