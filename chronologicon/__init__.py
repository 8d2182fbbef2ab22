"""Top-level package for the chronologicon project.

Historical events are ingested from uploaded files by background workers and
queried for hierarchy, overlaps, gaps and influence paths. Run a worker with
`python -m chronologicon worker`.
"""

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version(__name__)
except _metadata.PackageNotFoundError:  # pragma: no cover  (running from source)
    __version__ = "0.0.0"


__all__ = ["__version__"]
