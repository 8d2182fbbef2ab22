"""Command line entry point: ``python -m chronologicon <command>``."""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
import uuid
from pathlib import Path
from typing import Any, List

from .logging_config import logging as _  # noqa: F401  # ensure config applied early
from .config import UPLOAD_DIR
from .errors import ChronologiconError, NotFoundError, ValidationError
from .services import (
    build_tree,
    find_gaps,
    find_influence_path,
    find_overlaps,
    get_event_store,
    get_ingestion_job,
    get_job_store,
    initiate_file_ingestion,
    search_events,
)
from .workflows import worker

logger = logging.getLogger(__name__)

EXIT_VALIDATION = 2
EXIT_NOT_FOUND = 3


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _ingest(args: argparse.Namespace) -> None:
    source = Path(args.file)
    if not source.is_file():
        raise ValidationError(f"File not accessible: {args.file}")

    # the worker deletes the file it ingests, so hand it a private copy
    upload_dir = Path(UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    staged = upload_dir / f"temp-{uuid.uuid4().hex}-{source.name}"
    shutil.copyfile(source, staged)
    logger.info("File staged: %s -> %s", source, staged)

    try:
        result = initiate_file_ingestion(
            get_job_store(),
            str(staged),
            {
                "original_name": source.name,
                "description": args.description,
                "file_size": staged.stat().st_size,
            },
        )
    except Exception:
        staged.unlink(missing_ok=True)
        raise
    _print(result)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chronologicon", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    run_worker = commands.add_parser("worker", help="run an ingestion worker until interrupted")
    run_worker.add_argument("--poll-interval", type=float, default=None, help="seconds between polls")
    run_worker.set_defaults(handler=lambda args: worker.run(args.poll_interval))

    ingest = commands.add_parser("ingest", help="queue a file for ingestion")
    ingest.add_argument("file")
    ingest.add_argument("--description", default=None)
    ingest.set_defaults(handler=_ingest)

    status = commands.add_parser("status", help="show an ingestion job")
    status.add_argument("job_id")
    status.set_defaults(handler=lambda args: _print(get_ingestion_job(get_job_store(), args.job_id).to_dict()))

    timeline = commands.add_parser("timeline", help="hierarchy under a root event")
    timeline.add_argument("root_event_id")
    timeline.set_defaults(handler=lambda args: _print(build_tree(get_event_store(), args.root_event_id).to_dict()))

    overlaps = commands.add_parser("overlaps", help="overlapping events in a window")
    overlaps.add_argument("start_date")
    overlaps.add_argument("end_date")
    overlaps.set_defaults(
        handler=lambda args: _print(
            {
                "overlapping_groups": [
                    group.to_dict() for group in find_overlaps(get_event_store(), args.start_date, args.end_date)
                ]
            }
        )
    )

    gaps = commands.add_parser("gaps", help="temporal gaps in a window")
    gaps.add_argument("start_date")
    gaps.add_argument("end_date")
    gaps.set_defaults(handler=lambda args: _print(find_gaps(get_event_store(), args.start_date, args.end_date).to_dict()))

    influence = commands.add_parser("influence", help="shortest parent/child path between two events")
    influence.add_argument("source_event_id")
    influence.add_argument("target_event_id")
    influence.add_argument("--max-hops", type=int, default=None)
    influence.set_defaults(
        handler=lambda args: _print(
            find_influence_path(
                get_event_store(), args.source_event_id, args.target_event_id, args.max_hops
            ).to_dict()
        )
    )

    search = commands.add_parser("search", help="search events")
    search.add_argument("--name")
    search.add_argument("--start-date")
    search.add_argument("--end-date")
    search.add_argument("--sort-by")
    search.add_argument("--sort-order")
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--limit", type=int, default=None)
    search.set_defaults(
        handler=lambda args: _print(
            search_events(
                get_event_store(),
                name=args.name,
                start_date=args.start_date,
                end_date=args.end_date,
                sort_by=args.sort_by,
                sort_order=args.sort_order,
                page=args.page,
                limit=args.limit,
            ).to_dict()
        )
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        args.handler(args)
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION
    except NotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except ChronologiconError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
