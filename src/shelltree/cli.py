"""Command-line entry point for shelltree runs.

* Accept one or more root paths plus the report-only and prune flags.
* Configure logging verbosity for the run.
* Walk every root in turn and print the combined totals as a summary line
  or, with ``--json``, as a single JSON object.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .core.errors import TraversalError
from .core.totals import RunTotals
from .core.walker import process_roots

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s - %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shelltree",
        description="Apply per-directory retention policies to directory trees",
    )
    parser.add_argument(
        "paths",
        metavar="PATH",
        nargs="+",
        type=Path,
        help="Root path(s) to process.",
    )
    parser.add_argument(
        "--report",
        dest="report_only",
        action="store_true",
        help="Run in report-only mode; no files are archived or deleted.",
    )
    parser.add_argument(
        "--prune-archive",
        action="store_true",
        help="Remove archive folders that no longer hold any visible files.",
    )
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        help="Descend into symlinked directories (default: skip them).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the run summary as JSON instead of a text line.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug details such as the effective policy per directory.",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    return parser


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


def _emit_summary(totals: RunTotals) -> None:
    sys.stdout.write(f"Complete. {totals.summary_line()}\n")
    sys.stdout.write(
        f"Visited {totals.directories_visited} directories, "
        f"{totals.candidates} purge candidates, "
        f"{totals.archives_purged} archives purged, "
        f"{totals.folders_pruned} folders pruned, "
        f"{totals.errors} errors\n"
    )


def _emit_json(totals: RunTotals, *, report_only: bool) -> None:
    payload = totals.to_dict()
    payload["report_only"] = report_only
    print(json.dumps(payload, sort_keys=True))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(verbose=args.verbose, quiet=args.quiet)

    def _report_root(path: Path, exc: TraversalError) -> None:
        sys.stderr.write(f"error: {exc}\n")

    totals = process_roots(
        args.paths,
        args.report_only,
        args.prune_archive,
        follow_symlinks=args.follow_symlinks,
        on_root_error=_report_root,
    )

    if args.json:
        _emit_json(totals, report_only=args.report_only)
    else:
        _emit_summary(totals)
    return 1 if totals.failed_roots else 0


def console_main() -> None:
    """Entry point for the ``shelltree`` console script."""

    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    console_main()
