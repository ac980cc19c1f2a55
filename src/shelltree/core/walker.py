"""Depth-first traversal applying cascading retention policies.

Each directory resolves its effective policy (local policy file first, then
whatever recursive policy the parent handed down), runs the retention engine
when a policy applies, and then descends into its eligible subdirectories.
Failures stay local to the directory where they happen.

Example
-------
>>> from pathlib import Path
>>> import tempfile
>>> with tempfile.TemporaryDirectory() as tmp:
...     totals = process_root(Path(tmp), report_only=True)
>>> totals.directories_visited
1
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from .errors import ShellTreeError, TraversalError, wrap_os_error
from .policy import Policy, find_policy_file, load_policy
from .retention import RetentionEngine, list_entries
from .selector import is_eligible_subdirectory
from .totals import DirectoryResult, RunTotals

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Path, Exception], None]
ResultHandler = Callable[[DirectoryResult], None]
RootErrorHandler = Callable[[Path, TraversalError], None]


class TreeWalker:
    """Walks directory trees and folds every directory result into run totals."""

    def __init__(
        self,
        engine: Optional[RetentionEngine] = None,
        *,
        follow_symlinks: bool = False,
        on_error: Optional[ErrorHandler] = None,
        on_result: Optional[ResultHandler] = None,
    ) -> None:
        self.engine = engine or RetentionEngine(on_error=on_error)
        self.follow_symlinks = follow_symlinks
        self._on_error = on_error
        self._on_result = on_result

    def _handle_error(self, path: Path, error: ShellTreeError, totals: RunTotals) -> None:
        totals.errors += 1
        if self._on_error is not None:
            try:
                self._on_error(path, error)
            except Exception:  # pragma: no cover - defensive
                logger.exception("on_error handler raised during traversal")

    def process(
        self,
        path: Path,
        inherited_policy: Optional[Policy],
        totals: RunTotals,
    ) -> RunTotals:
        """Process ``path`` and its subtree, adding counts to ``totals``."""

        directory = Path(path)
        totals.directories_visited += 1
        try:
            policy_file = find_policy_file(directory)
            policy = load_policy(policy_file) if policy_file is not None else inherited_policy
            if policy is not None:
                result = self.engine.perform_actions(directory, policy)
                totals.add_result(result)
                if self._on_result is not None:
                    self._on_result(result)
            children = [
                entry
                for entry in list_entries(directory)
                if is_eligible_subdirectory(entry, policy, follow_symlinks=self.follow_symlinks)
            ]
        except ShellTreeError as exc:
            logger.error("Error processing path %s: %s", directory, exc)
            self._handle_error(directory, exc, totals)
            return totals
        except OSError as exc:
            error = wrap_os_error(TraversalError, directory, exc)
            logger.error("Error processing path %s: %s", directory, error)
            self._handle_error(directory, error, totals)
            return totals
        except Exception as exc:
            logger.exception("Error processing path %s", directory)
            self._handle_error(directory, TraversalError(directory, str(exc)), totals)
            return totals

        handed_down = policy if policy is not None and policy.recursive else None
        for child in children:
            self.process(child, handed_down, totals)
        return totals


def _ensure_root(path: Path) -> Path:
    root = Path(path).expanduser()
    if not root.exists():
        raise TraversalError(root, "path does not exist")
    if not root.is_dir():
        raise TraversalError(root, "path is not a directory")
    list_entries(root)
    return root


def process_root(
    path: Path,
    report_only: bool = False,
    prune_archive: bool = False,
    *,
    now: Optional[datetime] = None,
    follow_symlinks: bool = False,
    case_sensitive: Optional[bool] = None,
    totals: Optional[RunTotals] = None,
    on_error: Optional[ErrorHandler] = None,
    on_result: Optional[ResultHandler] = None,
) -> RunTotals:
    """Walk one root with no inherited policy and return the run totals.

    Raises :class:`TraversalError` only when ``path`` itself cannot be listed;
    every other failure is logged and counted in ``RunTotals.errors``.
    """

    root = _ensure_root(path)
    run_totals = totals if totals is not None else RunTotals()
    logger.debug("Starting at path: %s", root)
    if report_only:
        logger.warning("Running in report-only mode; no changes will be made")
    engine = RetentionEngine(
        report_only=report_only,
        prune_archive=prune_archive,
        now=now,
        case_sensitive=case_sensitive,
        on_error=on_error,
    )
    walker = TreeWalker(
        engine,
        follow_symlinks=follow_symlinks,
        on_error=on_error,
        on_result=on_result,
    )
    if str(root) not in run_totals.roots:
        run_totals.roots.append(str(root))
    return walker.process(root, None, run_totals)


def process_roots(
    paths: Iterable[Path],
    report_only: bool = False,
    prune_archive: bool = False,
    *,
    on_root_error: Optional[RootErrorHandler] = None,
    **kwargs,
) -> RunTotals:
    """Process several roots one after another into a single :class:`RunTotals`.

    Each root is walked into its own totals, which are then merged. A root
    that cannot be listed is logged, counted as an error and recorded in
    ``RunTotals.failed_roots``; the remaining roots are still processed.
    """

    totals = RunTotals()
    for path in paths:
        try:
            root_totals = process_root(path, report_only, prune_archive, **kwargs)
        except TraversalError as exc:
            logger.error("Cannot process root %s: %s", exc.path, exc.reason)
            totals.errors += 1
            totals.failed_roots.append(str(exc.path))
            if on_root_error is not None:
                on_root_error(exc.path, exc)
            continue
        logger.info("Finished %s. %s", path, root_totals.summary_line())
        totals.merge(root_totals)
    return totals


__all__ = ["TreeWalker", "process_root", "process_roots"]
