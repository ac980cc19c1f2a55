"""Per-directory retention actions.

:class:`RetentionEngine` applies one :class:`~shelltree.core.policy.Policy`
to one directory, in this order:

1. Build the purge set (eligible files older than ``fileAgeDays``).
2. Stop there in report-only mode.
3. Copy the purge set into a dated zip under the archive folder, if the
   policy archives.
4. Delete the originals that were archived (or all of them when the policy
   does not archive).
5. Delete archive containers older than ``archiveAgeDays``.
6. Remove the archive folder when pruning is requested and it holds no
   visible files.

File purging, archive purging and pruning are gated independently. Failures
are logged and counted on the returned :class:`DirectoryResult`; only a
directory that cannot be listed raises (:class:`TraversalError`).
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .archiver import container_name, ensure_archive_folder, open_container
from .errors import (
    ArchiveCreateError,
    DeleteError,
    ShellTreeError,
    TraversalError,
    wrap_os_error,
)
from .policy import Policy
from .selector import (
    PurgeCandidate,
    WildcardPattern,
    age_in_days,
    collect_purge_set,
    is_archive_entry,
    is_hidden,
)
from .totals import DirectoryResult, byte_count_to_display_size

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Path, Exception], None]


def list_entries(directory: Path) -> List[Path]:
    """Return the immediate entries of ``directory`` sorted by name."""

    directory = Path(directory)
    try:
        return sorted(directory.iterdir())
    except OSError as exc:
        raise wrap_os_error(TraversalError, directory, exc) from exc


def delete_file(path: Path) -> None:
    """Delete ``path``, raising :class:`DeleteError` on failure."""

    try:
        Path(path).unlink()
    except OSError as exc:
        raise wrap_os_error(DeleteError, path, exc) from exc


class RetentionEngine:
    """Executes retention policies against single directories."""

    def __init__(
        self,
        *,
        report_only: bool = False,
        prune_archive: bool = False,
        now: Optional[datetime] = None,
        case_sensitive: Optional[bool] = None,
        on_error: Optional[ErrorHandler] = None,
    ) -> None:
        """Create an engine.

        Args:
            report_only: Compute and log the purge set without touching the
                filesystem.
            prune_archive: Remove archive folders left without visible files.
            now: Fixed clock used for every age calculation. ``None`` reads
                the current time on each call.
            case_sensitive: Force pattern case handling; ``None`` follows the
                host filesystem convention.
            on_error: Optional callback invoked with ``(path, exception)`` for
                every logged failure.
        """
        self.report_only = report_only
        self.prune_archive = prune_archive
        self._now = now
        self._case_sensitive = case_sensitive
        self._on_error = on_error

    def _clock(self) -> datetime:
        return self._now or datetime.now(tz=timezone.utc)

    def _report(self, path: Path, error: ShellTreeError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(path, error)
        except Exception:  # pragma: no cover - defensive
            logger.exception("on_error handler raised during retention pass")

    def perform_actions(self, directory: Path, policy: Policy) -> DirectoryResult:
        directory = Path(directory)
        logger.info("Processing: %s", directory)
        logger.debug("Policy: %s", policy)
        clock = self._clock()

        candidates: Tuple[PurgeCandidate, ...] = ()
        if policy.file_purge_enabled:
            matcher = WildcardPattern.for_policy(policy, case_sensitive=self._case_sensitive)
            candidates = collect_purge_set(
                list_entries(directory), policy, now=clock, matcher=matcher
            )
            for candidate in candidates:
                logger.info(
                    "Delete file %s (%s days old)", candidate.path.name, candidate.age_days
                )

        if self.report_only:
            return DirectoryResult(path=directory, candidates=candidates, report_only=True)

        errors = 0
        archived: Set[Path] = set()
        archive_path: Optional[Path] = None
        if candidates and policy.archive_enabled:
            try:
                archived, archive_path = self._archive(directory, policy, candidates, clock)
            except ArchiveCreateError as exc:
                logger.error("Could not create archive for %s: %s", directory, exc.reason)
                self._report(exc.path, exc)
                return DirectoryResult(path=directory, candidates=candidates, errors=1)
            errors += len(candidates) - len(archived)

        deleted = 0
        reclaimed = 0
        for candidate in candidates:
            if policy.archive_enabled and candidate.path not in archived:
                continue
            try:
                delete_file(candidate.path)
            except DeleteError as exc:
                logger.error("Error deleting %s: %s", candidate.path, exc.reason)
                self._report(candidate.path, exc)
                errors += 1
                continue
            deleted += 1
            reclaimed += candidate.size

        logger.info(
            "Archived %s files, deleted %s files, %s",
            len(archived),
            deleted,
            byte_count_to_display_size(reclaimed),
        )

        archives_purged = 0
        pruned = False
        archive_folder = policy.archive_path(directory)
        if archive_folder is not None and archive_folder.is_dir():
            if policy.archive_purge_enabled:
                purged, purged_bytes, purge_errors = self._purge_archives(
                    archive_folder, policy.archive_age_days, clock
                )
                archives_purged += purged
                reclaimed += purged_bytes
                errors += purge_errors
            if self.prune_archive:
                pruned, prune_failed = self._prune(archive_folder)
                errors += int(prune_failed)

        return DirectoryResult(
            path=directory,
            candidates=candidates,
            archived=len(archived),
            deleted=deleted,
            bytes_reclaimed=reclaimed,
            archives_purged=archives_purged,
            pruned=pruned,
            errors=errors,
            archive_path=archive_path,
        )

    def _archive(
        self,
        directory: Path,
        policy: Policy,
        candidates: Sequence[PurgeCandidate],
        clock: datetime,
    ) -> Tuple[Set[Path], Optional[Path]]:
        archive_folder = ensure_archive_folder(directory / str(policy.archive_folder))
        archived: Set[Path] = set()
        name = container_name(clock)
        try:
            with open_container(archive_folder, name, on_error=self._on_error) as container:
                for candidate in candidates:
                    if container.add_entry(candidate.path):
                        archived.add(candidate.path)
                        logger.info("Archived file: %s", candidate.path.name)
                    else:
                        logger.error("Archive failed for %s", candidate.path.name)
        except OSError as exc:
            raise wrap_os_error(ArchiveCreateError, archive_folder / name, exc) from exc
        container_path = archive_folder / name
        return archived, (container_path if container_path.exists() else None)

    def _purge_archives(
        self, archive_folder: Path, age_days: int, clock: datetime
    ) -> Tuple[int, int, int]:
        purged = 0
        reclaimed = 0
        errors = 0
        try:
            entries = list_entries(archive_folder)
        except TraversalError as exc:
            logger.error("Could not list archive folder %s: %s", archive_folder, exc.reason)
            self._report(archive_folder, exc)
            return 0, 0, 1
        for entry in entries:
            try:
                if not is_archive_entry(entry):
                    continue
                age = age_in_days(entry, clock)
                if age <= age_days:
                    continue
                size = entry.stat().st_size
            except OSError as exc:
                error = wrap_os_error(DeleteError, entry, exc)
                logger.error("Could not inspect archive %s: %s", entry, error.reason)
                self._report(entry, error)
                errors += 1
                continue
            logger.info("Delete archive file %s (%s days old)", entry.name, age)
            try:
                delete_file(entry)
            except DeleteError as exc:
                logger.error("Error deleting archive %s: %s", entry, exc.reason)
                self._report(entry, exc)
                errors += 1
                continue
            purged += 1
            reclaimed += size
        return purged, reclaimed, errors

    def _prune(self, archive_folder: Path) -> Tuple[bool, bool]:
        """Remove ``archive_folder`` when only hidden entries remain in it.

        Any visible entry, file or folder, keeps the folder in place.

        Returns ``(pruned, failed)``.
        """

        try:
            entries = list_entries(archive_folder)
        except TraversalError as exc:
            logger.error("Could not prune %s: %s", archive_folder, exc.reason)
            self._report(archive_folder, exc)
            return False, True
        if any(not is_hidden(entry) for entry in entries):
            return False, False
        logger.info("Removing empty archive folder %s", archive_folder)
        try:
            for entry in entries:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            archive_folder.rmdir()
        except OSError as exc:
            error = wrap_os_error(TraversalError, archive_folder, exc)
            logger.error("Could not prune %s: %s", archive_folder, error.reason)
            self._report(archive_folder, error)
            return False, True
        return True, False


__all__ = ["RetentionEngine", "delete_file", "list_entries"]
