"""Run-level counters folded together from per-directory results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .selector import PurgeCandidate

_ONE_KB = 1024
_ONE_MB = _ONE_KB * 1024
_ONE_GB = _ONE_MB * 1024
_ONE_TB = _ONE_GB * 1024


def byte_count_to_display_size(size: int) -> str:
    """Render ``size`` with the largest whole unit, rounding down.

    >>> byte_count_to_display_size(1536), byte_count_to_display_size(12)
    ('1 KB', '12 bytes')
    """

    for unit, label in ((_ONE_TB, "TB"), (_ONE_GB, "GB"), (_ONE_MB, "MB"), (_ONE_KB, "KB")):
        if size >= unit:
            return f"{size // unit} {label}"
    return f"{size} bytes"


@dataclass(frozen=True)
class DirectoryResult:
    """Outcome of one retention pass over a single directory."""

    path: Path
    candidates: Tuple[PurgeCandidate, ...] = ()
    archived: int = 0
    deleted: int = 0
    bytes_reclaimed: int = 0
    archives_purged: int = 0
    pruned: bool = False
    errors: int = 0
    report_only: bool = False
    archive_path: Optional[Path] = None

    @property
    def candidate_paths(self) -> Tuple[Path, ...]:
        return tuple(candidate.path for candidate in self.candidates)


@dataclass
class RunTotals:
    """Additive counters for a whole run, possibly spanning several roots."""

    archived: int = 0
    deleted: int = 0
    bytes_reclaimed: int = 0
    directories_visited: int = 0
    candidates: int = 0
    archives_purged: int = 0
    folders_pruned: int = 0
    errors: int = 0
    roots: list[str] = field(default_factory=list)
    failed_roots: list[str] = field(default_factory=list)

    def add_result(self, result: DirectoryResult) -> None:
        self.candidates += len(result.candidates)
        self.archived += result.archived
        self.deleted += result.deleted
        self.bytes_reclaimed += result.bytes_reclaimed
        self.archives_purged += result.archives_purged
        self.folders_pruned += int(result.pruned)
        self.errors += result.errors

    def merge(self, other: "RunTotals") -> None:
        self.archived += other.archived
        self.deleted += other.deleted
        self.bytes_reclaimed += other.bytes_reclaimed
        self.directories_visited += other.directories_visited
        self.candidates += other.candidates
        self.archives_purged += other.archives_purged
        self.folders_pruned += other.folders_pruned
        self.errors += other.errors
        self.roots.extend(root for root in other.roots if root not in self.roots)
        self.failed_roots.extend(other.failed_roots)

    def __add__(self, other: "RunTotals") -> "RunTotals":
        if not isinstance(other, RunTotals):
            return NotImplemented
        combined = RunTotals()
        combined.merge(self)
        combined.merge(other)
        return combined

    @property
    def display_size(self) -> str:
        return byte_count_to_display_size(self.bytes_reclaimed)

    def summary_line(self) -> str:
        return (
            f"Archived {self.archived} files, deleted {self.deleted} files, "
            f"{self.display_size}"
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["display_size"] = self.display_size
        return payload


__all__ = ["DirectoryResult", "RunTotals", "byte_count_to_display_size"]
