"""Side-effect free selection rules for files, folders and archives."""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .policy import POLICY_FILE_NAMES, Policy

ARCHIVE_SUFFIX = ".zip"
SECONDS_PER_DAY = 86400

_FILE_ATTRIBUTE_HIDDEN = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2)


def _filesystem_is_case_sensitive() -> bool:
    return os.path.normcase("A") == "A"


class WildcardPattern:
    """Compiled ``*``/``?`` matcher over one or more alternatives.

    Example
    -------
    >>> matcher = WildcardPattern.parse("*.log;data-??.csv", case_sensitive=True)
    >>> matcher.matches("app.log"), matcher.matches("data-01.csv"), matcher.matches("data-1.csv")
    (True, True, False)
    """

    def __init__(self, patterns: Sequence[str], *, case_sensitive: Optional[bool] = None) -> None:
        if case_sensitive is None:
            case_sensitive = _filesystem_is_case_sensitive()
        self.patterns: Tuple[str, ...] = tuple(patterns)
        self.case_sensitive = case_sensitive
        flags = 0 if case_sensitive else re.IGNORECASE
        alternatives = "|".join(_translate(pattern) for pattern in self.patterns)
        self._regex = re.compile(rf"(?:{alternatives})\Z", flags | re.DOTALL) if self.patterns else None

    @classmethod
    def parse(cls, text: str, *, case_sensitive: Optional[bool] = None) -> "WildcardPattern":
        parts = [part.strip() for part in text.split(";") if part.strip()]
        return cls(parts, case_sensitive=case_sensitive)

    @classmethod
    def for_policy(cls, policy: Policy, *, case_sensitive: Optional[bool] = None) -> "WildcardPattern":
        return cls(policy.patterns, case_sensitive=case_sensitive)

    def matches(self, name: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.match(name) is not None

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"WildcardPattern(patterns={self.patterns!r}, case_sensitive={self.case_sensitive})"


def _translate(pattern: str) -> str:
    pieces: List[str] = []
    for char in pattern:
        if char == "*":
            if not pieces or pieces[-1] != ".*":
                pieces.append(".*")
        elif char == "?":
            pieces.append(".")
        else:
            pieces.append(re.escape(char))
    return "".join(pieces)


@dataclass(frozen=True)
class PurgeCandidate:
    """A file judged eligible for removal during one directory pass."""

    path: Path
    age_days: int
    size: int


def is_hidden(entry: Path) -> bool:
    """Dot-files are hidden everywhere; Windows also honours the hidden attribute."""

    if entry.name.startswith("."):
        return True
    try:
        attributes = getattr(entry.lstat(), "st_file_attributes", 0)
    except OSError:
        return False
    return bool(attributes & _FILE_ATTRIBUTE_HIDDEN)


def is_eligible_file(
    entry: Path,
    policy: Policy,
    *,
    matcher: Optional[WildcardPattern] = None,
) -> bool:
    """Return ``True`` for visible regular files matching the policy patterns.

    Policy files themselves never qualify, whatever the pattern says.
    """

    entry = Path(entry)
    if not entry.is_file():
        return False
    if is_hidden(entry):
        return False
    if entry.name in POLICY_FILE_NAMES:
        return False
    active = matcher or WildcardPattern.for_policy(policy)
    return active.matches(entry.name)


def is_eligible_subdirectory(
    entry: Path,
    policy: Optional[Policy],
    *,
    follow_symlinks: bool = False,
) -> bool:
    """Return ``True`` for visible directories other than the archive folder."""

    entry = Path(entry)
    if not follow_symlinks and entry.is_symlink():
        return False
    if not entry.is_dir():
        return False
    if is_hidden(entry):
        return False
    if policy is not None and policy.archive_folder:
        if entry.name.lower() == policy.archive_folder.lower():
            return False
    return True


def is_archive_entry(entry: Path) -> bool:
    entry = Path(entry)
    return entry.is_file() and not is_hidden(entry) and entry.name.lower().endswith(ARCHIVE_SUFFIX)


def _days_since(mtime: float, clock: datetime) -> int:
    return int((clock.timestamp() - mtime) / SECONDS_PER_DAY)


def age_in_days(entry: Path, now: Optional[datetime] = None) -> int:
    """Whole days since ``entry`` was modified, truncated toward zero."""

    clock = now or datetime.now(tz=timezone.utc)
    return _days_since(Path(entry).stat().st_mtime, clock)


def collect_purge_set(
    entries: Iterable[Path],
    policy: Policy,
    *,
    now: Optional[datetime] = None,
    matcher: Optional[WildcardPattern] = None,
) -> Tuple[PurgeCandidate, ...]:
    """Return eligible files from ``entries`` older than ``policy.file_age_days``.

    Nothing qualifies when file purging is disabled for the policy.
    """

    if not policy.file_purge_enabled:
        return ()
    clock = now or datetime.now(tz=timezone.utc)
    active = matcher or WildcardPattern.for_policy(policy)
    candidates: List[PurgeCandidate] = []
    for entry in sorted(entries):
        if not is_eligible_file(entry, policy, matcher=active):
            continue
        stats = entry.stat()
        age = _days_since(stats.st_mtime, clock)
        if age > policy.file_age_days:
            candidates.append(PurgeCandidate(path=entry, age_days=age, size=stats.st_size))
    return tuple(candidates)


__all__ = [
    "ARCHIVE_SUFFIX",
    "PurgeCandidate",
    "WildcardPattern",
    "age_in_days",
    "collect_purge_set",
    "is_archive_entry",
    "is_eligible_file",
    "is_eligible_subdirectory",
    "is_hidden",
]
