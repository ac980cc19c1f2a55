"""Per-directory retention policies.

A policy is read from a properties file placed directly in the directory it
governs. Missing keys fall back to defaults that disable every action, so an
empty policy file only matters through ``recursive``.

Example
-------
>>> policy = Policy.from_mapping({"filePattern": "*.log", "fileAgeDays": "7"})
>>> policy.patterns
('*.log',)
>>> policy.file_purge_enabled, policy.archive_enabled
(True, False)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from ..formats.properties import PropertiesSyntaxError, load_properties
from .errors import PolicyLoadError, wrap_os_error

POLICY_FILE_NAMES: Tuple[str, ...] = ("shelltree.properties", ".shelltree")
"""Recognised policy file names; the first one found in a directory wins."""

DEFAULT_FILE_PATTERN = "*"
PATTERN_SEPARATOR = ";"
DISABLED = -1


def _parse_days(payload: Mapping[str, Any], key: str) -> int:
    raw = payload.get(key)
    if raw is None:
        return DISABLED
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {text!r}") from exc


def _parse_archive_folder(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text in {".", ".."} or "/" in text or "\\" in text:
        raise ValueError(f"archiveFolder must be a plain folder name, got {text!r}")
    return text


@dataclass(frozen=True)
class Policy:
    """Immutable retention settings for one directory (and, if recursive, its subtree)."""

    file_pattern: str = DEFAULT_FILE_PATTERN
    recursive: bool = False
    file_age_days: int = DISABLED
    archive_folder: Optional[str] = None
    archive_age_days: int = DISABLED

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Policy":
        """Build a policy from raw ``key -> value`` pairs; unknown keys are ignored."""

        file_pattern = payload.get("filePattern", DEFAULT_FILE_PATTERN)
        recursive = str(payload.get("recursive", "false")).strip().lower() == "true"
        return cls(
            file_pattern=str(file_pattern),
            recursive=recursive,
            file_age_days=_parse_days(payload, "fileAgeDays"),
            archive_folder=_parse_archive_folder(payload.get("archiveFolder")),
            archive_age_days=_parse_days(payload, "archiveAgeDays"),
        )

    @property
    def patterns(self) -> Tuple[str, ...]:
        return tuple(
            part.strip()
            for part in self.file_pattern.split(PATTERN_SEPARATOR)
            if part.strip()
        )

    @property
    def file_purge_enabled(self) -> bool:
        return self.file_age_days > 0

    @property
    def archive_enabled(self) -> bool:
        return bool(self.archive_folder)

    @property
    def archive_purge_enabled(self) -> bool:
        return self.archive_age_days > 0

    def archive_path(self, directory: Path) -> Optional[Path]:
        """Return the archive folder location under ``directory``, if any."""

        if not self.archive_folder:
            return None
        return Path(directory) / self.archive_folder

    def __str__(self) -> str:
        return (
            f"filePattern: {self.file_pattern}, recursive: {self.recursive}, "
            f"fileAgeDays: {self.file_age_days}, archiveFolder: {self.archive_folder}, "
            f"archiveAgeDays: {self.archive_age_days}"
        )


def find_policy_file(directory: Path) -> Optional[Path]:
    """Return the first recognised policy file present in ``directory``."""

    for name in POLICY_FILE_NAMES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


def load_policy(path: Path) -> Policy:
    """Load a policy file, raising :class:`PolicyLoadError` on any failure."""

    path = Path(path)
    try:
        payload = load_properties(path)
    except OSError as exc:
        raise wrap_os_error(PolicyLoadError, path, exc) from exc
    except PropertiesSyntaxError as exc:
        raise PolicyLoadError(path, str(exc)) from exc
    try:
        return Policy.from_mapping(payload)
    except ValueError as exc:
        raise PolicyLoadError(path, str(exc)) from exc


__all__ = [
    "DEFAULT_FILE_PATTERN",
    "POLICY_FILE_NAMES",
    "Policy",
    "find_policy_file",
    "load_policy",
]
