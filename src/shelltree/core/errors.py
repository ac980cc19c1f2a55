"""Error taxonomy shared by the tree walker and retention engine.

Every error carries the path it relates to plus a short reason so log lines
and ``on_error`` callbacks can report failures without unpacking ``OSError``
details themselves.
"""

from __future__ import annotations

from pathlib import Path


class ShellTreeError(Exception):
    """Base class for failures tied to a single filesystem path."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {self.reason}")

    def __repr__(self) -> str:  # pragma: no cover - trivial wrapper
        path_repr = str(self.path)
        return f"{type(self).__name__}(path={path_repr!r}, reason={self.reason!r})"


class PolicyLoadError(ShellTreeError):
    """Policy file could not be read or parsed; fatal for that directory."""


class ArchiveCreateError(ShellTreeError):
    """Archive folder or container could not be created; no deletions follow."""


class ArchiveEntryError(ShellTreeError):
    """A single file could not be copied into the archive container."""


class DeleteError(ShellTreeError):
    """A file or archive container could not be deleted."""


class TraversalError(ShellTreeError):
    """A directory could not be listed or descended."""


def wrap_os_error(error_type: type[ShellTreeError], path: Path, exc: OSError) -> ShellTreeError:
    """Convert an ``OSError`` into ``error_type`` keeping the OS message."""

    reason = exc.strerror or str(exc)
    return error_type(path=Path(path), reason=reason)


__all__ = [
    "ArchiveCreateError",
    "ArchiveEntryError",
    "DeleteError",
    "PolicyLoadError",
    "ShellTreeError",
    "TraversalError",
    "wrap_os_error",
]
