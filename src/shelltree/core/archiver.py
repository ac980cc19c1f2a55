"""Zip containers that hold copies of files before they are purged.

Containers are opened once per directory pass and always closed before the
pass moves on to deleting originals. A container created during a pass that
ends up holding nothing is removed again on close.
"""

from __future__ import annotations

import logging
import os
import tempfile
import warnings
import zipfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from .errors import ArchiveCreateError, ArchiveEntryError, wrap_os_error

logger = logging.getLogger(__name__)

CONTAINER_PREFIX = "archive-"
CONTAINER_TIMESTAMP_FORMAT = "%Y-%m-%d_%H%M%S"

ErrorHandler = Callable[[Path, Exception], None]


def container_name(now: Optional[datetime] = None) -> str:
    """Return the dated container file name for a pass started at ``now``."""

    moment = now.astimezone() if now is not None else datetime.now()
    return f"{CONTAINER_PREFIX}{moment.strftime(CONTAINER_TIMESTAMP_FORMAT)}.zip"


def ensure_archive_folder(path: Path) -> Path:
    """Create the archive folder when missing."""

    path = Path(path)
    if path.is_dir():
        return path
    try:
        path.mkdir()
    except OSError as exc:
        raise wrap_os_error(ArchiveCreateError, path, exc) from exc
    return path


class ArchiveContainer:
    """One open zip file receiving copies of purge candidates."""

    def __init__(
        self,
        path: Path,
        archive: zipfile.ZipFile,
        *,
        created: bool,
        on_error: Optional[ErrorHandler] = None,
    ) -> None:
        self.path = Path(path)
        self.created = created
        self.entries_added = 0
        self._archive: Optional[zipfile.ZipFile] = archive
        self._replaced: set[str] = set()
        self._existing = set(archive.namelist())
        self._on_error = on_error

    @classmethod
    def open(
        cls,
        directory: Path,
        name: str,
        *,
        on_error: Optional[ErrorHandler] = None,
    ) -> "ArchiveContainer":
        """Create ``directory/name`` or open the existing container for appending."""

        path = Path(directory) / name
        created = not path.exists()
        mode = "w" if created else "a"
        # Append mode would silently tack a zip onto any existing file.
        if not created and not zipfile.is_zipfile(path):
            raise ArchiveCreateError(path, "existing container is not a zip file")
        try:
            archive = zipfile.ZipFile(
                path,
                mode=mode,
                compression=zipfile.ZIP_DEFLATED,
                strict_timestamps=False,
            )
        except OSError as exc:
            raise wrap_os_error(ArchiveCreateError, path, exc) from exc
        except zipfile.BadZipFile as exc:
            raise ArchiveCreateError(path, f"existing container is not a zip file: {exc}") from exc
        logger.debug("%s archive container %s", "Created" if created else "Opened", path)
        return cls(path, archive, created=created, on_error=on_error)

    @property
    def closed(self) -> bool:
        return self._archive is None

    def add_entry(self, file: Path) -> bool:
        """Copy ``file`` into the container under its base name.

        Returns ``False`` instead of raising when the copy fails so the caller
        can keep the original and carry on with the remaining files.
        """

        file = Path(file)
        if self._archive is None:
            raise ValueError(f"Archive container already closed: {self.path}")
        arcname = file.name
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                self._archive.write(file, arcname)
        except (OSError, ValueError) as exc:
            reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
            error = ArchiveEntryError(file, reason)
            logger.error("Error archiving %s: %s", file.name, error.reason)
            self._report(file, error)
            return False
        if arcname in self._existing:
            self._replaced.add(arcname)
        self._existing.add(arcname)
        self.entries_added += 1
        return True

    def close(self) -> None:
        """Finalise the container; drop it again if this session left it empty."""

        archive, self._archive = self._archive, None
        if archive is None:
            return
        empty = self.created and self.entries_added == 0
        try:
            archive.close()
        finally:
            if empty:
                logger.debug("Removing empty archive container %s", self.path)
                self.path.unlink(missing_ok=True)
        if self._replaced and not empty:
            _compact(self.path)

    def _report(self, path: Path, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(path, error)
        except Exception:  # pragma: no cover - defensive
            logger.exception("on_error handler raised while archiving")

    def __enter__(self) -> "ArchiveContainer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _compact(path: Path) -> None:
    """Rewrite ``path`` keeping only the newest entry for every name."""

    with zipfile.ZipFile(path, mode="r") as source:
        latest: Dict[str, zipfile.ZipInfo] = {}
        for info in source.infolist():
            latest[info.filename] = info
        handle, temp_name = tempfile.mkstemp(prefix=".compact-", suffix=".zip", dir=path.parent)
        os.close(handle)
        try:
            with zipfile.ZipFile(temp_name, mode="w", compression=zipfile.ZIP_DEFLATED) as target:
                for info in latest.values():
                    target.writestr(info, source.read(info))
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
    os.replace(temp_name, path)


@contextmanager
def open_container(
    directory: Path,
    name: str,
    *,
    on_error: Optional[ErrorHandler] = None,
) -> Iterator[ArchiveContainer]:
    """Context manager around :meth:`ArchiveContainer.open` that always closes."""

    container = ArchiveContainer.open(directory, name, on_error=on_error)
    try:
        yield container
    finally:
        container.close()


__all__ = [
    "ArchiveContainer",
    "container_name",
    "ensure_archive_folder",
    "open_container",
]
