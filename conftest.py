from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

FIXED_NOW = datetime(2025, 11, 13, 12, 0, 0, tzinfo=timezone.utc)


def set_age(path: Path, *, days: float, now: datetime = FIXED_NOW) -> Path:
    """Backdate ``path`` so it is ``days`` old relative to ``now``."""

    mtime = now.timestamp() - days * 86400
    os.utime(path, times=(mtime, mtime))
    return path


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def aged_file() -> Callable[..., Path]:
    def _make(path: Path, *, days: float, content: str = "payload") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return set_age(path, days=days)

    return _make


@pytest.fixture
def write_policy() -> Callable[..., Path]:
    def _write(directory: Path, name: str = "shelltree.properties", **values: object) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        lines = [f"{key}={value}" for key, value in values.items()]
        target = directory / name
        target.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return target

    return _write


@pytest.fixture
def backdate() -> Callable[..., Path]:
    return set_age
