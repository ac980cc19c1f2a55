from __future__ import annotations

from pathlib import Path

import pytest

from shelltree.core.selector import PurgeCandidate
from shelltree.core.totals import DirectoryResult, RunTotals, byte_count_to_display_size


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 bytes"),
        (1023, "1023 bytes"),
        (1024, "1 KB"),
        (5 * 1024 * 1024 - 1, "4 MB"),
        (3 * 1024**3, "3 GB"),
        (2 * 1024**4 + 17, "2 TB"),
    ],
)
def test_display_size_rounds_down(size: int, expected: str) -> None:
    assert byte_count_to_display_size(size) == expected


def test_add_result_folds_directory_counts(tmp_path: Path) -> None:
    candidate = PurgeCandidate(path=tmp_path / "a.log", age_days=9, size=10)
    result = DirectoryResult(
        path=tmp_path,
        candidates=(candidate,),
        archived=1,
        deleted=1,
        bytes_reclaimed=2048,
        archives_purged=2,
        pruned=True,
        errors=1,
    )
    totals = RunTotals()

    totals.add_result(result)
    totals.add_result(DirectoryResult(path=tmp_path / "empty"))

    assert totals.candidates == 1
    assert (totals.archived, totals.deleted, totals.bytes_reclaimed) == (1, 1, 2048)
    assert totals.archives_purged == 2
    assert totals.folders_pruned == 1
    assert totals.errors == 1
    assert result.candidate_paths == (tmp_path / "a.log",)


def test_totals_are_additive_across_roots() -> None:
    first = RunTotals(archived=1, deleted=2, bytes_reclaimed=100, directories_visited=3, roots=["a"])
    second = RunTotals(deleted=4, bytes_reclaimed=50, errors=1, roots=["b", "a"], failed_roots=["c"])

    combined = first + second

    assert combined.archived == 1
    assert combined.deleted == 6
    assert combined.bytes_reclaimed == 150
    assert combined.directories_visited == 3
    assert combined.errors == 1
    assert combined.roots == ["a", "b"]
    assert combined.failed_roots == ["c"]
    assert first.deleted == 2


def test_summary_line_matches_log_format() -> None:
    totals = RunTotals(archived=3, deleted=3, bytes_reclaimed=3 * 1024 * 1024)

    assert totals.summary_line() == "Archived 3 files, deleted 3 files, 3 MB"


def test_to_dict_includes_display_size() -> None:
    payload = RunTotals(deleted=1, bytes_reclaimed=12).to_dict()

    assert payload["deleted"] == 1
    assert payload["display_size"] == "12 bytes"
    assert payload["roots"] == []
    assert payload["failed_roots"] == []
