from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

from shelltree import cli


def test_cli_purges_and_prints_summary(
    tmp_path: Path, aged_file, write_policy, capsys: pytest.CaptureFixture[str]
) -> None:
    write_policy(tmp_path, filePattern="*.log", fileAgeDays=7)
    old = aged_file(tmp_path / "old.log", days=30, content="x" * 2048)
    keep = aged_file(tmp_path / "notes.txt", days=30)

    exit_code = cli.main([str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert not old.exists()
    assert keep.exists()
    assert "Complete. Archived 0 files, deleted 1 files, 2 KB" in captured.out
    assert "Visited 1 directories" in captured.out


def test_cli_archives_before_deleting(tmp_path: Path, aged_file, write_policy) -> None:
    write_policy(tmp_path, fileAgeDays=1, archiveFolder="archive")
    aged_file(tmp_path / "report.csv", days=5)

    assert cli.main([str(tmp_path), "-q"]) == 0

    containers = list((tmp_path / "archive").glob("archive-*.zip"))
    assert len(containers) == 1
    with zipfile.ZipFile(containers[0]) as archive:
        assert archive.namelist() == ["report.csv"]
    assert not (tmp_path / "report.csv").exists()


def test_cli_report_mode_changes_nothing(
    tmp_path: Path, aged_file, write_policy, capsys: pytest.CaptureFixture[str]
) -> None:
    write_policy(tmp_path, fileAgeDays=1, archiveFolder="archive")
    old = aged_file(tmp_path / "old.log", days=5)

    exit_code = cli.main([str(tmp_path), "--report", "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert old.exists()
    assert not (tmp_path / "archive").exists()
    assert payload["report_only"] is True
    assert payload["candidates"] == 1
    assert payload["deleted"] == 0
    assert payload["roots"] == [str(tmp_path)]


def test_cli_combines_totals_across_roots(
    tmp_path: Path, aged_file, write_policy, capsys: pytest.CaptureFixture[str]
) -> None:
    for name in ("first", "second"):
        write_policy(tmp_path / name, fileAgeDays=1)
        aged_file(tmp_path / name / "old.log", days=5)

    exit_code = cli.main([str(tmp_path / "first"), str(tmp_path / "second"), "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["deleted"] == 2
    assert payload["directories_visited"] == 2


def test_cli_reports_missing_root_and_continues(
    tmp_path: Path, aged_file, write_policy, capsys: pytest.CaptureFixture[str]
) -> None:
    write_policy(tmp_path, fileAgeDays=1)
    old = aged_file(tmp_path / "old.log", days=5)

    exit_code = cli.main([str(tmp_path / "missing"), str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "error:" in captured.err
    assert "path does not exist" in captured.err
    assert not old.exists()


def test_cli_requires_a_path(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])

    assert exc.value.code == 2
    assert "PATH" in capsys.readouterr().err


def test_cli_rejects_verbose_and_quiet_together(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([str(tmp_path), "-v", "-q"])

    assert exc.value.code == 2


def test_cli_json_lists_failed_roots(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(tmp_path / "missing"), str(tmp_path), "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["failed_roots"] == [str(tmp_path / "missing")]
    assert payload["roots"] == [str(tmp_path)]
    assert payload["errors"] == 1
