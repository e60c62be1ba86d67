"""Tests for the choreo command-line interface."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from choreo.cli.main import build_parser, main
from choreo.core.models import Project
from choreo.core.persistence import FileProjectRepository
from choreo.core.session import ChoreoSession


@pytest.fixture
def project_file(tmp_path: Path, two_keyframe_project: Project, monkeypatch) -> Path:
    """Project saved to disk, with the working directory isolated from any choreo.yaml."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "show.json"
    FileProjectRepository(path).save(two_keyframe_project)
    return path


def test_keyframes_lists_in_time_order(project_file: Path, capsys) -> None:
    assert main(["keyframes", str(project_file)]) == 0

    out = capsys.readouterr().out
    assert out.index("Opening") < out.index("Finale")


def test_poses_at_time(project_file: Path, capsys) -> None:
    """Poses between keyframes are interpolated."""
    assert main(["poses", str(project_file), "--time", "5"]) == 0

    out = capsys.readouterr().out
    assert "5.00" in out
    assert "10.00" in out
    assert "Active formation: none" in out


def test_poses_reports_active_formation(project_file: Path, capsys) -> None:
    assert main(["poses", str(project_file), "-t", "10.05"]) == 0
    assert "Finale" in capsys.readouterr().out


def test_sample(project_file: Path, capsys) -> None:
    assert main(["sample", str(project_file), "--fps", "1", "--end", "2"]) == 0
    out = capsys.readouterr().out
    assert "3 samples" in out


def test_sample_rejects_bad_fps(project_file: Path) -> None:
    assert main(["sample", str(project_file), "--fps", "0"]) == 1


def test_missing_project_file(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["keyframes", str(tmp_path / "missing.json")]) == 1
    assert "ERROR" in capsys.readouterr().out


def test_invalid_config_file(project_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "broken.json"
    config.write_text("{not json", encoding="utf-8")
    assert main(["--config", str(config), "keyframes", str(project_file)]) == 1


def test_config_file_is_applied(project_file: Path, tmp_path: Path, capsys) -> None:
    """A wider active window makes 9.5s report the finale."""
    config = tmp_path / "choreo.yaml"
    config.write_text("playback:\n  active_epsilon_s: 1.0\n", encoding="utf-8")

    assert main(["poses", str(project_file), "-t", "9.5"]) == 0
    assert "Active formation: Finale" in capsys.readouterr().out


def test_subcommand_required() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_sample_writes_json(project_file: Path, tmp_path: Path) -> None:
    """Absent poses are written as null."""
    output = tmp_path / "out" / "samples.json"

    assert main(["sample", str(project_file), "--end", "12", "-o", str(output)]) == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["dancer_ids"] == ["alice", "bob"]
    assert len(data["times"]) == 13
    assert data["poses"][5][0] == [5.0, 10.0, 45.0]
    assert data["poses"][12][1] is None


def test_log_level_option_overrides_config(project_file: Path) -> None:
    assert main(["--log-level", "ERROR", "keyframes", str(project_file)]) == 0
    assert logging.getLogger().level == logging.ERROR


@pytest.mark.parametrize("command", ["poses", "sample"])
def test_session_without_project_is_an_error(
    project_file: Path, monkeypatch, capsys, command: str
) -> None:
    monkeypatch.setattr(ChoreoSession, "from_file", classmethod(lambda cls, *a, **kw: cls()))

    assert main([command, str(project_file)]) == 1
    assert "No project loaded" in capsys.readouterr().out
