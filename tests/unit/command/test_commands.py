"""Tests for CLI subcommands and exit code mapping."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from mergesight.cli import EXIT_ACCESS_ERROR, EXIT_BACKEND_ERROR, run
from mergesight.command import DetectCommand, HealthCommand, ScanCommand
from mergesight.core.config import DetectionConfig, TrackerConfig
from mergesight.core.errors import (
    BackendOperationError,
    RepositoryAccessError,
)


@pytest.fixture
def state():
    """Minimal stand-in for State carrying only the config sections."""
    return SimpleNamespace(config=SimpleNamespace(
        detection=DetectionConfig(),
        tracker=TrackerConfig(),
    ))


def test_detect_prints_conflicts(conflicted_repo, state, capsys):
    command = DetectCommand(path=conflicted_repo.working_tree_dir)

    code = asyncio.run(command.run_workflow(state))

    assert code == 0
    conflicts = json.loads(capsys.readouterr().out)
    assert len(conflicts) == 1
    assert conflicts[0]["file_path"] == "src/core.py"
    assert conflicts[0]["severity"] == "moderate"
    assert conflicts[0]["resolution_status"] == "detected"


def test_detect_clean_repository(committed_repo, state, capsys):
    command = DetectCommand(path=committed_repo.working_tree_dir)

    assert asyncio.run(command.run_workflow(state)) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_scan_prints_snapshot(committed_repo, state, capsys):
    command = ScanCommand(path=committed_repo.working_tree_dir)

    assert asyncio.run(command.run_workflow(state)) == 0
    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot["name"] == "repo"
    assert snapshot["current_branch"] == "main"
    assert snapshot["state"]["working_directory_clean"] is True


def test_health_reports_issues_with_success(committed_repo, state, capsys):
    command = HealthCommand(path=committed_repo.working_tree_dir)

    assert asyncio.run(command.run_workflow(state)) == 0
    health = json.loads(capsys.readouterr().out)
    assert health["status"] == "warning"
    assert health["issues"][0]["kind"] == "configuration"


class Failing:
    """Subcommand whose workflow raises the given error."""

    def __init__(self, error):
        self.error = error

    async def run_workflow(self, state):
        raise self.error


def test_run_returns_workflow_code(state):
    class Succeeding:
        async def run_workflow(self, state):
            return 0

    assert run(Succeeding(), state) == 0


def test_run_maps_access_error(state, capsys):
    error = RepositoryAccessError("/nowhere", "no such path")

    assert run(Failing(error), state) == EXIT_ACCESS_ERROR
    assert "Cannot open repository" in capsys.readouterr().err


def test_run_maps_backend_error(state, capsys):
    error = BackendOperationError("status", "index locked")

    assert run(Failing(error), state) == EXIT_BACKEND_ERROR
    assert "index locked" in capsys.readouterr().err


def test_run_lets_other_errors_through(state):
    with pytest.raises(RuntimeError):
        run(Failing(RuntimeError("boom")), state)


def test_missing_repository_is_access_error(tmp_path, state):
    command = ScanCommand(path=tmp_path / "gone")

    assert run(command, state) == EXIT_ACCESS_ERROR
