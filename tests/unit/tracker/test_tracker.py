"""Tests for the repository tracker."""

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest

from conftest import commit_files
from mergesight.core.config import TrackerConfig
from mergesight.core.errors import (
    RepositoryAccessError,
    UnknownRepositoryError,
)
from mergesight.state.repository import HealthStatus, StateChangeKind
from mergesight.tracker import RepositoryTracker


def track(tracker, repo):
    return asyncio.run(
        tracker.get_or_create_repository_id(repo.working_tree_dir)
    )


def test_identity_is_stable(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())

    first = track(tracker, committed_repo)
    second = asyncio.run(tracker.get_or_create_repository_id(
        Path(committed_repo.working_tree_dir) / "src" / ".."
    ))

    assert first == second
    assert len(tracker.get_all_repositories()) == 1
    tracked = tracker.get_repository(first)
    assert tracked.repository_id == first
    assert tracked.current_branch == "main"


def test_untrackable_path(tmp_path):
    tracker = RepositoryTracker(TrackerConfig())

    with pytest.raises(RepositoryAccessError):
        asyncio.run(tracker.get_or_create_repository_id(tmp_path))

    assert tracker.get_all_repositories() == []


def test_rescan_records_events(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())
    repository_id = track(tracker, committed_repo)
    assert tracker.get_state_events(repository_id) == []

    workdir = committed_repo.working_tree_dir
    with open(f"{workdir}/README.md", "a") as f:
        f.write("edit\n")
    current = asyncio.run(tracker.rescan_repository(repository_id))

    assert not current.state.working_directory_clean
    assert tracker.get_repository(repository_id) == current
    kinds = [e.kind for e in tracker.get_state_events(repository_id)]
    assert kinds == [
        StateChangeKind.STATUS_CHANGE,
        StateChangeKind.FILES_MODIFIED,
    ]

    commit_files(committed_repo, {"README.md": "final\n"}, "update")
    asyncio.run(tracker.rescan_repository(repository_id))

    kinds = [e.kind for e in tracker.get_state_events(repository_id)]
    assert kinds[2:] == [
        StateChangeKind.STATUS_CHANGE,
        StateChangeKind.COMMIT_ADDED,
        StateChangeKind.FILES_MODIFIED,
    ]


def test_event_buffer_is_bounded(committed_repo):
    tracker = RepositoryTracker(TrackerConfig(max_state_events=3))
    repository_id = track(tracker, committed_repo)
    workdir = committed_repo.working_tree_dir

    for n in range(3):
        with open(f"{workdir}/README.md", "a") as f:
            f.write(f"edit {n}\n")
        committed_repo.git.add("README.md")
        asyncio.run(tracker.rescan_repository(repository_id))
        committed_repo.git.commit("-m", f"commit {n}")
        asyncio.run(tracker.rescan_repository(repository_id))

    events = tracker.get_state_events(repository_id)
    assert len(events) == 3
    # Oldest events are dropped first
    assert events[-1].kind == StateChangeKind.FILES_STAGED


def test_health_is_stored(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())
    repository_id = track(tracker, committed_repo)
    assert tracker.get_repository_health(repository_id) is None

    health = asyncio.run(tracker.check_repository_health(repository_id))

    assert health.status == HealthStatus.WARNING
    assert tracker.get_repository_health(repository_id) == health


def test_unknown_repository():
    tracker = RepositoryTracker(TrackerConfig())

    assert tracker.get_repository("missing") is None
    assert tracker.get_repository_health("missing") is None
    assert tracker.get_state_events("missing") == []
    with pytest.raises(UnknownRepositoryError):
        asyncio.run(tracker.rescan_repository("missing"))
    with pytest.raises(UnknownRepositoryError):
        asyncio.run(tracker.check_repository_health("missing"))
    with pytest.raises(UnknownRepositoryError):
        tracker.needs_rescan("missing")


def test_remove_repository(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())
    repository_id = track(tracker, committed_repo)
    asyncio.run(tracker.check_repository_health(repository_id))

    asyncio.run(tracker.remove_repository(repository_id))
    asyncio.run(tracker.remove_repository(repository_id))

    assert tracker.get_repository(repository_id) is None
    assert tracker.get_repository_health(repository_id) is None
    # The path gets a fresh identity afterwards
    assert track(tracker, committed_repo) != repository_id


def test_needs_rescan(committed_repo):
    tracker = RepositoryTracker(TrackerConfig(scan_interval_seconds=60))
    repository_id = track(tracker, committed_repo)
    scanned = tracker.get_repository(repository_id).last_scanned

    assert not tracker.needs_rescan(repository_id, now=scanned)
    assert not tracker.needs_rescan(
        repository_id, now=scanned + timedelta(seconds=60)
    )
    assert tracker.needs_rescan(
        repository_id, now=scanned + timedelta(seconds=61)
    )


def test_remove_waits_for_rescan_in_progress(committed_repo):
    """A rescan already running cannot bring a removed repository back."""
    tracker = RepositoryTracker(TrackerConfig())
    path = committed_repo.working_tree_dir

    async def rescan_then_remove():
        repository_id = await tracker.get_or_create_repository_id(path)
        rescan = asyncio.create_task(
            tracker.rescan_repository(repository_id)
        )
        await asyncio.sleep(0)
        await tracker.remove_repository(repository_id)
        await rescan
        return repository_id

    repository_id = asyncio.run(rescan_then_remove())

    assert tracker.get_repository(repository_id) is None
    assert tracker.get_all_repositories() == []
    track(tracker, committed_repo)
    assert len(tracker.get_all_repositories()) == 1


def test_remove_waits_for_health_check_in_progress(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())
    path = committed_repo.working_tree_dir

    async def check_then_remove():
        repository_id = await tracker.get_or_create_repository_id(path)
        check = asyncio.create_task(
            tracker.check_repository_health(repository_id)
        )
        await asyncio.sleep(0)
        await tracker.remove_repository(repository_id)
        await check
        return repository_id

    repository_id = asyncio.run(check_then_remove())

    assert tracker.get_repository_health(repository_id) is None


def test_tracking_statistics(committed_repo):
    tracker = RepositoryTracker(TrackerConfig())
    assert tracker.get_tracking_statistics().total_repositories == 0

    repository_id = track(tracker, committed_repo)
    with open(f"{committed_repo.working_tree_dir}/README.md", "a") as f:
        f.write("edit\n")
    asyncio.run(tracker.rescan_repository(repository_id))
    asyncio.run(tracker.check_repository_health(repository_id))

    stats = tracker.get_tracking_statistics()

    assert stats.total_repositories == 1
    assert stats.total_events == 2
    assert stats.event_kind_distribution == {
        StateChangeKind.STATUS_CHANGE: 1,
        StateChangeKind.FILES_MODIFIED: 1,
    }
    assert stats.health_status_distribution == {HealthStatus.WARNING: 1}
