"""Build TrackedRepository snapshots from an open repository."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime

from mergesight.core.config import TrackerConfig
from mergesight.core.log import logger
from mergesight.git.repository import RepositoryHandle
from mergesight.state.repository import (
    RepositoryMetadata,
    RepositoryOperation,
    RepositoryState,
    RepositoryStatistics,
    TrackedRepository,
)
from mergesight.tools.classifier import SOURCE_EXTENSIONS, extension

# First match wins
OPERATION_MARKERS = (
    ("rebase-merge", RepositoryOperation.REBASING),
    ("rebase-apply", RepositoryOperation.REBASING),
    ("MERGE_HEAD", RepositoryOperation.MERGING),
    ("REVERT_HEAD", RepositoryOperation.REVERTING),
    ("CHERRY_PICK_HEAD", RepositoryOperation.CHERRY_PICKING),
    ("BISECT_LOG", RepositoryOperation.BISECTING),
)


def repository_operation(
    handle: RepositoryHandle, changed: bool
) -> RepositoryOperation:
    """Operation in progress, else clean or dirty.

    Args:
        handle: Open repository
        changed: Whether status reported any entry, untracked included
    """
    for name, operation in OPERATION_MARKERS:
        if (handle.git_dir / name).exists():
            return operation
    if changed:
        return RepositoryOperation.DIRTY
    return RepositoryOperation.CLEAN


def scan_state(handle: RepositoryHandle) -> RepositoryState:
    """Count working tree changes and read HEAD, stash and upstream."""
    staged = unstaged = untracked = 0
    entries = handle.status(untracked=True)
    for entry in entries:
        if entry.is_untracked:
            untracked += 1
            continue
        if entry.is_staged:
            staged += 1
        if entry.is_unstaged:
            unstaged += 1

    commit = handle.head_commit()
    ahead, behind = handle.ahead_behind()
    return RepositoryState(
        operation=repository_operation(handle, bool(entries)),
        staged_changes=staged,
        unstaged_changes=unstaged,
        untracked_files=untracked,
        ahead_commits=ahead,
        behind_commits=behind,
        stash_count=handle.stash_count(),
        last_commit_hash=commit.hexsha if commit else None,
        last_commit_timestamp=commit.committed_datetime if commit else None,
        repository_size_bytes=handle.metadata_size(),
    )


def language_fractions(paths: list[str]) -> dict[str, float]:
    """Share of each source extension among the source files in paths."""
    counts = Counter(
        ext for ext in (extension(p) for p in paths)
        if ext in SOURCE_EXTENSIONS
    )
    total = sum(counts.values())
    if not total:
        return {}
    return {ext: count / total for ext, count in sorted(counts.items())}


def scan_metadata(
    handle: RepositoryHandle, config: TrackerConfig
) -> RepositoryMetadata:
    # created_at is the HEAD commit time, not the root commit time
    head_time = handle.head_commit_time()
    return RepositoryMetadata(
        description=handle.description(),
        tags=handle.tags(),
        contributors=handle.contributors(config.contributor_walk_limit),
        languages=language_fractions(handle.head_blob_paths()),
        license=handle.license(),
        created_at=head_time,
        last_activity=head_time,
    )


def activity_score(
    frequency: float, contributors: int, commits: int
) -> float:
    score = 0.4 * frequency + 0.3 * contributors + 0.3 * (commits / 100)
    return min(1.0, max(0.0, score))


def compute_statistics(
    commits: int,
    files: int,
    contributors: int,
    created_at: datetime | None,
    now: datetime | None = None,
) -> RepositoryStatistics:
    """Derive statistics from raw counts.

    Args:
        commits: Total commits reachable from HEAD
        files: Entries in the HEAD tree
        contributors: Distinct recent authors
        created_at: Approximate creation time, None without commits
        now: Reference time (defaults to current UTC time)

    Returns:
        RepositoryStatistics with frequency and activity filled in
    """
    now = now or datetime.now(UTC)
    lines_of_code = 0
    frequency = 0.0
    if created_at is not None:
        days = max(1, (now - created_at).days)
        frequency = commits / days
    return RepositoryStatistics(
        total_commits=commits,
        total_files=files,
        total_lines_of_code=lines_of_code,
        commit_frequency=frequency,
        active_contributors=contributors,
        average_commit_size=lines_of_code / commits if commits else 0.0,
        activity_score=activity_score(frequency, contributors, commits),
    )


def scan_repository(
    handle: RepositoryHandle,
    repository_id: str,
    config: TrackerConfig,
) -> TrackedRepository:
    """Take a full snapshot of a repository.

    Args:
        handle: Open repository
        repository_id: Identity to stamp on the snapshot
        config: Tracker settings

    Returns:
        TrackedRepository for the current repository state

    Raises:
        BackendOperationError: If an enumeration fails
    """
    with logger.span("Scan repository", path=str(handle.path)):
        metadata = scan_metadata(handle, config)
        statistics = compute_statistics(
            commits=handle.commit_count(),
            files=handle.head_tree_entry_count(),
            contributors=len(metadata.contributors),
            created_at=metadata.created_at,
        )
        tracked = TrackedRepository(
            repository_id=repository_id,
            path=str(handle.path),
            name=handle.path.name,
            remote_url=handle.remote_url(),
            current_branch=handle.current_branch(),
            branches=handle.branches(),
            state=scan_state(handle),
            metadata=metadata,
            statistics=statistics,
        )

    logger.debug(
        "Scanned repository",
        repository_id=repository_id,
        branch=tracked.current_branch,
        commits=statistics.total_commits,
    )
    return tracked


__all__ = [
    "activity_score",
    "compute_statistics",
    "language_fractions",
    "repository_operation",
    "scan_metadata",
    "scan_repository",
    "scan_state",
]
