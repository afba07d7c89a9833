"""Differences between two snapshots of the same repository."""

from mergesight.state.repository import (
    StateChangeEvent,
    StateChangeKind,
    TrackedRepository,
)


def _clean_label(repo: TrackedRepository) -> str:
    return "clean" if repo.state.working_directory_clean else "dirty"


def diff_snapshots(
    previous: TrackedRepository, current: TrackedRepository
) -> list[StateChangeEvent]:
    """Describe what changed between two scans.

    Args:
        previous: Earlier snapshot
        current: Later snapshot of the same repository

    Returns:
        One event per changed aspect, in a fixed order
    """
    repository_id = current.repository_id
    events = []

    def add(kind, description, old, new):
        events.append(StateChangeEvent(
            repository_id=repository_id,
            kind=kind,
            description=description,
            previous_value=old,
            new_value=new,
        ))

    old, new = _clean_label(previous), _clean_label(current)
    if old != new:
        add(
            StateChangeKind.STATUS_CHANGE,
            f"Working tree changed from {old} to {new}",
            old, new,
        )

    if previous.current_branch != current.current_branch:
        add(
            StateChangeKind.BRANCH_CHANGE,
            f"Branch changed from {previous.current_branch} "
            f"to {current.current_branch}",
            previous.current_branch, current.current_branch,
        )

    old_head = previous.state.last_commit_hash
    new_head = current.state.last_commit_hash
    if old_head != new_head:
        add(
            StateChangeKind.COMMIT_ADDED,
            "New commit detected",
            old_head, new_head,
        )

    old_count = previous.state.unstaged_changes
    new_count = current.state.unstaged_changes
    if old_count != new_count:
        add(
            StateChangeKind.FILES_MODIFIED,
            f"Modified files changed from {old_count} to {new_count}",
            str(old_count), str(new_count),
        )

    old_count = previous.state.staged_changes
    new_count = current.state.staged_changes
    if old_count != new_count:
        add(
            StateChangeKind.FILES_STAGED,
            f"Staged files changed from {old_count} to {new_count}",
            str(old_count), str(new_count),
        )

    old_tags = sorted(previous.metadata.tags)
    new_tags = sorted(current.metadata.tags)
    if old_tags != new_tags:
        add(
            StateChangeKind.TAGS_CHANGED,
            f"Tags changed from {len(old_tags)} to {len(new_tags)}",
            ",".join(old_tags), ",".join(new_tags),
        )

    return events


__all__ = ["diff_snapshots"]
