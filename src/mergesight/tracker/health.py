"""Read-only repository health checks.

Each check inspects one aspect of a repository and reports a
HealthCheck plus any HealthIssues it found. Checks never modify the
repository; fixes are only suggested.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from git.exc import BadName, BadObject

from mergesight.core.config import TrackerConfig
from mergesight.core.errors import (
    BackendOperationError,
    RepositoryAccessError,
)
from mergesight.core.log import logger
from mergesight.git.repository import RepositoryHandle
from mergesight.state.repository import (
    CheckStatus,
    HealthCheck,
    HealthIssue,
    HealthStatus,
    IssueKind,
    IssueSeverity,
    RepositoryHealth,
)

CheckResult = tuple[CheckStatus, str, list[HealthIssue]]


def _passed(message: str) -> CheckResult:
    return CheckStatus.PASSED, message, []


def _failed(
    message: str,
    kind: IssueKind,
    severity: IssueSeverity,
    suggested_fix: str | None = None,
) -> CheckResult:
    issue = HealthIssue(
        kind=kind,
        severity=severity,
        description=message,
        suggested_fix=suggested_fix,
    )
    return CheckStatus.FAILED, message, [issue]


def check_head_commit(
    handle: RepositoryHandle, config: TrackerConfig
) -> CheckResult:
    try:
        commit = handle.head_commit()
        if commit is not None:
            commit.tree  # noqa: B018
    except (BadName, BadObject, ValueError, OSError) as e:
        return _failed(
            f"HEAD commit cannot be read: {e}",
            IssueKind.CORRUPTION,
            IssueSeverity.CRITICAL,
            "Run 'git fsck' and restore missing objects",
        )
    if commit is None:
        return _failed(
            "Repository has no commits",
            IssueKind.MISSING_FILES,
            IssueSeverity.LOW,
            "Create an initial commit",
        )
    return _passed(f"HEAD at {commit.hexsha[:12]}")


def check_remote_configured(
    handle: RepositoryHandle, config: TrackerConfig
) -> CheckResult:
    url = handle.remote_url()
    if url is None:
        return _failed(
            "No 'origin' remote configured",
            IssueKind.CONFIGURATION,
            IssueSeverity.LOW,
            "Add a remote with 'git remote add origin <url>'",
        )
    return _passed(f"origin -> {url}")


def check_working_tree(
    handle: RepositoryHandle, config: TrackerConfig
) -> CheckResult:
    if handle.repo.bare:
        return CheckStatus.SKIPPED, "Bare repository", []
    try:
        entries = handle.status(untracked=True)
    except BackendOperationError as e:
        return _failed(
            f"Working tree status failed: {e.reason}",
            IssueKind.CORRUPTION,
            IssueSeverity.HIGH,
            "Run 'git status' and 'git fsck' to inspect the index",
        )
    return _passed(f"{len(entries)} changed or untracked path(s)")


def check_repository_size(
    handle: RepositoryHandle, config: TrackerConfig
) -> CheckResult:
    size = handle.metadata_size()
    if size > config.large_repository_bytes:
        return _failed(
            f"Repository metadata is {size} bytes",
            IssueKind.PERFORMANCE,
            IssueSeverity.MEDIUM,
            "Run 'git gc' or move large files out of history",
        )
    return _passed(f"{size} bytes")


def check_merge_state(
    handle: RepositoryHandle, config: TrackerConfig
) -> CheckResult:
    if not handle.is_merging():
        return _passed("No merge in progress")
    unmerged = handle.unmerged_paths()
    return _failed(
        f"Merge in progress with {len(unmerged)} unmerged path(s)",
        IssueKind.CONFIGURATION,
        IssueSeverity.MEDIUM,
        "Resolve the conflicts and commit, or run 'git merge --abort'",
    )


CHECKS: dict[
    str, Callable[[RepositoryHandle, TrackerConfig], CheckResult]
] = {
    "head_commit": check_head_commit,
    "remote_configured": check_remote_configured,
    "working_tree": check_working_tree,
    "repository_size": check_repository_size,
    "merge_state": check_merge_state,
}


def _run(name: str, check, *args) -> tuple[HealthCheck, list[HealthIssue]]:
    start = time.perf_counter()
    status, message, issues = check(*args)
    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.debug(
        f"Health check {name}: {status}",
        check=name,
        status=str(status),
        duration_ms=duration_ms,
    )
    return HealthCheck(
        name=name,
        status=status,
        message=message,
        duration_ms=duration_ms,
    ), issues


def summarize(
    checks: list[HealthCheck], issues: list[HealthIssue]
) -> RepositoryHealth:
    """Score checks and derive the overall status from issues.

    Score is passed / (passed + failed); skipped and timed out checks
    do not count. Status is healthy without issues, warning when the
    worst issue is at most medium, critical otherwise.
    """
    passed = sum(1 for c in checks if c.status == CheckStatus.PASSED)
    failed = sum(1 for c in checks if c.status == CheckStatus.FAILED)
    counted = passed + failed

    if not issues:
        status = HealthStatus.HEALTHY
    elif max(i.severity for i in issues) <= IssueSeverity.MEDIUM:
        status = HealthStatus.WARNING
    else:
        status = HealthStatus.CRITICAL

    recommendations: list[str] = []
    for issue in issues:
        fix = issue.suggested_fix
        if fix and fix not in recommendations:
            recommendations.append(fix)

    return RepositoryHealth(
        status=status,
        score=passed / counted if counted else 0.0,
        checks=checks,
        issues=issues,
        recommendations=recommendations,
    )


def inaccessible(path: Path | str, reason: str) -> RepositoryHealth:
    """Health record for a repository that cannot be opened."""
    message = f"Cannot open repository at {path}: {reason}"
    issue = HealthIssue(
        kind=IssueKind.MISSING_FILES,
        severity=IssueSeverity.CRITICAL,
        description=message,
        suggested_fix="Check that the path exists and is a git repository",
    )
    return RepositoryHealth(
        status=HealthStatus.FAILED,
        score=0.0,
        checks=[HealthCheck(
            name="repository_access",
            status=CheckStatus.FAILED,
            message=message,
        )],
        issues=[issue],
        recommendations=[issue.suggested_fix],
    )


def check_health(path: Path | str, config: TrackerConfig) -> RepositoryHealth:
    """Run every health check against the repository at path.

    Args:
        path: Repository root
        config: Tracker settings (size threshold)

    Returns:
        RepositoryHealth; status FAILED when the repository cannot be
        opened
    """
    start = time.perf_counter()
    try:
        handle = RepositoryHandle.open(path)
    except RepositoryAccessError as e:
        logger.warn("Repository not accessible", path=str(path))
        return inaccessible(path, e.reason or "unknown error")

    checks = [HealthCheck(
        name="repository_access",
        status=CheckStatus.PASSED,
        message="Repository opened",
        duration_ms=int((time.perf_counter() - start) * 1000),
    )]
    issues: list[HealthIssue] = []
    with handle:
        for name, check in CHECKS.items():
            result, found = _run(name, check, handle, config)
            checks.append(result)
            issues.extend(found)

    health = summarize(checks, issues)
    logger.info(
        f"Repository health: {health.status}",
        path=str(path),
        score=health.score,
        issues=len(issues),
    )
    return health


__all__ = [
    "CHECKS",
    "check_health",
    "check_head_commit",
    "check_merge_state",
    "check_remote_configured",
    "check_repository_size",
    "check_working_tree",
    "inaccessible",
    "summarize",
]
