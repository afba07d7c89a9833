"""Tracked repository, health and state change records."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field, field_validator

from mergesight.state.conflict import new_id, utcnow
from mergesight.state.scale import OrderedStrEnum


class RepositoryOperation(StrEnum):
    """Idle (clean or dirty) or in the middle of a git operation."""

    CLEAN = "clean"
    DIRTY = "dirty"
    MERGING = "merging"
    REBASING = "rebasing"
    CHERRY_PICKING = "cherry_picking"
    REVERTING = "reverting"
    BISECTING = "bisecting"


class RepositoryState(BaseModel):
    """Working tree snapshot taken by one scan."""

    operation: RepositoryOperation = RepositoryOperation.CLEAN
    staged_changes: int = 0
    unstaged_changes: int = 0
    untracked_files: int = 0
    ahead_commits: int = 0
    behind_commits: int = 0
    stash_count: int = 0
    last_commit_hash: str | None = None
    last_commit_timestamp: datetime | None = None
    repository_size_bytes: int = 0

    @computed_field
    @property
    def working_directory_clean(self) -> bool:
        return (
            self.staged_changes == 0
            and self.unstaged_changes == 0
            and self.untracked_files == 0
        )


class RepositoryMetadata(BaseModel):
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    contributors: list[str] = Field(default_factory=list)
    languages: dict[str, float] = Field(
        default_factory=dict,
        description="Extension -> fraction of source files in HEAD",
    )
    license: str | None = None
    created_at: datetime | None = Field(
        default=None,
        description="Approximated by the HEAD commit time",
    )
    last_activity: datetime | None = None
    custom: dict[str, str] = Field(default_factory=dict)


class RepositoryStatistics(BaseModel):
    total_commits: int = 0
    total_files: int = 0
    total_lines_of_code: int = 0
    commit_frequency: float = Field(
        default=0.0, description="Commits per day"
    )
    average_commit_size: float = 0.0
    active_contributors: int = 0
    activity_score: float = 0.0

    @field_validator("activity_score")
    @classmethod
    def _clamp_activity(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


class TrackedRepository(BaseModel):
    """A repository registered with the tracker."""

    repository_id: str
    path: str
    name: str
    remote_url: str | None = None
    current_branch: str = "HEAD"
    branches: list[str] = Field(default_factory=list)
    state: RepositoryState = Field(default_factory=RepositoryState)
    metadata: RepositoryMetadata = Field(default_factory=RepositoryMetadata)
    statistics: RepositoryStatistics = Field(
        default_factory=RepositoryStatistics
    )
    last_scanned: datetime = Field(default_factory=utcnow)


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    FAILED = "failed"
    UNKNOWN = "unknown"


class CheckStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMEOUT = "timeout"


class IssueKind(StrEnum):
    CORRUPTION = "corruption"
    MISSING_FILES = "missing_files"
    PERMISSION_DENIED = "permission_denied"
    NETWORK_ISSUES = "network_issues"
    DISK_SPACE = "disk_space"
    CONFIGURATION = "configuration"
    PERFORMANCE = "performance"
    SECURITY = "security"


class IssueSeverity(OrderedStrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    IGNORED = "ignored"
    FAILED = "failed"


class HealthCheck(BaseModel):
    name: str
    status: CheckStatus
    message: str = ""
    duration_ms: int = 0
    timestamp: datetime = Field(default_factory=utcnow)


class HealthIssue(BaseModel):
    issue_id: str = Field(default_factory=new_id)
    kind: IssueKind
    severity: IssueSeverity
    description: str
    detected_at: datetime = Field(default_factory=utcnow)
    suggested_fix: str | None = None
    resolution_status: IssueStatus = IssueStatus.OPEN


class RepositoryHealth(BaseModel):
    """Result of one health check run against a tracked repository."""

    status: HealthStatus = HealthStatus.UNKNOWN
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    checks: list[HealthCheck] = Field(default_factory=list)
    issues: list[HealthIssue] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    last_checked: datetime = Field(default_factory=utcnow)


class StateChangeKind(StrEnum):
    STATUS_CHANGE = "status_change"
    BRANCH_CHANGE = "branch_change"
    COMMIT_ADDED = "commit_added"
    FILES_MODIFIED = "files_modified"
    FILES_STAGED = "files_staged"
    TAGS_CHANGED = "tags_changed"


class StateChangeEvent(BaseModel):
    """A difference observed between two scans of the same repository."""

    event_id: str = Field(default_factory=new_id)
    repository_id: str
    kind: StateChangeKind
    description: str
    previous_value: str | None = None
    new_value: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class TrackingStatistics(BaseModel):
    total_repositories: int = 0
    total_events: int = 0
    event_kind_distribution: dict[StateChangeKind, int] = Field(
        default_factory=dict
    )
    health_status_distribution: dict[HealthStatus, int] = Field(
        default_factory=dict,
        description="Latest health status of each checked repository",
    )


__all__ = [
    "CheckStatus",
    "HealthCheck",
    "HealthIssue",
    "HealthStatus",
    "IssueKind",
    "IssueSeverity",
    "IssueStatus",
    "RepositoryHealth",
    "RepositoryMetadata",
    "RepositoryOperation",
    "RepositoryState",
    "RepositoryStatistics",
    "StateChangeEvent",
    "StateChangeKind",
    "TrackedRepository",
    "TrackingStatistics",
]
