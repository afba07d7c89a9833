"""Records produced by the detector and the tracker."""

from mergesight.state.conflict import (
    Conflict,
    ConflictContent,
    ConflictKind,
    ConflictLocation,
    ConflictSeverity,
    ContentCategory,
    Resolution,
    ResolutionEffort,
    ResolutionKind,
    ResolutionStatus,
    ResolutionStep,
    RiskLevel,
    StepKind,
)
from mergesight.state.history import (
    ConflictPattern,
    ConflictStatistics,
    ResolutionOutcome,
    ResolutionRecord,
)
from mergesight.state.repository import (
    CheckStatus,
    HealthCheck,
    HealthIssue,
    HealthStatus,
    IssueKind,
    IssueSeverity,
    IssueStatus,
    RepositoryHealth,
    RepositoryMetadata,
    RepositoryOperation,
    RepositoryState,
    RepositoryStatistics,
    StateChangeEvent,
    StateChangeKind,
    TrackedRepository,
    TrackingStatistics,
)

__all__ = [
    "CheckStatus",
    "Conflict",
    "ConflictContent",
    "ConflictKind",
    "ConflictLocation",
    "ConflictPattern",
    "ConflictSeverity",
    "ConflictStatistics",
    "ContentCategory",
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
    "Resolution",
    "ResolutionEffort",
    "ResolutionKind",
    "ResolutionOutcome",
    "ResolutionRecord",
    "ResolutionStatus",
    "ResolutionStep",
    "RiskLevel",
    "StateChangeEvent",
    "StateChangeKind",
    "TrackedRepository",
    "TrackingStatistics",
]
