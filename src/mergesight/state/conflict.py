"""Conflict and resolution records."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from mergesight.state.scale import OrderedStrEnum


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class ConflictKind(StrEnum):
    """What kind of conflict was detected."""

    CONTENT_CONFLICT = "content_conflict"
    DELETE_MODIFY = "delete_modify"
    ADD_ADD = "add_add"
    RENAME_RENAME = "rename_rename"
    MODE_CONFLICT = "mode_conflict"
    SUBMODULE_CONFLICT = "submodule_conflict"
    SEMANTIC_CONFLICT = "semantic_conflict"
    STRUCTURAL_CONFLICT = "structural_conflict"
    ATTRIBUTION_CONFLICT = "attribution_conflict"
    DEPENDENCY_CONFLICT = "dependency_conflict"


class ConflictSeverity(OrderedStrEnum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    CRITICAL = "critical"
    BLOCKING = "blocking"


class ContentCategory(StrEnum):
    TEXT = "text"
    BINARY = "binary"
    IMAGE = "image"
    CONFIGURATION = "configuration"
    SOURCE_CODE = "source_code"
    DOCUMENTATION = "documentation"


class ResolutionStatus(StrEnum):
    """Lifecycle of a conflict: detected -> in_progress -> terminal."""

    DETECTED = "detected"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    FAILED = "failed"
    DEFERRED = "deferred"
    ESCALATED = "escalated"


class ResolutionKind(StrEnum):
    ACCEPT_OURS = "accept_ours"
    ACCEPT_THEIRS = "accept_theirs"
    MANUAL_MERGE = "manual_merge"
    AUTO_MERGE = "auto_merge"
    REWRITE = "rewrite"
    SPLIT = "split"
    DEFER = "defer"
    ESCALATE = "escalate"


class StepKind(StrEnum):
    """What an external executor has to do for a resolution step."""

    BACKEND_COMMAND = "backend_command"
    FILE_EDIT = "file_edit"
    CODE_REVIEW = "code_review"
    TEST_EXECUTION = "test_execution"
    DOCUMENTATION_UPDATE = "documentation_update"
    CEREMONY_INITIATION = "ceremony_initiation"
    MANUAL_INTERVENTION = "manual_intervention"


class ResolutionEffort(OrderedStrEnum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class RiskLevel(OrderedStrEnum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class ConflictLocation(BaseModel):
    """Where in a file the conflict sits (1-based lines, 0 = unknown)."""

    start_line: int = 0
    end_line: int = 0
    start_column: int | None = None
    end_column: int | None = None
    context: str | None = Field(
        default=None,
        description="Enclosing function or section name",
    )


class ConflictContent(BaseModel):
    ours: str = ""
    theirs: str = ""
    base: str | None = None
    has_markers: bool = False
    category: ContentCategory = ContentCategory.TEXT


class ResolutionStep(BaseModel):
    """One step an external executor performs, in ascending order."""

    step_id: str = Field(default_factory=new_id)
    description: str
    kind: StepKind
    parameters: dict[str, str] = Field(default_factory=dict)
    order: int = Field(ge=1)
    optional: bool = False


class Resolution(BaseModel):
    """A suggested way of resolving one conflict."""

    resolution_id: str = Field(default_factory=new_id)
    kind: ResolutionKind
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    steps: list[ResolutionStep] = Field(default_factory=list)
    estimated_effort: ResolutionEffort
    risk_level: RiskLevel
    required_expertise: list[str] = Field(default_factory=list)


class Conflict(BaseModel):
    """A conflict found by one detection pass.

    severity and resolution_status are frozen: they change only
    through the detector, which hands out updated copies.
    """

    conflict_id: str = Field(default_factory=new_id)
    kind: ConflictKind
    severity: ConflictSeverity = Field(
        default=ConflictSeverity.MINOR, frozen=True
    )
    file_path: str
    location: ConflictLocation = Field(default_factory=ConflictLocation)
    description: str = ""
    conflicting_refs: list[str] = Field(default_factory=list)
    content: ConflictContent = Field(default_factory=ConflictContent)
    suggested_resolutions: list[Resolution] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)
    detected_at: datetime = Field(default_factory=utcnow)
    resolution_status: ResolutionStatus = Field(
        default=ResolutionStatus.DETECTED, frozen=True
    )


__all__ = [
    "Conflict",
    "ConflictContent",
    "ConflictKind",
    "ConflictLocation",
    "ConflictSeverity",
    "ContentCategory",
    "Resolution",
    "ResolutionEffort",
    "ResolutionKind",
    "ResolutionStatus",
    "ResolutionStep",
    "RiskLevel",
    "StepKind",
]
