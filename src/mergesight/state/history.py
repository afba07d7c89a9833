"""Resolution history, learned patterns and detector statistics."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from mergesight.state.conflict import (
    Conflict,
    ConflictKind,
    Resolution,
    ResolutionKind,
    new_id,
    utcnow,
)


class ResolutionOutcome(BaseModel):
    """What happened when a resolution was applied externally."""

    success: bool
    description: str = ""
    quality_score: float = Field(default=0.0, ge=0.0, le=1.0)
    side_effects: list[str] = Field(default_factory=list)
    follow_up_actions: list[str] = Field(default_factory=list)


class ResolutionRecord(BaseModel):
    """Append-only history entry linking a conflict to its resolution."""

    record_id: str = Field(default_factory=new_id)
    conflict: Conflict
    resolution: Resolution
    outcome: ResolutionOutcome
    resolution_time_minutes: int = Field(ge=0)
    participants: list[str] = Field(default_factory=list)
    lessons_learned: list[str] = Field(default_factory=list)
    recorded_at: datetime = Field(default_factory=utcnow)


class ConflictPattern(BaseModel):
    """Recurring conflict shape mined from the resolution history."""

    pattern_id: str
    name: str
    conflict_kinds: list[ConflictKind] = Field(default_factory=list)
    file_patterns: list[str] = Field(default_factory=list)
    typical_resolutions: list[ResolutionKind] = Field(default_factory=list)
    frequency: int = 0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ConflictStatistics(BaseModel):
    total_conflicts: int = 0
    resolved_conflicts: int = 0
    resolution_rate: float = 0.0
    average_resolution_time_minutes: float = 0.0
    conflict_kind_distribution: dict[ConflictKind, int] = Field(
        default_factory=dict
    )
    patterns_learned: int = 0
    inactive_strategies: list[str] = Field(
        default_factory=list,
        description="Enabled strategies that only have the no-op default",
    )


__all__ = [
    "ConflictPattern",
    "ConflictStatistics",
    "ResolutionOutcome",
    "ResolutionRecord",
]
