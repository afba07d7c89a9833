"""Tests for record models: ordering, frozen fields, derived values."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from mergesight.state import (
    Conflict,
    ConflictKind,
    ConflictSeverity,
    IssueSeverity,
    RepositoryHealth,
    RepositoryState,
    RepositoryStatistics,
    Resolution,
    ResolutionEffort,
    ResolutionKind,
    ResolutionStatus,
    ResolutionStep,
    RiskLevel,
    StepKind,
    TrackedRepository,
)


def test_severity_orders_by_declaration():
    """Ordering follows the scale, not the alphabet."""
    assert ConflictSeverity.MINOR < ConflictSeverity.MODERATE
    assert ConflictSeverity.MODERATE < ConflictSeverity.MAJOR
    assert ConflictSeverity.MAJOR < ConflictSeverity.CRITICAL
    assert ConflictSeverity.CRITICAL < ConflictSeverity.BLOCKING
    # Alphabetically "blocking" < "minor"
    assert ConflictSeverity.BLOCKING > ConflictSeverity.MINOR
    assert max(ConflictSeverity) == ConflictSeverity.BLOCKING


def test_other_scales_order():
    assert ResolutionEffort.MINIMAL < ResolutionEffort.VERY_HIGH
    assert RiskLevel.VERY_LOW < RiskLevel.LOW < RiskLevel.MEDIUM
    assert IssueSeverity.LOW < IssueSeverity.MEDIUM < IssueSeverity.HIGH
    assert IssueSeverity.HIGH <= IssueSeverity.HIGH
    assert IssueSeverity.CRITICAL >= IssueSeverity.HIGH


def test_scales_do_not_compare_across_types():
    with pytest.raises(TypeError):
        ConflictSeverity.MAJOR < RiskLevel.HIGH  # noqa: B015


def test_scales_serialize_as_strings():
    assert ConflictSeverity.MAJOR == "major"
    assert str(RiskLevel.VERY_HIGH) == "very_high"


def test_conflict_defaults():
    conflict = Conflict(kind=ConflictKind.ADD_ADD, file_path="a.txt")

    assert conflict.resolution_status == ResolutionStatus.DETECTED
    assert conflict.severity == ConflictSeverity.MINOR
    assert conflict.detected_at.tzinfo is not None
    assert len(conflict.conflict_id) == 36


def test_conflict_status_and_severity_are_frozen():
    conflict = Conflict(kind=ConflictKind.ADD_ADD, file_path="a.txt")

    with pytest.raises(ValidationError):
        conflict.resolution_status = ResolutionStatus.RESOLVED
    with pytest.raises(ValidationError):
        conflict.severity = ConflictSeverity.BLOCKING

    # Other fields stay writable
    conflict.description = "edited"
    assert conflict.description == "edited"


def test_resolution_confidence_bounds():
    with pytest.raises(ValidationError):
        Resolution(
            kind=ResolutionKind.DEFER,
            description="later",
            confidence=1.5,
            estimated_effort=ResolutionEffort.LOW,
            risk_level=RiskLevel.LOW,
        )


def test_step_order_starts_at_one():
    with pytest.raises(ValidationError):
        ResolutionStep(description="x", kind=StepKind.FILE_EDIT, order=0)


def test_conflict_json_round_trip():
    """The JSON encoding carries every field."""
    conflict = Conflict(
        kind=ConflictKind.DELETE_MODIFY,
        severity=ConflictSeverity.CRITICAL,
        file_path="src/core/main.rs",
        conflicting_refs=["HEAD", "MERGE_HEAD"],
        metadata={"marker_blocks": "2"},
        suggested_resolutions=[Resolution(
            kind=ResolutionKind.ACCEPT_OURS,
            description="ours",
            confidence=0.7,
            steps=[ResolutionStep(
                description="checkout",
                kind=StepKind.BACKEND_COMMAND,
                parameters={"command": "checkout --ours"},
                order=1,
            )],
            estimated_effort=ResolutionEffort.MINIMAL,
            risk_level=RiskLevel.LOW,
        )],
    )

    payload = conflict.model_dump_json()
    restored = Conflict.model_validate_json(payload)

    assert restored == conflict
    assert '"severity":"critical"' in payload
    assert '"kind":"delete_modify"' in payload


def test_clean_flag_is_derived():
    assert RepositoryState().working_directory_clean
    assert not RepositoryState(untracked_files=1).working_directory_clean
    assert not RepositoryState(staged_changes=2).working_directory_clean
    assert not RepositoryState(unstaged_changes=3).working_directory_clean


def test_clean_flag_is_serialized_and_ignored_on_input():
    state = RepositoryState(unstaged_changes=1)
    data = state.model_dump()

    assert data["working_directory_clean"] is False
    data["working_directory_clean"] = True
    assert not RepositoryState.model_validate(data).working_directory_clean


def test_activity_score_is_clamped():
    assert RepositoryStatistics(activity_score=3.2).activity_score == 1.0
    assert RepositoryStatistics(activity_score=-1).activity_score == 0.0
    assert RepositoryStatistics(activity_score=0.25).activity_score == 0.25


def test_tracked_repository_round_trip():
    tracked = TrackedRepository(
        repository_id="id-1",
        path="/tmp/repo",
        name="repo",
        state=RepositoryState(
            staged_changes=1,
            last_commit_timestamp=datetime(2024, 1, 2, tzinfo=UTC),
        ),
    )

    restored = TrackedRepository.model_validate_json(
        tracked.model_dump_json()
    )

    assert restored == tracked
    assert not restored.state.working_directory_clean


def test_health_score_bounds():
    with pytest.raises(ValidationError):
        RepositoryHealth(score=1.2)
