"""Suggested resolutions for analyzed conflicts."""

from mergesight.state.conflict import (
    Conflict,
    ConflictSeverity,
    Resolution,
    ResolutionEffort,
    ResolutionKind,
    ResolutionStep,
    RiskLevel,
    StepKind,
)


def _checkout_side(conflict: Conflict, side: str) -> Resolution:
    kind = (
        ResolutionKind.ACCEPT_OURS if side == "ours"
        else ResolutionKind.ACCEPT_THEIRS
    )
    return Resolution(
        kind=kind,
        description=f"Accept {side} version of {conflict.file_path}",
        confidence=0.7,
        steps=[
            ResolutionStep(
                description=f"Check out {side} version",
                kind=StepKind.BACKEND_COMMAND,
                parameters={
                    "command": f"checkout --{side}",
                    "file": conflict.file_path,
                },
                order=1,
            ),
        ],
        estimated_effort=ResolutionEffort.MINIMAL,
        risk_level=RiskLevel.LOW,
        required_expertise=["git"],
    )


def _manual_merge(conflict: Conflict) -> Resolution:
    return Resolution(
        kind=ResolutionKind.MANUAL_MERGE,
        description=f"Merge both sides of {conflict.file_path} by hand",
        confidence=0.9,
        steps=[
            ResolutionStep(
                description="Review conflicting changes",
                kind=StepKind.CODE_REVIEW,
                order=1,
            ),
            ResolutionStep(
                description="Edit file to combine both sides",
                kind=StepKind.FILE_EDIT,
                parameters={"file": conflict.file_path},
                order=2,
            ),
            ResolutionStep(
                description="Run tests against the merged result",
                kind=StepKind.TEST_EXECUTION,
                order=3,
                optional=True,
            ),
        ],
        estimated_effort=ResolutionEffort.MEDIUM,
        risk_level=RiskLevel.MEDIUM,
        required_expertise=["domain_knowledge", "code_review"],
    )


def suggest_resolutions(conflict: Conflict) -> list[Resolution]:
    """Build the resolution suggestions for one conflict.

    Taking either side is always offered. Conflicts of major severity
    or worse also get a manual merge.

    Args:
        conflict: Analyzed conflict (severity already assessed)

    Returns:
        Resolutions in suggestion order
    """
    resolutions = [
        _checkout_side(conflict, "ours"),
        _checkout_side(conflict, "theirs"),
    ]
    if conflict.severity >= ConflictSeverity.MAJOR:
        resolutions.append(_manual_merge(conflict))
    return resolutions


__all__ = ["suggest_resolutions"]
