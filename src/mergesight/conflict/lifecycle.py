"""Conflict resolution status transitions."""

from mergesight.core.errors import InvalidTransitionError
from mergesight.state.conflict import Conflict, ResolutionStatus

TRANSITIONS: dict[ResolutionStatus, frozenset[ResolutionStatus]] = {
    ResolutionStatus.DETECTED: frozenset({ResolutionStatus.IN_PROGRESS}),
    ResolutionStatus.IN_PROGRESS: frozenset({
        ResolutionStatus.RESOLVED,
        ResolutionStatus.FAILED,
        ResolutionStatus.DEFERRED,
        ResolutionStatus.ESCALATED,
    }),
    ResolutionStatus.DEFERRED: frozenset({ResolutionStatus.IN_PROGRESS}),
    ResolutionStatus.FAILED: frozenset({ResolutionStatus.IN_PROGRESS}),
    ResolutionStatus.RESOLVED: frozenset(),
    ResolutionStatus.ESCALATED: frozenset(),
}


def can_transition(
    current: ResolutionStatus, target: ResolutionStatus
) -> bool:
    return target in TRANSITIONS[current]


def transition(conflict: Conflict, target: ResolutionStatus) -> Conflict:
    """Return a copy of conflict with its status moved to target.

    Raises:
        InvalidTransitionError: If the move is not allowed
    """
    current = conflict.resolution_status
    if not can_transition(current, target):
        raise InvalidTransitionError(conflict.conflict_id, current, target)
    return conflict.model_copy(update={"resolution_status": target})


__all__ = ["TRANSITIONS", "can_transition", "transition"]
