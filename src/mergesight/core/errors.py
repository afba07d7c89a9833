"""Exception taxonomy for repository scanning and conflict detection.

RepositoryAccessError and BackendOperationError are fatal for the call
in progress and are never retried here. Missing optional metadata (no
remote, no commits, unreadable files) is not an error at all: the
affected field is left empty.
"""

from pathlib import Path


class MergesightError(Exception):
    """Base class for all mergesight errors."""


class RepositoryAccessError(MergesightError):
    """Path is not a repository, or the backend cannot open it."""

    def __init__(self, path: Path | str, reason: str | None = None):
        self.path = Path(path)
        self.reason = reason
        message = f"Cannot open repository at {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BackendOperationError(MergesightError):
    """Enumeration of status, refs, tags or commits failed."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Backend operation '{operation}' failed: {reason}")


class InvalidTransitionError(MergesightError, ValueError):
    """A conflict resolution status change that is not allowed."""

    def __init__(self, conflict_id: str, current, target):
        self.conflict_id = conflict_id
        self.current = current
        self.target = target
        super().__init__(
            f"Conflict {conflict_id} cannot move from "
            f"'{current}' to '{target}'"
        )


class UnknownConflictError(MergesightError, KeyError):
    """No cached conflict carries the requested identifier."""


class UnknownRepositoryError(MergesightError, KeyError):
    """No tracked repository carries the requested identifier."""


__all__ = [
    "MergesightError",
    "RepositoryAccessError",
    "BackendOperationError",
    "InvalidTransitionError",
    "UnknownConflictError",
    "UnknownRepositoryError",
]
