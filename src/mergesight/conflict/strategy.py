"""Pluggable detection strategies."""

from abc import abstractmethod
from typing import Protocol

from mergesight.git.repository import RepositoryHandle
from mergesight.state.conflict import Conflict


class DetectionStrategy(Protocol):
    """Protocol for extra detection passes (semantic, proactive).

    A strategy looks at an open repository and returns conflicts the
    merge-state and status passes cannot see.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name (semantic, proactive)."""
        pass

    @property
    @abstractmethod
    def implemented(self) -> bool:
        """False for placeholders that never report anything."""
        pass

    @abstractmethod
    def detect(
        self, handle: RepositoryHandle, sensitivity: float
    ) -> list[Conflict]:
        """Detect conflicts in the repository.

        Args:
            handle: Open repository, read-only
            sensitivity: detection_sensitivity from config, 0.0 to 1.0;
                higher means report more speculative conflicts

        Returns:
            Conflicts found; analysis and resolutions are added later
        """
        pass


class NoOpStrategy:
    """Placeholder strategy that reports nothing.

    Detectors report enabled no-op strategies as inactive in their
    statistics.
    """

    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def implemented(self) -> bool:
        return False

    def detect(
        self, handle: RepositoryHandle, sensitivity: float
    ) -> list[Conflict]:
        return []


__all__ = ["DetectionStrategy", "NoOpStrategy"]
