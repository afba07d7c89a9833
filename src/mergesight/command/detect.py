"""Detect command - report conflicts in a repository."""

from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter

from mergesight.core.log import logger
from mergesight.state.conflict import Conflict

_CONFLICTS = TypeAdapter(list[Conflict])


class DetectCommand(BaseModel):
    """Detect merge conflicts and print them with suggested resolutions.

    Output is a JSON array of conflict records. Nothing in the
    repository is modified.
    """

    path: Path = Field(
        default=Path("."),
        description="Repository to inspect",
    )

    async def run_workflow(self, state: "State") -> int:
        """Run detection.

        Args:
            state: State instance

        Returns:
            Exit code (0=success)
        """
        from mergesight.conflict.detector import ConflictDetector

        detector = ConflictDetector(state.config.detection)
        conflicts = await detector.detect_conflicts(self.path)
        print(_CONFLICTS.dump_json(conflicts, indent=2).decode())

        stats = detector.get_conflict_statistics()
        if stats.inactive_strategies:
            logger.debug(
                "Inactive detection strategies",
                strategies=stats.inactive_strategies,
            )
        logger.info(f"Detected {len(conflicts)} conflict(s)")
        return 0
