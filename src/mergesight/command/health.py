"""Health command - run read-only repository health checks."""

from pathlib import Path

from pydantic import BaseModel, Field

from mergesight.core.log import logger


class HealthCommand(BaseModel):
    """Check a repository's health and print the result as JSON.

    Checks cover HEAD, the origin remote, the working tree, metadata
    size and unfinished merges. Problems come with suggested fixes;
    none are applied.
    """

    path: Path = Field(
        default=Path("."),
        description="Repository to check",
    )

    async def run_workflow(self, state: "State") -> int:
        """Run health checks.

        Args:
            state: State instance

        Returns:
            Exit code (0=success, even when issues were found)
        """
        from mergesight.tracker.tracker import RepositoryTracker

        tracker = RepositoryTracker(state.config.tracker)
        repository_id = await tracker.get_or_create_repository_id(self.path)
        health = await tracker.check_repository_health(repository_id)
        print(health.model_dump_json(indent=2))

        for issue in health.issues:
            logger.warn(
                issue.description,
                kind=str(issue.kind),
                severity=str(issue.severity),
            )
        return 0
