"""Scan command - snapshot a repository's state and metadata."""

from pathlib import Path

from pydantic import BaseModel, Field


class ScanCommand(BaseModel):
    """Scan a repository and print its tracked snapshot as JSON.

    The snapshot covers branches, working tree counts, metadata and
    activity statistics.
    """

    path: Path = Field(
        default=Path("."),
        description="Repository to scan",
    )

    async def run_workflow(self, state: "State") -> int:
        from mergesight.tracker.tracker import RepositoryTracker

        tracker = RepositoryTracker(state.config.tracker)
        repository_id = await tracker.get_or_create_repository_id(self.path)
        tracked = tracker.get_repository(repository_id)
        print(tracked.model_dump_json(indent=2))
        return 0
