"""Repository identities, snapshots, events and health records."""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter, deque
from datetime import UTC, datetime, timedelta
from pathlib import Path

from mergesight.core.config import TrackerConfig
from mergesight.core.errors import UnknownRepositoryError
from mergesight.core.log import logger
from mergesight.git.repository import RepositoryHandle
from mergesight.state.repository import (
    RepositoryHealth,
    StateChangeEvent,
    TrackedRepository,
    TrackingStatistics,
)
from mergesight.tracker.events import diff_snapshots
from mergesight.tracker.health import check_health
from mergesight.tracker.scanner import scan_repository


def _scan_path(
    path: str, repository_id: str, config: TrackerConfig
) -> TrackedRepository:
    with RepositoryHandle.open(path) as handle:
        return scan_repository(handle, repository_id, config)


class RepositoryTracker:
    """Keep one TrackedRepository per repository path.

    Identities are assigned on first sight of a path and stay stable
    across rescans. Rescans record what changed as StateChangeEvents,
    keeping at most config.max_state_events of them.

    Mutating operations are serialized by an asyncio.Lock; git access
    runs in a worker thread.
    """

    def __init__(self, config: TrackerConfig):
        self.config = config
        self._repositories: dict[str, TrackedRepository] = {}
        self._path_ids: dict[str, str] = {}
        self._health: dict[str, RepositoryHealth] = {}
        self._events: deque[StateChangeEvent] = deque(
            maxlen=config.max_state_events
        )
        self._lock = asyncio.Lock()

    async def get_or_create_repository_id(self, path: Path | str) -> str:
        """Return the identity for path, scanning it on first sight.

        Args:
            path: Repository root

        Returns:
            Stable repository id

        Raises:
            RepositoryAccessError: If the repository cannot be opened
            BackendOperationError: If scanning fails
        """
        key = str(Path(path).resolve())
        async with self._lock:
            existing = self._path_ids.get(key)
            if existing is not None:
                return existing

            repository_id = str(uuid.uuid4())
            tracked = await asyncio.to_thread(
                _scan_path, key, repository_id, self.config
            )
            self._repositories[repository_id] = tracked
            self._path_ids[key] = repository_id
            logger.info(
                f"Tracking repository {tracked.name}",
                repository_id=repository_id,
                path=key,
            )
            return repository_id

    async def rescan_repository(self, repository_id: str) -> TrackedRepository:
        """Scan a tracked repository again and record what changed.

        Raises:
            UnknownRepositoryError: If the id is not tracked
            RepositoryAccessError: If the repository cannot be opened
            BackendOperationError: If scanning fails
        """
        async with self._lock:
            previous = self._require(repository_id)
            current = await asyncio.to_thread(
                _scan_path, previous.path, repository_id, self.config
            )
            events = diff_snapshots(previous, current)
            self._events.extend(events)
            self._repositories[repository_id] = current
            for event in events:
                logger.debug(
                    event.description,
                    repository_id=repository_id,
                    kind=str(event.kind),
                )
            return current

    async def check_repository_health(
        self, repository_id: str
    ) -> RepositoryHealth:
        """Run the health checks and keep the result.

        Raises:
            UnknownRepositoryError: If the id is not tracked
            BackendOperationError: If a check cannot enumerate state
        """
        async with self._lock:
            tracked = self._require(repository_id)
            health = await asyncio.to_thread(
                check_health, tracked.path, self.config
            )
            self._health[repository_id] = health
            return health

    def _require(self, repository_id: str) -> TrackedRepository:
        tracked = self._repositories.get(repository_id)
        if tracked is None:
            raise UnknownRepositoryError(repository_id)
        return tracked

    def get_repository(self, repository_id: str) -> TrackedRepository | None:
        return self._repositories.get(repository_id)

    def get_all_repositories(self) -> list[TrackedRepository]:
        return list(self._repositories.values())

    def get_repository_health(
        self, repository_id: str
    ) -> RepositoryHealth | None:
        return self._health.get(repository_id)

    def get_state_events(self, repository_id: str) -> list[StateChangeEvent]:
        """Events for one repository, oldest first."""
        return [e for e in self._events if e.repository_id == repository_id]

    async def remove_repository(self, repository_id: str):
        """Forget a repository, its health record and its events.

        Waits for a rescan or health check in progress to finish.
        Unknown ids are ignored.
        """
        async with self._lock:
            tracked = self._repositories.pop(repository_id, None)
            if tracked is None:
                return
            self._path_ids.pop(tracked.path, None)
            self._health.pop(repository_id, None)
            kept = [
                e for e in self._events if e.repository_id != repository_id
            ]
            self._events.clear()
            self._events.extend(kept)
        logger.info(
            f"Stopped tracking repository {tracked.name}",
            repository_id=repository_id,
        )

    def get_tracking_statistics(self) -> TrackingStatistics:
        """Counts over tracked repositories, kept events and health records."""
        return TrackingStatistics(
            total_repositories=len(self._repositories),
            total_events=len(self._events),
            event_kind_distribution=dict(
                Counter(e.kind for e in self._events)
            ),
            health_status_distribution=dict(
                Counter(h.status for h in self._health.values())
            ),
        )

    def needs_rescan(
        self, repository_id: str, now: datetime | None = None
    ) -> bool:
        """True when the last scan is older than scan_interval_seconds.

        Raises:
            UnknownRepositoryError: If the id is not tracked
        """
        tracked = self._require(repository_id)
        now = now or datetime.now(UTC)
        interval = timedelta(seconds=self.config.scan_interval_seconds)
        return now - tracked.last_scanned > interval


__all__ = ["RepositoryTracker"]
