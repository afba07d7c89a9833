"""Conflict detection, caching and resolution bookkeeping."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from mergesight.conflict.analysis import analyze
from mergesight.conflict.lifecycle import transition
from mergesight.conflict.patterns import PatternMiner
from mergesight.conflict.resolutions import suggest_resolutions
from mergesight.conflict.strategy import DetectionStrategy, NoOpStrategy
from mergesight.core.cache import BoundedCache
from mergesight.core.config import DetectionConfig
from mergesight.core.errors import UnknownConflictError
from mergesight.core.log import logger
from mergesight.git.repository import RepositoryHandle, StatusEntry
from mergesight.state.conflict import (
    Conflict,
    ConflictContent,
    ConflictKind,
    ConflictSeverity,
    Resolution,
    ResolutionStatus,
)
from mergesight.state.history import (
    ConflictPattern,
    ConflictStatistics,
    ResolutionOutcome,
    ResolutionRecord,
)
from mergesight.tools.classifier import classify

SEMANTIC = "semantic"
PROACTIVE = "proactive"

STATUS_KINDS = {
    "DU": ConflictKind.DELETE_MODIFY,
    "UD": ConflictKind.DELETE_MODIFY,
    "AA": ConflictKind.ADD_ADD,
}


def _merge_conflict(
    path: str, kind: ConflictKind = ConflictKind.CONTENT_CONFLICT
) -> Conflict:
    return Conflict(
        kind=kind,
        severity=ConflictSeverity.MAJOR,
        file_path=path,
        description=f"Merge conflict in {path}",
        conflicting_refs=["HEAD", "MERGE_HEAD"],
        content=ConflictContent(has_markers=True, category=classify(path)),
    )


def _status_conflict(entry: StatusEntry) -> Conflict:
    return Conflict(
        kind=STATUS_KINDS.get(entry.code, ConflictKind.CONTENT_CONFLICT),
        severity=ConflictSeverity.MAJOR,
        file_path=entry.path,
        description=f"Status conflict in {entry.path}",
        content=ConflictContent(category=classify(entry.path)),
    )


class ConflictDetector:
    """Detect conflicts in repositories and track their resolution.

    Detection results are cached per repository path in an LRU cache
    of config.cache_size entries; a cached path is not rescanned until
    invalidate() drops it. Status changes and recorded resolutions
    update the cached conflicts.

    All operations on one detector are serialized by an asyncio.Lock.
    Git access runs in a worker thread.
    """

    def __init__(
        self,
        config: DetectionConfig,
        strategies: Mapping[str, DetectionStrategy] | None = None,
    ):
        """Initialize detector.

        Args:
            config: Detection settings
            strategies: Strategies keyed by "semantic" / "proactive";
                missing entries get a NoOpStrategy
        """
        self.config = config
        self.strategies: dict[str, DetectionStrategy] = {
            SEMANTIC: NoOpStrategy(SEMANTIC),
            PROACTIVE: NoOpStrategy(PROACTIVE),
        }
        if strategies:
            self.strategies.update(strategies)

        self._cache: BoundedCache[str, list[Conflict]] = BoundedCache(
            config.cache_size
        )
        self._history: list[ResolutionRecord] = []
        self._patterns: dict[str, ConflictPattern] = {}
        self._miner = PatternMiner(config.min_pattern_occurrences)
        self._lock = asyncio.Lock()

    @property
    def resolution_history(self) -> tuple[ResolutionRecord, ...]:
        return tuple(self._history)

    @property
    def patterns(self) -> Mapping[str, ConflictPattern]:
        return MappingProxyType(self._patterns)

    def enabled_strategies(self) -> list[DetectionStrategy]:
        enabled = []
        if self.config.enable_semantic_detection:
            enabled.append(self.strategies[SEMANTIC])
        if self.config.enable_proactive_detection:
            enabled.append(self.strategies[PROACTIVE])
        return enabled

    # Detection

    async def detect_conflicts(
        self, repository_path: Path | str
    ) -> list[Conflict]:
        """Detect conflicts in the repository at repository_path.

        Args:
            repository_path: Repository root

        Returns:
            Analyzed conflicts with suggested resolutions

        Raises:
            RepositoryAccessError: If the repository cannot be opened
            BackendOperationError: If git enumeration fails
        """
        key = str(Path(repository_path).resolve())
        async with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Conflict cache hit", path=key)
                return list(cached)

            conflicts = await asyncio.to_thread(self._scan, key)
            self._cache.put(key, conflicts)
            return list(conflicts)

    def _scan(self, path: str) -> list[Conflict]:
        with logger.span("Detect conflicts", path=path):
            with RepositoryHandle.open(path) as handle:
                status = self._detect_status(handle)
                conflicts = self._detect_merge_state(handle, status)
                reported = {c.file_path for c in conflicts}
                conflicts.extend(
                    c for c in status if c.file_path not in reported
                )
                for strategy in self.enabled_strategies():
                    found = strategy.detect(
                        handle, self.config.detection_sensitivity
                    )
                    logger.debug(
                        "Strategy finished",
                        strategy=strategy.name,
                        count=len(found),
                    )
                    conflicts.extend(found)

                analyzed = []
                for conflict in conflicts:
                    conflict = analyze(handle, conflict)
                    analyzed.append(conflict.model_copy(update={
                        "suggested_resolutions": suggest_resolutions(conflict)
                    }))

        logger.info(
            f"Found {len(analyzed)} conflict(s)",
            path=path,
            count=len(analyzed),
        )
        return analyzed

    def _detect_merge_state(
        self, handle: RepositoryHandle, status: list[Conflict]
    ) -> list[Conflict]:
        """One conflict per unmerged path, kind taken from status."""
        if not handle.is_merging():
            return []
        kinds = {c.file_path: c.kind for c in status}
        default = ConflictKind.CONTENT_CONFLICT
        return [
            _merge_conflict(path, kinds.get(path, default))
            for path in handle.unmerged_paths()
        ]

    def _detect_status(self, handle: RepositoryHandle) -> list[Conflict]:
        return [_status_conflict(e) for e in handle.conflicted_entries()]

    async def invalidate(self, repository_path: Path | str | None = None):
        """Drop cached results for one repository, or all of them.

        A detection pass in progress finishes and is cached first.
        """
        async with self._lock:
            if repository_path is None:
                self._cache.clear()
                return
            self._cache.pop(str(Path(repository_path).resolve()))

    # Resolution bookkeeping

    def _locate(self, conflict_id: str) -> tuple[list[Conflict], int]:
        for conflicts in self._cache.values():
            for index, conflict in enumerate(conflicts):
                if conflict.conflict_id == conflict_id:
                    return conflicts, index
        raise UnknownConflictError(conflict_id)

    def get_conflict(self, conflict_id: str) -> Conflict:
        conflicts, index = self._locate(conflict_id)
        return conflicts[index]

    async def _move(
        self, conflict_id: str, target: ResolutionStatus
    ) -> Conflict:
        async with self._lock:
            conflicts, index = self._locate(conflict_id)
            updated = transition(conflicts[index], target)
            conflicts[index] = updated
            logger.debug(
                "Conflict status changed",
                conflict_id=conflict_id,
                status=str(target),
            )
            return updated

    async def begin_resolution(self, conflict_id: str) -> Conflict:
        return await self._move(conflict_id, ResolutionStatus.IN_PROGRESS)

    async def defer(self, conflict_id: str) -> Conflict:
        return await self._move(conflict_id, ResolutionStatus.DEFERRED)

    async def escalate(self, conflict_id: str) -> Conflict:
        return await self._move(conflict_id, ResolutionStatus.ESCALATED)

    async def record_resolution(
        self,
        conflict_id: str,
        resolution: Resolution,
        outcome: ResolutionOutcome,
        minutes: int,
        participants: Iterable[str] = (),
        lessons_learned: Iterable[str] = (),
    ) -> ResolutionRecord:
        """Record how a conflict was resolved.

        Moves the conflict to in_progress if needed, then to resolved
        or failed depending on outcome.success, and appends a record
        to the history.

        Args:
            conflict_id: Cached conflict the resolution applies to
            resolution: Resolution that was applied
            outcome: Result reported by whoever applied it
            minutes: Time spent resolving
            participants: People involved
            lessons_learned: Free-form notes

        Returns:
            The appended ResolutionRecord

        Raises:
            UnknownConflictError: If no cached conflict has the id
            InvalidTransitionError: If the conflict is already resolved
                or escalated
        """
        async with self._lock:
            conflicts, index = self._locate(conflict_id)
            conflict = conflicts[index]
            if conflict.resolution_status != ResolutionStatus.IN_PROGRESS:
                conflict = transition(conflict, ResolutionStatus.IN_PROGRESS)
            final = (
                ResolutionStatus.RESOLVED if outcome.success
                else ResolutionStatus.FAILED
            )
            conflict = transition(conflict, final)

            record = ResolutionRecord(
                conflict=conflict,
                resolution=resolution,
                outcome=outcome,
                resolution_time_minutes=minutes,
                participants=list(participants),
                lessons_learned=list(lessons_learned),
            )
            conflicts[index] = conflict
            self._history.append(record)
            logger.info(
                f"Recorded resolution for {conflict.file_path}",
                conflict_id=conflict_id,
                resolution=str(resolution.kind),
                success=outcome.success,
            )

            if self.config.enable_pattern_learning:
                self._patterns = self._miner.mine(self._history)
            return record

    # Statistics

    def get_conflict_statistics(self) -> ConflictStatistics:
        """Summarize cached conflicts and resolution history.

        Resolved conflicts stay in the cache and are also counted
        through the history, so they appear twice in the total.
        """
        cached = [c for conflicts in self._cache.values() for c in conflicts]
        resolved = len(self._history)
        total = len(cached) + resolved

        distribution = dict(Counter(c.kind for c in cached))

        average = 0.0
        if self._history:
            average = sum(
                r.resolution_time_minutes for r in self._history
            ) / len(self._history)

        return ConflictStatistics(
            total_conflicts=total,
            resolved_conflicts=resolved,
            resolution_rate=resolved / total if total else 0.0,
            average_resolution_time_minutes=average,
            conflict_kind_distribution=distribution,
            patterns_learned=len(self._patterns),
            inactive_strategies=[
                s.name for s in self.enabled_strategies()
                if not s.implemented
            ],
        )


__all__ = ["ConflictDetector"]
