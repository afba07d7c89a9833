"""Mine recurring conflict patterns from resolution history."""

from collections import Counter, defaultdict
from collections.abc import Iterable

from mergesight.state.conflict import ConflictKind
from mergesight.state.history import ConflictPattern, ResolutionRecord
from mergesight.tools.classifier import extension


class PatternMiner:
    """Group resolution records into conflict patterns.

    Records are grouped by (conflict kind, file extension). A group
    becomes a pattern once it holds at least min_occurrences records.
    Confidence grows with the group's success rate and, up to twice
    min_occurrences, with its size.
    """

    def __init__(self, min_occurrences: int = 2):
        if min_occurrences < 1:
            raise ValueError("min_occurrences must be at least 1")
        self.min_occurrences = min_occurrences

    def mine(
        self, history: Iterable[ResolutionRecord]
    ) -> dict[str, ConflictPattern]:
        """Build patterns from history.

        Args:
            history: Resolution records, any order

        Returns:
            Patterns keyed by pattern_id ("<kind>:<extension>")
        """
        groups: dict[tuple[ConflictKind, str], list[ResolutionRecord]] = (
            defaultdict(list)
        )
        for record in history:
            key = (record.conflict.kind, extension(record.conflict.file_path))
            groups[key].append(record)

        patterns = {}
        for (kind, ext), records in sorted(groups.items()):
            if len(records) < self.min_occurrences:
                continue
            pattern = self._build(kind, ext, records)
            patterns[pattern.pattern_id] = pattern
        return patterns

    def _build(
        self,
        kind: ConflictKind,
        ext: str,
        records: list[ResolutionRecord],
    ) -> ConflictPattern:
        frequency = len(records)
        successes = [r for r in records if r.outcome.success]
        success_rate = len(successes) / frequency
        counts = Counter(r.resolution.kind for r in successes)
        scale = min(1.0, frequency / (2 * self.min_occurrences))
        label = f"*.{ext}" if ext else "*"

        return ConflictPattern(
            pattern_id=f"{kind}:{ext}",
            name=f"{kind} in {label}",
            conflict_kinds=[kind],
            file_patterns=[label],
            typical_resolutions=[k for k, _ in counts.most_common()],
            frequency=frequency,
            success_rate=success_rate,
            confidence=success_rate * scale,
        )


__all__ = ["PatternMiner"]
