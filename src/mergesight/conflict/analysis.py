"""Per-conflict content analysis and severity scoring."""

from mergesight.core.log import logger
from mergesight.git.repository import RepositoryHandle
from mergesight.state.conflict import (
    Conflict,
    ConflictContent,
    ConflictKind,
    ConflictLocation,
    ConflictSeverity,
)
from mergesight.tools.classifier import classify
from mergesight.tools.parser import has_markers, parse

KIND_WEIGHTS = {
    ConflictKind.CONTENT_CONFLICT: 1,
    ConflictKind.DELETE_MODIFY: 2,
    ConflictKind.SEMANTIC_CONFLICT: 3,
    ConflictKind.STRUCTURAL_CONFLICT: 3,
}
CRITICAL_PATH_HINTS = ("main", "core")

# Upper bound (inclusive) of each severity bucket
SEVERITY_BUCKETS = (
    (1, ConflictSeverity.MINOR),
    (3, ConflictSeverity.MODERATE),
    (5, ConflictSeverity.MAJOR),
    (7, ConflictSeverity.CRITICAL),
)


def severity_score(file_path: str, kind: ConflictKind, size: int) -> int:
    """Score a conflict by path, kind and combined content length."""
    score = 0
    if any(hint in file_path for hint in CRITICAL_PATH_HINTS):
        score += 2
    score += KIND_WEIGHTS.get(kind, 1)
    if size > 1000:
        score += 2
    elif size > 100:
        score += 1
    return score


def severity_for_score(score: int) -> ConflictSeverity:
    for upper, severity in SEVERITY_BUCKETS:
        if score <= upper:
            return severity
    return ConflictSeverity.BLOCKING


def assess_severity(conflict: Conflict) -> ConflictSeverity:
    size = len(conflict.content.ours) + len(conflict.content.theirs)
    return severity_for_score(
        severity_score(conflict.file_path, conflict.kind, size)
    )


def read_content(
    handle: RepositoryHandle, conflict: Conflict
) -> tuple[ConflictContent, ConflictLocation, dict[str, str]]:
    """Extract marker content for a conflicted file.

    Unreadable files and malformed markers are not errors: the
    existing content is kept and the problem is logged. A readable file
    without markers clears has_markers.

    Returns:
        Tuple of (content, location, extra metadata)
    """
    content = conflict.content.model_copy(
        update={"category": classify(conflict.file_path)}
    )
    location = conflict.location
    metadata: dict[str, str] = {}

    try:
        text = handle.read_file(conflict.file_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(
            "Conflicted file not readable",
            file=conflict.file_path,
            error=str(e),
        )
        return content, location, metadata

    if not has_markers(text):
        content = content.model_copy(update={"has_markers": False})
        return content, location, metadata

    try:
        blocks = parse(text)
    except ValueError as e:
        logger.warn(
            "Malformed conflict markers",
            file=conflict.file_path,
            error=str(e),
        )
        return content, location, metadata

    if not blocks:
        return content, location, metadata

    bases = [block.base for block in blocks if block.base is not None]
    content = content.model_copy(update={
        "ours": "".join(block.ours for block in blocks),
        "theirs": "".join(block.theirs for block in blocks),
        "base": "".join(bases) if bases else None,
        "has_markers": True,
    })
    location = ConflictLocation(
        start_line=blocks[0].start_line,
        end_line=blocks[0].end_line,
    )
    metadata["marker_blocks"] = str(len(blocks))
    return content, location, metadata


def analyze(handle: RepositoryHandle, conflict: Conflict) -> Conflict:
    """Fill in content, location and severity for one conflict.

    Args:
        handle: Open repository the conflict was found in
        conflict: Conflict as reported by a detection pass

    Returns:
        Updated copy of the conflict
    """
    content, location, metadata = read_content(handle, conflict)
    analyzed = conflict.model_copy(update={
        "content": content,
        "location": location,
        "metadata": {**conflict.metadata, **metadata},
    })
    return analyzed.model_copy(
        update={"severity": assess_severity(analyzed)}
    )


__all__ = [
    "analyze",
    "assess_severity",
    "read_content",
    "severity_for_score",
    "severity_score",
]
