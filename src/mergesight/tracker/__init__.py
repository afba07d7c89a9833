"""Repository state tracking and health checks."""

from mergesight.tracker.events import diff_snapshots
from mergesight.tracker.health import check_health
from mergesight.tracker.scanner import scan_repository
from mergesight.tracker.tracker import RepositoryTracker

__all__ = [
    "RepositoryTracker",
    "check_health",
    "diff_snapshots",
    "scan_repository",
]
