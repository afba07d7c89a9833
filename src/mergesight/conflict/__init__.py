"""Conflict detection, analysis and resolution suggestions."""

from mergesight.conflict.detector import ConflictDetector
from mergesight.conflict.lifecycle import can_transition, transition
from mergesight.conflict.patterns import PatternMiner
from mergesight.conflict.strategy import DetectionStrategy, NoOpStrategy

__all__ = [
    "ConflictDetector",
    "DetectionStrategy",
    "NoOpStrategy",
    "PatternMiner",
    "can_transition",
    "transition",
]
