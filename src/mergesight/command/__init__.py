"""CLI command modules for mergesight."""

from mergesight.command.detect import DetectCommand
from mergesight.command.health import HealthCommand
from mergesight.command.scan import ScanCommand

__all__ = ["DetectCommand", "HealthCommand", "ScanCommand"]
