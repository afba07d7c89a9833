#!/usr/bin/env python3
"""Mergesight CLI - conflict detection and repository health."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from mergesight.command.detect import DetectCommand
from mergesight.command.health import HealthCommand
from mergesight.command.scan import ScanCommand
from mergesight.core.config import State
from mergesight.core.errors import (
    BackendOperationError,
    RepositoryAccessError,
)
from mergesight.core.log import logger

EXIT_BACKEND_ERROR = 1
EXIT_ACCESS_ERROR = 2


class CliState(State):
    """Read-only conflict detection and repository tracking for git.

    Mergesight reports merge conflicts with ranked resolution
    suggestions, scans repository state and metadata, and runs
    health checks. It never changes the repository.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.detection.cache_size 50)
    2. mergesight.yaml in the current directory, then the user
       config directory, then the packaged defaults
    3. .env file
    4. Environment variables
       (MERGESIGHT_CONFIG__DETECTION__CACHE_SIZE=50)

    Additional YAML files can be merged with --include FILE.
    """

    detect: CliSubCommand[DetectCommand]
    scan: CliSubCommand[ScanCommand]
    health: CliSubCommand[HealthCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            raise SystemExit(run(subcommand, self))


def run(subcommand, state: State) -> int:
    """Run a subcommand and map fatal errors to exit codes."""
    try:
        return asyncio.run(subcommand.run_workflow(state))
    except RepositoryAccessError as e:
        logger.error(str(e), path=str(e.path))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ACCESS_ERROR
    except BackendOperationError as e:
        logger.error(str(e), operation=e.operation)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BACKEND_ERROR


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
