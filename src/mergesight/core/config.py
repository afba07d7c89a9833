"""Application configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mergesight.core.base import BaseConfig
from mergesight.core.log import Logger
from mergesight.core.yaml_settings import (
    CONFIG_FILENAME,
    YamlWithIncludesSettingsSource,
)


class DetectionConfig(BaseConfig):
    """Conflict detection policy."""

    enable_proactive_detection: bool = Field(
        default=True,
        description="Run the proactive (predictive) detection strategy",
    )
    enable_semantic_detection: bool = Field(
        default=True,
        description="Run the semantic detection strategy",
    )
    detection_sensitivity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Passed to each detection strategy's detect()",
    )
    cache_size: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of repositories kept in the cache",
    )
    analysis_timeout_seconds: int = Field(
        default=60,
        description=(
            "Analysis timeout in seconds. Carried for callers that "
            "wrap detection in their own timeout; not enforced here"
        ),
    )
    enable_pattern_learning: bool = Field(
        default=True,
        description="Re-mine conflict patterns after each recorded resolution",
    )
    min_pattern_occurrences: int = Field(
        default=2,
        ge=1,
        description="Records needed before a group becomes a pattern",
    )


class TrackerConfig(BaseConfig):
    """Repository tracking policy."""

    scan_interval_seconds: int = Field(
        default=300,
        description=(
            "Age after which needs_rescan() reports a repository as "
            "stale. Nothing schedules rescans on this interval"
        ),
    )
    contributor_walk_limit: int = Field(
        default=100,
        ge=1,
        description="Commits walked from HEAD to collect contributors",
    )
    max_state_events: int = Field(
        default=10000,
        ge=1,
        description="State change events kept before the oldest drop",
    )
    large_repository_bytes: int = Field(
        default=1024 ** 3,
        description="Metadata directory size reported as a performance issue",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    detection: DetectionConfig = Field(
        default_factory=DetectionConfig,
        description="Conflict detection settings",
    )
    tracker: TrackerConfig = Field(
        default_factory=TrackerConfig,
        description="Repository tracker settings",
    )
    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("mergesight"))
        ),
        description="Root directory for log files",
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode='after')
    def _setup_logger(self) -> Config:
        """Initialize the global logger once config has loaded."""
        from mergesight.core.log import setup_logger
        from mergesight.core.yaml_settings import _cleanup_bootstrap_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name="mergesight",
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
        )

        _cleanup_bootstrap_logger()
        return self

    def close(self):
        """Close the global logger, then the remaining children."""
        from mergesight.core.log import logger
        logger.close()
        super().close()


class State(BaseSettings):
    """Complete application state handed to CLI commands.

    Loads from, highest priority first: init arguments, YAML files
    (with include support), .env, environment variables
    (MERGESIGHT_CONFIG__DETECTION__CACHE_SIZE=50) and file secrets.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on the CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILENAME,
        env_file=".env",
        env_prefix="MERGESIGHT_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = [
    "Config",
    "DetectionConfig",
    "State",
    "TrackerConfig",
]
