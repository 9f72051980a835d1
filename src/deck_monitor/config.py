"""Configuration for monitoring sessions.

Settings come from an optional YAML file, overridden by environment
variables:

    DATABASE_URL                  SQL snapshot store URL (in-memory if unset)
    LOG_LEVEL                     Root log level
    DECK_MONITOR_SLIDE_MATCHING   'positional' or 'identity'
    DECK_MONITOR_POLL_INTERVAL    Seconds between polls in `watch`

Example YAML::

    slide_matching: identity
    database_url: sqlite:///deck_monitor.sqlite3
    session_key: quarterly-review
    poll_interval: 5
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ConfigDict, Field, ValidationError

from deck_monitor.detection.diff import DiffEngine
from deck_monitor.detection.session import MonitoringSession
from deck_monitor.errors import ConfigError
from deck_monitor.models.base import ModelBase
from deck_monitor.models.enums import SlideMatching
from deck_monitor.persistence.in_memory import InMemorySnapshotStore
from deck_monitor.persistence.repository import SnapshotStore
from deck_monitor.persistence.sql_repository import SQLSnapshotStore
from deck_monitor.providers.base import SnapshotProvider

ENV_OVERRIDES = {
    "DATABASE_URL": "database_url",
    "LOG_LEVEL": "log_level",
    "DECK_MONITOR_SLIDE_MATCHING": "slide_matching",
    "DECK_MONITOR_POLL_INTERVAL": "poll_interval",
}


class MonitorConfig(ModelBase):
    """Settings for one monitoring session.

    Attributes:
        slide_matching: How slides are paired between snapshots.
        database_url: SQL store URL; None keeps history in memory.
        session_key: Scope of the rows in a shared SQL store.
        poll_interval: Seconds between polls for the `watch` command.
        log_level: Root log level.
    """

    model_config = ConfigDict(frozen=True)

    slide_matching: SlideMatching = Field(
        default=SlideMatching.POSITIONAL,
        description="How slides are paired between snapshots.",
    )
    database_url: Optional[str] = Field(
        default=None, description="SQL store URL; None keeps history in memory."
    )
    session_key: str = Field(
        default="default", description="Scope of the rows in a shared SQL store."
    )
    poll_interval: float = Field(
        default=2.0, gt=0, description="Seconds between polls."
    )
    log_level: str = Field(default="INFO", description="Root log level.")


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> MonitorConfig:
    """Loads the configuration.

    Args:
        path: Optional YAML file.
        env: Environment mapping; defaults to `os.environ`.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid.
    """
    env = os.environ if env is None else env
    data: dict[str, Any] = {}

    if path is not None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config {path} must be a mapping")
        data.update(loaded)

    for var, key in ENV_OVERRIDES.items():
        if env.get(var):
            data[key] = env[var]

    if isinstance(data.get("slide_matching"), str):
        data["slide_matching"] = data["slide_matching"].lower()

    try:
        return MonitorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def build_store(config: MonitorConfig) -> SnapshotStore:
    """Creates the snapshot store selected by the configuration."""
    if config.database_url:
        return SQLSnapshotStore(config.database_url, config.session_key)
    return InMemorySnapshotStore()


def build_session(
    provider: SnapshotProvider, config: Optional[MonitorConfig] = None
) -> MonitoringSession:
    """Wires a `MonitoringSession` for a provider from the configuration."""
    config = config or MonitorConfig()
    return MonitoringSession(
        provider,
        store=build_store(config),
        diff_engine=DiffEngine(config.slide_matching),
    )
