"""Core module — config, types, logging."""

from taskwatch.core.config import (
    ConfigError,
    Settings,
    get_settings,
    load_settings,
    parse_duration,
    reset_settings,
)
from taskwatch.core.logging import setup_logging
from taskwatch.core.types import (
    ExecutionLogEntry,
    ExecutionStatus,
    ScheduledJob,
    ensure_utc,
    parse_recipients,
)

__all__ = [
    "ConfigError",
    "ExecutionLogEntry",
    "ExecutionStatus",
    "ScheduledJob",
    "Settings",
    "ensure_utc",
    "get_settings",
    "load_settings",
    "parse_duration",
    "parse_recipients",
    "reset_settings",
    "setup_logging",
]
