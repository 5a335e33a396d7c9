"""Utility modules for command execution, configuration and logging."""

from reclaimer.utils.command import (
    CommandError,
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    CommandTimeoutError,
    OutputParseError,
)
from reclaimer.utils.config import ConfigurationError, ReclaimerConfig
from reclaimer.utils.logging import (
    ActionType,
    LogEntry,
    LogLevel,
    ReclaimerLogger,
)

__all__ = [
    "CommandError",
    "CommandNotFoundError",
    "CommandResult",
    "CommandRunner",
    "CommandTimeoutError",
    "OutputParseError",
    "ConfigurationError",
    "ReclaimerConfig",
    "ActionType",
    "LogEntry",
    "LogLevel",
    "ReclaimerLogger",
]
