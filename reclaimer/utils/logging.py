"""Structured logging for reclaimer operations.

Every probe, planned action, completed action and failure goes through
ReclaimerLogger so the run leaves an ordered trail of LogEntry records in
addition to the regular log output.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from reclaimer.models import ActionKind

# Configure module logger
logger = logging.getLogger(__name__)


class LogLevel(Enum):
    """Log levels for reclaimer operations."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ActionType(Enum):
    """Types of actions that can be logged."""

    PROBE = "PROBE"
    STOP = "STOP"
    PRUNE = "PRUNE"
    DELETE = "DELETE"
    REPORT = "REPORT"
    SKIP = "SKIP"
    ERROR = "ERROR"


@dataclass
class LogEntry:
    """Structured log entry."""

    timestamp: datetime
    level: LogLevel
    action: ActionType
    system: str
    subject: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    error_info: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary for structured logging."""
        entry = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "action": self.action.value,
            "system": self.system,
            "subject": self.subject,
            "message": self.message,
        }
        if self.details:
            entry["details"] = self.details
        if self.error_info:
            entry["error"] = self.error_info
        return entry


class ReclaimerLogger:
    """Structured logging for reclaimer runs.

    Entries are kept in memory for the duration of the run and written to
    the standard logging hierarchy as they are created.
    """

    def __init__(self, dry_run: bool = False):
        """
        Initialize reclaimer logger.

        Args:
            dry_run: Whether operating in dry-run mode
        """
        self.dry_run = dry_run
        self._log_entries: List[LogEntry] = []

    def _create_entry(
        self,
        level: LogLevel,
        action: ActionType,
        system: str,
        subject: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_info: Optional[Dict[str, Any]] = None,
    ) -> LogEntry:
        return LogEntry(
            timestamp=datetime.now(timezone.utc),
            level=level,
            action=action,
            system=system,
            subject=subject,
            message=message,
            details=dict(details) if details else {},
            error_info=error_info,
        )

    def _log(self, entry: LogEntry) -> None:
        """Emit an entry and store it for reporting."""
        self._log_entries.append(entry)

        prefix = "[DRY RUN] " if self.dry_run else ""
        log_message = (
            f"{prefix}[{entry.action.value}] {entry.system} "
            f"{entry.subject}: {entry.message}"
        )

        if entry.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in entry.details.items())
            log_message += f" ({detail_str})"

        if entry.level == LogLevel.DEBUG:
            logger.debug(log_message)
        elif entry.level == LogLevel.INFO:
            logger.info(log_message)
        elif entry.level == LogLevel.WARNING:
            logger.warning(log_message)
        elif entry.level == LogLevel.ERROR:
            if entry.error_info:
                log_message += f" - Error: {entry.error_info}"
            logger.error(log_message)
        elif entry.level == LogLevel.CRITICAL:
            logger.critical(log_message)

    # Probing

    def log_probe(self, system: str, available: bool, detail: str = "") -> None:
        """Log the availability of one backing system."""
        entry = self._create_entry(
            level=LogLevel.INFO if available else LogLevel.DEBUG,
            action=ActionType.PROBE,
            system=system,
            subject="*",
            message="available" if available else "unavailable",
            details={"detail": detail} if detail else None,
        )
        self._log(entry)

    def log_system_skipped(self, system: str, reason: str) -> None:
        """Log a backing system skipped because it is installed but unreachable."""
        entry = self._create_entry(
            level=LogLevel.WARNING,
            action=ActionType.SKIP,
            system=system,
            subject="*",
            message=f"Skipped: {reason}",
        )
        self._log(entry)

    # Actions

    def log_action_start(
        self,
        action: ActionType,
        system: str,
        subject: str,
        description: str,
    ) -> None:
        """Log start of a reclaim action."""
        entry = self._create_entry(
            level=LogLevel.INFO,
            action=action,
            system=system,
            subject=subject,
            message=f"Starting: {description}",
        )
        self._log(entry)

    def log_action_complete(
        self,
        action: ActionType,
        system: str,
        subject: str,
        detail: str = "",
    ) -> None:
        """Log successful completion of a reclaim action."""
        entry = self._create_entry(
            level=LogLevel.INFO,
            action=action,
            system=system,
            subject=subject,
            message=f"Completed{': ' + detail if detail else ''}",
        )
        self._log(entry)

    def log_action_planned(
        self,
        action: ActionType,
        system: str,
        subject: str,
        description: str,
    ) -> None:
        """Log an action that would run outside dry-run mode."""
        entry = self._create_entry(
            level=LogLevel.INFO,
            action=action,
            system=system,
            subject=subject,
            message=f"Would {description}",
        )
        self._log(entry)

    def log_error(
        self,
        system: str,
        subject: str,
        error: Exception,
        action: Optional[ActionType] = None,
    ) -> None:
        """Log a failed action with detailed error information."""
        error_info: Dict[str, Any] = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }

        returncode = getattr(error, "returncode", None)
        if returncode is not None:
            error_info["returncode"] = returncode

        entry = self._create_entry(
            level=LogLevel.ERROR,
            action=action or ActionType.ERROR,
            system=system,
            subject=subject,
            message=f"Error occurred: {type(error).__name__}",
            error_info=error_info,
        )
        self._log(entry)

    # Summary Logging

    def log_execution_start(self, level: str, systems: List[str]) -> None:
        """Log start of a reclaimer run."""
        mode = "DRY RUN" if self.dry_run else "LIVE"
        logger.info("=" * 60)
        logger.info(f"RESOURCE RECLAIMER - EXECUTION START ({mode})")
        logger.info("=" * 60)
        logger.info(f"Level: {level}")
        logger.info(f"Systems: {', '.join(systems) if systems else 'none'}")
        logger.info(f"Timestamp: {datetime.now(timezone.utc).isoformat()}")
        logger.info("-" * 40)

    def log_execution_complete(
        self,
        total_actions: int,
        total_succeeded: int,
        total_failed: int,
    ) -> None:
        """Log completion of a reclaimer run with summary."""
        mode = "DRY RUN" if self.dry_run else "LIVE"
        logger.info("-" * 40)
        logger.info(f"EXECUTION SUMMARY ({mode})")
        logger.info("-" * 40)
        logger.info(f"Total actions attempted: {total_actions}")
        logger.info(f"Total actions succeeded: {total_succeeded}")
        logger.info(f"Total actions failed: {total_failed}")
        logger.info("=" * 60)
        logger.info("RESOURCE RECLAIMER - EXECUTION COMPLETE")
        logger.info("=" * 60)

    def get_log_entries(self) -> List[LogEntry]:
        """Get all log entries for reporting."""
        return self._log_entries.copy()


ACTION_TYPES: Dict[ActionKind, ActionType] = {
    ActionKind.STOP_CONTAINER: ActionType.STOP,
    ActionKind.PRUNE_CONTAINERS: ActionType.PRUNE,
    ActionKind.PRUNE_DANGLING_IMAGES: ActionType.PRUNE,
    ActionKind.PRUNE_ALL_IMAGES: ActionType.PRUNE,
    ActionKind.PRUNE_NETWORKS: ActionType.PRUNE,
    ActionKind.PRUNE_BUILD_CACHE: ActionType.PRUNE,
    ActionKind.PRUNE_ALL_BUILD_CACHE: ActionType.PRUNE,
    ActionKind.PRUNE_UNUSED_VOLUMES: ActionType.PRUNE,
    ActionKind.REMOVE_ALL_VOLUMES: ActionType.DELETE,
    ActionKind.PRUNE_SYSTEM: ActionType.PRUNE,
    ActionKind.DELETE_PODS_BY_PHASE: ActionType.DELETE,
    ActionKind.DELETE_EVICTED_PODS: ActionType.DELETE,
    ActionKind.REPORT_UNUSED_PVCS: ActionType.REPORT,
    ActionKind.DELETE_NAMESPACE: ActionType.DELETE,
    ActionKind.DELETE_DEFAULT_OBJECTS: ActionType.DELETE,
    ActionKind.PRUNE_CLUSTER_ENGINE: ActionType.PRUNE,
    ActionKind.DELETE_IMAGE_CACHE: ActionType.DELETE,
    ActionKind.DELETE_CLUSTER: ActionType.DELETE,
    ActionKind.REMOVE_CACHE_DIRS: ActionType.DELETE,
}


def action_type_for(kind: ActionKind) -> ActionType:
    """Log category of a reclaim action kind."""
    return ACTION_TYPES.get(kind, ActionType.PRUNE)
