"""Configuration management for the container resource reclaimer.

Configuration is read from environment variables so the same binary can be
used interactively on a workstation and unattended on a CI host.

Key configuration options:
- LOG_LEVEL: Log level for diagnostic output
- DRY_RUN: Plan and report actions without executing them
- RECLAIM_ASSUME_YES: Skip the interactive confirmation prompt
- RECLAIM_DELETE_TIMEOUT: Seconds allowed for each orchestrator deletion
- RECLAIM_STATUS_TIMEOUT: Seconds allowed for each probe/status query
- RECLAIM_STOP_TIMEOUT: Grace period handed to `docker stop`
- RECLAIM_PROTECTED_NAMESPACES: Extra namespaces never deleted
- RECLAIM_MINIKUBE_DIR: Minikube home directory (cache and logs)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

# Valid log levels
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Namespaces that are never deleted as a whole
DEFAULT_PROTECTED_NAMESPACES = frozenset(
    {"kube-system", "kube-public", "kube-node-lease", "default"}
)

TRUTHY_VALUES = ("true", "1", "yes")

# Module logger for configuration warnings
_config_logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration validation errors."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)


def _parse_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower().strip() in TRUTHY_VALUES


def _parse_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: '{value}' is not a valid integer")


@dataclass
class ReclaimerConfig:
    """Configuration for a reclaimer run.

    Attributes:
        log_level: Log level for diagnostic output.
        dry_run: When True, actions are planned and reported but never executed.
        assume_yes: When True, the confirmation prompt is skipped.
        delete_timeout: Seconds allowed for each orchestrator deletion.
        status_timeout: Seconds allowed for each probe or status query.
        stop_timeout: Seconds a container gets to stop before it is killed.
        extra_protected_namespaces: Namespaces protected in addition to the
            system ones.
        minikube_dir: Minikube home directory holding cache and logs.
        docker_bin: Container engine CLI binary.
        kubectl_bin: Orchestrator CLI binary.
        minikube_bin: Local-cluster manager CLI binary.
    """

    log_level: str = "INFO"
    dry_run: bool = False
    assume_yes: bool = False
    delete_timeout: int = 60
    status_timeout: int = 20
    stop_timeout: int = 10
    extra_protected_namespaces: List[str] = field(default_factory=list)
    minikube_dir: str = field(
        default_factory=lambda: os.path.join(os.path.expanduser("~"), ".minikube")
    )
    docker_bin: str = "docker"
    kubectl_bin: str = "kubectl"
    minikube_bin: str = "minikube"

    @classmethod
    def from_environment(cls, validate: bool = True) -> "ReclaimerConfig":
        """Create configuration from environment variables.

        Args:
            validate: If True, validates the configuration and raises
                ConfigurationError if invalid.

        Returns:
            ReclaimerConfig instance populated from environment variables.

        Raises:
            ConfigurationError: If a numeric value cannot be parsed, or if
                validation is enabled and the configuration is invalid.
        """
        config = cls()

        log_level_value = os.environ.get("LOG_LEVEL", "INFO").upper().strip()
        if log_level_value in VALID_LOG_LEVELS:
            config.log_level = log_level_value
        else:
            _config_logger.warning(
                f"Invalid LOG_LEVEL '{log_level_value}', defaulting to INFO"
            )
            config.log_level = "INFO"

        config.dry_run = _parse_bool("DRY_RUN")
        config.assume_yes = _parse_bool("RECLAIM_ASSUME_YES")

        config.delete_timeout = _parse_int("RECLAIM_DELETE_TIMEOUT", config.delete_timeout)
        config.status_timeout = _parse_int("RECLAIM_STATUS_TIMEOUT", config.status_timeout)
        config.stop_timeout = _parse_int("RECLAIM_STOP_TIMEOUT", config.stop_timeout)

        protected = os.environ.get("RECLAIM_PROTECTED_NAMESPACES", "")
        config.extra_protected_namespaces = [
            ns.strip() for ns in protected.split(",") if ns.strip()
        ]

        minikube_dir = os.environ.get("RECLAIM_MINIKUBE_DIR", "").strip()
        if minikube_dir:
            config.minikube_dir = os.path.expanduser(minikube_dir)

        config.docker_bin = os.environ.get("DOCKER_BIN", "docker").strip() or "docker"
        config.kubectl_bin = os.environ.get("KUBECTL_BIN", "kubectl").strip() or "kubectl"
        config.minikube_bin = (
            os.environ.get("MINIKUBE_BIN", "minikube").strip() or "minikube"
        )

        if validate:
            errors = config.validate()
            if errors:
                raise ConfigurationError(
                    f"Configuration validation failed: {errors}", errors=errors
                )

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages. Empty list if configuration is valid.
        """
        errors = []

        if self.delete_timeout < 1:
            errors.append("RECLAIM_DELETE_TIMEOUT must be a positive integer")

        if self.status_timeout < 1:
            errors.append("RECLAIM_STATUS_TIMEOUT must be a positive integer")

        if self.stop_timeout < 0:
            errors.append("RECLAIM_STOP_TIMEOUT cannot be negative")

        if not self.minikube_dir:
            errors.append("RECLAIM_MINIKUBE_DIR cannot be empty")

        return errors

    def protected_namespaces(self) -> frozenset[str]:
        """System namespaces plus any configured extras."""
        return DEFAULT_PROTECTED_NAMESPACES | frozenset(self.extra_protected_namespaces)

    def get_numeric_log_level(self) -> int:
        """Get the numeric log level for use with logging module."""
        return getattr(logging, self.log_level, logging.INFO)


def configure_logging(config: Optional[ReclaimerConfig] = None) -> logging.Logger:
    """Configure logging based on LOG_LEVEL environment variable or config.

    Diagnostic logs go to stderr so they never interleave with the status
    lines printed on stdout.

    Args:
        config: Optional ReclaimerConfig instance. If not provided, reads from environment.

    Returns:
        Configured logger instance for the reclaimer.
    """
    if config is None:
        log_level_str = os.environ.get("LOG_LEVEL", "INFO").upper().strip()
        if log_level_str not in VALID_LOG_LEVELS:
            logging.warning(f"Invalid LOG_LEVEL '{log_level_str}', defaulting to INFO")
            log_level_str = "INFO"
    else:
        log_level_str = config.log_level

    log_level = getattr(logging, log_level_str, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )

    reclaimer_logger = logging.getLogger("reclaimer")
    reclaimer_logger.setLevel(log_level)

    return reclaimer_logger
