"""Run reporting: per-action lines, the final tally and the disk-usage snapshot."""

import logging
from typing import Optional

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.models import ExecutionResult, ReclaimPlan, RunReport, SystemKind
from reclaimer.reporting.console import ReclaimerConsole
from reclaimer.utils.command import CommandError

logger = logging.getLogger(__name__)

SYSTEM_TITLES = {
    SystemKind.CONTAINER_ENGINE: "DOCKER CLEANUP",
    SystemKind.ORCHESTRATOR: "KUBERNETES CLEANUP",
    SystemKind.LOCAL_CLUSTER: "MINIKUBE CLEANUP",
}

SYSTEM_LABELS = {
    SystemKind.CONTAINER_ENGINE: "Docker",
    SystemKind.ORCHESTRATOR: "Kubernetes",
    SystemKind.LOCAL_CLUSTER: "Minikube",
}

USAGE_UNAVAILABLE = "Could not get Docker system info"


class Reporter:
    """Prints action outcomes as they happen and summarizes the run.

    The usage snapshot is best-effort: a container engine that is missing
    or fails the query only produces a warning line.
    """

    def __init__(
        self,
        console: ReclaimerConsole,
        docker: Optional[DockerManager] = None,
    ):
        """
        Initialize reporter.

        Args:
            console: Console receiving every status line
            docker: Container engine manager used for the usage snapshot,
                None when the engine is unavailable
        """
        self.console = console
        self.docker = docker
        self._current_system: Optional[SystemKind] = None

    def report_skipped(self, plan: ReclaimPlan) -> None:
        """Print a warning line for every skipped system."""
        for kind, reason in plan.skipped:
            self.console.warning(f"{reason}. Skipping {SYSTEM_LABELS[kind]} cleanup.")

    def report_result(self, result: ExecutionResult) -> None:
        """Print one action outcome, with a section header on system change."""
        target = result.action.target
        if target != self._current_system:
            self._current_system = target
            self.console.blank()
            self.console.info(f"=== {SYSTEM_TITLES[target]} ===")

        if result.succeeded:
            line = result.action.description
            if result.detail:
                line += f": {result.detail}"
            self.console.success(line)
        else:
            self.console.error(f"Failed to {result.action.description}", result.detail)

    def take_usage_snapshot(self, report: RunReport) -> str:
        """
        Query the container engine for disk usage and store it on the report.

        Returns:
            The snapshot text, empty if it could not be obtained
        """
        if self.docker is None:
            return ""
        try:
            report.usage_snapshot = self.docker.disk_usage()
        except CommandError as e:
            logger.warning(f"Disk usage query failed: {e}")
            report.usage_snapshot = ""
        return report.usage_snapshot

    def report_summary(self, report: RunReport) -> None:
        """Print the tally, the failures and the usage snapshot."""
        self.console.blank()
        self.console.rule("Summary")

        mode = " (dry run)" if report.dry_run else ""
        self.console.info(
            f"Level {report.level.value}{mode}: {report.total_count()} actions, "
            f"{report.succeeded_count()} succeeded, {report.failed_count()} failed"
        )
        for failure in report.failures():
            self.console.error(f"Failed to {failure.action.description}", failure.detail)

        if report.failed_count() == 0:
            self.console.success("Cleanup complete!")
        else:
            self.console.warning("Cleanup finished with failures.")

        self.console.blank()
        self.console.info("Current Docker disk usage:")
        snapshot = self.take_usage_snapshot(report)
        if snapshot:
            self.console.plain(snapshot)
        else:
            self.console.warning(USAGE_UNAVAILABLE)
