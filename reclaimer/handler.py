"""Command-line entry point for the container resource reclaimer.

A run moves through a fixed sequence of states:

    Init -> Probing -> AwaitConfirmation -> Cancelled
                                         -> Executing -> Reporting -> Done

Probing happens once and drives the confirmation summary. Running containers
and namespaces are listed again after confirmation, before the plan is
selected. Once Executing starts, the run always reaches Reporting: no action
failure is fatal, and an interrupt only fails the action in progress.

Exit codes:
- 0: cleanup finished (with or without action failures), or the user declined
- 1: invalid level argument, invalid configuration, or no backing system
"""

import argparse
import logging
import sys
from enum import Enum
from typing import List, Optional

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.cleanup.engine import ReclaimEngine
from reclaimer.cleanup.kubernetes_manager import KubernetesManager
from reclaimer.cleanup.minikube_manager import MinikubeManager
from reclaimer.cleanup.policy import select_actions
from reclaimer.models import Capabilities, CleanupLevel, RunReport
from reclaimer.probe import CapabilityProber
from reclaimer.reporting.console import ReclaimerConsole
from reclaimer.reporting.reporter import Reporter
from reclaimer.utils.command import CommandRunner
from reclaimer.utils.config import ConfigurationError, ReclaimerConfig, configure_logging
from reclaimer.utils.logging import ReclaimerLogger

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

AFFIRMATIVE_ANSWERS = ("yes", "y")

LEVEL_HELP = """\
level: 1 (regular clean, default) or 2 (aggressive clean)

Level 1: Prunes unused Docker containers, images, networks, build cache and
         unused volumes. Cleans terminated Kubernetes pods and reports
         unused PVCs. Does not stop running containers or pods, or delete
         in-use volumes.

Level 2: Stops all Docker containers, deletes all Kubernetes namespaces
         except the system ones, deletes the Minikube cluster, then fully
         prunes everything including all volumes and images.
"""

LEVEL_DESCRIPTIONS = {
    CleanupLevel.REGULAR: (
        "Level 1: Regular clean (preserves running containers and their volumes)."
    ),
    CleanupLevel.AGGRESSIVE: (
        "Level 2: Aggressive clean (stops everything and deletes all data)."
    ),
}


class RunState(Enum):
    """States of a single reclaimer run."""

    INIT = "init"
    PROBING = "probing"
    AWAIT_CONFIRMATION = "await_confirmation"
    CANCELLED = "cancelled"
    EXECUTING = "executing"
    REPORTING = "reporting"
    DONE = "done"


TRANSITIONS = {
    RunState.INIT: {RunState.PROBING},
    RunState.PROBING: {RunState.AWAIT_CONFIRMATION, RunState.DONE},
    RunState.AWAIT_CONFIRMATION: {RunState.CANCELLED, RunState.EXECUTING},
    RunState.EXECUTING: {RunState.REPORTING},
    RunState.REPORTING: {RunState.DONE},
    RunState.CANCELLED: set(),
    RunState.DONE: set(),
}


class InvalidTransitionError(Exception):
    """Raised when a run is moved to a state not reachable from its current one."""


class ReclaimRun:
    """Tracks the state of one run; states only move forward."""

    def __init__(self) -> None:
        self.state = RunState.INIT
        self.history: List[RunState] = [RunState.INIT]

    def advance(self, new_state: RunState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot move from {self.state.value} to {new_state.value}"
            )
        logger.debug(f"Run state: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    @property
    def finished(self) -> bool:
        return not TRANSITIONS[self.state]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reclaim",
        description="Reclaim disk space from Docker, Kubernetes and Minikube.",
        epilog=LEVEL_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "level",
        nargs="?",
        default="1",
        help="cleanup level: 1 (regular, default) or 2 (aggressive)",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="skip the confirmation prompt",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="show the actions that would run without executing them",
    )
    return parser


def is_affirmative(answer: str) -> bool:
    """True for "yes" or "y", case-insensitive, ignoring surrounding whitespace."""
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


def print_detected_systems(console: ReclaimerConsole, capabilities: Capabilities) -> None:
    console.info("Detected systems:")
    for system in capabilities.available_systems():
        console.print(f"  ✓ {system.name}", markup=False)
    console.blank()


def confirm(console: ReclaimerConsole, level: CleanupLevel) -> bool:
    """
    Ask the user to confirm the cleanup.

    Returns:
        True only for an explicit affirmative answer; EOF counts as a refusal
    """
    console.warning(LEVEL_DESCRIPTIONS[level])
    console.warning("CONFIRMATION REQUIRED")
    try:
        answer = console.input("This will delete resources. Are you sure? (yes/no) ")
    except EOFError:
        console.blank()
        return False
    return is_affirmative(answer)


def build_managers(
    config: ReclaimerConfig, runner: Optional[CommandRunner] = None
) -> tuple[DockerManager, KubernetesManager, MinikubeManager]:
    """Create the three backing-system managers from configuration."""
    runner = runner or CommandRunner()
    docker = DockerManager(
        runner,
        binary=config.docker_bin,
        stop_timeout=config.stop_timeout,
        status_timeout=config.status_timeout,
    )
    kubernetes = KubernetesManager(
        runner,
        binary=config.kubectl_bin,
        delete_timeout=config.delete_timeout,
        status_timeout=config.status_timeout,
    )
    minikube = MinikubeManager(
        runner,
        binary=config.minikube_bin,
        minikube_dir=config.minikube_dir,
        status_timeout=config.status_timeout,
    )
    return docker, kubernetes, minikube


def execute_reclaimer(
    config: ReclaimerConfig,
    level: CleanupLevel,
    console: ReclaimerConsole,
    runner: Optional[CommandRunner] = None,
    run: Optional[ReclaimRun] = None,
) -> int:
    """
    Execute one reclaimer run.

    This function implements the whole workflow:
    1. Probe the backing systems once
    2. Ask for confirmation (unless assume_yes or dry_run)
    3. Select the ordered plan for the level
    4. Execute it, printing each result inline
    5. Print the summary and the disk-usage snapshot

    Args:
        config: Reclaimer configuration
        level: Requested cleanup level
        console: Console receiving all user-facing output
        runner: Command runner shared by the managers
        run: State tracker, created if not given

    Returns:
        Process exit code
    """
    run = run or ReclaimRun()
    reclaimer_logger = ReclaimerLogger(dry_run=config.dry_run)
    docker, kubernetes, minikube = build_managers(config, runner)

    run.advance(RunState.PROBING)
    prober = CapabilityProber(docker, kubernetes, minikube, reclaimer_logger)
    capabilities = prober.probe()

    if not capabilities.any_available():
        console.error("Neither Docker, kubectl, nor minikube are available.")
        run.advance(RunState.DONE)
        return EXIT_FAILURE

    print_detected_systems(console, capabilities)

    run.advance(RunState.AWAIT_CONFIRMATION)
    if config.dry_run:
        console.info("Dry run: no resources will be modified.")
    elif config.assume_yes:
        console.warning(LEVEL_DESCRIPTIONS[level])
        console.info("Confirmation skipped (--yes).")
    elif not confirm(console, level):
        console.info("Cleanup cancelled.")
        run.advance(RunState.CANCELLED)
        return EXIT_OK

    run.advance(RunState.EXECUTING)
    capabilities = prober.refresh_workloads(capabilities)
    plan = select_actions(level, capabilities, config.protected_namespaces())
    reclaimer_logger.log_execution_start(
        level.name, [s.name for s in capabilities.available_systems()]
    )

    reporter = Reporter(
        console, docker=docker if capabilities.container_engine.available else None
    )
    reporter.report_skipped(plan)

    engine = ReclaimEngine(
        docker=docker,
        kubernetes=kubernetes,
        minikube=minikube,
        dry_run=config.dry_run,
        reclaimer_logger=reclaimer_logger,
    )
    report: RunReport = engine.execute(plan, on_result=reporter.report_result)

    run.advance(RunState.REPORTING)
    reclaimer_logger.log_execution_complete(
        report.total_count(), report.succeeded_count(), report.failed_count()
    )
    reporter.report_summary(report)

    run.advance(RunState.DONE)
    return EXIT_OK


def main(argv: Optional[List[str]] = None, console: Optional[ReclaimerConsole] = None) -> int:
    """
    Console-script entry point.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]
        console: Console for user-facing output

    Returns:
        Process exit code
    """
    console = console or ReclaimerConsole()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        level = CleanupLevel.from_argument(args.level)
    except ValueError as e:
        console.error(str(e))
        console.plain(parser.format_usage().rstrip())
        console.plain(LEVEL_HELP.rstrip())
        return EXIT_FAILURE

    try:
        config = ReclaimerConfig.from_environment(validate=True)
    except ConfigurationError as e:
        configure_logging()
        console.error("Invalid configuration")
        for error in e.errors or [e.message]:
            console.secondary(error)
        return EXIT_FAILURE

    configure_logging(config)

    if args.yes:
        config.assume_yes = True
    if args.dry_run:
        config.dry_run = True

    logger.debug(
        f"Configuration: level={level.name}, dry_run={config.dry_run}, "
        f"assume_yes={config.assume_yes}, delete_timeout={config.delete_timeout}s"
    )

    console.rule(f"RESOURCE RECLAIMER - LEVEL {level.value}")
    return execute_reclaimer(config, level, console)


if __name__ == "__main__":
    sys.exit(main())
