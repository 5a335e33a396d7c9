"""Reclaim executor: runs a plan as a best-effort sweep.

Actions run strictly in plan order, one at a time. Every failure is caught
at the action boundary, recorded as a failed ExecutionResult, logged and
reported to the optional progress callback; the sweep then moves on to the
next action. Nothing raised by a backing system escapes execute().

The aggressive container-engine plan stops every running container before
the first prune, so pruning sees those containers' volumes as unused.
"""

import logging
from typing import Callable, Dict, Optional

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.cleanup.dry_run import DryRunExecutor
from reclaimer.cleanup.kubernetes_manager import KubernetesManager
from reclaimer.cleanup.minikube_manager import MinikubeManager
from reclaimer.models import (
    ActionKind,
    ExecutionResult,
    ReclaimAction,
    ReclaimPlan,
    RunReport,
)
from reclaimer.utils.logging import ReclaimerLogger, action_type_for

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExecutionResult], None]


class UnsupportedActionError(Exception):
    """Raised for an action whose backing-system manager is not configured."""


class ReclaimEngine:
    """Executes reclaim plans against the backing-system managers.

    Error handling:
    - Every action is attempted once, there is no retry
    - A failing action is recorded with succeeded=False and its error text
    - Later actions always run, whatever happened before
    """

    def __init__(
        self,
        docker: Optional[DockerManager] = None,
        kubernetes: Optional[KubernetesManager] = None,
        minikube: Optional[MinikubeManager] = None,
        dry_run: bool = False,
        reclaimer_logger: Optional[ReclaimerLogger] = None,
    ):
        """
        Initialize reclaim engine.

        Args:
            docker: Container engine manager
            kubernetes: Orchestrator manager
            minikube: Local-cluster manager
            dry_run: If True, record planned actions without executing them
            reclaimer_logger: Structured logger shared with the rest of the run
        """
        self.docker = docker
        self.kubernetes = kubernetes
        self.minikube = minikube
        self.dry_run = dry_run
        self.reclaimer_logger = reclaimer_logger or ReclaimerLogger(dry_run=dry_run)
        self.dry_run_executor = DryRunExecutor(self.reclaimer_logger)

        self._handlers: Dict[ActionKind, Callable[[ReclaimAction], str]] = {
            ActionKind.STOP_CONTAINER: lambda a: self._docker().stop_container(
                a.subject or ""
            ),
            ActionKind.PRUNE_CONTAINERS: lambda a: self._docker().prune_containers(),
            ActionKind.PRUNE_DANGLING_IMAGES: lambda a: self._docker().prune_images(),
            ActionKind.PRUNE_ALL_IMAGES: lambda a: self._docker().prune_images(
                all_images=True
            ),
            ActionKind.PRUNE_NETWORKS: lambda a: self._docker().prune_networks(),
            ActionKind.PRUNE_BUILD_CACHE: lambda a: self._docker().prune_build_cache(),
            ActionKind.PRUNE_ALL_BUILD_CACHE: lambda a: self._docker().prune_build_cache(
                all_cache=True
            ),
            ActionKind.PRUNE_UNUSED_VOLUMES: lambda a: self._docker().prune_unused_volumes(),
            ActionKind.REMOVE_ALL_VOLUMES: lambda a: self._docker().remove_all_volumes(),
            ActionKind.PRUNE_SYSTEM: lambda a: self._docker().prune_system(),
            ActionKind.DELETE_PODS_BY_PHASE: lambda a: self._kubernetes().delete_pods_by_phase(
                a.subject or ""
            ),
            ActionKind.DELETE_EVICTED_PODS: lambda a: self._kubernetes().delete_evicted_pods(),
            ActionKind.REPORT_UNUSED_PVCS: (
                lambda a: self._kubernetes().report_unused_volume_claims()
            ),
            ActionKind.DELETE_NAMESPACE: lambda a: self._kubernetes().delete_namespace(
                a.subject or ""
            ),
            ActionKind.DELETE_DEFAULT_OBJECTS: lambda a: self._kubernetes().delete_all_objects(
                a.subject or "all"
            ),
            ActionKind.PRUNE_CLUSTER_ENGINE: lambda a: self._minikube().prune_node_engine(),
            ActionKind.DELETE_IMAGE_CACHE: lambda a: self._minikube().delete_image_cache(),
            ActionKind.DELETE_CLUSTER: lambda a: self._minikube().delete_cluster(),
            ActionKind.REMOVE_CACHE_DIRS: (
                lambda a: self._minikube().remove_cache_directories()
            ),
        }

    def _docker(self) -> DockerManager:
        if self.docker is None:
            raise UnsupportedActionError("container engine manager not configured")
        return self.docker

    def _kubernetes(self) -> KubernetesManager:
        if self.kubernetes is None:
            raise UnsupportedActionError("orchestrator manager not configured")
        return self.kubernetes

    def _minikube(self) -> MinikubeManager:
        if self.minikube is None:
            raise UnsupportedActionError("local-cluster manager not configured")
        return self.minikube

    def execute(
        self,
        plan: ReclaimPlan,
        on_result: Optional[ProgressCallback] = None,
    ) -> RunReport:
        """
        Execute a plan in order.

        In dry-run mode the plan is handed to the DryRunExecutor and no
        backing system is called.

        Args:
            plan: Ordered actions from the policy selector
            on_result: Called with each result as soon as it is known

        Returns:
            RunReport with one result per action, in plan order
        """
        if self.dry_run:
            return self.dry_run_executor.execute_dry_run(plan, on_result)

        report = RunReport(level=plan.level)
        logger.info(f"Executing {len(plan.actions)} actions at level {plan.level.name}")

        for action in plan.actions:
            result = self.execute_action(action)
            report.results.append(result)
            if on_result is not None:
                on_result(result)

        logger.info(
            f"Execution complete: {report.succeeded_count()} succeeded, "
            f"{report.failed_count()} failed"
        )
        return report

    def execute_action(self, action: ReclaimAction) -> ExecutionResult:
        """
        Execute one action, converting any failure into a failed result.

        Args:
            action: The action to execute

        Returns:
            ExecutionResult for the action; never raises for backing-system errors
        """
        action_type = action_type_for(action.kind)
        system = action.target.value
        subject = action.subject or "*"

        self.reclaimer_logger.log_action_start(
            action_type, system, subject, action.description
        )

        try:
            handler = self._handlers.get(action.kind)
            if handler is None:
                raise UnsupportedActionError(f"no handler for action {action.kind.value}")
            detail = handler(action)
        except KeyboardInterrupt:
            # Execution is not cancellable; the interrupted action is a failure
            logger.warning(f"Interrupted during {action.description}, continuing")
            self.reclaimer_logger.log_error(
                system, subject, InterruptedError("interrupted"), action=action_type
            )
            return ExecutionResult(action=action, succeeded=False, detail="interrupted")
        except Exception as e:
            self.reclaimer_logger.log_error(system, subject, e, action=action_type)
            return ExecutionResult(action=action, succeeded=False, detail=str(e))

        self.reclaimer_logger.log_action_complete(action_type, system, subject, detail)
        return ExecutionResult(action=action, succeeded=True, detail=detail)
