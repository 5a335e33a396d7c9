"""Cleanup modules: backing-system managers, policy selection and execution."""

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.cleanup.dry_run import DryRunExecutor
from reclaimer.cleanup.engine import ReclaimEngine, UnsupportedActionError
from reclaimer.cleanup.kubernetes_manager import KubernetesManager, ReclaimError
from reclaimer.cleanup.minikube_manager import MinikubeManager
from reclaimer.cleanup.policy import select_actions

__all__ = [
    "DockerManager",
    "DryRunExecutor",
    "KubernetesManager",
    "MinikubeManager",
    "ReclaimEngine",
    "ReclaimError",
    "UnsupportedActionError",
    "select_actions",
]
