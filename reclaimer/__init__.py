"""Container Resource Reclaimer - two-level Docker, Kubernetes and Minikube cleanup."""

__version__ = "1.0.0"

from reclaimer.models import (
    ActionKind,
    BackingSystem,
    Capabilities,
    CleanupLevel,
    ClusterState,
    ExecutionResult,
    ReclaimAction,
    ReclaimPlan,
    RunReport,
    SystemKind,
)

__all__ = [
    "ActionKind",
    "BackingSystem",
    "Capabilities",
    "CleanupLevel",
    "ClusterState",
    "ExecutionResult",
    "ReclaimAction",
    "ReclaimPlan",
    "RunReport",
    "SystemKind",
]
