"""Data models for the container resource reclaimer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SystemKind(Enum):
    """Backing systems that own reclaimable resources."""

    CONTAINER_ENGINE = "container_engine"
    ORCHESTRATOR = "orchestrator"
    LOCAL_CLUSTER = "local_cluster"


# Orchestrator and local cluster usually run on top of the container engine
EXECUTION_ORDER = (
    SystemKind.CONTAINER_ENGINE,
    SystemKind.ORCHESTRATOR,
    SystemKind.LOCAL_CLUSTER,
)


class CleanupLevel(Enum):
    """Cleanup level requested on the command line."""

    REGULAR = 1
    AGGRESSIVE = 2

    @classmethod
    def from_argument(cls, value: str) -> "CleanupLevel":
        """Parse a CLI level argument ("1" or "2").

        Raises:
            ValueError: If the value is not a known level.
        """
        for level in cls:
            if str(level.value) == value.strip():
                return level
        raise ValueError(f"Invalid level '{value}'. Must be 1 or 2.")


class ClusterState(Enum):
    """State of the local cluster managed by minikube."""

    RUNNING = "running"
    STOPPED = "stopped"
    ABSENT = "absent"


class ActionKind(Enum):
    """Reclaim operations known to the executor."""

    STOP_CONTAINER = "stop_container"
    PRUNE_CONTAINERS = "prune_containers"
    PRUNE_DANGLING_IMAGES = "prune_dangling_images"
    PRUNE_ALL_IMAGES = "prune_all_images"
    PRUNE_NETWORKS = "prune_networks"
    PRUNE_BUILD_CACHE = "prune_build_cache"
    PRUNE_ALL_BUILD_CACHE = "prune_all_build_cache"
    PRUNE_UNUSED_VOLUMES = "prune_unused_volumes"
    REMOVE_ALL_VOLUMES = "remove_all_volumes"
    PRUNE_SYSTEM = "prune_system"
    DELETE_PODS_BY_PHASE = "delete_pods_by_phase"
    DELETE_EVICTED_PODS = "delete_evicted_pods"
    REPORT_UNUSED_PVCS = "report_unused_pvcs"
    DELETE_NAMESPACE = "delete_namespace"
    DELETE_DEFAULT_OBJECTS = "delete_default_objects"
    PRUNE_CLUSTER_ENGINE = "prune_cluster_engine"
    DELETE_IMAGE_CACHE = "delete_image_cache"
    DELETE_CLUSTER = "delete_cluster"
    REMOVE_CACHE_DIRS = "remove_cache_dirs"


@dataclass(frozen=True)
class BackingSystem:
    """Availability record for one backing system, computed once per run."""

    kind: SystemKind
    name: str
    installed: bool = False
    available: bool = False
    detail: str = ""

    @property
    def degraded(self) -> bool:
        """Installed and responsive, but not reachable for reclaim work."""
        return self.installed and not self.available


@dataclass(frozen=True)
class Capabilities:
    """Immutable snapshot of the environment taken by the prober.

    Besides the availability of each backing system this holds the live
    sub-states the policy depends on: running containers, orchestrator
    namespaces and the local cluster state.
    """

    container_engine: BackingSystem
    orchestrator: BackingSystem
    local_cluster: BackingSystem
    running_containers: tuple[str, ...] = ()
    namespaces: tuple[str, ...] = ()
    local_cluster_state: ClusterState = ClusterState.ABSENT

    def systems(self) -> tuple[BackingSystem, ...]:
        """All backing systems in execution order."""
        by_kind = {
            SystemKind.CONTAINER_ENGINE: self.container_engine,
            SystemKind.ORCHESTRATOR: self.orchestrator,
            SystemKind.LOCAL_CLUSTER: self.local_cluster,
        }
        return tuple(by_kind[kind] for kind in EXECUTION_ORDER)

    def available_systems(self) -> tuple[BackingSystem, ...]:
        return tuple(s for s in self.systems() if s.available)

    def is_available(self, kind: SystemKind) -> bool:
        return any(s.kind == kind for s in self.available_systems())

    def any_available(self) -> bool:
        return bool(self.available_systems())


@dataclass(frozen=True)
class ReclaimAction:
    """A named, idempotent operation scoped to one backing system."""

    kind: ActionKind
    target: SystemKind
    description: str
    destructive: bool = False
    levels: frozenset[CleanupLevel] = frozenset(CleanupLevel)
    subject: Optional[str] = None


@dataclass(frozen=True)
class ReclaimPlan:
    """Ordered actions selected for a run, plus systems skipped with a reason."""

    level: CleanupLevel
    actions: tuple[ReclaimAction, ...] = ()
    skipped: tuple[tuple[SystemKind, str], ...] = ()

    def actions_for(self, kind: SystemKind) -> list[ReclaimAction]:
        return [a for a in self.actions if a.target == kind]

    def is_empty(self) -> bool:
        return len(self.actions) == 0


@dataclass
class ExecutionResult:
    """Outcome of one attempted action."""

    action: ReclaimAction
    succeeded: bool
    detail: str = ""


@dataclass
class RunReport:
    """Results of a whole run, built incrementally and printed at the end."""

    level: CleanupLevel
    results: list[ExecutionResult] = field(default_factory=list)
    usage_snapshot: str = ""
    dry_run: bool = False

    def succeeded_count(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    def failures(self) -> list[ExecutionResult]:
        return [r for r in self.results if not r.succeeded]

    def total_count(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class ContainerInfo:
    """Container listed by the container engine."""

    container_id: str
    name: str = ""
    image: str = ""
    state: str = ""


@dataclass(frozen=True)
class PodInfo:
    """Pod listed by the orchestrator."""

    namespace: str
    name: str
    phase: str
    reason: str = ""
    claim_names: tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class VolumeClaim:
    """Persistent volume claim listed by the orchestrator."""

    namespace: str
    name: str
    phase: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.name}"
