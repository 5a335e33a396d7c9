"""Policy selection: maps a cleanup level and the probed capabilities to actions.

select_actions is a pure function of its inputs. It returns data, an ordered
ReclaimPlan, so the destructive/non-destructive split for every backing
system is auditable in one place. Systems run in a fixed order: container
engine, orchestrator, local cluster.
"""

import logging
from typing import AbstractSet, List, Tuple

from reclaimer.filters.namespaces import select_deletable_namespaces
from reclaimer.filters.pods import PHASE_FAILED, PHASE_SUCCEEDED
from reclaimer.models import (
    ActionKind,
    Capabilities,
    CleanupLevel,
    ClusterState,
    ReclaimAction,
    ReclaimPlan,
    SystemKind,
)
from reclaimer.utils.config import DEFAULT_PROTECTED_NAMESPACES

logger = logging.getLogger(__name__)

REGULAR_ONLY = frozenset({CleanupLevel.REGULAR})
AGGRESSIVE_ONLY = frozenset({CleanupLevel.AGGRESSIVE})
ALL_LEVELS = frozenset(CleanupLevel)

# Kinds deleted inside the default namespace at the aggressive level
DEFAULT_NAMESPACE = "default"
DEFAULT_NAMESPACE_KINDS = ("all", "pvc", "configmap", "secret")


def _engine(kind: ActionKind, description: str, **kwargs) -> ReclaimAction:
    return ReclaimAction(
        kind=kind, target=SystemKind.CONTAINER_ENGINE, description=description, **kwargs
    )


def _orchestrator(kind: ActionKind, description: str, **kwargs) -> ReclaimAction:
    return ReclaimAction(
        kind=kind, target=SystemKind.ORCHESTRATOR, description=description, **kwargs
    )


def _local_cluster(kind: ActionKind, description: str, **kwargs) -> ReclaimAction:
    return ReclaimAction(
        kind=kind, target=SystemKind.LOCAL_CLUSTER, description=description, **kwargs
    )


def container_engine_actions(
    level: CleanupLevel, running_containers: Tuple[str, ...] = ()
) -> List[ReclaimAction]:
    """
    Container engine actions for a level.

    Regular never touches running containers or volumes they use.
    Aggressive stops every running container first, then prunes everything,
    finishing with a full system prune.
    """
    if level == CleanupLevel.REGULAR:
        return [
            _engine(ActionKind.PRUNE_CONTAINERS, "prune stopped containers", levels=ALL_LEVELS),
            _engine(
                ActionKind.PRUNE_DANGLING_IMAGES, "prune dangling images", levels=REGULAR_ONLY
            ),
            _engine(ActionKind.PRUNE_NETWORKS, "prune unused networks", levels=ALL_LEVELS),
            _engine(ActionKind.PRUNE_BUILD_CACHE, "prune build cache", levels=REGULAR_ONLY),
            _engine(
                ActionKind.PRUNE_UNUSED_VOLUMES,
                "prune volumes not referenced by any container",
                levels=REGULAR_ONLY,
            ),
        ]

    actions = [
        _engine(
            ActionKind.STOP_CONTAINER,
            f"stop container {container_id[:12]}",
            destructive=True,
            levels=AGGRESSIVE_ONLY,
            subject=container_id,
        )
        for container_id in running_containers
    ]
    actions.extend(
        [
            _engine(ActionKind.PRUNE_CONTAINERS, "prune stopped containers", levels=ALL_LEVELS),
            _engine(
                ActionKind.PRUNE_ALL_IMAGES,
                "prune all images",
                destructive=True,
                levels=AGGRESSIVE_ONLY,
            ),
            _engine(ActionKind.PRUNE_NETWORKS, "prune unused networks", levels=ALL_LEVELS),
            _engine(
                ActionKind.PRUNE_ALL_BUILD_CACHE,
                "prune all build cache",
                levels=AGGRESSIVE_ONLY,
            ),
            _engine(
                ActionKind.REMOVE_ALL_VOLUMES,
                "remove all volumes",
                destructive=True,
                levels=AGGRESSIVE_ONLY,
            ),
            _engine(
                ActionKind.PRUNE_SYSTEM,
                "full system prune including volumes",
                destructive=True,
                levels=AGGRESSIVE_ONLY,
            ),
        ]
    )
    return actions


def orchestrator_actions(
    level: CleanupLevel,
    namespaces: Tuple[str, ...] = (),
    protected: AbstractSet[str] = DEFAULT_PROTECTED_NAMESPACES,
) -> List[ReclaimAction]:
    """
    Orchestrator actions for a level.

    Regular removes pods in terminal phases and only reports unused claims.
    Aggressive deletes every unprotected namespace, then empties the default
    namespace.
    """
    if level == CleanupLevel.REGULAR:
        return [
            _orchestrator(
                ActionKind.DELETE_PODS_BY_PHASE,
                f"delete {PHASE_SUCCEEDED} pods in all namespaces",
                levels=REGULAR_ONLY,
                subject=PHASE_SUCCEEDED,
            ),
            _orchestrator(
                ActionKind.DELETE_EVICTED_PODS,
                "delete evicted pods in all namespaces",
                levels=REGULAR_ONLY,
            ),
            _orchestrator(
                ActionKind.DELETE_PODS_BY_PHASE,
                f"delete {PHASE_FAILED} pods in all namespaces",
                levels=REGULAR_ONLY,
                subject=PHASE_FAILED,
            ),
            _orchestrator(
                ActionKind.REPORT_UNUSED_PVCS,
                "report unused persistent volume claims",
                levels=REGULAR_ONLY,
            ),
        ]

    actions = [
        _orchestrator(
            ActionKind.DELETE_NAMESPACE,
            f"delete namespace {namespace}",
            destructive=True,
            levels=AGGRESSIVE_ONLY,
            subject=namespace,
        )
        for namespace in select_deletable_namespaces(namespaces, protected)
    ]
    actions.extend(
        _orchestrator(
            ActionKind.DELETE_DEFAULT_OBJECTS,
            f"delete all '{kind}' objects in namespace {DEFAULT_NAMESPACE}",
            destructive=True,
            levels=AGGRESSIVE_ONLY,
            subject=kind,
        )
        for kind in DEFAULT_NAMESPACE_KINDS
    )
    return actions


def local_cluster_actions(level: CleanupLevel, state: ClusterState) -> List[ReclaimAction]:
    """Local cluster actions for a level and cluster state."""
    running = state == ClusterState.RUNNING

    if level == CleanupLevel.REGULAR:
        if not running:
            return []
        return [
            _local_cluster(
                ActionKind.PRUNE_CLUSTER_ENGINE,
                "prune container engine inside the cluster node",
                levels=REGULAR_ONLY,
            ),
            _local_cluster(
                ActionKind.DELETE_IMAGE_CACHE,
                "clear the local image cache",
                levels=REGULAR_ONLY,
            ),
        ]

    if running:
        return [
            _local_cluster(
                ActionKind.DELETE_CLUSTER,
                "delete the local cluster",
                destructive=True,
                levels=AGGRESSIVE_ONLY,
            )
        ]
    return [
        _local_cluster(
            ActionKind.REMOVE_CACHE_DIRS,
            "remove on-disk cache and log directories",
            levels=AGGRESSIVE_ONLY,
        )
    ]


def select_actions(
    level: CleanupLevel,
    capabilities: Capabilities,
    protected_namespaces: AbstractSet[str] = DEFAULT_PROTECTED_NAMESPACES,
) -> ReclaimPlan:
    """
    Build the ordered reclaim plan.

    Args:
        level: Requested cleanup level
        capabilities: Probed availability and live sub-states
        protected_namespaces: Namespaces never deleted as a whole

    Returns:
        ReclaimPlan whose actions only target available systems; installed
        but unreachable systems are listed as skipped
    """
    actions: List[ReclaimAction] = []
    skipped: List[Tuple[SystemKind, str]] = []

    for system in capabilities.systems():
        if not system.available:
            if system.degraded:
                reason = system.detail or f"{system.name} installed but not reachable"
                skipped.append((system.kind, reason))
            continue

        if system.kind == SystemKind.CONTAINER_ENGINE:
            actions.extend(
                container_engine_actions(level, capabilities.running_containers)
            )
        elif system.kind == SystemKind.ORCHESTRATOR:
            actions.extend(
                orchestrator_actions(level, capabilities.namespaces, protected_namespaces)
            )
        elif system.kind == SystemKind.LOCAL_CLUSTER:
            actions.extend(
                local_cluster_actions(level, capabilities.local_cluster_state)
            )

    logger.debug(
        f"Selected {len(actions)} actions for level {level.name}, "
        f"{len(skipped)} systems skipped"
    )
    return ReclaimPlan(level=level, actions=tuple(actions), skipped=tuple(skipped))
