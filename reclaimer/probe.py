"""Capability probing: which backing systems are present and reachable.

Probing is read-only. Each system counts as available only when its binary
is on PATH and it answers a no-op status query. The live sub-states the
policy needs (running containers, namespaces, local cluster state) are
snapshotted here into an immutable Capabilities record; the workload lists
are refreshed once more after confirmation.
"""

import logging
from dataclasses import replace
from typing import Optional

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.cleanup.kubernetes_manager import KubernetesManager
from reclaimer.cleanup.minikube_manager import MinikubeManager
from reclaimer.models import BackingSystem, Capabilities, ClusterState, SystemKind
from reclaimer.utils.command import CommandError
from reclaimer.utils.logging import ReclaimerLogger

logger = logging.getLogger(__name__)

DOCKER_NAME = "Docker"
KUBERNETES_NAME = "Kubernetes (kubectl)"
MINIKUBE_NAME = "Minikube"


class CapabilityProber:
    """Detects backing-system availability without side effects."""

    def __init__(
        self,
        docker: DockerManager,
        kubernetes: KubernetesManager,
        minikube: MinikubeManager,
        reclaimer_logger: Optional[ReclaimerLogger] = None,
    ):
        self.docker = docker
        self.kubernetes = kubernetes
        self.minikube = minikube
        self.reclaimer_logger = reclaimer_logger or ReclaimerLogger()

    def probe(self) -> Capabilities:
        """
        Probe every backing system once.

        Returns:
            Capabilities snapshot used for the rest of the run
        """
        engine, running = self._probe_container_engine()
        orchestrator, namespaces = self._probe_orchestrator()
        local_cluster, state = self._probe_local_cluster()

        for system in (engine, orchestrator, local_cluster):
            self.reclaimer_logger.log_probe(system.name, system.available, system.detail)
            if system.degraded:
                self.reclaimer_logger.log_system_skipped(system.name, system.detail)

        return Capabilities(
            container_engine=engine,
            orchestrator=orchestrator,
            local_cluster=local_cluster,
            running_containers=running,
            namespaces=namespaces,
            local_cluster_state=state,
        )

    def refresh_workloads(self, capabilities: Capabilities) -> Capabilities:
        """
        Re-list running containers and namespaces of the available systems.

        Called once confirmation is given, so containers started while the
        prompt was open are stopped too. Availability is not re-probed.

        Returns:
            Capabilities with fresh running_containers and namespaces
        """
        running = capabilities.running_containers
        namespaces = capabilities.namespaces

        if capabilities.container_engine.available:
            try:
                running = tuple(
                    c.container_id for c in self.docker.list_running_containers()
                )
            except CommandError as e:
                logger.warning(f"Could not refresh running containers, keeping snapshot: {e}")

        if capabilities.orchestrator.available:
            try:
                namespaces = tuple(self.kubernetes.list_namespaces())
            except CommandError as e:
                logger.warning(f"Could not refresh namespaces, keeping snapshot: {e}")

        return replace(capabilities, running_containers=running, namespaces=namespaces)

    def _probe_container_engine(self) -> tuple[BackingSystem, tuple[str, ...]]:
        if not self.docker.is_installed():
            return BackingSystem(SystemKind.CONTAINER_ENGINE, DOCKER_NAME), ()

        if not self.docker.ping():
            return (
                BackingSystem(
                    SystemKind.CONTAINER_ENGINE,
                    DOCKER_NAME,
                    installed=True,
                    detail="docker installed but the daemon is not responding",
                ),
                (),
            )

        running: tuple[str, ...] = ()
        try:
            running = tuple(c.container_id for c in self.docker.list_running_containers())
        except CommandError as e:
            # The stop phase will find nothing to stop; pruning still proceeds
            logger.warning(f"Could not list running containers: {e}")

        system = BackingSystem(
            SystemKind.CONTAINER_ENGINE,
            DOCKER_NAME,
            installed=True,
            available=True,
            detail=f"{len(running)} running containers",
        )
        return system, running

    def _probe_orchestrator(self) -> tuple[BackingSystem, tuple[str, ...]]:
        if not self.kubernetes.is_installed():
            return BackingSystem(SystemKind.ORCHESTRATOR, KUBERNETES_NAME), ()

        if not self.kubernetes.is_reachable():
            return (
                BackingSystem(
                    SystemKind.ORCHESTRATOR,
                    KUBERNETES_NAME,
                    installed=True,
                    detail="kubectl configured but cannot connect to a cluster",
                ),
                (),
            )

        namespaces: tuple[str, ...] = ()
        try:
            namespaces = tuple(self.kubernetes.list_namespaces())
        except CommandError as e:
            logger.warning(f"Could not list namespaces: {e}")

        system = BackingSystem(
            SystemKind.ORCHESTRATOR,
            KUBERNETES_NAME,
            installed=True,
            available=True,
            detail=f"{len(namespaces)} namespaces",
        )
        return system, namespaces

    def _probe_local_cluster(self) -> tuple[BackingSystem, ClusterState]:
        if not self.minikube.is_installed():
            return BackingSystem(SystemKind.LOCAL_CLUSTER, MINIKUBE_NAME), ClusterState.ABSENT

        try:
            state = self.minikube.cluster_state()
        except CommandError as e:
            logger.warning(f"Local cluster status query failed: {e}")
            return (
                BackingSystem(
                    SystemKind.LOCAL_CLUSTER,
                    MINIKUBE_NAME,
                    installed=True,
                    detail=f"minikube status failed ({e.message})",
                ),
                ClusterState.ABSENT,
            )

        if state == ClusterState.ABSENT and not self.minikube.has_home_directory():
            # Binary present but no cluster: reported as absent, not degraded
            return (
                BackingSystem(
                    SystemKind.LOCAL_CLUSTER,
                    MINIKUBE_NAME,
                    detail="no local cluster configured",
                ),
                state,
            )

        system = BackingSystem(
            SystemKind.LOCAL_CLUSTER,
            MINIKUBE_NAME,
            installed=True,
            available=True,
            detail=f"cluster {state.value}",
        )
        return system, state
