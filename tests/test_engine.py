"""Tests for the reclaim engine.

Actions run in plan order and a failing action never prevents later ones.
"""

import inspect
from unittest.mock import MagicMock

from hypothesis import given, settings
from hypothesis import strategies as st

from reclaimer.cleanup.docker_manager import DockerManager
from reclaimer.cleanup.engine import ReclaimEngine
from reclaimer.cleanup.kubernetes_manager import KubernetesManager
from reclaimer.cleanup.minikube_manager import MinikubeManager
from reclaimer.cleanup.policy import select_actions
from reclaimer.models import (
    ActionKind,
    BackingSystem,
    Capabilities,
    CleanupLevel,
    ClusterState,
    ReclaimAction,
    ReclaimPlan,
    SystemKind,
)
from reclaimer.utils.command import CommandError, OutputParseError
from reclaimer.utils.logging import ActionType, LogLevel, ReclaimerLogger


def create_engine(**kwargs):
    """Create an engine whose manager methods all succeed with detail "ok"."""
    docker = mock_manager(DockerManager)
    kubernetes = mock_manager(KubernetesManager)
    minikube = mock_manager(MinikubeManager)
    engine = ReclaimEngine(docker=docker, kubernetes=kubernetes, minikube=minikube, **kwargs)
    return engine, docker, kubernetes, minikube


def mock_manager(cls):
    manager = MagicMock(spec=cls)
    for name, _ in inspect.getmembers(cls, inspect.isfunction):
        if not name.startswith("_"):
            getattr(manager, name).return_value = "ok"
    return manager


def available(kind):
    return BackingSystem(kind, kind.value, installed=True, available=True)


# Action kinds with a single manager method, used to inject failures
FAILABLE = {
    ActionKind.PRUNE_CONTAINERS: (SystemKind.CONTAINER_ENGINE, "prune_containers"),
    ActionKind.PRUNE_NETWORKS: (SystemKind.CONTAINER_ENGINE, "prune_networks"),
    ActionKind.REMOVE_ALL_VOLUMES: (SystemKind.CONTAINER_ENGINE, "remove_all_volumes"),
    ActionKind.PRUNE_SYSTEM: (SystemKind.CONTAINER_ENGINE, "prune_system"),
    ActionKind.DELETE_EVICTED_PODS: (SystemKind.ORCHESTRATOR, "delete_evicted_pods"),
    ActionKind.REPORT_UNUSED_PVCS: (SystemKind.ORCHESTRATOR, "report_unused_volume_claims"),
    ActionKind.DELETE_NAMESPACE: (SystemKind.ORCHESTRATOR, "delete_namespace"),
    ActionKind.PRUNE_CLUSTER_ENGINE: (SystemKind.LOCAL_CLUSTER, "prune_node_engine"),
    ActionKind.DELETE_IMAGE_CACHE: (SystemKind.LOCAL_CLUSTER, "delete_image_cache"),
    ActionKind.DELETE_CLUSTER: (SystemKind.LOCAL_CLUSTER, "delete_cluster"),
}


def action(kind, target=SystemKind.CONTAINER_ENGINE, subject=None):
    return ReclaimAction(kind=kind, target=target, description=kind.value, subject=subject)


class TestReclaimEngine:
    """Tests for ReclaimEngine.execute."""

    def test_dispatches_to_managers(self):
        engine, docker, kubernetes, minikube = create_engine()
        plan = ReclaimPlan(
            level=CleanupLevel.AGGRESSIVE,
            actions=(
                action(ActionKind.STOP_CONTAINER, subject="c1"),
                action(ActionKind.PRUNE_ALL_IMAGES),
                action(ActionKind.DELETE_NAMESPACE, SystemKind.ORCHESTRATOR, "web"),
                action(ActionKind.DELETE_DEFAULT_OBJECTS, SystemKind.ORCHESTRATOR, "pvc"),
                action(ActionKind.DELETE_CLUSTER, SystemKind.LOCAL_CLUSTER),
            ),
        )

        report = engine.execute(plan)

        assert report.succeeded_count() == 5
        docker.stop_container.assert_called_once_with("c1")
        docker.prune_images.assert_called_once_with(all_images=True)
        kubernetes.delete_namespace.assert_called_once_with("web")
        kubernetes.delete_all_objects.assert_called_once_with("pvc")
        minikube.delete_cluster.assert_called_once_with()

    def test_failure_does_not_stop_later_actions(self):
        engine, docker, _, _ = create_engine()
        docker.prune_containers.side_effect = CommandError(["docker"], 1, "daemon busy")
        docker.prune_networks.side_effect = OutputParseError(["docker"], "bad json")
        plan = ReclaimPlan(
            level=CleanupLevel.REGULAR,
            actions=(
                action(ActionKind.PRUNE_CONTAINERS),
                action(ActionKind.PRUNE_NETWORKS),
                action(ActionKind.PRUNE_BUILD_CACHE),
            ),
        )

        report = engine.execute(plan)

        assert [r.succeeded for r in report.results] == [False, False, True]
        assert "daemon busy" in report.results[0].detail
        docker.prune_build_cache.assert_called_once_with()

    def test_unexpected_exception_is_recorded(self):
        engine, docker, _, _ = create_engine()
        docker.remove_all_volumes.side_effect = RuntimeError("unexpected")
        result = engine.execute_action(action(ActionKind.REMOVE_ALL_VOLUMES))
        assert not result.succeeded
        assert result.detail == "unexpected"

    def test_interrupt_fails_only_the_current_action(self):
        reclaimer_logger = ReclaimerLogger()
        engine, docker, _, _ = create_engine(reclaimer_logger=reclaimer_logger)
        docker.prune_images.side_effect = KeyboardInterrupt
        plan = ReclaimPlan(
            level=CleanupLevel.AGGRESSIVE,
            actions=(
                action(ActionKind.PRUNE_ALL_IMAGES),
                action(ActionKind.PRUNE_NETWORKS),
                action(ActionKind.PRUNE_SYSTEM),
            ),
        )

        report = engine.execute(plan)

        assert [r.succeeded for r in report.results] == [False, True, True]
        assert report.results[0].detail == "interrupted"
        docker.prune_system.assert_called_once_with()
        errors = [e for e in reclaimer_logger.get_log_entries() if e.level == LogLevel.ERROR]
        assert errors[0].error_info["error_type"] == "InterruptedError"

    def test_missing_manager_is_a_failed_action(self):
        engine = ReclaimEngine()
        result = engine.execute_action(action(ActionKind.DELETE_CLUSTER, SystemKind.LOCAL_CLUSTER))
        assert not result.succeeded
        assert "not configured" in result.detail

    def test_progress_callback_receives_each_result(self):
        engine, _, _, _ = create_engine()
        seen = []
        plan = ReclaimPlan(
            level=CleanupLevel.REGULAR,
            actions=(action(ActionKind.PRUNE_CONTAINERS), action(ActionKind.PRUNE_NETWORKS)),
        )
        engine.execute(plan, on_result=seen.append)
        assert [r.action.kind for r in seen] == [
            ActionKind.PRUNE_CONTAINERS,
            ActionKind.PRUNE_NETWORKS,
        ]

    def test_failures_are_logged(self):
        reclaimer_logger = ReclaimerLogger()
        engine, docker, _, _ = create_engine(reclaimer_logger=reclaimer_logger)
        docker.prune_system.side_effect = CommandError(["docker"], 2, "no space")

        engine.execute_action(action(ActionKind.PRUNE_SYSTEM))

        errors = [e for e in reclaimer_logger.get_log_entries() if e.level == LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].action == ActionType.PRUNE
        assert errors[0].error_info["returncode"] == 2


@settings(max_examples=100, deadline=5000)
@given(
    level=st.sampled_from(list(CleanupLevel)),
    running=st.lists(
        st.text(alphabet="abcdef0123456789", min_size=4, max_size=12), max_size=5, unique=True
    ),
    failing=st.sets(st.sampled_from(sorted(FAILABLE, key=lambda k: k.value))),
)
def test_every_planned_action_is_attempted(level, running, failing):
    engine, docker, kubernetes, minikube = create_engine()
    managers = {
        SystemKind.CONTAINER_ENGINE: docker,
        SystemKind.ORCHESTRATOR: kubernetes,
        SystemKind.LOCAL_CLUSTER: minikube,
    }
    for kind in failing:
        target, method = FAILABLE[kind]
        getattr(managers[target], method).side_effect = CommandError(["x"], 1, "failed")

    caps = Capabilities(
        container_engine=available(SystemKind.CONTAINER_ENGINE),
        orchestrator=available(SystemKind.ORCHESTRATOR),
        local_cluster=available(SystemKind.LOCAL_CLUSTER),
        running_containers=tuple(running),
        namespaces=("default", "web"),
        local_cluster_state=ClusterState.RUNNING,
    )
    plan = select_actions(level, caps)
    report = engine.execute(plan)

    assert [r.action for r in report.results] == list(plan.actions)
    for result in report.results:
        assert result.succeeded == (result.action.kind not in failing)
