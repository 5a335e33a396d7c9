"""Pytest configuration and shared fixtures."""

import os
from typing import Callable, Iterable, Optional
from unittest.mock import MagicMock

import pytest

from reclaimer.models import (
    BackingSystem,
    Capabilities,
    ClusterState,
    SystemKind,
)
from reclaimer.utils.command import CommandResult, CommandRunner

# Keep tests independent of the developer's environment
for _name in (
    "LOG_LEVEL",
    "DRY_RUN",
    "RECLAIM_ASSUME_YES",
    "RECLAIM_DELETE_TIMEOUT",
    "RECLAIM_STATUS_TIMEOUT",
    "RECLAIM_STOP_TIMEOUT",
    "RECLAIM_PROTECTED_NAMESPACES",
    "RECLAIM_MINIKUBE_DIR",
):
    os.environ.pop(_name, None)


SYSTEM_NAMES = {
    SystemKind.CONTAINER_ENGINE: "Docker",
    SystemKind.ORCHESTRATOR: "Kubernetes (kubectl)",
    SystemKind.LOCAL_CLUSTER: "Minikube",
}


def _system(kind: SystemKind, status: str) -> BackingSystem:
    """status is one of "available", "degraded" or "absent"."""
    return BackingSystem(
        kind=kind,
        name=SYSTEM_NAMES[kind],
        installed=status in ("available", "degraded"),
        available=status == "available",
        detail=f"{SYSTEM_NAMES[kind]} unreachable" if status == "degraded" else "",
    )


@pytest.fixture
def make_capabilities() -> Callable[..., Capabilities]:
    """Factory for Capabilities snapshots."""

    def factory(
        engine: str = "available",
        orchestrator: str = "absent",
        local_cluster: str = "absent",
        running_containers: Iterable[str] = (),
        namespaces: Iterable[str] = (),
        local_cluster_state: ClusterState = ClusterState.ABSENT,
    ) -> Capabilities:
        return Capabilities(
            container_engine=_system(SystemKind.CONTAINER_ENGINE, engine),
            orchestrator=_system(SystemKind.ORCHESTRATOR, orchestrator),
            local_cluster=_system(SystemKind.LOCAL_CLUSTER, local_cluster),
            running_containers=tuple(running_containers),
            namespaces=tuple(namespaces),
            local_cluster_state=local_cluster_state,
        )

    return factory


@pytest.fixture
def make_result() -> Callable[..., CommandResult]:
    """Factory for CommandResult objects."""

    def factory(
        stdout: str = "",
        returncode: int = 0,
        stderr: str = "",
        args: Optional[list] = None,
    ) -> CommandResult:
        return CommandResult(
            args=args or ["cmd"], returncode=returncode, stdout=stdout, stderr=stderr
        )

    return factory


@pytest.fixture
def mock_runner() -> MagicMock:
    """CommandRunner mock whose binaries are all on PATH and whose commands succeed."""
    runner = MagicMock(spec=CommandRunner)
    runner.which.side_effect = lambda binary: f"/usr/bin/{binary}"
    runner.succeeds.return_value = True
    runner.run.return_value = CommandResult(args=["cmd"], returncode=0)
    return runner
