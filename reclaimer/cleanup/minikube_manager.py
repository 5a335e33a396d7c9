"""Local-cluster manager operations for cleanup.

Wraps the minikube CLI for status queries, in-node engine pruning, image
cache removal and cluster deletion, and removes the on-disk cache and log
directories of a stopped cluster.
"""

import logging
import os
import shutil
from typing import Any, List, Optional

from reclaimer.models import ClusterState
from reclaimer.utils.command import CommandRunner, OutputParseError

logger = logging.getLogger(__name__)

# Directories under the minikube home removed when the cluster is stopped
CACHE_DIRECTORIES = ("cache", "logs")

# Engine prune run inside the cluster node; keeps running workloads intact
NODE_PRUNE_COMMAND = ("docker", "system", "prune", "--force", "--volumes")


class MinikubeManager:
    """Manages the local cluster and its on-disk state."""

    def __init__(
        self,
        runner: CommandRunner,
        binary: str = "minikube",
        minikube_dir: str = "~/.minikube",
        status_timeout: Optional[float] = None,
    ):
        """
        Initialize minikube manager.

        Args:
            runner: Command runner used for every minikube call
            binary: minikube binary name or path
            minikube_dir: Minikube home directory holding cache and logs
            status_timeout: Timeout for version and status queries
        """
        self.runner = runner
        self.binary = binary
        self.minikube_dir = os.path.expanduser(minikube_dir)
        self.status_timeout = status_timeout

    def _cmd(self, *args: str) -> List[str]:
        return [self.binary, *args]

    def is_installed(self) -> bool:
        """Check whether minikube is on PATH and answers a version query."""
        if self.runner.which(self.binary) is None:
            return False
        return self.runner.succeeds(
            self._cmd("version", "--short"), timeout=self.status_timeout
        )

    def has_home_directory(self) -> bool:
        return os.path.isdir(self.minikube_dir)

    def cluster_state(self) -> ClusterState:
        """
        Query the local cluster state.

        `minikube status` exits non-zero whenever the cluster is not fully
        running, so the exit status is ignored and the JSON body decides.
        Output that is not a status document means no profile exists.
        """
        args = self._cmd("status", "--output=json")
        result = self.runner.run(args, timeout=self.status_timeout, check=False)
        if not result.stdout.strip():
            return ClusterState.ABSENT

        try:
            document: Any = result.json()
        except OutputParseError:
            logger.debug(f"minikube status returned non-JSON output: {result.stdout!r}")
            return ClusterState.ABSENT

        # Multi-node clusters report one document per node
        if isinstance(document, list):
            document = document[0] if document else {}
        if not isinstance(document, dict):
            return ClusterState.ABSENT

        host = str(document.get("Host", ""))
        if host == "Running":
            return ClusterState.RUNNING
        if host in ("", "Nonexistent"):
            return ClusterState.ABSENT
        return ClusterState.STOPPED

    def prune_node_engine(self) -> str:
        """Prune the container engine inside the cluster node."""
        self.runner.run(self._cmd("ssh", "--", " ".join(NODE_PRUNE_COMMAND)))
        return "pruned container engine inside the cluster node"

    def delete_image_cache(self) -> str:
        """Remove every image from the local image cache."""
        images = self.runner.run(self._cmd("cache", "list")).lines()
        if not images:
            return "image cache already empty"
        self.runner.run(self._cmd("cache", "delete", *images))
        return f"removed {len(images)} cached images"

    def delete_cluster(self) -> str:
        """Delete the whole local cluster."""
        self.runner.run(self._cmd("delete"))
        return "deleted local cluster"

    def remove_cache_directories(self) -> str:
        """
        Remove the cache and log directories of a stopped cluster.

        Raises:
            OSError: If a directory exists but cannot be removed
        """
        removed = []
        for name in CACHE_DIRECTORIES:
            path = os.path.join(self.minikube_dir, name)
            if not os.path.exists(path):
                continue
            shutil.rmtree(path)
            removed.append(path)
            logger.info(f"Removed {path}")

        if not removed:
            return "no cache directories present"
        return f"removed {', '.join(removed)}"
