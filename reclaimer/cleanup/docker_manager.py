"""Container engine management for cleanup operations.

Wraps the docker CLI: daemon ping, running-container listing, container
stop, the prune family and the disk-usage query used for the final report.
"""

import logging
import re
from typing import List, Optional

from reclaimer.models import ContainerInfo
from reclaimer.utils.command import CommandError, CommandRunner, OutputParseError

logger = logging.getLogger(__name__)

RECLAIMED_PATTERN = re.compile(r"Total reclaimed space:\s*(\S+)")


def _rejects_all_flag(stderr: str) -> bool:
    """True when the CLI or the daemon API is too old for `volume prune --all`."""
    if "unknown flag" in stderr:
        return True
    return "--all" in stderr and "requires API version" in stderr


class DockerManager:
    """Manages container engine scanning and prune operations.

    Handles:
    - Daemon reachability check
    - Running container listing from JSON output
    - Container stop with kill fallback
    - Pruning containers, images, networks, build cache and volumes
    - Disk usage accounting for the final report
    """

    def __init__(
        self,
        runner: CommandRunner,
        binary: str = "docker",
        stop_timeout: int = 10,
        status_timeout: Optional[float] = None,
    ):
        """
        Initialize docker manager.

        Args:
            runner: Command runner used for every docker call
            binary: Docker CLI binary name or path
            stop_timeout: Seconds a container gets to stop before docker kills it
            status_timeout: Timeout for status queries such as the daemon ping
        """
        self.runner = runner
        self.binary = binary
        self.stop_timeout = stop_timeout
        self.status_timeout = status_timeout

    def _cmd(self, *args: str) -> List[str]:
        return [self.binary, *args]

    def is_installed(self) -> bool:
        """Check whether the docker CLI is on PATH."""
        return self.runner.which(self.binary) is not None

    def ping(self) -> bool:
        """Check whether the daemon answers a no-op info query."""
        return self.runner.succeeds(
            self._cmd("info", "--format", "{{json .ServerVersion}}"),
            timeout=self.status_timeout,
        )

    def list_running_containers(self) -> List[ContainerInfo]:
        """
        List running containers.

        Returns:
            List of ContainerInfo for every running container

        Raises:
            CommandError: If the listing fails or its output cannot be parsed
        """
        result = self.runner.run(
            self._cmd("ps", "--no-trunc", "--format", "{{json .}}"),
            timeout=self.status_timeout,
        )
        containers = []
        for doc in result.json_lines():
            if not isinstance(doc, dict):
                raise OutputParseError(result.args, "expected one JSON object per line")
            containers.append(
                ContainerInfo(
                    container_id=doc.get("ID", ""),
                    name=doc.get("Names", ""),
                    image=doc.get("Image", ""),
                    state=doc.get("State", "running"),
                )
            )
        logger.info(f"Found {len(containers)} running containers")
        return containers

    def stop_container(self, container_id: str) -> str:
        """
        Stop a running container, killing it if the stop fails.

        Pruning relies on containers being stopped to release their volume
        references, so a failed stop is followed by a kill.

        Returns:
            Detail string describing how the container was stopped

        Raises:
            CommandError: If both stop and kill fail
        """
        try:
            self.runner.run(
                self._cmd("stop", "--time", str(self.stop_timeout), container_id)
            )
            return f"stopped {container_id[:12]}"
        except CommandError as e:
            logger.warning(f"Stop failed for {container_id[:12]}, killing: {e}")

        self.runner.run(self._cmd("kill", container_id))
        return f"killed {container_id[:12]} after stop failed"

    def prune_containers(self) -> str:
        """Remove all stopped containers."""
        return self._prune(self._cmd("container", "prune", "--force"))

    def prune_images(self, all_images: bool = False) -> str:
        """Remove dangling images, or every image not used by a container."""
        args = self._cmd("image", "prune", "--force")
        if all_images:
            args.append("--all")
        return self._prune(args)

    def prune_networks(self) -> str:
        """Remove networks not used by any container."""
        return self._prune(self._cmd("network", "prune", "--force"))

    def prune_build_cache(self, all_cache: bool = False) -> str:
        """Remove dangling build cache, or all of it."""
        args = self._cmd("builder", "prune", "--force")
        if all_cache:
            args.append("--all")
        return self._prune(args)

    def prune_unused_volumes(self) -> str:
        """
        Remove volumes not referenced by any existing container.

        `--all` includes named volumes; daemons that predate the flag only
        support the anonymous-volume prune.
        """
        try:
            return self._prune(self._cmd("volume", "prune", "--force", "--all"))
        except CommandError as e:
            if not _rejects_all_flag(e.stderr):
                raise
            logger.warning("Daemon does not support 'volume prune --all', retrying without it")
            return self._prune(self._cmd("volume", "prune", "--force"))

    def list_volumes(self) -> List[str]:
        """List the names of all volumes."""
        result = self.runner.run(self._cmd("volume", "ls", "--quiet"))
        return result.lines()

    def remove_all_volumes(self) -> str:
        """
        Remove every volume.

        Raises:
            CommandError: If any volume could not be removed (for example
                because a container started by someone else still uses it)
        """
        volumes = self.list_volumes()
        if not volumes:
            return "no volumes present"

        self.runner.run(self._cmd("volume", "rm", "--force", *volumes))
        return f"removed {len(volumes)} volumes"

    def prune_system(self) -> str:
        """Full system prune including all images and volumes."""
        return self._prune(
            self._cmd("system", "prune", "--all", "--force", "--volumes")
        )

    def disk_usage(self) -> str:
        """Return the `docker system df` accounting as text."""
        result = self.runner.run(self._cmd("system", "df"), timeout=self.status_timeout)
        return result.stdout.rstrip()

    def _prune(self, args: List[str]) -> str:
        result = self.runner.run(args)
        match = RECLAIMED_PATTERN.search(result.stdout)
        if match:
            return f"reclaimed {match.group(1)}"
        return "nothing to reclaim"
