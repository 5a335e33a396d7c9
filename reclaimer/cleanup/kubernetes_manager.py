"""Orchestrator management for cleanup operations.

Wraps kubectl: cluster reachability, namespace and pod listings parsed from
JSON, time-bounded deletions, and the unused-claim report.
"""

import logging
from typing import Any, Dict, List, Optional

from reclaimer.filters.pods import find_unused_claims, select_evicted_pods
from reclaimer.models import PodInfo, VolumeClaim
from reclaimer.utils.command import CommandError, CommandRunner, OutputParseError

logger = logging.getLogger(__name__)

# Extra seconds granted to the process on top of kubectl's own --timeout
TIMEOUT_GRACE_SECONDS = 15


class ReclaimError(Exception):
    """Raised when some objects of a multi-object action could not be reclaimed."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        self.message = message
        self.errors = errors or {}
        super().__init__(self.message)


def _items(args: List[str], document: Any) -> List[Dict[str, Any]]:
    if not isinstance(document, dict) or not isinstance(document.get("items"), list):
        raise OutputParseError(args, "expected an object with an 'items' list")
    if not all(isinstance(item, dict) for item in document["items"]):
        raise OutputParseError(args, "expected every item to be an object")
    return document["items"]


class KubernetesManager:
    """Manages orchestrator scanning and deletion operations.

    Every deletion is bounded by `delete_timeout`: kubectl gets it as
    `--timeout` and the process is killed shortly after it expires.
    """

    def __init__(
        self,
        runner: CommandRunner,
        binary: str = "kubectl",
        delete_timeout: int = 60,
        status_timeout: Optional[float] = None,
    ):
        """
        Initialize kubernetes manager.

        Args:
            runner: Command runner used for every kubectl call
            binary: kubectl binary name or path
            delete_timeout: Seconds allowed for each deletion
            status_timeout: Timeout for reachability and listing queries
        """
        self.runner = runner
        self.binary = binary
        self.delete_timeout = delete_timeout
        self.status_timeout = status_timeout

    def _cmd(self, *args: str) -> List[str]:
        return [self.binary, *args]

    def _delete(self, *args: str) -> str:
        result = self.runner.run(
            self._cmd("delete", *args, f"--timeout={self.delete_timeout}s"),
            timeout=self.delete_timeout + TIMEOUT_GRACE_SECONDS,
        )
        return result.stdout.strip()

    def is_installed(self) -> bool:
        """Check whether kubectl is on PATH and answers a client version query."""
        if self.runner.which(self.binary) is None:
            return False
        return self.runner.succeeds(
            self._cmd("version", "--client", "--output=json"),
            timeout=self.status_timeout,
        )

    def is_reachable(self) -> bool:
        """Check whether kubectl can reach a live cluster."""
        args = self._cmd("cluster-info")
        if self.status_timeout:
            args.append(f"--request-timeout={int(self.status_timeout)}s")
        return self.runner.succeeds(args, timeout=self.status_timeout)

    def list_namespaces(self) -> List[str]:
        """
        List namespace names.

        Raises:
            CommandError: If the listing fails or its output cannot be parsed
        """
        args = self._cmd("get", "namespaces", "--output=json")
        document = self.runner.run(args, timeout=self.status_timeout).json()
        return [item.get("metadata", {}).get("name", "") for item in _items(args, document)]

    def list_pods(self, phase: Optional[str] = None) -> List[PodInfo]:
        """
        List pods across all namespaces, optionally restricted to one phase.

        Raises:
            CommandError: If the listing fails or its output cannot be parsed
        """
        args = self._cmd("get", "pods", "--all-namespaces", "--output=json")
        if phase:
            args.append(f"--field-selector=status.phase={phase}")
        document = self.runner.run(args, timeout=self.status_timeout).json()

        pods = []
        for item in _items(args, document):
            metadata = item.get("metadata", {})
            status = item.get("status", {})
            claims = tuple(
                volume["persistentVolumeClaim"]["claimName"]
                for volume in item.get("spec", {}).get("volumes", []) or []
                if volume.get("persistentVolumeClaim", {}).get("claimName")
            )
            pods.append(
                PodInfo(
                    namespace=metadata.get("namespace", ""),
                    name=metadata.get("name", ""),
                    phase=status.get("phase", ""),
                    reason=status.get("reason", "") or "",
                    claim_names=claims,
                )
            )
        return pods

    def list_volume_claims(self) -> List[VolumeClaim]:
        """List persistent volume claims across all namespaces."""
        args = self._cmd("get", "pvc", "--all-namespaces", "--output=json")
        document = self.runner.run(args, timeout=self.status_timeout).json()
        return [
            VolumeClaim(
                namespace=item.get("metadata", {}).get("namespace", ""),
                name=item.get("metadata", {}).get("name", ""),
                phase=item.get("status", {}).get("phase", ""),
            )
            for item in _items(args, document)
        ]

    def delete_pods_by_phase(self, phase: str) -> str:
        """Delete every pod in the given phase across all namespaces."""
        output = self._delete(
            "pods", "--all-namespaces", f"--field-selector=status.phase={phase}"
        )
        deleted = sum(1 for line in output.splitlines() if "deleted" in line)
        return f"deleted {deleted} {phase} pods"

    def delete_evicted_pods(self) -> str:
        """
        Delete pods evicted by their node.

        Evicted pods are selected from the Failed listing by status reason.

        Raises:
            ReclaimError: If some evicted pods could not be deleted
        """
        evicted = select_evicted_pods(self.list_pods(phase="Failed"))
        if not evicted:
            return "no evicted pods"

        errors: Dict[str, str] = {}
        for pod in evicted:
            try:
                self._delete("pod", pod.name, f"--namespace={pod.namespace}")
                logger.info(f"Deleted evicted pod {pod.qualified_name}")
            except CommandError as e:
                logger.warning(f"Failed to delete evicted pod {pod.qualified_name}: {e}")
                errors[pod.qualified_name] = str(e)

        deleted = len(evicted) - len(errors)
        if errors:
            raise ReclaimError(
                f"deleted {deleted}/{len(evicted)} evicted pods", errors=errors
            )
        return f"deleted {deleted} evicted pods"

    def report_unused_volume_claims(self) -> str:
        """
        List claims not mounted by any pod, without deleting them.

        Returns:
            Detail string naming the unused claims
        """
        unused = find_unused_claims(self.list_volume_claims(), self.list_pods())
        for claim in unused:
            logger.info(f"Unused persistent volume claim: {claim.qualified_name}")
        if not unused:
            return "no unused persistent volume claims"
        names = ", ".join(claim.qualified_name for claim in unused)
        return f"{len(unused)} unused persistent volume claims (not deleted): {names}"

    def delete_namespace(self, namespace: str) -> str:
        """Delete a whole namespace."""
        self._delete("namespace", namespace)
        return f"deleted namespace {namespace}"

    def delete_all_objects(self, kind: str, namespace: str = "default") -> str:
        """Delete every object of a kind ("all", "pvc", ...) in a namespace."""
        output = self._delete(kind, "--all", f"--namespace={namespace}")
        deleted = sum(1 for line in output.splitlines() if "deleted" in line)
        return f"deleted {deleted} objects of kind '{kind}' in {namespace}"
