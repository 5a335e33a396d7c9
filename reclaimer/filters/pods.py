"""Pod and volume-claim filters for orchestrator cleanup.

Evicted pods are Failed pods whose status reason is "Evicted"; they are
matched on both fields so a normally failed pod or a Succeeded pod is never
reported as evicted.
"""

import logging
from typing import Iterable

from reclaimer.filters.base import ResourceFilter
from reclaimer.models import PodInfo, VolumeClaim

logger = logging.getLogger(__name__)

PHASE_SUCCEEDED = "Succeeded"
PHASE_FAILED = "Failed"
EVICTED_REASON = "Evicted"


class EvictedPodFilter(ResourceFilter[PodInfo]):
    """Selects pods evicted by their node for resource pressure."""

    def matches(self, item: PodInfo) -> bool:
        return item.phase == PHASE_FAILED and item.reason == EVICTED_REASON


class UnusedClaimFilter(ResourceFilter[VolumeClaim]):
    """Selects claims not mounted by any of the given pods."""

    def __init__(self, pods: Iterable[PodInfo]):
        self.claims_in_use = {
            (pod.namespace, claim) for pod in pods for claim in pod.claim_names
        }

    def matches(self, item: VolumeClaim) -> bool:
        return (item.namespace, item.name) not in self.claims_in_use


def select_evicted_pods(pods: Iterable[PodInfo]) -> list[PodInfo]:
    """Return exactly the evicted subset of the given pods."""
    pods = list(pods)
    evicted = EvictedPodFilter().select(pods)
    logger.debug(f"Evicted pod filter: {len(pods)} -> {len(evicted)}")
    return evicted


def find_unused_claims(
    claims: Iterable[VolumeClaim], pods: Iterable[PodInfo]
) -> list[VolumeClaim]:
    """Return claims that no pod in the same namespace references."""
    return UnusedClaimFilter(pods).select(claims)
