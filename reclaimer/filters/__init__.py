"""Filter modules for selecting reclaimable orchestrator resources."""

from reclaimer.filters.base import ResourceFilter
from reclaimer.filters.namespaces import (
    ProtectedNamespaceFilter,
    select_deletable_namespaces,
)
from reclaimer.filters.pods import (
    EvictedPodFilter,
    UnusedClaimFilter,
    find_unused_claims,
    select_evicted_pods,
)

__all__ = [
    "ResourceFilter",
    "ProtectedNamespaceFilter",
    "select_deletable_namespaces",
    "EvictedPodFilter",
    "UnusedClaimFilter",
    "find_unused_claims",
    "select_evicted_pods",
]
