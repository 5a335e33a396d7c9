"""Namespace filter protecting system namespaces from whole-namespace deletion."""

from typing import AbstractSet, Iterable

from reclaimer.filters.base import ResourceFilter
from reclaimer.utils.config import DEFAULT_PROTECTED_NAMESPACES


class ProtectedNamespaceFilter(ResourceFilter[str]):
    """Selects namespaces that may be deleted.

    The system namespaces are always protected; extra names can only add
    to that set.
    """

    def __init__(self, protected: AbstractSet[str] = DEFAULT_PROTECTED_NAMESPACES):
        self.protected = frozenset(protected) | DEFAULT_PROTECTED_NAMESPACES

    def matches(self, item: str) -> bool:
        return bool(item) and item not in self.protected


def select_deletable_namespaces(
    namespaces: Iterable[str],
    protected: AbstractSet[str] = DEFAULT_PROTECTED_NAMESPACES,
) -> list[str]:
    """Return unprotected namespaces, sorted and without duplicates."""
    return sorted(set(ProtectedNamespaceFilter(protected).select(namespaces)))
