"""Base filter interface for resource filtering."""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


class ResourceFilter(ABC, Generic[T]):
    """Abstract base class for resource filters.

    Filters are pure: they never call a backing system and return the
    matching items in input order.
    """

    @abstractmethod
    def matches(self, item: T) -> bool:
        """Check whether a single item is selected by this filter."""
        raise NotImplementedError

    def select(self, items: Iterable[T]) -> list[T]:
        """Return the items selected by this filter, preserving order."""
        return [item for item in items if self.matches(item)]
