"""Collaborator interfaces used by the search engine.

The engine never persists anything itself. Records come from a
``RecordStore``, an optional ``IndexLookup`` narrows candidates through a
full-text index, and an optional ``CacheStore`` keeps unranked matches.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..query import OrderClause, WhereClause


class SearchError(Exception):
    """Base exception for search collaborators."""

    pass


class IndexingError(SearchError):
    """Raised when a full-text index cannot be written or read."""

    pass


class RecordStore(ABC):
    """Source of candidate records."""

    @abstractmethod
    def fetch(
        self,
        wheres: Sequence[WhereClause] = (),
        orders: Sequence[OrderClause] = (),
    ) -> list[Any]:
        """Return records satisfying every where clause, in the given order."""
        pass

    @abstractmethod
    def find_many(self, keys: Sequence[str]) -> list[Any]:
        """Return the records with the given primary keys, in key order.

        Unknown keys are skipped.
        """
        pass


class IndexLookup(ABC):
    """Full-text index that maps query text to ranked primary keys."""

    @abstractmethod
    def search(self, text: str) -> list[str]:
        """Return primary keys of matching records, best first."""
        pass


class CacheStore(ABC):
    """Key/value store for unranked search matches."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        pass

    @abstractmethod
    def put(self, key: str, value: Any, ttl: int) -> None:
        """Store a value for ``ttl`` seconds."""
        pass

    @abstractmethod
    def forget(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
