"""Search result types."""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass
class SearchResult:
    """A record matched by a search, with its score and match details."""

    item: Any
    score: float
    algorithm: str
    matched_fields: list[str] = field(default_factory=list)
    highlights: dict[str, list[str]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """De-duplicate matched fields, keeping their order."""
        self.matched_fields = list(dict.fromkeys(self.matched_fields))

    def copy(self) -> "SearchResult":
        """Copy with its own field, highlight and metadata containers."""
        return replace(
            self,
            matched_fields=list(self.matched_fields),
            highlights={k: list(v) for k, v in self.highlights.items()},
            metadata=dict(self.metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "item": self.item,
            "score": self.score,
            "algorithm": self.algorithm,
            "matched_fields": list(self.matched_fields),
            "highlights": {k: list(v) for k, v in self.highlights.items()},
            "metadata": dict(self.metadata),
        }


class SearchResultCollection:
    """Ordered collection of search results.

    Every view returns a new collection and leaves this one untouched.
    """

    def __init__(self, results: Iterable[SearchResult] = ()):
        self._results = list(results)
        for result in self._results:
            if not isinstance(result, SearchResult):
                raise TypeError(
                    f"SearchResultCollection only holds SearchResult, "
                    f"got {type(result).__name__}"
                )

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[SearchResult]:
        return iter(self._results)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SearchResultCollection(self._results[index])
        return self._results[index]

    def __bool__(self) -> bool:
        return bool(self._results)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchResultCollection):
            return NotImplemented
        return self._results == other._results

    def __repr__(self) -> str:
        return f"SearchResultCollection({len(self._results)} results)"

    def sort_by_score(self) -> "SearchResultCollection":
        """Sort by score, highest first; equal scores keep their order."""
        return SearchResultCollection(
            sorted(self._results, key=lambda r: r.score, reverse=True)
        )

    def min_score(self, threshold: float) -> "SearchResultCollection":
        """Keep results scoring at least ``threshold``."""
        return SearchResultCollection(r for r in self._results if r.score >= threshold)

    def by_algorithm(self, name: str) -> "SearchResultCollection":
        return SearchResultCollection(r for r in self._results if r.algorithm == name)

    def group_by_algorithm(self) -> dict[str, "SearchResultCollection"]:
        groups: dict[str, list[SearchResult]] = {}
        for result in self._results:
            groups.setdefault(result.algorithm, []).append(result)
        return {name: SearchResultCollection(group) for name, group in groups.items()}

    def items(self) -> list[Any]:
        """The matched records, in result order."""
        return [r.item for r in self._results]

    def max_score(self) -> float:
        return max((r.score for r in self._results), default=0.0)

    def min_score_value(self) -> float:
        return min((r.score for r in self._results), default=0.0)

    def avg_score(self) -> float:
        if not self._results:
            return 0.0
        return sum(r.score for r in self._results) / len(self._results)

    def slice(self, offset: int) -> "SearchResultCollection":
        return SearchResultCollection(self._results[offset:])

    def take(self, limit: int) -> "SearchResultCollection":
        return SearchResultCollection(self._results[:limit])

    def map(
        self, func: Callable[[SearchResult], SearchResult]
    ) -> "SearchResultCollection":
        return SearchResultCollection(func(r) for r in self._results)

    def to_list(self) -> list[SearchResult]:
        return list(self._results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": len(self._results),
            "max_score": self.max_score(),
            "avg_score": self.avg_score(),
            "results": [r.to_dict() for r in self._results],
        }
