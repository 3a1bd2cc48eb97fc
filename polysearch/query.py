"""Search query value and its fluent builder."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

WHERE_OPERATORS = ("=", "==", "!=", "<>", "<", "<=", ">", ">=", "like", "in", "not in")

_MISSING = object()


@dataclass(frozen=True)
class WhereClause:
    """Record filter applied before matching."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class OrderClause:
    """Record ordering applied before matching."""

    field: str
    direction: str = "asc"


@dataclass(frozen=True)
class SearchQuery:
    """Immutable description of one search request."""

    text: str
    fields: tuple[str, ...] = ()
    weights: Mapping[str, float] = field(default_factory=dict)
    algorithm: str | None = None
    wheres: tuple[WhereClause, ...] = ()
    orders: tuple[OrderClause, ...] = ()
    limit: int | None = None
    offset: int = 0
    min_score: float = 0.0
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "fields": list(self.fields),
            "weights": dict(self.weights),
            "algorithm": self.algorithm,
            "wheres": [[w.field, w.operator, w.value] for w in self.wheres],
            "orders": [[o.field, o.direction] for o in self.orders],
            "limit": self.limit,
            "offset": self.offset,
            "min_score": self.min_score,
            "options": dict(self.options),
        }


@dataclass
class SearchQueryBuilder:
    """Fluent builder for SearchQuery objects.

    Each setter returns the builder so calls can be chained:

        query = (
            SearchQueryBuilder()
            .query("laravel")
            .in_fields(["title", "body"])
            .using("fuzzy")
            .limit(10)
            .build()
        )

    ``engine`` is optional; when set, ``get()`` runs the built query on it.
    """

    text: str = ""
    fields: list[str] = field(default_factory=list)
    field_weights: dict[str, float] = field(default_factory=dict)
    algorithm: str | None = None
    wheres: list[WhereClause] = field(default_factory=list)
    orders: list[OrderClause] = field(default_factory=list)
    max_results: int | None = None
    skip: int = 0
    score_threshold: float = 0.0
    algorithm_options: dict[str, Any] = field(default_factory=dict)
    engine: Any = None

    def query(self, text: str) -> "SearchQueryBuilder":
        """Set the query text."""
        self.text = text
        return self

    def in_fields(self, fields: str | list[str]) -> "SearchQueryBuilder":
        """Set the fields to search."""
        self.fields = [fields] if isinstance(fields, str) else list(fields)
        return self

    def weights(self, weights: Mapping[str, float]) -> "SearchQueryBuilder":
        """Set per-field score multipliers."""
        for name, weight in weights.items():
            if weight <= 0:
                raise ValueError(f"Weight for '{name}' must be positive, got {weight}")
        self.field_weights = dict(weights)
        return self

    def using(self, algorithm: str) -> "SearchQueryBuilder":
        """Select the matching algorithm by name."""
        self.algorithm = algorithm
        return self

    def where(
        self, field_name: str, operator: Any, value: Any = _MISSING
    ) -> "SearchQueryBuilder":
        """Add a record filter; ``where(field, value)`` means equality."""
        if value is _MISSING:
            operator, value = "=", operator

        operator = str(operator).lower()
        if operator not in WHERE_OPERATORS:
            raise ValueError(f"Unsupported where operator: {operator}")

        self.wheres.append(WhereClause(field_name, operator, value))
        return self

    def order_by(self, field_name: str, direction: str = "asc") -> "SearchQueryBuilder":
        """Add a record ordering."""
        direction = direction.lower()
        if direction not in ("asc", "desc"):
            raise ValueError(
                f"Order direction must be 'asc' or 'desc', got {direction}"
            )
        self.orders.append(OrderClause(field_name, direction))
        return self

    def limit(self, limit: int) -> "SearchQueryBuilder":
        """Cap the number of results."""
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self.max_results = limit
        return self

    def offset(self, offset: int) -> "SearchQueryBuilder":
        """Skip the first ``offset`` results."""
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        self.skip = offset
        return self

    def min_score(self, score: float) -> "SearchQueryBuilder":
        """Drop results scoring below ``score`` after ranking."""
        self.score_threshold = score
        return self

    def options(self, options: Mapping[str, Any]) -> "SearchQueryBuilder":
        """Merge algorithm options."""
        self.algorithm_options.update(options)
        return self

    def build(self) -> SearchQuery:
        """Build the final SearchQuery."""
        return SearchQuery(
            text=self.text,
            fields=tuple(self.fields),
            weights=dict(self.field_weights),
            algorithm=self.algorithm,
            wheres=tuple(self.wheres),
            orders=tuple(self.orders),
            limit=self.max_results,
            offset=self.skip,
            min_score=self.score_threshold,
            options=dict(self.algorithm_options),
        )

    def get(self, records: list[Any] | None = None):
        """Build the query and run it on the attached engine."""
        if self.engine is None:
            raise RuntimeError("No search engine attached to this query builder")
        return self.engine.search(self.build(), records)
