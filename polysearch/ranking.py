"""Score fusion for search results.

The final score of a result combines the raw algorithm score with the
configured algorithm weight, the query's field weights, and optional
recency and popularity boosts taken from the matched record.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timezone

from .config import RankingConfig
from .query import SearchQuery
from .records import get_field_value
from .results import SearchResult, SearchResultCollection

logger = logging.getLogger(__name__)


def _as_datetime(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def age_in_days(value, reference: datetime) -> int | None:
    """Whole days between ``value`` and ``reference``, in either direction."""
    moment = _as_datetime(value)
    if moment is None:
        return None

    # Compare aware and naive values on the same footing
    if (moment.tzinfo is None) != (reference.tzinfo is None):
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
        else:
            reference = reference.astimezone(timezone.utc).replace(tzinfo=None)

    return abs(reference - moment).days


class RankingEngine:
    """Re-scores and orders results.

    Ranking never mutates its input; it returns new results in a new
    collection, sorted by score with ties kept in their incoming order.
    """

    def __init__(
        self,
        config: RankingConfig | None = None,
        reference_date: datetime | None = None,
    ):
        """Initialize the ranking engine.

        Args:
            config: Ranking configuration
            reference_date: Reference time for recency boosts, defaults to now
        """
        self.config = config or RankingConfig()
        self.reference_date = reference_date

    def is_enabled(self) -> bool:
        return self.config.enabled

    def rank(
        self, results: SearchResultCollection, query: SearchQuery
    ) -> SearchResultCollection:
        """Apply weights and boosts, then sort by score."""
        if not self.config.enabled:
            return results

        reference = self.reference_date or datetime.now()
        ranked = results.map(
            lambda r: replace(r, score=self.score(r, query, reference))
        )
        return ranked.sort_by_score()

    def score(
        self,
        result: SearchResult,
        query: SearchQuery,
        reference: datetime | None = None,
    ) -> float:
        """Compute the fused score of a single result."""
        score = float(result.score)

        weight = self.config.algorithm_weights.get(result.algorithm, 1)
        score *= weight / 100

        # Field weights compound when several weighted fields matched
        for field_name in result.matched_fields:
            if field_name in query.weights:
                score *= query.weights[field_name]

        recency = self.config.recency_boost
        if recency.enabled:
            reference = reference or self.reference_date or datetime.now()
            score *= self._recency_factor(result, reference)

        popularity = self.config.popularity_boost
        if popularity.enabled:
            value = get_field_value(result.item, popularity.field)
            try:
                score *= 1 + int(value) * popularity.boost_factor
            except (TypeError, ValueError):
                logger.debug(
                    f"Skipping popularity boost, '{popularity.field}' is {value!r}"
                )

        return score

    def _recency_factor(self, result: SearchResult, reference: datetime) -> float:
        recency = self.config.recency_boost
        age = age_in_days(get_field_value(result.item, recency.field), reference)
        if age is None:
            return 1.0

        if recency.decay_days <= 0:
            return 1.0
        decay = max(0.0, 1 - age / recency.decay_days)
        return 1 + decay * recency.boost_factor
