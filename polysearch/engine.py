"""Search engine orchestrating matching, ranking and highlighting."""

import hashlib
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

import msgspec

from .algorithms import MatchAlgorithm, RawMatch, create_algorithms
from .backends.base import CacheStore, IndexLookup, RecordStore
from .backends.memory import MemoryRecordStore
from .config import SearchConfig
from .highlighting import SearchHighlighter
from .query import SearchQuery, SearchQueryBuilder
from .ranking import RankingEngine
from .records import Searchable, get_field_value
from .results import SearchResult, SearchResultCollection
from .suggestions import SearchSuggester
from .synonyms import SynonymExpander

logger = logging.getLogger(__name__)

FALLBACK_ALGORITHM = "partial"
FTS_ALGORITHM = "fts"
FTS_SCORE = 50


class SearchEngine:
    """Search engine over caller-supplied records.

    Coordinates synonym expansion, algorithm selection, ranking,
    highlighting, paging and result caching. Records come either from the
    ``records`` argument of ``search`` or from the configured record store.
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        record_store: RecordStore | None = None,
        index_lookup: IndexLookup | None = None,
        cache_store: CacheStore | None = None,
        reference_date: datetime | None = None,
    ):
        """Initialize search engine.

        Args:
            config: Search configuration (default: SearchConfig())
            record_store: Source of records when none are passed to search
            index_lookup: Full-text index used when full-text search is enabled
            cache_store: Store for finished results
            reference_date: Reference time for recency boosts, defaults to now
        """
        self.config = config or SearchConfig()
        self.record_store = record_store
        self.index_lookup = index_lookup
        self.cache_store = cache_store
        self._indexes: dict[str, IndexLookup] = {}

        self._algorithms: dict[str, MatchAlgorithm] = create_algorithms(
            self.config.algorithms
        )
        self.ranker = RankingEngine(self.config.ranking, reference_date=reference_date)
        self.highlighter = SearchHighlighter(self.config.highlighting)
        self.suggester = SearchSuggester(self.config.suggestions)
        self.synonym_expander = SynonymExpander(self.config.synonyms)

    @property
    def algorithms(self) -> dict[str, MatchAlgorithm]:
        return dict(self._algorithms)

    def get_algorithm(self, name: str) -> MatchAlgorithm | None:
        return self._algorithms.get(name)

    def register_algorithm(self, algorithm: MatchAlgorithm) -> None:
        """Add or replace an algorithm under its own name."""
        if not algorithm.name:
            raise ValueError("Algorithm must have a name to be registered")
        self._algorithms[algorithm.name] = algorithm

    def query(self, text: str = "") -> SearchQueryBuilder:
        """Start building a query that can be run with ``get()``."""
        return SearchQueryBuilder(engine=self).query(text)

    def search(
        self,
        query: SearchQuery,
        records: Sequence[Any] | None = None,
        index_name: str | None = None,
    ) -> SearchResultCollection:
        """Execute a search query.

        Args:
            query: The query to run
            records: Records to search; the record store is used when None
            index_name: Registered full-text index to use instead of the
                default one

        Returns:
            Ranked, highlighted and paged results
        """
        text = query.text
        if self.config.synonyms.enabled:
            text = self.synonym_expander.expand(text)

        results = self._match(query, text, records, index_name)

        if self.config.ranking.enabled:
            results = self.ranker.rank(results, query)
        if self.config.highlighting.enabled:
            results = self.highlighter.highlight(results, text)

        if query.min_score > 0:
            results = results.min_score(query.min_score)
        if query.offset:
            results = results.slice(query.offset)
        if query.limit is not None:
            results = results.take(query.limit)

        return results

    def _match(
        self,
        query: SearchQuery,
        text: str,
        records: Sequence[Any] | None,
        index_name: str | None,
    ) -> SearchResultCollection:
        """Unranked matches for a query.

        Only record-store searches are cached; explicitly passed records
        are not part of the cache key.
        """
        cache_key = None
        if (
            records is None
            and self.config.cache.enabled
            and self.cache_store is not None
        ):
            cache_key = self.cache_key(query, index_name)
            cached = self.cache_store.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for {cache_key}")
                return cached.map(SearchResult.copy)

        lookup = self._index_for(index_name)
        if self._use_full_text(query, lookup):
            results = self._search_full_text(query, lookup)
        else:
            results = self._search_algorithm(query, text, records)

        if cache_key is not None:
            self.cache_store.put(
                cache_key, results.map(SearchResult.copy), self.config.cache.ttl
            )

        return results

    def register_index(self, name: str, lookup: IndexLookup) -> None:
        """Make a full-text index available under ``name``."""
        self._indexes[name] = lookup

    def _index_for(self, index_name: str | None) -> IndexLookup | None:
        if index_name is None:
            return self.index_lookup
        lookup = self._indexes.get(index_name)
        if lookup is None:
            logger.debug(f"No index named '{index_name}', using the default index")
            return self.index_lookup
        return lookup

    def _use_full_text(
        self, query: SearchQuery, lookup: IndexLookup | None
    ) -> bool:
        return (
            self.config.fts.enabled
            and lookup is not None
            and self.record_store is not None
            and query.algorithm in (None, FTS_ALGORITHM)
        )

    def _search_full_text(
        self, query: SearchQuery, lookup: IndexLookup
    ) -> SearchResultCollection:
        keys = lookup.search(query.text)
        records = self.record_store.find_many(keys)
        logger.debug(f"Full-text search found {len(records)} records")

        return SearchResultCollection(
            SearchResult(
                item=record,
                score=FTS_SCORE,
                algorithm=FTS_ALGORITHM,
                matched_fields=list(query.fields),
                metadata={"match_type": FTS_ALGORITHM},
            )
            for record in records
        )

    def _select_algorithm(self, query: SearchQuery) -> MatchAlgorithm:
        name = query.algorithm or self.config.default_algorithm
        algorithm = self._algorithms.get(name)
        if algorithm is None:
            logger.warning(
                f"Unknown search algorithm '{name}', using '{FALLBACK_ALGORITHM}'"
            )
            algorithm = self._algorithms[FALLBACK_ALGORITHM]
        return algorithm

    def _candidates(
        self, query: SearchQuery, records: Sequence[Any] | None
    ) -> list[Any] | None:
        if records is not None:
            return MemoryRecordStore(records).fetch(query.wheres, query.orders)
        if self.record_store is not None:
            return self.record_store.fetch(query.wheres, query.orders)
        return None

    def _search_algorithm(
        self, query: SearchQuery, text: str, records: Sequence[Any] | None
    ) -> SearchResultCollection:
        algorithm = self._select_algorithm(query)
        if not algorithm.is_enabled():
            logger.debug(f"Algorithm '{algorithm.name}' is disabled")
            return SearchResultCollection()

        candidates = self._candidates(query, records)
        if candidates is None:
            logger.debug("No records or record store to search")
            return SearchResultCollection()

        logger.debug(
            f"Running '{algorithm.name}' over {len(candidates)} records "
            f"in fields {list(query.fields)}"
        )
        matches = algorithm.search(text, candidates, query.fields, query.options)
        logger.debug(f"'{algorithm.name}' matched {len(matches)} records")

        results = SearchResultCollection(
            self._to_result(match, candidates, algorithm.name) for match in matches
        )
        return results.sort_by_score()

    @staticmethod
    def _to_result(match: RawMatch, records: Sequence[Any], name: str) -> SearchResult:
        return SearchResult(
            item=records[match.index],
            score=match.score,
            algorithm=name,
            matched_fields=list(match.fields),
            metadata=dict(match.metadata),
        )

    def cache_key(self, query: SearchQuery, index_name: str | None = None) -> str:
        """Cache key for a query.

        The text, fields, algorithm, filters, options and index name identify
        the cached matches. Paging, weights and score thresholds are applied
        after the cache, so they are not part of the key.
        """
        payload = msgspec.json.encode(
            {
                "text": query.text,
                "fields": list(query.fields),
                "algorithm": query.algorithm,
                "wheres": [[w.field, w.operator, w.value] for w in query.wheres],
                "options": dict(query.options),
                "index": index_name,
            },
            order="sorted",
            enc_hook=str,
        )
        return self.config.cache.prefix + hashlib.md5(payload).hexdigest()

    def suggest(
        self, query: str, candidates: Iterable[Any], limit: int = 5
    ) -> list[str]:
        return self.suggester.suggest(query, candidates, limit)

    def did_you_mean(self, query: str, dictionary: Iterable[str]) -> str | None:
        return self.suggester.did_you_mean(query, dictionary)

    def search_searchable(
        self,
        searchable: Searchable,
        text: str,
        algorithm: str | None = None,
        records: Sequence[Any] | None = None,
    ) -> SearchResultCollection:
        """Search using the fields, weights and index a Searchable declares."""
        builder = (
            SearchQueryBuilder()
            .query(text)
            .in_fields(searchable.searchable_fields())
            .weights(searchable.search_weights())
        )
        if algorithm:
            builder.using(algorithm)
        return self.search(
            builder.build(), records, index_name=searchable.search_index_name()
        )

    @staticmethod
    def ordered_keys(
        results: SearchResultCollection, key_field: str = "id"
    ) -> list[Any]:
        """Primary keys of the results in ranked order, skipping keyless items."""
        keys = []
        for result in results:
            key = get_field_value(result.item, key_field)
            if key is not None:
                keys.append(key)
        return keys


class SearchEngineBuilder:
    """Builder for constructing SearchEngine instances."""

    def __init__(self):
        self.config: SearchConfig | None = None
        self.record_store: RecordStore | None = None
        self.index_lookup: IndexLookup | None = None
        self.cache_store: CacheStore | None = None
        self.reference_date: datetime | None = None
        self.extra_algorithms: list[MatchAlgorithm] = []
        self.indexes: dict[str, IndexLookup] = {}

    def with_config(self, config: SearchConfig) -> "SearchEngineBuilder":
        self.config = config
        return self

    def with_record_store(self, store: RecordStore) -> "SearchEngineBuilder":
        self.record_store = store
        return self

    def with_index_lookup(self, lookup: IndexLookup) -> "SearchEngineBuilder":
        self.index_lookup = lookup
        return self

    def with_index(self, name: str, lookup: IndexLookup) -> "SearchEngineBuilder":
        """Register a named full-text index."""
        self.indexes[name] = lookup
        return self

    def with_cache(self, cache: CacheStore) -> "SearchEngineBuilder":
        self.cache_store = cache
        return self

    def with_reference_date(self, reference_date: datetime) -> "SearchEngineBuilder":
        self.reference_date = reference_date
        return self

    def with_algorithm(self, algorithm: MatchAlgorithm) -> "SearchEngineBuilder":
        """Register an additional (or replacement) algorithm."""
        self.extra_algorithms.append(algorithm)
        return self

    def build(self) -> SearchEngine:
        """Build the SearchEngine instance."""
        engine = SearchEngine(
            config=self.config,
            record_store=self.record_store,
            index_lookup=self.index_lookup,
            cache_store=self.cache_store,
            reference_date=self.reference_date,
        )
        for algorithm in self.extra_algorithms:
            engine.register_algorithm(algorithm)
        for name, lookup in self.indexes.items():
            engine.register_index(name, lookup)
        return engine


def create_default_engine(records: Iterable[Any] | None = None) -> SearchEngine:
    """Create a SearchEngine with default configuration.

    When ``records`` are given they become the engine's record store.
    """
    builder = SearchEngineBuilder()
    if records is not None:
        builder.with_record_store(MemoryRecordStore(records))
    return builder.build()
