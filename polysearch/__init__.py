"""Pluggable multi-strategy text matching and ranking."""

from .config import SearchConfig, load_config
from .engine import SearchEngine, SearchEngineBuilder, create_default_engine
from .query import SearchQuery, SearchQueryBuilder
from .records import Searchable
from .results import SearchResult, SearchResultCollection

__version__ = "0.1.0"

__all__ = [
    "SearchConfig",
    "SearchEngine",
    "SearchEngineBuilder",
    "SearchQuery",
    "SearchQueryBuilder",
    "SearchResult",
    "SearchResultCollection",
    "Searchable",
    "create_default_engine",
    "load_config",
]
