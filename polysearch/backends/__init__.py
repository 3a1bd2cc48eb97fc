"""Collaborator interfaces and implementations."""

from .base import CacheStore, IndexingError, IndexLookup, RecordStore, SearchError
from .memory import MemoryCacheStore, MemoryRecordStore

__all__ = [
    "CacheStore",
    "IndexLookup",
    "IndexingError",
    "MemoryCacheStore",
    "MemoryRecordStore",
    "RecordStore",
    "SearchError",
]
