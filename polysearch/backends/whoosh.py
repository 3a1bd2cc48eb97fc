"""Whoosh full-text index lookup."""

import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from whoosh import fields as whoosh_fields
from whoosh.analysis import StandardAnalyzer
from whoosh.filedb.filestore import RamStorage
from whoosh.index import Index, create_in, exists_in, open_dir
from whoosh.qparser import MultifieldParser, OrGroup
from whoosh.query import Every
from whoosh.writing import IndexWriter

from ..records import get_field_text, get_field_value
from .base import IndexingError, IndexLookup

logger = logging.getLogger(__name__)


def _schema_name(field_path: str) -> str:
    return field_path.replace(".", "_")


class WhooshIndexLookup(IndexLookup):
    """Index lookup backed by a Whoosh index.

    The index lives in memory unless ``index_dir`` is given, in which case
    it is created there or reopened if it already exists.
    """

    def __init__(
        self,
        fields: Sequence[str],
        index_dir: Path | None = None,
        key_field: str = "id",
        limit: int | None = None,
    ):
        """Initialize the lookup.

        Args:
            fields: Record field paths to index as text
            index_dir: Directory for a persistent index, in memory if None
            key_field: Record field holding the primary key
            limit: Maximum number of keys returned per search
        """
        if not fields:
            raise ValueError("At least one field is required for a full-text index")

        self.fields = list(fields)
        self.index_dir = index_dir
        self.key_field = key_field
        self.limit = limit
        self._writer: IndexWriter | None = None
        self._writer_lock = threading.Lock()
        self._index: Index = self._open_index()

    def _create_schema(self) -> whoosh_fields.Schema:
        schema_fields: dict[str, Any] = {
            # key must be ID for update_document to work
            "key": whoosh_fields.ID(stored=True, unique=True)
        }
        for field_path in self.fields:
            schema_fields[_schema_name(field_path)] = whoosh_fields.TEXT(
                stored=False, analyzer=StandardAnalyzer()
            )
        return whoosh_fields.Schema(**schema_fields)

    def _open_index(self) -> Index:
        schema = self._create_schema()

        if self.index_dir is None:
            return RamStorage().create_index(schema)

        self.index_dir.mkdir(parents=True, exist_ok=True)
        if exists_in(str(self.index_dir)):
            index = open_dir(str(self.index_dir))
            if set(index.schema.names()) == set(schema.names()):
                return index
            logger.info(f"Schema changed, rebuilding index in {self.index_dir}")
            index.close()

        return create_in(str(self.index_dir), schema)

    @property
    def schema(self) -> whoosh_fields.Schema:
        return self._index.schema

    def _prepare_document(self, record: Any) -> dict[str, str]:
        key = get_field_value(record, self.key_field)
        if key is None:
            raise IndexingError(f"Record has no '{self.key_field}' value to index by")

        doc = {"key": str(key)}
        for field_path in self.fields:
            doc[_schema_name(field_path)] = get_field_text(record, field_path) or ""
        return doc

    def _get_writer(self) -> IndexWriter:
        if self._writer is None:
            self._writer = self._index.writer()
        return self._writer

    def index(self, record: Any) -> None:
        """Add or replace one record in the index."""
        doc = self._prepare_document(record)
        with self._writer_lock:
            self._get_writer().update_document(**doc)

    def index_batch(self, records: Iterable[Any]) -> None:
        """Add or replace several records in the index."""
        docs = [self._prepare_document(record) for record in records]
        with self._writer_lock:
            writer = self._get_writer()
            for doc in docs:
                writer.update_document(**doc)
        logger.debug(f"Queued {len(docs)} documents for indexing")

    def remove(self, key: str) -> bool:
        """Remove a record by primary key."""
        with self._writer_lock:
            deleted = self._get_writer().delete_by_term("key", str(key))
        return deleted > 0

    def commit(self) -> None:
        """Commit pending changes to index."""
        with self._writer_lock:
            if self._writer is not None:
                self._writer.commit()
                self._writer = None

    def clear(self) -> None:
        """Remove every document from the index."""
        self.commit()
        with self._index.writer() as writer:
            writer.delete_by_query(Every())

    def optimize(self) -> None:
        """Merge index segments."""
        self.commit()
        self._index.optimize()

    def search(self, text: str) -> list[str]:
        """Return primary keys of matching records, best first."""
        if not text.strip():
            return []

        self.commit()
        parser = MultifieldParser(
            [_schema_name(f) for f in self.fields], self.schema, group=OrGroup
        )
        query = parser.parse(text)

        with self._index.searcher() as searcher:
            results = searcher.search(query, limit=self.limit)
            keys = [hit["key"] for hit in results]

        logger.debug(f"Full-text lookup for {text!r} returned {len(keys)} keys")
        return keys

    def get_statistics(self) -> dict[str, Any]:
        """Get index statistics."""
        self.commit()
        with self._index.searcher() as searcher:
            return {
                "total_documents": searcher.doc_count(),
                "index_path": str(self.index_dir) if self.index_dir else None,
                "fields": list(self.fields),
            }
