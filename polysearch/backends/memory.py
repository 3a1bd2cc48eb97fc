"""In-memory collaborators for testing and lightweight scenarios."""

import operator
import re
import threading
import time
from collections.abc import Iterable, Sequence
from typing import Any

from ..query import OrderClause, WhereClause
from ..records import get_field_value
from .base import CacheStore, RecordStore

_COMPARATORS = {
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _like_pattern(pattern: str) -> re.Pattern:
    """Translate an SQL LIKE pattern into a regular expression."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def matches_where(record: Any, clause: WhereClause) -> bool:
    """Check a record against one where clause.

    Values that cannot be compared with the clause value do not match.
    """
    value = get_field_value(record, clause.field)
    op = clause.operator.lower()

    if op == "like":
        return value is not None and bool(
            _like_pattern(str(clause.value)).fullmatch(str(value))
        )
    if op in ("in", "not in"):
        try:
            found = value in clause.value
        except TypeError:
            return False
        return found if op == "in" else not found

    try:
        return bool(_COMPARATORS[op](value, clause.value))
    except KeyError:
        raise ValueError(f"Unsupported where operator: {clause.operator}")
    except TypeError:
        return False


def filter_records(records: Iterable[Any], wheres: Sequence[WhereClause]) -> list[Any]:
    return [r for r in records if all(matches_where(r, w) for w in wheres)]


def order_records(records: list[Any], orders: Sequence[OrderClause]) -> list[Any]:
    """Sort records by each order clause, the first clause taking precedence.

    Missing values sort last in either direction.
    """
    ordered = list(records)
    for clause in reversed(orders):
        reverse = clause.direction == "desc"
        present = [r for r in ordered if get_field_value(r, clause.field) is not None]
        missing = [r for r in ordered if get_field_value(r, clause.field) is None]
        try:
            present.sort(
                key=lambda r: get_field_value(r, clause.field), reverse=reverse
            )
        except TypeError:
            present.sort(
                key=lambda r: str(get_field_value(r, clause.field)), reverse=reverse
            )
        ordered = present + missing
    return ordered


class MemoryRecordStore(RecordStore):
    """Record store over a plain list of records."""

    def __init__(self, records: Iterable[Any] = (), key_field: str = "id"):
        self.records = list(records)
        self.key_field = key_field

    def add(self, record: Any) -> None:
        self.records.append(record)

    def fetch(
        self,
        wheres: Sequence[WhereClause] = (),
        orders: Sequence[OrderClause] = (),
    ) -> list[Any]:
        return order_records(filter_records(self.records, wheres), orders)

    def find_many(self, keys: Sequence[str]) -> list[Any]:
        by_key = {}
        for record in self.records:
            key = get_field_value(record, self.key_field)
            if key is not None:
                by_key.setdefault(str(key), record)
        return [by_key[str(key)] for key in keys if str(key) in by_key]

    def __len__(self) -> int:
        return len(self.records)


class MemoryCacheStore(CacheStore):
    """Thread-safe in-process cache with per-entry expiry."""

    def __init__(self, clock=time.monotonic):
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
