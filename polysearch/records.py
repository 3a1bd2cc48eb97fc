"""Field access on records and the ``Searchable`` capability interface.

Records are read-only to the search core. A record is usually a mapping,
but any object exposing its fields as attributes works too. Nested values
are reached with dotted paths such as ``author.name`` or ``tags.0``.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

_MISSING = object()


def _step(value: Any, part: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(part, _MISSING)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return value[int(part)]
        except (ValueError, IndexError):
            return _MISSING

    return getattr(value, part, _MISSING)


def get_field_value(record: Any, path: str, default: Any = None) -> Any:
    """Return the raw value at ``path`` in ``record``, or ``default``."""
    value = record
    for part in path.split("."):
        if value is None:
            return default
        value = _step(value, part)
        if value is _MISSING:
            return default
    return value


def get_field_text(record: Any, path: str) -> str | None:
    """Return the textual value of a field.

    Strings are returned unchanged and numbers are stringified. Missing
    fields, nulls and values of any other type give ``None`` so callers
    can skip the field.
    """
    value = get_field_value(record, path)

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


@runtime_checkable
class Searchable(Protocol):
    """Capability interface for objects that describe how to search them."""

    def searchable_fields(self) -> list[str]:
        """Fields to inspect when no explicit fields are given."""
        ...

    def search_weights(self) -> dict[str, float]:
        """Per-field score multipliers."""
        ...

    def search_index_name(self) -> str:
        """Name of the full-text index backing this collection."""
        ...
