"""Base matching algorithm interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import msgspec

from ..records import get_field_text


@dataclass
class RawMatch:
    """A record matched by one algorithm run, before ranking.

    ``index`` is the record's position in the list that was searched.
    """

    index: int
    score: float
    fields: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


def normalize(value: str, case_sensitive: bool = False) -> str:
    """Trim a string and lowercase it unless case matters."""
    value = value.strip()
    return value if case_sensitive else value.lower()


class MatchAlgorithm(ABC):
    """Abstract interface for matching strategies.

    Implementations never raise on malformed queries or records; anything
    they cannot evaluate simply does not match.
    """

    name: str = ""

    def __init__(self, config: msgspec.Struct):
        self.config = config

    def get_name(self) -> str:
        return self.name

    def is_enabled(self) -> bool:
        return bool(getattr(self.config, "enabled", True))

    def option(self, options: Mapping[str, Any] | None, key: str) -> Any:
        """Read a setting, letting per-query options override configuration."""
        if options and key in options:
            return options[key]
        return getattr(self.config, key)

    @abstractmethod
    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        """Match ``query`` against ``fields`` of every record.

        Args:
            query: Raw query text
            records: Records to scan, in order
            fields: Field paths to inspect on each record
            options: Per-query overrides for this algorithm's settings

        Returns:
            One RawMatch per matching record, in record order
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(enabled={self.is_enabled()})"


def iter_field_texts(record: Any, fields: Sequence[str]):
    """Yield ``(field, text)`` for every field of ``record`` holding text."""
    for field_name in fields:
        text = get_field_text(record, field_name)
        if text is not None:
            yield field_name, text
