"""Prefix and suffix matching."""

from collections.abc import Mapping, Sequence
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize


class _AffixMatcher(MatchAlgorithm):
    """Shared scan for anchored matches.

    The score is the covered fraction of the value times ``base_score``.
    When several fields match, the last one sets the score.
    """

    base_score = 0

    def _is_match(self, value: str, needle: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        case_sensitive = self.option(options, "case_sensitive")
        min_length = self.option(options, "min_length")
        needle = normalize(query, case_sensitive)

        if len(needle) < min_length:
            return []

        matches = []
        for index, record in enumerate(records):
            matched = []
            score = 0

            for field_name, text in iter_field_texts(record, fields):
                value = normalize(text, case_sensitive)
                if value and self._is_match(value, needle):
                    matched.append(field_name)
                    score = int(self.base_score * (len(needle) / len(value)))

            if matched:
                matches.append(
                    RawMatch(index, score, matched, {"match_type": self.name})
                )

        return matches


class PrefixMatcher(_AffixMatcher):
    name = "prefix"
    base_score = 80

    def _is_match(self, value: str, needle: str) -> bool:
        return value.startswith(needle)


class SuffixMatcher(_AffixMatcher):
    name = "suffix"
    base_score = 70

    def _is_match(self, value: str, needle: str) -> bool:
        return value.endswith(needle)
