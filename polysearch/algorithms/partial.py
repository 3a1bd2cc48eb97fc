"""Substring matching."""

from collections.abc import Mapping, Sequence
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize


class PartialMatcher(MatchAlgorithm):
    """Matches records whose field contains the query.

    Longer coverage of the value and earlier occurrences score higher;
    a record keeps the best score over its matching fields.
    """

    name = "partial"

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
            best = 0

            for field_name, text in iter_field_texts(record, fields):
                value = normalize(text, case_sensitive)
                position = value.find(needle)
                if position < 0 or not value:
                    continue

                matched.append(field_name)
                length_ratio = len(needle) / len(value)
                position_penalty = position / max(len(value), 1)
                best = max(best, int(60 * length_ratio * (1 - position_penalty * 0.5)))

            if matched:
                matches.append(
                    RawMatch(index, best, matched, {"match_type": self.name})
                )

        return matches
