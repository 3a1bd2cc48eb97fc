"""Exact (whole value) matching."""

from collections.abc import Mapping, Sequence
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize


class ExactMatcher(MatchAlgorithm):
    """Matches records whose field equals the query after normalisation."""

    name = "exact"

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        case_sensitive = self.option(options, "case_sensitive")
        needle = normalize(query, case_sensitive)
        matches = []

        for index, record in enumerate(records):
            matched = [
                field_name
                for field_name, text in iter_field_texts(record, fields)
                if normalize(text, case_sensitive) == needle
            ]
            if matched:
                matches.append(
                    RawMatch(index, 100, matched, {"match_type": self.name})
                )

        return matches
