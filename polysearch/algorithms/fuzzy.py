"""Edit-distance matching."""

import sys
from collections.abc import Mapping, Sequence
from typing import Any

from rapidfuzz.distance import Levenshtein

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize


class FuzzyMatcher(MatchAlgorithm):
    """Matches values (or single words) within ``threshold`` edits of the query."""

    name = "fuzzy"

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        threshold = self.option(options, "threshold")
        max_length = self.option(options, "max_length")
        needle = normalize(query)

        if len(needle) > max_length:
            return []

        matches = []
        for index, record in enumerate(records):
            matched: list[str] = []
            min_distance = sys.maxsize

            for field_name, text in iter_field_texts(record, fields):
                value = normalize(text)
                if len(value) > max_length:
                    continue

                distance = Levenshtein.distance(needle, value)
                if distance <= threshold:
                    matched.append(field_name)
                    min_distance = min(min_distance, distance)

                for word in value.split(" "):
                    if len(word) < 2:
                        continue
                    distance = Levenshtein.distance(needle, word)
                    if distance <= threshold:
                        if field_name not in matched:
                            matched.append(field_name)
                        min_distance = min(min_distance, distance)

            if matched:
                score = max(0, int(40 * (1 - min_distance / max(threshold, 1))))
                matches.append(
                    RawMatch(
                        index,
                        score,
                        matched,
                        {"match_type": self.name, "distance": min_distance},
                    )
                )

        return matches
