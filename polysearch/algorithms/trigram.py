"""Trigram similarity matching."""

from collections.abc import Mapping, Sequence
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize


def trigrams(text: str) -> set[str]:
    """Return the set of 3-character windows over the padded text."""
    padded = "  " + text + " "
    return {padded[i : i + 3] for i in range(len(padded) - 2)}


def similarity(first: set[str], second: set[str]) -> float:
    """Jaccard coefficient of two trigram sets."""
    if not first or not second:
        return 0.0
    return len(first & second) / len(first | second)


class TrigramMatcher(MatchAlgorithm):
    """Matches values (or single words) sharing enough trigrams with the query."""

    name = "trigram"

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        min_similarity = self.option(options, "min_similarity")
        needle = normalize(query)

        if not needle:
            return []
        query_trigrams = trigrams(needle)

        matches = []
        for index, record in enumerate(records):
            matched: list[str] = []
            best = 0.0

            for field_name, text in iter_field_texts(record, fields):
                value = normalize(text)
                if not value:
                    continue

                score = similarity(query_trigrams, trigrams(value))
                if score >= min_similarity:
                    matched.append(field_name)
                    best = max(best, score)

                for word in value.split(" "):
                    if len(word) < 2:
                        continue
                    score = similarity(query_trigrams, trigrams(word))
                    if score >= min_similarity:
                        if field_name not in matched:
                            matched.append(field_name)
                        best = max(best, score)

            if matched:
                matches.append(
                    RawMatch(
                        index,
                        int(35 * best),
                        matched,
                        {"match_type": self.name, "similarity": best},
                    )
                )

        return matches
