"""Query suggestions and spelling correction."""

from collections.abc import Iterable, Mapping
from typing import Any

from rapidfuzz.distance import Levenshtein

from .config import SuggestionsConfig

DID_YOU_MEAN_THRESHOLD = 0.7


def suggestion_score(query: str, candidate: str) -> float:
    """Score how well ``candidate`` completes or corrects ``query``.

    Identical text scores 1.0, a completion 0.9 and a containing text 0.7;
    anything else is scored by normalised edit distance.
    """
    query = query.strip().lower()
    candidate = candidate.strip().lower()

    if query == candidate:
        return 1.0
    if candidate.startswith(query):
        return 0.9
    if query in candidate:
        return 0.7

    longest = max(len(query), len(candidate))
    if longest == 0:
        return 0.0
    return max(0.0, 1 - Levenshtein.distance(query, candidate) / longest)


def candidate_text(candidate: Any) -> str:
    """Flatten a candidate into the text that is scored and returned."""
    if isinstance(candidate, str):
        return candidate
    if isinstance(candidate, Mapping):
        return " ".join(str(v) for v in candidate.values())
    if isinstance(candidate, Iterable):
        return " ".join(str(v) for v in candidate)
    return ""


class SearchSuggester:
    """Suggests candidate texts for a (partial or misspelled) query."""

    def __init__(self, config: SuggestionsConfig | None = None):
        self.config = config or SuggestionsConfig()

    def suggest(
        self, query: str, candidates: Iterable[Any], limit: int = 5
    ) -> list[str]:
        """Return up to ``limit`` candidate texts, best first.

        A ``limit`` of 0 falls back to the configured maximum.
        """
        if not self.config.enabled:
            return []

        limit = limit or self.config.max_suggestions
        scored = []
        for candidate in candidates:
            text = candidate_text(candidate)
            if not text:
                continue
            score = suggestion_score(query, text)
            if score >= self.config.min_score:
                scored.append((score, text))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [text for _, text in scored[:limit]]

    def did_you_mean(self, query: str, dictionary: Iterable[str]) -> str | None:
        """Return the closest dictionary word, or None if nothing is close enough."""
        best_word = None
        best_score = 0.0

        for word in dictionary:
            score = suggestion_score(query, word)
            if score > best_score and score >= DID_YOU_MEAN_THRESHOLD:
                best_score = score
                best_word = word

        return best_word
