"""Search result highlighting and fragment extraction."""

import re
from dataclasses import replace

from .config import HighlightingConfig
from .records import get_field_text
from .results import SearchResult, SearchResultCollection

_OPERATOR_RE = re.compile(r"\b(AND|OR|NOT)\b", re.IGNORECASE)
_PHRASE_RE = re.compile(r'"([^"]+)"')


def extract_terms(query: str) -> list[str]:
    """Split a query into highlightable terms, phrases first.

    Boolean operators are dropped; quoted phrases stay whole.
    """
    query = _OPERATOR_RE.sub(" ", query)
    phrases = _PHRASE_RE.findall(query)
    query = _PHRASE_RE.sub("", query)
    return phrases + query.split()


class SearchHighlighter:
    """Wraps query terms found in matched fields and cuts display fragments."""

    def __init__(self, config: HighlightingConfig | None = None):
        self.config = config or HighlightingConfig()

    def is_enabled(self) -> bool:
        return self.config.enabled

    def highlight(
        self, results: SearchResultCollection, query: str
    ) -> SearchResultCollection:
        """Return new results carrying highlight fragments per matched field."""
        if not self.config.enabled:
            return results

        terms = extract_terms(query)
        return results.map(lambda r: self._highlight_result(r, terms))

    def _highlight_result(self, result: SearchResult, terms: list[str]) -> SearchResult:
        highlights = {}
        for field_name in result.matched_fields:
            text = get_field_text(result.item, field_name)
            if text is None:
                continue

            fragments = self.extract_fragments(self.highlight_text(text, terms))
            if fragments:
                highlights[field_name] = fragments

        return replace(result, highlights=highlights)

    def highlight_text(self, text: str, terms: list[str]) -> str:
        """Wrap every case-insensitive occurrence of each term."""
        prefix, suffix = self.config.prefix, self.config.suffix

        for term in terms:
            if len(term) < 2:
                continue
            text = re.sub(
                f"({re.escape(term)})",
                lambda m: f"{prefix}{m.group(1)}{suffix}",
                text,
                flags=re.IGNORECASE,
            )

        return text

    def extract_fragments(self, text: str) -> list[str]:
        """Cut windows of ``fragment_size`` around the first highlights."""
        prefix = self.config.prefix
        size = self.config.fragment_size

        positions = []
        pos = text.find(prefix)
        while pos != -1 and prefix:
            positions.append(pos)
            pos = text.find(prefix, pos + 1)

        fragments = []
        for pos in positions[: self.config.max_fragments]:
            start = max(0, pos - size // 2)
            fragment = text[start : start + size]

            if start > 0:
                fragment = "..." + fragment
            if start + size < len(text):
                fragment += "..."

            fragments.append(fragment)

        return fragments
