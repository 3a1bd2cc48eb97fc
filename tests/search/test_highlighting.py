"""Tests for result highlighting."""

import pytest

from polysearch.config import HighlightingConfig
from polysearch.highlighting import SearchHighlighter, extract_terms
from polysearch.results import SearchResult, SearchResultCollection


@pytest.fixture
def highlighter():
    return SearchHighlighter(HighlightingConfig())


class TestExtractTerms:
    """Test query term extraction."""

    def test_phrases_first(self):
        terms = extract_terms('laravel "web framework" AND php')

        assert terms == ["web framework", "laravel", "php"]

    def test_operators_are_dropped(self):
        assert extract_terms("laravel OR symfony NOT java") == [
            "laravel",
            "symfony",
            "java",
        ]

    def test_empty(self):
        assert extract_terms("   ") == []


class TestHighlightText:
    """Test term wrapping."""

    def test_case_insensitive(self, highlighter):
        text = highlighter.highlight_text("Laravel loves laravel", ["LARAVEL"])

        assert text == "<mark>Laravel</mark> loves <mark>laravel</mark>"

    def test_single_characters_are_skipped(self, highlighter):
        assert highlighter.highlight_text("a laravel app", ["a"]) == "a laravel app"

    def test_special_characters_are_literal(self, highlighter):
        text = highlighter.highlight_text("C++ and C#", ["c++"])

        assert text == "<mark>C++</mark> and C#"

    def test_custom_markers(self):
        highlighter = SearchHighlighter(HighlightingConfig(prefix="**", suffix="**"))

        assert highlighter.highlight_text("nova", ["nova"]) == "**nova**"


class TestExtractFragments:
    """Test fragment windows."""

    def test_short_text_is_one_fragment(self, highlighter):
        text = highlighter.highlight_text("laravel rocks", ["laravel"])

        assert highlighter.extract_fragments(text) == ["<mark>laravel</mark> rocks"]

    def test_window_with_ellipses(self):
        highlighter = SearchHighlighter(HighlightingConfig(fragment_size=20))
        source = "a" * 30 + " laravel " + "b" * 30
        text = highlighter.highlight_text(source, ["laravel"])

        fragments = highlighter.extract_fragments(text)

        assert fragments == ["..." + "a" * 9 + " <mark>lara..."]

    def test_max_fragments(self, highlighter):
        text = highlighter.highlight_text(" ".join(["laravel"] * 5), ["laravel"])

        assert len(highlighter.extract_fragments(text)) == 3

    def test_no_highlights(self, highlighter):
        assert highlighter.extract_fragments("nothing here") == []


class TestSearchHighlighter:
    """Test highlighting of whole results."""

    def test_highlights_matched_fields(self, highlighter):
        result = SearchResult(
            item={"title": "Laravel Guide", "body": "No match", "views": 3},
            score=10,
            algorithm="partial",
            matched_fields=["title", "body", "missing"],
        )
        results = SearchResultCollection([result])

        highlighted = highlighter.highlight(results, "laravel")

        assert highlighted[0].highlights == {"title": ["<mark>Laravel</mark> Guide"]}
        assert result.highlights == {}

    def test_disabled(self):
        highlighter = SearchHighlighter(HighlightingConfig(enabled=False))
        results = SearchResultCollection()

        assert highlighter.highlight(results, "laravel") is results
