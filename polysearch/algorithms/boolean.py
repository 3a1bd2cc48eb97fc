"""Boolean query parsing and matching.

Queries combine terms with ``AND``, ``OR`` and ``NOT`` (case-insensitive).
Double-quoted phrases are single terms, and parenthesised groups are
evaluated as sub-queries when grouping is allowed.

Outside of groups the evaluation follows a simple rule: as soon
as any term is OR-tagged, only the OR-tagged terms decide the match.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize

OPERATORS = ("AND", "OR", "NOT")

_PHRASE_RE = re.compile(r'"([^"]+)"')
_GROUP_RE = re.compile(r"\((\s*[^()\s][^()]*)\)")
_OPERATOR_RE = re.compile(r"(?:^|\s+)(AND|OR|NOT)(?=\s|$)", re.IGNORECASE)
_PHRASE_PLACEHOLDER_RE = re.compile(r"__phrase_\d+__")
_GROUP_PLACEHOLDER_RE = re.compile(r"(__group_\d+__)")


@dataclass
class BooleanTerm:
    """A single term; ``group`` is set when the term is a sub-query."""

    value: str
    operator: str = "AND"
    group: "ParsedBooleanQuery | None" = None

    def matches(self, value: str) -> bool:
        if self.group is not None:
            return self.group.evaluate(value)
        return self.value in value


@dataclass
class ParsedBooleanQuery:
    """Parsed form of a boolean query."""

    operator: str = "AND"
    terms: list[BooleanTerm] = field(default_factory=list)
    not_terms: list[BooleanTerm] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.terms and not self.not_terms

    def evaluate(self, value: str) -> bool:
        """Check whether ``value`` satisfies the query."""
        value = value.lower()

        if any(term.matches(value) for term in self.not_terms):
            return False

        or_terms = [term for term in self.terms if term.operator == "OR"]
        if or_terms:
            return any(term.matches(value) for term in or_terms)

        return all(term.matches(value) for term in self.terms)


class BooleanQueryParser:
    """Turns query text into a ParsedBooleanQuery."""

    def __init__(self, allow_grouping: bool = True):
        self.allow_grouping = allow_grouping

    def parse(self, text: str) -> ParsedBooleanQuery:
        phrases: dict[str, str] = {}
        groups: dict[str, str] = {}

        def stash_phrase(match: re.Match) -> str:
            placeholder = f"__phrase_{len(phrases)}__"
            phrases[placeholder] = match.group(1)
            return placeholder

        text = _PHRASE_RE.sub(stash_phrase, text.strip())

        if self.allow_grouping:
            # Innermost groups first, so outer groups only see placeholders
            while match := _GROUP_RE.search(text):
                placeholder = f"__group_{len(groups)}__"
                groups[placeholder] = match.group(1)
                text = f"{text[: match.start()]} {placeholder} {text[match.end() :]}"

        return self._parse(text.strip(), phrases, groups, in_group=False)

    def _parse(
        self,
        text: str,
        phrases: dict[str, str],
        groups: dict[str, str],
        in_group: bool,
    ) -> ParsedBooleanQuery:
        parsed = ParsedBooleanQuery()
        current = "AND"
        negate_next = False
        saw_operator = False

        for part in _OPERATOR_RE.split(text):
            part = part.strip()
            if not part:
                continue

            upper = part.upper()
            if upper in OPERATORS:
                if upper == "NOT":
                    negate_next = True
                    continue
                # Leading terms of a group take the group's first operator
                if in_group and not saw_operator:
                    for term in parsed.terms:
                        term.operator = upper
                current = upper
                saw_operator = True
                continue

            for piece in self._pieces(part):
                term = self._make_term(piece, current, phrases, groups)
                if negate_next:
                    parsed.not_terms.append(term)
                    negate_next = False
                else:
                    parsed.terms.append(term)

        return parsed

    def _pieces(self, part: str) -> list[str]:
        if "__group_" not in part:
            return [part]
        return [
            piece.strip()
            for piece in _GROUP_PLACEHOLDER_RE.split(part)
            if piece.strip()
        ]

    def _make_term(
        self,
        piece: str,
        operator: str,
        phrases: dict[str, str],
        groups: dict[str, str],
    ) -> BooleanTerm:
        if piece in groups:
            inner = groups[piece]
            group = self._parse(inner.strip(), phrases, groups, in_group=True)
            return BooleanTerm(
                value=self._restore(inner, phrases, groups).lower(),
                operator=operator,
                group=group,
            )
        return BooleanTerm(
            value=self._restore(piece, phrases, groups).lower(), operator=operator
        )

    def _restore(
        self, text: str, phrases: dict[str, str], groups: dict[str, str]
    ) -> str:
        def restore_group(match: re.Match) -> str:
            placeholder = match.group(1)
            if placeholder not in groups:
                return placeholder
            return f"({self._restore(groups[placeholder], phrases, groups)})"

        text = _GROUP_PLACEHOLDER_RE.sub(restore_group, text)
        return _PHRASE_PLACEHOLDER_RE.sub(
            lambda match: phrases.get(match.group(0), match.group(0)), text
        )


class BooleanMatcher(MatchAlgorithm):
    """Matches records whose field satisfies a boolean query."""

    name = "boolean"

    def parse(self, query: str, options: Mapping[str, Any] | None = None):
        parser = BooleanQueryParser(self.option(options, "allow_grouping"))
        return parser.parse(query)

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        parsed = self.parse(query, options)
        if parsed.is_empty():
            return []

        matches = []
        for index, record in enumerate(records):
            matched = [
                field_name
                for field_name, text in iter_field_texts(record, fields)
                if parsed.evaluate(normalize(text))
            ]
            if matched:
                matches.append(
                    RawMatch(
                        index,
                        50,
                        matched,
                        {"match_type": self.name, "query": query},
                    )
                )

        return matches
