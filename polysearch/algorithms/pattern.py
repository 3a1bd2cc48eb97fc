"""Regular expression matching.

Queries are delimited patterns in the ``/body/flags`` style, where the
delimiter is one of ``/ # ~ @ % | !``. Evaluation uses the ``regex``
package so that each field match can be bounded by a timeout.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

import regex as regex_mod

from .base import MatchAlgorithm, RawMatch, iter_field_texts

logger = logging.getLogger(__name__)

DELIMITERS = "/#~@%|!"

_DELIMITED_RE = re.compile(r"^[/#~@%|!].*[/#~@%|!][imsxeADSUXJu]*$")

_FLAG_MAP = {
    "i": regex_mod.IGNORECASE,
    "m": regex_mod.MULTILINE,
    "s": regex_mod.DOTALL,
    "x": regex_mod.VERBOSE,
    "u": regex_mod.UNICODE,
}
_IGNORED_FLAGS = set("DSXJ")
# Evaluation and ungreedy modifiers have no equivalent
_UNSUPPORTED_FLAGS = set("eU")


class CompiledPattern:
    """A compiled delimited pattern."""

    def __init__(self, source: str, pattern: regex_mod.Pattern, anchored: bool):
        self.source = source
        self.pattern = pattern
        self.anchored = anchored

    def matches(self, text: str, timeout: float | None = None) -> bool:
        if self.anchored:
            return self.pattern.match(text, timeout=timeout) is not None
        return self.pattern.search(text, timeout=timeout) is not None


def compile_pattern(source: str, max_length: int = 500) -> CompiledPattern | None:
    """Compile a delimited pattern, or return None when it is unusable."""
    if len(source) > max_length or not _DELIMITED_RE.match(source):
        return None

    delimiter = source[0]
    end = source.rfind(delimiter)
    if end <= 0:
        return None

    body, modifiers = source[1:end], source[end + 1 :]
    flags = 0
    anchored = False
    for modifier in modifiers:
        if modifier in _FLAG_MAP:
            flags |= _FLAG_MAP[modifier]
        elif modifier == "A":
            anchored = True
        elif modifier in _IGNORED_FLAGS:
            continue
        else:
            # Unsupported or stray characters after the delimiter
            return None

    try:
        pattern = regex_mod.compile(body, flags=flags)
    except regex_mod.error as e:
        logger.debug(f"Invalid pattern {source!r}: {e}")
        return None

    return CompiledPattern(source, pattern, anchored)


class RegexMatcher(MatchAlgorithm):
    """Matches records whose raw field value matches a delimited pattern."""

    name = "regex"

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        timeout_ms = self.option(options, "timeout")
        compiled = compile_pattern(query, self.option(options, "max_pattern_length"))
        if compiled is None:
            return []

        timeout = timeout_ms / 1000 if timeout_ms else None
        matches = []
        for index, record in enumerate(records):
            matched = []
            for field_name, text in iter_field_texts(record, fields):
                try:
                    if compiled.matches(text, timeout=timeout):
                        matched.append(field_name)
                except TimeoutError:
                    logger.debug(
                        f"Pattern {query!r} timed out on field '{field_name}' "
                        f"of record {index}"
                    )

            if matched:
                matches.append(
                    RawMatch(
                        index,
                        45,
                        matched,
                        {"match_type": self.name, "pattern": query},
                    )
                )

        return matches
