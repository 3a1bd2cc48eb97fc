"""Matching algorithms and their registry."""

from ..config import AlgorithmsConfig
from .affix import PrefixMatcher, SuffixMatcher
from .base import MatchAlgorithm, RawMatch, normalize
from .boolean import BooleanMatcher, BooleanQueryParser, BooleanTerm, ParsedBooleanQuery
from .exact import ExactMatcher
from .fuzzy import FuzzyMatcher
from .partial import PartialMatcher
from .pattern import RegexMatcher, compile_pattern
from .phonetic import PhoneticMatcher, metaphone, phonetic_code, soundex
from .trigram import TrigramMatcher

ALGORITHM_CLASSES: dict[str, type[MatchAlgorithm]] = {
    "exact": ExactMatcher,
    "partial": PartialMatcher,
    "prefix": PrefixMatcher,
    "suffix": SuffixMatcher,
    "fuzzy": FuzzyMatcher,
    "trigram": TrigramMatcher,
    "boolean": BooleanMatcher,
    "regex": RegexMatcher,
    "phonetic": PhoneticMatcher,
}


def create_algorithms(
    config: AlgorithmsConfig | None = None,
) -> dict[str, MatchAlgorithm]:
    """Instantiate every built-in algorithm with its configuration."""
    config = config or AlgorithmsConfig()
    return {
        name: cls(getattr(config, name)) for name, cls in ALGORITHM_CLASSES.items()
    }


__all__ = [
    "ALGORITHM_CLASSES",
    "BooleanMatcher",
    "BooleanQueryParser",
    "BooleanTerm",
    "ExactMatcher",
    "FuzzyMatcher",
    "MatchAlgorithm",
    "ParsedBooleanQuery",
    "PartialMatcher",
    "PhoneticMatcher",
    "PrefixMatcher",
    "RawMatch",
    "RegexMatcher",
    "SuffixMatcher",
    "TrigramMatcher",
    "compile_pattern",
    "create_algorithms",
    "metaphone",
    "normalize",
    "phonetic_code",
    "soundex",
]
