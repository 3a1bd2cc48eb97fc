"""Synonym-based query expansion."""

import logging
from pathlib import Path

import msgspec

from .config import SynonymsConfig

logger = logging.getLogger(__name__)


def _key(word: str) -> str:
    return word.strip().lower()


class SynonymExpander:
    """Expands query words into ``OR`` alternatives.

    The dictionary comes from configuration and is then merged with an
    optional JSON file mapping words to lists of synonyms; file entries
    replace configured ones for the same word.
    """

    def __init__(self, config: SynonymsConfig | None = None):
        self.config = config or SynonymsConfig()
        self._dictionary: dict[str, list[str]] = {
            _key(word): list(synonyms)
            for word, synonyms in self.config.dictionary.items()
        }
        if self.config.file:
            self._dictionary.update(self.load_file(Path(self.config.file)))

    @staticmethod
    def load_file(path: Path) -> dict[str, list[str]]:
        """Read a synonym file, returning an empty mapping if unusable."""
        if not path.exists():
            logger.warning(f"Synonym file not found: {path}")
            return {}

        try:
            data = msgspec.json.decode(path.read_bytes(), type=dict[str, list[str]])
        except (OSError, msgspec.DecodeError) as e:
            logger.warning(f"Ignoring synonym file {path}: {e}")
            return {}

        return {_key(word): synonyms for word, synonyms in data.items()}

    @property
    def dictionary(self) -> dict[str, list[str]]:
        return self._dictionary

    def expand(self, query: str) -> str:
        """Append ``OR <synonym>`` after every word that has synonyms."""
        if not self.config.enabled or not self._dictionary:
            return query

        expanded = []
        for word in query.split(" "):
            expanded.append(word)
            for synonym in self._dictionary.get(_key(word), []):
                expanded.append(f"OR {synonym}")

        return " ".join(expanded)

    def get_synonyms(self, word: str) -> list[str]:
        return list(self._dictionary.get(_key(word), []))

    def add_synonym(self, word: str, synonyms: list[str]) -> None:
        """Add synonyms for a word, keeping any it already has."""
        key = _key(word)
        self._dictionary[key] = self._dictionary.get(key, []) + list(synonyms)
