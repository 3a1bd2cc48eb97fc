"""Configuration for the search engine.

Every component receives a ``SearchConfig`` value at construction time.
Configurations are immutable msgspec structs so they can be shared safely,
and they are built from plain dictionaries (typically loaded from YAML) with
missing keys filled in by defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any

import msgspec
import yaml

logger = logging.getLogger(__name__)


class ExactConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for exact matching."""

    enabled: bool = True
    case_sensitive: bool = False


class PartialConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for substring matching."""

    enabled: bool = True
    min_length: int = 2
    case_sensitive: bool = False


class AffixConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings shared by prefix and suffix matching."""

    enabled: bool = True
    min_length: int = 2
    case_sensitive: bool = False


class FuzzyConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for edit-distance matching."""

    enabled: bool = True
    threshold: int = 2
    max_length: int = 255


class TrigramConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for trigram similarity matching."""

    enabled: bool = True
    min_similarity: float = 0.3


class BooleanConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for boolean query matching."""

    enabled: bool = True
    allow_grouping: bool = True


class RegexConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for regular expression matching.

    ``timeout`` is expressed in milliseconds per field evaluation.
    """

    enabled: bool = True
    timeout: int = 1000
    max_pattern_length: int = 500


class PhoneticConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Settings for phonetic matching."""

    enabled: bool = True
    algorithm: str = "metaphone"


class AlgorithmsConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Per-algorithm settings, keyed by algorithm name."""

    exact: ExactConfig = msgspec.field(default_factory=ExactConfig)
    partial: PartialConfig = msgspec.field(default_factory=PartialConfig)
    prefix: AffixConfig = msgspec.field(default_factory=AffixConfig)
    suffix: AffixConfig = msgspec.field(default_factory=AffixConfig)
    fuzzy: FuzzyConfig = msgspec.field(default_factory=FuzzyConfig)
    trigram: TrigramConfig = msgspec.field(default_factory=TrigramConfig)
    boolean: BooleanConfig = msgspec.field(default_factory=BooleanConfig)
    regex: RegexConfig = msgspec.field(default_factory=RegexConfig)
    phonetic: PhoneticConfig = msgspec.field(default_factory=PhoneticConfig)


def _default_algorithm_weights() -> dict[str, float]:
    return {
        "exact": 100,
        "prefix": 80,
        "suffix": 70,
        "partial": 60,
        "fuzzy": 40,
        "trigram": 35,
        "phonetic": 30,
        "boolean": 50,
        "regex": 45,
    }


class RecencyBoostConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = False
    field: str = "created_at"
    decay_days: int = 30
    boost_factor: float = 1.5


class PopularityBoostConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = False
    field: str = "views_count"
    boost_factor: float = 0.1


class RankingConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Score fusion settings."""

    enabled: bool = True
    algorithm_weights: dict[str, float] = msgspec.field(
        default_factory=_default_algorithm_weights
    )
    recency_boost: RecencyBoostConfig = msgspec.field(
        default_factory=RecencyBoostConfig
    )
    popularity_boost: PopularityBoostConfig = msgspec.field(
        default_factory=PopularityBoostConfig
    )


def _default_synonyms() -> dict[str, list[str]]:
    return {
        "car": ["automobile", "vehicle"],
        "phone": ["mobile", "smartphone", "cellphone"],
        "laptop": ["notebook", "computer"],
    }


class SynonymsConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = False
    dictionary: dict[str, list[str]] = msgspec.field(default_factory=_default_synonyms)
    file: str | None = None


class HighlightingConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = True
    prefix: str = "<mark>"
    suffix: str = "</mark>"
    max_fragments: int = 3
    fragment_size: int = 150


class SuggestionsConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = True
    max_suggestions: int = 5
    min_score: float = 0.5


class CacheConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = True
    ttl: int = 3600
    prefix: str = "search:"


class FtsConfig(msgspec.Struct, frozen=True, kw_only=True):
    enabled: bool = False


class SearchConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Top-level search configuration."""

    default_algorithm: str = "partial"
    algorithms: AlgorithmsConfig = msgspec.field(default_factory=AlgorithmsConfig)
    ranking: RankingConfig = msgspec.field(default_factory=RankingConfig)
    synonyms: SynonymsConfig = msgspec.field(default_factory=SynonymsConfig)
    highlighting: HighlightingConfig = msgspec.field(
        default_factory=HighlightingConfig
    )
    suggestions: SuggestionsConfig = msgspec.field(default_factory=SuggestionsConfig)
    cache: CacheConfig = msgspec.field(default_factory=CacheConfig)
    fts: FtsConfig = msgspec.field(default_factory=FtsConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SearchConfig":
        """Build a configuration from a (possibly partial) dictionary.

        Raises:
            ValueError: If the data does not describe a valid configuration
        """
        try:
            return msgspec.convert(data or {}, type=cls, strict=False)
        except msgspec.ValidationError as e:
            raise ValueError(f"Invalid search configuration: {e}")

    def to_dict(self) -> dict[str, Any]:
        return msgspec.to_builtins(self)


def read_config_file(path: Path) -> dict[str, Any]:
    """Load a configuration mapping from a YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except OSError as e:
        raise ValueError(f"Error reading config file: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    paths = []

    # User config
    xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    paths.append(xdg_config_home / "polysearch" / "config.yaml")

    # Project config
    paths.append(Path(".polysearch.yaml"))
    paths.append(Path("polysearch.yaml"))

    return paths


def env_overrides() -> dict[str, Any]:
    """Collect configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    if algorithm := os.environ.get("POLYSEARCH_DEFAULT_ALGORITHM"):
        overrides["default_algorithm"] = algorithm

    cache: dict[str, Any] = {}
    if (enabled := os.environ.get("POLYSEARCH_CACHE_ENABLED")) is not None:
        cache["enabled"] = enabled.strip().lower() in ("1", "true", "yes", "on")
    if ttl := os.environ.get("POLYSEARCH_CACHE_TTL"):
        try:
            cache["ttl"] = int(ttl)
        except ValueError:
            logger.warning(f"Ignoring non-integer POLYSEARCH_CACHE_TTL: {ttl!r}")
    if cache:
        overrides["cache"] = cache

    return overrides


def load_config(path: Path | str | None = None) -> SearchConfig:
    """Load configuration from files and environment variables.

    With an explicit ``path`` only that file is read; otherwise every
    existing default location is merged, later files winning.
    """
    data: dict[str, Any] = {}

    if path is not None:
        data = read_config_file(Path(path))
    else:
        for candidate in get_config_paths():
            if candidate.exists():
                logger.debug(f"Loading configuration from {candidate}")
                data = merge_configs(data, read_config_file(candidate))

    data = merge_configs(data, env_overrides())
    return SearchConfig.from_dict(data)


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple configuration dictionaries."""
    result: dict[str, Any] = {}
    for config in configs:
        result = _deep_merge(result, config)
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
