"""
Configuration for alias-split.

A single immutable AliasConfig is built once (from defaults, a mapping or
a JSON file) and handed to every component explicitly. Nothing in the
pipeline reads configuration from ambient state.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from alias_split.constants import (
    DEFAULT_ACRONYM_ALLOWLIST,
    DEFAULT_KEEP_ENGLISH,
    DEFAULT_STOPWORDS,
    LITERAL_EXT_SUFFIXES,
    MAX_LITERAL_LENGTH,
    MAX_NATURAL_LENGTH,
    NATURAL_EXT_SUFFIXES,
)
from alias_split.errors import ConfigError

logger = logging.getLogger(__name__)


# ============================================================================
# Enumerated Settings
# ============================================================================

class NumeralMode(str, Enum):
    """How pure-numeral tokens are displayed."""
    KEEP = 'keep'
    LOCALIZED = 'localized'
    ROMAN = 'roman'


class ExtensionMode(str, Enum):
    """What the literal builder does with the file extension."""
    KEEP = 'keep'
    SUFFIX = 'suffix'
    DROP = 'drop'


@dataclass(frozen=True)
class CustomRule:
    """A user-supplied drop rule for the cost guard."""
    pattern: str
    reason: str
    description: str = ''


# ============================================================================
# Config Object
# ============================================================================

@dataclass(frozen=True)
class AliasConfig:
    """
    Immutable settings for one pipeline.

    Attributes:
        strategy: Default alias builder, "literal" or "natural"
        numeral_mode: Display policy for pure-numeral tokens
        literal_joiner: Text inserted at soft camelCase breaks in literal output
        literal_extension_mode: keep / suffix / drop for literal output
        stopwords: Words ignored by the guard and the coverage check
        keep_english: Vocabulary kept in the source language
        acronym_allowlist: Upper-case acronyms never sent to the oracle
        user_whitelist: Tokens the guard must never drop
        custom_rules: Regex drop rules, checked before the built-in predicates
        literal_ext_suffixes: Extension -> suffix table for literal output
        natural_ext_suffixes: Extension -> suffix table for natural output
        intelligent_numerals: Keep numerals that look meaningful
        ignore_numeric_tokens: Drop pure numerals at all
        min_oracle_confidence: Oracle answers below this are discarded
        learn_key_pattern: Keys must match this to be learned
        allowed_coverage_misses: Tokens the coverage guard may miss
        oracle_timeout: Seconds allowed per oracle call
        oracle_concurrency: Simultaneous oracle calls in a batch
        max_literal_length: Literal alias truncation
        max_natural_length: Natural alias truncation
        use_builtin_dictionary: Include the packaged default layer
        global_learned_path: Global learned dictionary file
        project_learned_path: Project learned dictionary file (written by learning)
        project_fixed_path: Project fixed dictionary file
        ledger_path: Persistent guard usage ledger
    """
    strategy: str = 'literal'
    numeral_mode: NumeralMode = NumeralMode.KEEP
    literal_joiner: str = ''
    literal_extension_mode: ExtensionMode = ExtensionMode.KEEP
    stopwords: FrozenSet[str] = DEFAULT_STOPWORDS
    keep_english: FrozenSet[str] = DEFAULT_KEEP_ENGLISH
    acronym_allowlist: FrozenSet[str] = DEFAULT_ACRONYM_ALLOWLIST
    user_whitelist: FrozenSet[str] = frozenset()
    custom_rules: Tuple[CustomRule, ...] = ()
    literal_ext_suffixes: Mapping[str, str] = field(default_factory=lambda: dict(LITERAL_EXT_SUFFIXES))
    natural_ext_suffixes: Mapping[str, str] = field(default_factory=lambda: dict(NATURAL_EXT_SUFFIXES))
    intelligent_numerals: bool = True
    ignore_numeric_tokens: bool = True
    min_oracle_confidence: float = 0.5
    learn_key_pattern: str = r'^[a-z0-9 ]+$'
    allowed_coverage_misses: int = 0
    oracle_timeout: float = 15.0
    oracle_concurrency: int = 3
    max_literal_length: int = MAX_LITERAL_LENGTH
    max_natural_length: int = MAX_NATURAL_LENGTH
    use_builtin_dictionary: bool = True
    global_learned_path: Optional[Path] = None
    project_learned_path: Optional[Path] = None
    project_fixed_path: Optional[Path] = None
    ledger_path: Optional[Path] = None

    def __post_init__(self):
        if self.strategy not in ('literal', 'natural'):
            raise ConfigError(f"strategy must be 'literal' or 'natural', got {self.strategy!r}")
        if not 0.0 <= self.min_oracle_confidence <= 1.0:
            raise ConfigError("min_oracle_confidence must be within [0, 1]")
        if self.allowed_coverage_misses < 0:
            raise ConfigError("allowed_coverage_misses must be >= 0")
        if self.oracle_timeout <= 0:
            raise ConfigError("oracle_timeout must be positive")

    @property
    def batch_concurrency(self) -> int:
        """Oracle pool size, clamped to the 1..5 range upstream limits allow."""
        return max(1, min(5, self.oracle_concurrency))

    def with_overrides(self, **changes: Any) -> 'AliasConfig':
        """Return a copy with some fields replaced (values are coerced)."""
        merged = {f.name: getattr(self, f.name) for f in fields(self)}
        merged.update(changes)
        return AliasConfig.from_dict(merged)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AliasConfig':
        """
        Build a config from a plain mapping (e.g. parsed JSON).

        Unknown keys are logged and ignored. Values are coerced to the
        field types; invalid enumerated values raise ConfigError.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            kwargs[key] = _coerce(key, value)
        return cls(**kwargs)


# ============================================================================
# Coercion
# ============================================================================

_LOWER_SETS = ('stopwords', 'keep_english', 'user_whitelist')
_PATH_FIELDS = ('global_learned_path', 'project_learned_path', 'project_fixed_path', 'ledger_path')


def _coerce(key: str, value: Any) -> Any:
    try:
        if key == 'numeral_mode':
            return NumeralMode(value)
        if key == 'literal_extension_mode':
            return ExtensionMode(value)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e

    if key in _LOWER_SETS:
        return frozenset(str(s).lower() for s in value)
    if key == 'acronym_allowlist':
        return frozenset(str(s).upper() for s in value)
    if key == 'custom_rules':
        return tuple(_coerce_rule(rule) for rule in value)
    if key in ('literal_ext_suffixes', 'natural_ext_suffixes'):
        return {str(k).lower(): str(v) for k, v in dict(value).items()}
    if key in _PATH_FIELDS:
        return Path(value) if value is not None else None
    return value


def _coerce_rule(rule: Any) -> CustomRule:
    if isinstance(rule, CustomRule):
        return rule
    if not isinstance(rule, Mapping) or 'pattern' not in rule or 'reason' not in rule:
        raise ConfigError(f"custom rule needs 'pattern' and 'reason': {rule!r}")
    return CustomRule(
        pattern=str(rule['pattern']),
        reason=str(rule['reason']),
        description=str(rule.get('description', '')),
    )


# ============================================================================
# Loading
# ============================================================================

def load_config(path: Optional[Path] = None) -> AliasConfig:
    """
    Load configuration from a JSON file.

    Relative dictionary and ledger paths are resolved against the config
    file's directory.

    Args:
        path: Config file. Defaults if None.

    Returns:
        The loaded AliasConfig

    Raises:
        ConfigError: If the file is unreadable or holds invalid values
    """
    if path is None:
        return AliasConfig()

    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must hold a JSON object")

    for key in _PATH_FIELDS:
        if data.get(key):
            candidate = Path(data[key])
            if not candidate.is_absolute():
                data[key] = str(path.parent / candidate)

    return AliasConfig.from_dict(data)


def oracle_settings_from_env() -> Optional[Dict[str, str]]:
    """
    Read HTTP oracle settings from the environment.

    Returns:
        Dict with base_url, api_key and model, or None if no URL is set
    """
    base_url = os.environ.get('ALIAS_SPLIT_ORACLE_URL', '')
    if not base_url:
        return None
    return {
        'base_url': base_url,
        'api_key': os.environ.get('ALIAS_SPLIT_ORACLE_KEY', ''),
        'model': os.environ.get('ALIAS_SPLIT_ORACLE_MODEL', 'gpt-4o-mini'),
    }
