"""
Cost guard module for alias-split.

Decides which unresolved tokens are worth an oracle call. Each token is
run through an ordered list of drop predicates; the first match wins and
its reason code is recorded. Tokens that survive every predicate are sent
to the oracle.

Examples of tokens that are dropped:
- 19, 20240101, 1700000000 (ID-like numerals, dates, timestamps)
- v2, 1.2.3-beta (version strings)
- 3f2a9c1, sha256 (hashes)
- the, of (stopwords)
- react, api, index, useState (kept in the source language)
"""

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Pattern, Sequence, Tuple

from alias_split.config import AliasConfig
from alias_split.constants import (
    BUILD_TAGS,
    HASH_ALGORITHMS,
    LANGUAGE_CODES,
    PLACEHOLDER_WORDS,
    SEMANTIC_NUMBER_WORDS,
    SEMANTIC_ORDINAL_RANGE,
    SEMANTIC_YEAR_RANGE,
)

if TYPE_CHECKING:
    from alias_split.ledger import UsageLedger

logger = logging.getLogger(__name__)


# ============================================================================
# Data Structures
# ============================================================================

@dataclass(slots=True)
class GuardStats:
    """
    Counters for one filter_unknown call.

    Attributes:
        total: Number of tokens passed in (before de-duplication)
        kept: Tokens forwarded to the oracle
        dropped: Tokens filtered out
        reasons: reason code -> count
    """
    total: int = 0
    kept: int = 0
    dropped: int = 0
    reasons: Dict[str, int] = field(default_factory=dict)

    def add_drop(self, reason: str) -> None:
        self.dropped += 1
        self.reasons[reason] = self.reasons.get(reason, 0) + 1


@dataclass(slots=True)
class GuardContext:
    """
    Where the unknown tokens came from.

    Attributes:
        file_name: The full name being translated
        tokens: All normalized tokens of the name, in order
    """
    file_name: str = ''
    tokens: List[str] = field(default_factory=list)


def format_stats(stats: GuardStats) -> str:
    """
    Format guard stats as a one-line summary.

    Example:
        >>> format_stats(GuardStats(total=4, kept=1, dropped=3, reasons={'numeric': 2, 'version': 1}))
        'kept 1/4, dropped 3 (numeric=2, version=1)'
    """
    line = f"kept {stats.kept}/{stats.total}, dropped {stats.dropped}"
    if stats.reasons:
        ordered = sorted(stats.reasons.items(), key=lambda kv: (-kv[1], kv[0]))
        line += ' (' + ', '.join(f"{reason}={count}" for reason, count in ordered) + ')'
    return line


# ============================================================================
# Patterns
# ============================================================================

_NUMERAL = re.compile(r'^\d+$')
# Version tokens need a "v" prefix or a dotted form; bare digits are numerals
_VERSION = re.compile(
    r'^(v\d+(\.\d+){0,3}|\d+(\.\d+){1,3})([-._]?(alpha|beta|rc|dev|pre|post|build)\d*)?$'
)
_DATE = re.compile(r'^\d{4}[-_/]?\d{1,2}([-_/]?\d{1,2})?$')
_DATE_COMPACT = re.compile(r'^\d{8}$')
_TIMESTAMP = re.compile(r'^\d{9,}$')
_HASH = re.compile(r'^[a-f0-9]{7,}$')
_NUMERONYM = re.compile(r'^[a-z]\d+[a-z]$')
_SINGLE_LETTER = re.compile(r'^[a-z]$')
_LOCALE = re.compile(r'^[a-z]{2}[-_][a-z]{2}$')
_COLOR = re.compile(r'^#[0-9a-f]{3}([0-9a-f]{3})?$')
_COLOR_FN = re.compile(r'^(rgb|rgba|hsl|hsla)[\w\-]*$')
_PUNCT = re.compile(r'^[\-_.]+$')
_REACT_HOOK = re.compile(r'^use[a-z0-9]')
_ALNUM = re.compile(r'^[a-z0-9]+$')
_BASE64_CHARSET = re.compile(r'^[A-Za-z0-9+/=]+$')
_DOUBLE_VOWEL = re.compile(r'[aeiou]{2,}')

_SEMANTIC_NAME = re.compile(r'chapter|section|level|part|volume|lesson|episode|stage|phase', re.IGNORECASE)

GIBBERISH_MIN_LENGTH = 32
BASE64_MIN_LENGTH = 16


# ============================================================================
# Numeral Heuristics
# ============================================================================

def is_semantic_number(token: str, context: Optional[GuardContext], intelligent: bool = True) -> bool:
    """
    Check if a numeral probably carries meaning (ordinal, chapter, year).

    Returns:
        True if the numeral should be kept, False if it looks like an ID
    """
    if not intelligent:
        return False

    n = int(token)
    low, high = SEMANTIC_ORDINAL_RANGE
    if low <= n <= high:
        return True

    if context is not None:
        if context.file_name and _SEMANTIC_NAME.search(context.file_name):
            return True

        tokens = [t.lower() for t in context.tokens]
        if token in tokens:
            index = tokens.index(token)
            if index > 0 and tokens[index - 1] in SEMANTIC_NUMBER_WORDS:
                return True

    low, high = SEMANTIC_YEAR_RANGE
    return low <= n <= high


def find_date_tokens(tokens: Sequence[str]) -> set:
    """
    Find numerals that form a YYYY-MM or YYYY-MM-DD run of separate tokens.

    A lone year is not a date run.

    Example:
        >>> sorted(find_date_tokens(['release', 'v2', '2024', '12', '31']))
        ['12', '2024', '31']
    """
    found = set()
    year_low, year_high = SEMANTIC_YEAR_RANGE

    for i, token in enumerate(tokens):
        if len(token) != 4 or not _NUMERAL.match(token):
            continue
        if not year_low <= int(token) <= year_high:
            continue

        run = [token]
        if i + 1 < len(tokens) and _is_part(tokens[i + 1], 12):
            run.append(tokens[i + 1])
            if i + 2 < len(tokens) and _is_part(tokens[i + 2], 31):
                run.append(tokens[i + 2])
        if len(run) > 1:
            found.update(run)

    return found


def _is_part(token: str, upper: int) -> bool:
    return len(token) <= 2 and bool(_NUMERAL.match(token)) and 1 <= int(token) <= upper


# ============================================================================
# Cost Guard
# ============================================================================

class CostGuard:
    """
    Admission filter in front of the oracle.

    Custom rules with invalid regular expressions are skipped (and logged)
    when the guard is constructed.
    """

    def __init__(self, config: AliasConfig, ledger: Optional['UsageLedger'] = None):
        self.config = config
        self.ledger = ledger
        self.user_whitelist = frozenset(t.lower() for t in config.user_whitelist)
        self.custom_rules: List[Tuple[Pattern[str], str]] = []

        for rule in config.custom_rules:
            try:
                self.custom_rules.append((re.compile(rule.pattern), rule.reason))
            except re.error as e:
                logger.warning(f"Skipping custom rule {rule.pattern!r}: {e}")

    def filter_unknown(
        self,
        unknown_tokens: Sequence[str],
        context: Optional[GuardContext] = None,
    ) -> Tuple[List[str], GuardStats]:
        """
        Split unknown tokens into "send to oracle" and "drop".

        Tokens are lower-cased and de-duplicated first; the returned list
        keeps first-seen order.

        Args:
            unknown_tokens: Tokens the dictionary could not resolve
            context: File name and full token list, for numeral heuristics

        Returns:
            (tokens_to_send, stats)

        Example:
            >>> guard = CostGuard(AliasConfig())
            >>> keys, stats = guard.filter_unknown(['19', 'the', 'widget'])
            >>> keys, stats.reasons
            (['widget'], {'numeric': 1, 'stopword': 1})
        """
        stats = GuardStats(total=len(unknown_tokens))
        unique: List[str] = []
        for token in unknown_tokens:
            lower = token.lower()
            if lower not in unique:
                unique.append(lower)

        date_tokens = find_date_tokens([t.lower() for t in context.tokens]) if context else set()

        keep: List[str] = []
        for token in unique:
            reason = self.drop_reason(token, context, date_tokens)
            if reason is not None:
                stats.add_drop(reason)
                logger.debug(f"Guard dropped {token!r}: {reason}")
                continue
            keep.append(token)
            stats.kept += 1

        if self.ledger is not None:
            self.ledger.record(stats)

        return keep, stats

    def drop_reason(
        self,
        token: str,
        context: Optional[GuardContext] = None,
        date_tokens: Optional[set] = None,
    ) -> Optional[str]:
        """
        Evaluate the drop predicates in order.

        Args:
            token: Lower-cased token

        Returns:
            Reason code, or None if the token should go to the oracle
        """
        config = self.config

        if token in self.user_whitelist:
            return None

        for pattern, reason in self.custom_rules:
            if pattern.search(token):
                return f"custom:{reason}"

        if _NUMERAL.match(token):
            if date_tokens and token in date_tokens:
                return 'date'
            if config.ignore_numeric_tokens:
                if is_semantic_number(token, context, config.intelligent_numerals):
                    return None
                return 'numeric'

        if _VERSION.match(token):
            return 'version'
        if _DATE.match(token) or _DATE_COMPACT.match(token):
            return 'date'
        if _TIMESTAMP.match(token):
            return 'timestamp'
        if _HASH.match(token):
            return 'hash'
        if token in HASH_ALGORITHMS:
            return 'hash-algo'
        if _NUMERONYM.match(token):
            return 'numeronym'
        if _SINGLE_LETTER.match(token):
            return 'too-short'

        if token in config.stopwords:
            return 'stopword'
        if token in config.keep_english:
            return 'keep-english'
        if token in LANGUAGE_CODES:
            return 'lang-code'
        if _LOCALE.match(token):
            return 'locale'
        if _COLOR.match(token):
            return 'color'
        if _COLOR_FN.match(token):
            return 'color-fn'
        if token in BUILD_TAGS:
            return 'build-tag'
        if _PUNCT.match(token):
            return 'punct'
        if token.upper() in config.acronym_allowlist:
            return 'acronym-allow'
        if _REACT_HOOK.match(token):
            return 'react-hook'
        if token in PLACEHOLDER_WORDS:
            return 'common-placeholder'

        if len(token) > GIBBERISH_MIN_LENGTH and not _ALNUM.match(token):
            return 'gibberish'
        if (
            len(token) > BASE64_MIN_LENGTH
            and _BASE64_CHARSET.match(token)
            and not _DOUBLE_VOWEL.search(token)
        ):
            return 'base64-like'

        return None
