"""
Alias builders for alias-split.

Two interchangeable strategies share the segmenter/dictionary front end:

- literal: token order, delimiters and extension are preserved; each token
  is replaced by its dictionary alias where one exists.
  "analyze_element_hierarchy.cjs" -> "分析_元素_层级.cjs"

- natural: picks a head noun, puts modifiers in front of it (head-final,
  as in Chinese), moves variant words into a parenthesised note and maps
  the extension to a semantic suffix.
  "analyze_hierarchy_simple.cjs" -> "层级分析（简版）脚本"

The strategy is chosen once per call via build_alias().
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from alias_split.config import AliasConfig, ExtensionMode
from alias_split.constants import (
    ACTION_HEAD_NOUNS,
    ILLEGAL_CHAR_REPLACEMENT,
    ILLEGAL_PATH_CHARS,
    MODIFIER_WORDS,
    PRIORITY_HEAD_ACRONYMS,
    UI_HEAD_NOUNS,
    VARIANT_WORDS,
)
from alias_split.dictionary import LayeredDictionary
from alias_split.numerals import NumeralRenderer
from alias_split.segmenter import Segmentation, Token, TokenKind


class Strategy(str, Enum):
    LITERAL = 'literal'
    NATURAL = 'natural'


@dataclass(slots=True)
class BuildResult:
    """
    Output of one builder run.

    Attributes:
        alias: The assembled alias
        confidence: Heuristic confidence in [0, 1]
        coverage: Fraction of tokens resolved
        unknown_tokens: Normalized tokens left unresolved, in order
        hits: Dictionary entries used (words and phrases)
        debug: Human-readable trace of the decisions taken
    """
    alias: str
    confidence: float
    coverage: float
    unknown_tokens: List[str] = field(default_factory=list)
    hits: int = 0
    debug: str = ''


_ILLEGAL = re.compile('[' + re.escape(ILLEGAL_PATH_CHARS) + ']')
_WHITESPACE = re.compile(r'\s+')


def sanitize(text: str, max_length: int, strip_whitespace: bool = False) -> str:
    """Replace illegal path characters and truncate."""
    text = _ILLEGAL.sub(ILLEGAL_CHAR_REPLACEMENT, text)
    if strip_whitespace:
        text = _WHITESPACE.sub('', text)
    return text.strip()[:max_length]


def literal_confidence(coverage: float) -> float:
    """Step function of coverage."""
    if coverage >= 1.0:
        return 0.95
    if coverage >= 0.8:
        return 0.85
    if coverage >= 0.5:
        return 0.65
    return 0.4


# ============================================================================
# Literal Strategy
# ============================================================================

def build_literal(seg: Segmentation, dictionary: LayeredDictionary, config: AliasConfig) -> BuildResult:
    """
    Build a literal alias.

    Resolution order at each cursor position: longest phrase, single word,
    acronym pass-through, numeral, unknown (kept verbatim).

    Args:
        seg: Segmented name
        dictionary: Dictionary to resolve against
        config: Joiner, extension mode, numeral mode, length limit

    Returns:
        BuildResult

    Example:
        >>> seg = segment("get.user.info.py")
        >>> build_literal(seg, dictionary, config).alias
        'get.用户.info.py'
    """
    renderer = NumeralRenderer(config.numeral_mode)
    tokens = seg.tokens
    keys = seg.normalized

    parts: List[Tuple[str, str]] = []
    unknown: List[str] = []
    trace: List[str] = []
    resolved = 0
    hits = 0

    i = 0
    while i < len(tokens):
        entry, count = dictionary.resolve_phrase(keys, i)
        if entry is not None:
            last = i + count - 1
            parts.append((entry.alias, seg.delimiters[last]))
            trace.append(f"{'+'.join(keys[i:last + 1])}=>{entry.alias}")
            resolved += count
            hits += 1
            i += count
            continue

        token = tokens[i]
        text, was_resolved, was_hit = _resolve_literal_token(token, dictionary, renderer)
        parts.append((text, seg.delimiters[i]))
        if was_resolved:
            resolved += 1
            hits += int(was_hit)
            trace.append(f"{token.normalized}=>{text}")
        else:
            unknown.append(token.normalized)
            trace.append(f"{token.normalized}?")
        i += 1

    pieces = [seg.leading]
    for index, (text, delimiter) in enumerate(parts):
        pieces.append(text)
        if not delimiter and index < len(parts) - 1:
            delimiter = config.literal_joiner
        pieces.append(delimiter)
    pieces.append(_literal_extension(seg, config))

    coverage = resolved / len(tokens) if tokens else 0.0
    alias = sanitize(''.join(pieces), config.max_literal_length)

    return BuildResult(
        alias=alias,
        confidence=literal_confidence(coverage),
        coverage=coverage,
        unknown_tokens=unknown,
        hits=hits,
        debug=f"literal:{'|'.join(trace)} ext={seg.extension} coverage={coverage:.0%}",
    )


def _resolve_literal_token(
    token: Token,
    dictionary: LayeredDictionary,
    renderer: NumeralRenderer,
) -> Tuple[str, bool, bool]:
    """Returns (text, resolved, dictionary_hit)."""
    entry = dictionary.resolve_word(token.normalized)
    if entry is not None:
        return entry.alias, True, True

    if token.kind is TokenKind.ACRONYM:
        return token.raw, True, False

    if token.kind is TokenKind.NUMERAL:
        # In keep mode the digits are passed through and left to the guard
        if renderer.rewrites:
            return renderer.render(token.raw), True, False
        return token.raw, False, False

    return token.raw, False, False


def _literal_extension(seg: Segmentation, config: AliasConfig) -> str:
    if not seg.extension:
        return ''

    mode = config.literal_extension_mode
    if mode is ExtensionMode.DROP:
        return ''
    if mode is ExtensionMode.SUFFIX:
        suffix = config.literal_ext_suffixes.get(seg.extension)
        if suffix:
            return config.literal_joiner + suffix
    return '.' + seg.raw_extension


# ============================================================================
# Natural Strategy
# ============================================================================

@dataclass(slots=True)
class _Part:
    key: str
    alias: str
    numeral: bool = False


def build_natural(seg: Segmentation, dictionary: LayeredDictionary, config: AliasConfig) -> BuildResult:
    """
    Build a natural (head-final) alias.

    Tokens are sorted into modifiers, nouns, acronyms and others. A head is
    chosen by priority:

    1. UI surface nouns (section, block, panel, card, page, view, component)
    2. The "api" acronym
    3. Action nouns (analysis, manager, parser, ...)
    4. The last noun
    5. The last acronym
    6. The last unknown token, only when the extension has no suffix

    Without a head the alias is the extension suffix alone (confidence 0.4),
    or the literal alias when there is no suffix either.

    Unknown tokens other than the head do not appear in the output, so the
    coverage check sends such names back to the literal builder.
    """
    renderer = NumeralRenderer(config.numeral_mode)
    tokens = seg.tokens
    keys = seg.normalized
    suffix = config.natural_ext_suffixes.get(seg.extension, '') if seg.extension else ''

    nouns: List[_Part] = []
    modifiers: List[_Part] = []
    acronyms: List[_Part] = []
    others: List[_Part] = []
    unknown: List[str] = []
    resolved = 0
    hits = 0

    i = 0
    while i < len(tokens):
        entry, count = dictionary.resolve_phrase(keys, i)
        if entry is not None:
            nouns.append(_Part(' '.join(keys[i:i + count]), entry.alias))
            resolved += count
            hits += 1
            i += count
            continue

        token = tokens[i]
        i += 1
        entry = dictionary.resolve_word(token.normalized)

        if token.kind is TokenKind.ACRONYM:
            acronyms.append(_Part(token.normalized, entry.alias if entry else token.raw))
            resolved += 1
            hits += int(entry is not None)
        elif entry is not None:
            target = modifiers if token.normalized in MODIFIER_WORDS else nouns
            target.append(_Part(token.normalized, entry.alias))
            resolved += 1
            hits += 1
        elif token.kind is TokenKind.NUMERAL and renderer.rewrites:
            nouns.append(_Part(token.normalized, renderer.render(token.raw), numeral=True))
            resolved += 1
        else:
            others.append(_Part(token.normalized, token.raw))
            unknown.append(token.normalized)

    coverage = resolved / len(tokens) if tokens else 0.0
    head = select_head(nouns, acronyms, others, suffix)
    token_trace = '|'.join(t.raw for t in tokens)

    if head is None:
        if suffix:
            return BuildResult(
                alias=sanitize(suffix, config.max_natural_length, strip_whitespace=True),
                confidence=0.4,
                coverage=coverage,
                unknown_tokens=unknown,
                hits=hits,
                debug=f"natural: tokens={token_trace} head=none ext={seg.extension} (suffix-only)",
            )
        return build_literal(seg, dictionary, config)

    mods = [p.alias for p in modifiers if p.key not in VARIANT_WORDS]
    mods += [p.alias for p in nouns if p is not head]
    mods += [p.alias for p in acronyms if p is not head]

    variants: List[str] = []
    for part in modifiers:
        if part.key in VARIANT_WORDS and part.alias not in variants:
            variants.append(part.alias)
    variant_text = f"（{'、'.join(variants)}）" if variants else ''

    tail = suffix if suffix and suffix != head.alias else ''
    alias = sanitize(
        ''.join(mods) + head.alias + variant_text + tail,
        config.max_natural_length,
        strip_whitespace=True,
    )

    return BuildResult(
        alias=alias,
        confidence=natural_confidence(coverage, bool(nouns), bool(modifiers)),
        coverage=coverage,
        unknown_tokens=unknown,
        hits=hits,
        debug=f"natural: tokens={token_trace} head={head.key} ext={seg.extension}",
    )


def select_head(
    nouns: List[_Part],
    acronyms: List[_Part],
    others: List[_Part],
    suffix: str,
) -> Optional[_Part]:
    """Pick the head part by priority; None if nothing qualifies."""
    for word in UI_HEAD_NOUNS:
        for part in nouns:
            if part.key == word:
                return part

    for part in acronyms:
        if part.key in PRIORITY_HEAD_ACRONYMS:
            return part

    for part in nouns:
        if part.key in ACTION_HEAD_NOUNS:
            return part

    candidates = [p for p in nouns if not p.numeral]
    if candidates:
        return candidates[-1]
    if acronyms:
        return acronyms[-1]
    if others and not suffix:
        return others[-1]
    return None


def natural_confidence(coverage: float, has_nouns: bool, has_modifiers: bool) -> float:
    """Hit rate scaled to 0.9, with small bonuses, clamped to [0.5, 0.95]."""
    confidence = coverage * 0.9
    if has_nouns:
        confidence += 0.05
    if has_modifiers:
        confidence += 0.03
    return max(0.5, min(0.95, confidence))


# ============================================================================
# Dispatch
# ============================================================================

def build_alias(
    strategy: Strategy,
    seg: Segmentation,
    dictionary: LayeredDictionary,
    config: AliasConfig,
) -> BuildResult:
    """Run the builder for the given strategy."""
    if Strategy(strategy) is Strategy.NATURAL:
        return build_natural(seg, dictionary, config)
    return build_literal(seg, dictionary, config)
