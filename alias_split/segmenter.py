"""
Segmenter module for alias-split.

Splits machine-style names (camelCase, PascalCase, snake_case, kebab-case,
dot.case) into tokens plus the literal separator text between them. The
split is lossless: rebuild() reproduces the input byte for byte.

Example:
    "analyze_element_hierarchy.cjs"
      -> tokens:     analyze | element | hierarchy
      -> delimiters: "_"     | "_"     | ""
      -> extension:  "cjs"
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple


# =============================================================================
# Token Data Structures
# =============================================================================

class TokenKind(str, Enum):
    WORD = 'word'
    ACRONYM = 'acronym'
    NUMERAL = 'numeral'


@dataclass(slots=True, frozen=True)
class Token:
    """
    A single segment of a name.

    Attributes:
        raw: The text as it appears in the name
        normalized: Lower-cased form used for lookups
        kind: word, acronym (2+ upper-case letters) or numeral (digits only)
    """
    raw: str
    normalized: str
    kind: TokenKind

    def __repr__(self) -> str:
        return f"Token({self.raw!r}, {self.kind.value})"


@dataclass(slots=True)
class Segmentation:
    """
    Result of segmenting a name.

    delimiters[i] is the separator text right after tokens[i] ("" across a
    camelCase break). leading holds separator text before the first token.
    """
    tokens: List[Token] = field(default_factory=list)
    delimiters: List[str] = field(default_factory=list)
    extension: str = ''
    leading: str = ''
    raw_extension: str = ''

    def rebuild(self) -> str:
        return rebuild(self)

    @property
    def normalized(self) -> List[str]:
        return [t.normalized for t in self.tokens]


# =============================================================================
# Character Classes
# =============================================================================

# ASCII only: CJK and other scripts count as separator text, which keeps an
# already translated alias stable when it is segmented again.
_RUN_PATTERN = re.compile(r'([A-Za-z0-9]+)|([^A-Za-z0-9]+)')
_NUMERAL_PATTERN = re.compile(r'^[0-9]+$')
_ACRONYM_PATTERN = re.compile(r'^[A-Z]{2,}$')
_LONG_UPPER_PATTERN = re.compile(r'^[A-Z]{4,}$')

# Soft break positions inside a letter/digit run
_LOWER_TO_UPPER = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')
_UPPER_RUN_TO_WORD = re.compile(r'(?<=[A-Z])(?=[A-Z][a-z])')


# =============================================================================
# Segmentation
# =============================================================================

def split_extension(name: str) -> Tuple[str, str]:
    """
    Split the final ".ext" off a name.

    A leading dot (".gitignore") or a trailing dot ("notes.") does not
    start an extension.

    Returns:
        (base, raw_extension) - raw_extension keeps its original case
    """
    i = name.rfind('.')
    if i <= 0 or i == len(name) - 1:
        return name, ''
    return name[:i], name[i + 1:]


def split_camel(run: str) -> List[str]:
    """
    Split a letter/digit run at camelCase boundaries.

    Example:
        >>> split_camel("getUserById")
        ['get', 'User', 'By', 'Id']
        >>> split_camel("APIController")
        ['API', 'Controller']
    """
    marked = _LOWER_TO_UPPER.sub(' ', run)
    marked = _UPPER_RUN_TO_WORD.sub(' ', marked)
    parts = [p for p in marked.split(' ') if p]

    result = []
    for part in parts:
        if _LONG_UPPER_PATTERN.match(part):
            result.extend(split_upper_run(part))
        else:
            result.append(part)
    return result


def split_upper_run(s: str) -> List[str]:
    """
    Split 4+ consecutive capitals into 2-letter groups.

    A leftover single letter joins the previous group. This is a
    deterministic tie-break, not an acronym lookup: "UIAPI" gives
    UI | API, but "HTMLDOM" gives HT | ML | DOM.
    """
    groups: List[str] = []
    for i in range(0, len(s), 2):
        chunk = s[i:i + 2]
        if len(chunk) == 1 and groups:
            groups[-1] += chunk
        else:
            groups.append(chunk)
    return groups


def classify(raw: str) -> Token:
    """Build a Token, classifying it as numeral, acronym or word."""
    if _NUMERAL_PATTERN.match(raw):
        return Token(raw, raw, TokenKind.NUMERAL)
    if _ACRONYM_PATTERN.match(raw):
        return Token(raw, raw.lower(), TokenKind.ACRONYM)
    return Token(raw, raw.lower(), TokenKind.WORD)


def segment(name: str) -> Segmentation:
    """
    Segment a name into tokens and delimiters.

    Args:
        name: File or folder name

    Returns:
        Segmentation; empty tokens for empty input or input without
        letters/digits

    Example:
        >>> seg = segment("StepCard.tsx")
        >>> [t.raw for t in seg.tokens], seg.delimiters, seg.extension
        (['Step', 'Card'], ['', ''], 'tsx')
    """
    result = Segmentation()
    if not name:
        return result

    base, raw_ext = split_extension(name)
    result.raw_extension = raw_ext
    result.extension = raw_ext.lower()

    for match in _RUN_PATTERN.finditer(base):
        word, separator = match.group(1), match.group(2)

        if separator is not None:
            if result.tokens:
                result.delimiters[-1] += separator
            else:
                result.leading += separator
            continue

        for part in split_camel(word):
            result.tokens.append(classify(part))
            result.delimiters.append('')

    return result


def rebuild(seg: Segmentation) -> str:
    """Reassemble the original name from a Segmentation."""
    parts = [seg.leading]
    for token, delimiter in zip(seg.tokens, seg.delimiters):
        parts.append(token.raw)
        parts.append(delimiter)
    if seg.raw_extension:
        parts.append('.' + seg.raw_extension)
    return ''.join(parts)


# =============================================================================
# Naming Style Detection
# =============================================================================

def detect_naming_style(name: str) -> str:
    """
    Detect the naming convention of a name (extension ignored).

    Returns:
        One of: UPPER_CASE, camelCase, PascalCase, kebab-case,
        snake_case, dot.case, mixed
    """
    base, _ = split_extension(name)

    if re.match(r'^[A-Z_]+$', base):
        return 'UPPER_CASE'
    if re.match(r'^[a-z][a-z0-9]*([A-Z][a-z0-9]*)+$', base):
        return 'camelCase'
    if re.match(r'^[A-Z][a-z0-9]*([A-Z][a-z0-9]*)*$', base):
        return 'PascalCase'

    has_dash, has_under, has_dot = '-' in base, '_' in base, '.' in base
    if has_dash and not has_under and not has_dot:
        return 'kebab-case'
    if has_under and not has_dash and not has_dot:
        return 'snake_case'
    if has_dot and not has_dash and not has_under:
        return 'dot.case'
    return 'mixed'
