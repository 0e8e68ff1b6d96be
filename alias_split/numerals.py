"""
Numeral rendering for alias-split.

Rewrites pure-numeral tokens according to the configured display policy:
- keep:      leave Arabic digits alone
- localized: Chinese numeral words (up to 兆, enough for file names)
- roman:     Roman numerals (1-3999, otherwise unchanged)

Only pure-digit strings are rewritten. Tokens such as v2 or sha256 are
left to the caller.
"""

import re
from typing import Dict, List, Optional, Tuple

from alias_split.config import NumeralMode


# ============================================================================
# Chinese Numerals
# ============================================================================

CN_DIGITS: Dict[int, str] = {
    0: '零', 1: '一', 2: '二', 3: '三', 4: '四',
    5: '五', 6: '六', 7: '七', 8: '八', 9: '九',
}

# Unit inside a 4-digit block: thousands, hundreds, tens, ones
CN_UNITS = ('千', '百', '十', '')

# Unit per 4-digit block, lowest first
CN_BIG_UNITS = ('', '万', '亿', '兆')

_MULTI_ZERO = re.compile('零{2,}')


def _block_to_cn(n: int) -> str:
    """Render 1..9999 without the big unit."""
    digits = [n // 1000 % 10, n // 100 % 10, n // 10 % 10, n % 10]
    out = ''
    for digit, unit in zip(digits, CN_UNITS):
        if digit == 0:
            if out and not out.endswith('零'):
                out += '零'
        else:
            out += CN_DIGITS[digit] + unit
    return out.rstrip('零')


def to_chinese_number(n: int) -> Optional[str]:
    """
    Convert a non-negative integer to Chinese numeral words.

    Returns:
        The numeral words, or None when n is out of range

    Example:
        >>> to_chinese_number(10)
        '十'
        >>> to_chinese_number(10010)
        '一万零一十'
    """
    if n < 0 or n >= 10 ** (4 * len(CN_BIG_UNITS)):
        return None
    if n == 0:
        return CN_DIGITS[0]

    blocks: List[int] = []
    while n > 0:
        blocks.append(n % 10000)
        n //= 10000

    out = ''
    pending_zero = False
    for index in range(len(blocks) - 1, -1, -1):
        block = blocks[index]
        if block == 0:
            pending_zero = bool(out)
            continue
        # A gap inside the number (missing thousands or an empty block) reads as 零
        if out and (pending_zero or block < 1000):
            out += '零'
        out += _block_to_cn(block) + CN_BIG_UNITS[index]
        pending_zero = False

    out = _MULTI_ZERO.sub('零', out).rstrip('零')
    if out.startswith('一十'):
        out = out[1:]
    return out


# ============================================================================
# Roman Numerals
# ============================================================================

ROMAN_TABLE: Tuple[Tuple[int, str], ...] = (
    (1000, 'M'), (900, 'CM'), (500, 'D'), (400, 'CD'),
    (100, 'C'), (90, 'XC'), (50, 'L'), (40, 'XL'),
    (10, 'X'), (9, 'IX'), (5, 'V'), (4, 'IV'), (1, 'I'),
)


def to_roman(n: int) -> Optional[str]:
    """Convert 1..3999 to Roman numerals; None outside that range."""
    if n <= 0 or n >= 4000:
        return None
    out = ''
    for value, symbol in ROMAN_TABLE:
        while n >= value:
            out += symbol
            n -= value
    return out


# ============================================================================
# Renderer
# ============================================================================

def is_numeral(text: str) -> bool:
    """Check if text is a pure-digit string."""
    return text.isascii() and text.isdigit()


class NumeralRenderer:
    """Renders pure-numeral tokens under one display policy."""

    def __init__(self, mode: NumeralMode = NumeralMode.KEEP):
        self.mode = NumeralMode(mode)

    @property
    def rewrites(self) -> bool:
        """True when rendering can change a numeral's text."""
        return self.mode is not NumeralMode.KEEP

    def render(self, text: str) -> str:
        """
        Render a numeral token.

        Non-numeral input and numbers the policy cannot express are
        returned unchanged.
        """
        if self.mode is NumeralMode.KEEP or not is_numeral(text):
            return text

        n = int(text)
        if self.mode is NumeralMode.LOCALIZED:
            rendered = to_chinese_number(n)
        else:
            rendered = to_roman(n)
        return rendered if rendered is not None else text
