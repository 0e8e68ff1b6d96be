"""
Morphological normalization for alias-split.

Reduces inflected English words to a lookup key by suffix stripping, so a
single dictionary entry covers several surface forms:

1. Plural -ies -> -y          (entities -> entity)
2. Plural -es after s/x/z/ch/sh (boxes -> box, classes -> class)
3. Plural -s                  (elements -> element, nodes -> node)
4. Gerund -ing                (analyzing -> analyze, running -> run)
5. Past tense -ed             (walked -> walk, stopped -> stop)

The rules are small. Both the stored key and the looked-up
word go through the same function, so an imperfect stem still matches as
long as it is consistent.
"""

from typing import FrozenSet, Tuple


# =============================================================================
# Suffix Rules Configuration
# =============================================================================

# Stems ending in these take -es in the plural
ES_PLURAL_ENDINGS = ('s', 'x', 'z', 'ch', 'sh')

# Doubled final letters that belong to the stem (install-ing, buzz-ed)
KEEP_DOUBLED = frozenset('lsfz')

# A stripped stem ending in one of these gets its silent -e back
E_RESTORE_ENDINGS = ('z', 'v', 'c', 'g', 'u', 'rs')

# Words that look inflected but are not
INVARIANT_WORDS: FrozenSet[str] = frozenset([
    'status', 'alias', 'canvas', 'class', 'process', 'access', 'address',
    'bus', 'news', 'series', 'species', 'analysis', 'axis', 'basis',
    'string', 'thing', 'ring', 'king', 'spring', 'something', 'nothing',
    'red', 'bed', 'seed', 'need', 'speed', 'feed', 'embed', 'shed',
])

MIN_PLURAL_LENGTH = 3
MIN_GERUND_LENGTH = 6
MIN_PAST_LENGTH = 5


def _undouble(stem: str) -> str:
    """running -> runn -> run; keeps stems like install, buzz."""
    if len(stem) >= 4 and stem[-1] == stem[-2] and stem[-1] not in KEEP_DOUBLED:
        return stem[:-1]
    return stem


def _restore_e(stem: str) -> str:
    """analyz -> analyze, sav -> save, pars -> parse."""
    if stem.endswith(E_RESTORE_ENDINGS):
        return stem + 'e'
    return stem


def _strip_verb_suffix(word: str, suffix: str) -> str:
    stem = word[:-len(suffix)]
    undoubled = _undouble(stem)
    if undoubled != stem:
        return undoubled
    return _restore_e(stem)


def morphological_key(word: str) -> str:
    """
    Compute the morphological lookup key for a word.

    Args:
        word: A single token (any case)

    Returns:
        Lower-cased stem

    Example:
        >>> morphological_key("Elements")
        'element'
        >>> morphological_key("analyzing")
        'analyze'
        >>> morphological_key("walked")
        'walk'
    """
    lower = word.lower()
    if lower in INVARIANT_WORDS or not lower.isalpha():
        return lower

    # Plurals
    if lower.endswith('ies') and len(lower) > 4:
        return lower[:-3] + 'y'
    if lower.endswith('es') and len(lower) > MIN_PLURAL_LENGTH:
        stem = lower[:-2]
        if stem.endswith(ES_PLURAL_ENDINGS):
            return stem
        return lower[:-1]
    if lower.endswith('s') and not lower.endswith('ss') and len(lower) > MIN_PLURAL_LENGTH:
        return lower[:-1]

    # Gerund / present participle
    if lower.endswith('ing') and len(lower) >= MIN_GERUND_LENGTH:
        return _strip_verb_suffix(lower, 'ing')

    # Past tense
    if lower.endswith('ed') and len(lower) >= MIN_PAST_LENGTH:
        return _strip_verb_suffix(lower, 'ed')

    return lower


def lookup_keys(word: str) -> Tuple[str, ...]:
    """
    Morphological keys to try for a word, best first.

    Stripping -es, -ing or -ed cannot tell whether the stem had a silent
    -e (databases -> databas, caching -> cach), so an inflected word also
    yields its key with the -e put back. Uninflected words yield one key.

    Example:
        >>> lookup_keys("caches")
        ('cach', 'cache')
        >>> lookup_keys("database")
        ('database',)
    """
    lower = word.lower()
    key = morphological_key(lower)
    if key == lower or key.endswith('e'):
        return (key,)
    return (key, key + 'e')
