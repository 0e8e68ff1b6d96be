"""
Phrase trie for longest-phrase matching.

Phrases are stored as space-joined lower-case token sequences in a
marisa_trie.Trie. Matching joins the tokens from the cursor onward and
asks the trie for every stored key that is a prefix of that string; only
prefixes ending on a token boundary count.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import marisa_trie


class PhraseTrie:
    """Immutable phrase -> value map with greedy longest-match lookup."""

    def __init__(self, phrases: Dict[str, object]):
        self._values = dict(phrases)
        self._trie = marisa_trie.Trie(self._values.keys())

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, phrase: str) -> bool:
        return phrase in self._trie

    def get(self, phrase: str) -> Optional[object]:
        return self._values.get(phrase)

    def keys(self, prefix: str = '') -> List[str]:
        """All stored phrases starting with prefix."""
        return self._trie.keys(prefix)

    def longest_match(self, tokens: Sequence[str], start: int = 0) -> Tuple[Optional[object], int]:
        """
        Find the longest stored phrase rooted at tokens[start].

        Args:
            tokens: Normalized (lower-case) tokens
            start: Cursor position

        Returns:
            (value, matched_token_count), or (None, 0) when nothing matches

        Example:
            >>> trie = PhraseTrie({'element': 'X', 'element hierarchy': 'Y'})
            >>> trie.longest_match(['element', 'hierarchy'], 0)
            ('Y', 2)
        """
        if start >= len(tokens) or not self._values:
            return None, 0

        joined = ' '.join(tokens[start:])
        best = ''
        for candidate in self._trie.prefixes(joined):
            on_boundary = len(candidate) == len(joined) or joined[len(candidate)] == ' '
            if on_boundary and len(candidate) > len(best):
                best = candidate

        if not best:
            return None, 0
        return self._values[best], best.count(' ') + 1


def build_phrase_trie(items: Iterable[Tuple[str, object]]) -> PhraseTrie:
    """Build a PhraseTrie, normalizing keys to single-space lower case."""
    phrases: Dict[str, object] = {}
    for phrase, value in items:
        key = ' '.join(phrase.lower().split())
        if key:
            phrases[key] = value
    return PhraseTrie(phrases)
