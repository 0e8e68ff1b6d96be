"""
Coverage guard for alias-split.

Checks that an alias still represents every meaningful token of its
source name. The natural builder may drop or reorder tokens; when it loses
one, the pipeline discards that alias and rebuilds literally.

    is_sufficient('analyze_element_hierarchy', '分析层级')      -> False (element missing)
    is_sufficient('analyze_element_hierarchy', '分析元素层级')  -> True
"""

import logging
from dataclasses import dataclass, field
from typing import List

from alias_split.config import AliasConfig
from alias_split.dictionary import LayeredDictionary
from alias_split.numerals import NumeralRenderer
from alias_split.segmenter import Token, TokenKind, segment

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CoverageReport:
    """
    Per-name coverage detail.

    Attributes:
        total: Meaningful (non-stopword) tokens in the source
        covered: Tokens represented in the alias
        missed: Raw text of tokens not represented, in order
        rate: covered / total (1.0 when there is nothing to cover)
    """
    total: int = 0
    covered: int = 0
    missed: List[str] = field(default_factory=list)
    rate: float = 1.0


class CoverageGuard:
    """Checks aliases against the dictionary view that produced them."""

    def __init__(self, dictionary: LayeredDictionary, config: AliasConfig):
        self.dictionary = dictionary
        self.config = config
        self.renderer = NumeralRenderer(config.numeral_mode)

    def details(self, source: str, alias: str) -> CoverageReport:
        """
        Compute per-token coverage of alias against source.

        Tokens consumed by a phrase entry are covered when the phrase alias
        occurs in the alias, or else when each token is covered on its own.
        """
        seg = segment(source)
        keys = seg.normalized
        report = CoverageReport()
        alias_lower = alias.lower()

        i = 0
        while i < len(seg.tokens):
            entry, count = self.dictionary.resolve_phrase(keys, i)
            if entry is not None:
                group = seg.tokens[i:i + count]
                i += count
                meaningful = [t for t in group if t.normalized not in self.config.stopwords]
                hit = entry.alias in alias
                for token in meaningful:
                    self._count(report, token, hit or self._token_covered(token, alias, alias_lower))
                continue

            token = seg.tokens[i]
            i += 1
            if token.normalized in self.config.stopwords:
                continue
            self._count(report, token, self._token_covered(token, alias, alias_lower))

        if report.total:
            report.rate = report.covered / report.total
        return report

    def is_sufficient(self, source: str, alias: str, allowed_misses: int = 0) -> bool:
        """
        Check if no more than allowed_misses tokens are missing from alias.

        Args:
            source: Original name
            alias: Produced alias
            allowed_misses: Tolerated number of missing tokens

        Returns:
            True if coverage is sufficient
        """
        report = self.details(source, alias)
        sufficient = len(report.missed) <= allowed_misses
        if not sufficient:
            logger.debug(f"Coverage insufficient: {source} -> {alias}, missed {report.missed}")
        return sufficient

    def _count(self, report: CoverageReport, token: Token, covered: bool) -> None:
        report.total += 1
        if covered:
            report.covered += 1
        else:
            report.missed.append(token.raw)

    def _token_covered(self, token: Token, alias: str, alias_lower: str) -> bool:
        if token.kind is TokenKind.NUMERAL:
            return token.raw in alias or self.renderer.render(token.raw) in alias

        entry = self.dictionary.resolve_word(token.normalized)
        if entry is not None and entry.alias in alias:
            return True

        # Untranslated tokens (acronyms included) must survive verbatim, ignoring case
        return token.normalized in alias_lower
