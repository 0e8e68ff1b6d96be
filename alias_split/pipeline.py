"""
Translation pipeline for alias-split.

    name -> segment -> dictionary/numerals -> unknown tokens -> cost guard
         -> oracle -> learning -> builder -> coverage guard -> AliasResult

translate() runs the dictionary-only chain synchronously. translate_async()
adds the oracle round trip; translate_batch_async() runs many names with a
bounded number of oracle calls in flight.

No exception escapes the public entry points. The worst case is the
original name, confidence 0, source "fallback".
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from alias_split.builders import BuildResult, Strategy, build_alias, build_literal
from alias_split.config import AliasConfig
from alias_split.constants import MAX_NAME_LENGTH
from alias_split.coverage import CoverageGuard
from alias_split.dictionary import DictEntry, DictionaryLayer, LayeredDictionary, LayerName
from alias_split.guard import CostGuard, GuardContext, GuardStats, format_stats
from alias_split.learning import LearningWriteback
from alias_split.ledger import UsageLedger
from alias_split.oracle import Oracle, OracleAnswer, query_oracle
from alias_split.segmenter import Segmentation, TokenKind, segment

logger = logging.getLogger(__name__)


# ============================================================================
# Result
# ============================================================================

class Source(str, Enum):
    DICTIONARY = 'dictionary'
    RULE = 'rule'
    ORACLE = 'oracle'
    FALLBACK = 'fallback'


@dataclass(slots=True)
class AliasResult:
    """
    Translated alias plus diagnostics.

    Attributes:
        alias: The alias to display
        confidence: Heuristic confidence in [0, 1]
        coverage: Fraction of source tokens resolved
        unknown_tokens: Tokens left unresolved
        source: Where the alias came from
        debug_trace: Decisions taken, for logs and tooltips
    """
    alias: str
    confidence: float
    coverage: float
    unknown_tokens: List[str] = field(default_factory=list)
    source: Source = Source.RULE
    debug_trace: str = ''

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['source'] = self.source.value
        return data


def fallback_result(name: str, reason: str) -> AliasResult:
    """The original name, unchanged, with zero confidence."""
    return AliasResult(
        alias=name,
        confidence=0.0,
        coverage=0.0,
        unknown_tokens=[],
        source=Source.FALLBACK,
        debug_trace=f"fallback: {reason}",
    )


def answers_layer(answers: Dict[str, OracleAnswer]) -> DictionaryLayer:
    """Build an in-memory layer from oracle answers (keys with spaces are phrases)."""
    words: Dict[str, DictEntry] = {}
    phrases: Dict[str, DictEntry] = {}
    for key, answer in answers.items():
        target = phrases if ' ' in key else words
        target[key] = DictEntry(answer.alias, answer.confidence)
    return DictionaryLayer(LayerName.OVERLAY.value, words, phrases)


# ============================================================================
# Pipeline
# ============================================================================

class AliasPipeline:
    """
    Translates names into aliases.

    Args:
        config: Settings; defaults if None
        dictionary: Pre-built dictionary; loaded from config paths if None
        oracle: Oracle for unknown tokens; translate_async skips it if None
        ledger: Guard usage ledger; built from config.ledger_path if None
        writeback: Learning writeback; built from config.project_learned_path if None
    """

    def __init__(
        self,
        config: Optional[AliasConfig] = None,
        dictionary: Optional[LayeredDictionary] = None,
        oracle: Optional[Oracle] = None,
        ledger: Optional[UsageLedger] = None,
        writeback: Optional[LearningWriteback] = None,
    ):
        self.config = config if config is not None else AliasConfig()
        self.oracle = oracle

        if dictionary is None:
            dictionary = LayeredDictionary()
            dictionary.load_files(self.layer_specs(), include_builtin=self.config.use_builtin_dictionary)
        self.dictionary = dictionary

        if ledger is None:
            ledger = UsageLedger(self.config.ledger_path)
            ledger.load()
        self.ledger = ledger

        self.guard = CostGuard(self.config, self.ledger)
        self.writeback = writeback if writeback is not None else LearningWriteback(
            self.config.project_learned_path, self.dictionary, self.config
        )

    @classmethod
    def from_config(cls, config: AliasConfig, oracle: Optional[Oracle] = None) -> 'AliasPipeline':
        return cls(config=config, oracle=oracle)

    def layer_specs(self) -> List[Tuple[str, Path]]:
        """Configured dictionary files, highest priority first."""
        candidates = [
            (LayerName.PROJECT_FIXED.value, self.config.project_fixed_path),
            (LayerName.PROJECT_LEARNED.value, self.config.project_learned_path),
            (LayerName.GLOBAL_LEARNED.value, self.config.global_learned_path),
        ]
        return [(name, path) for name, path in candidates if path is not None]

    def reload(self) -> None:
        """Reload all dictionary files into a fresh snapshot."""
        self.dictionary.load_files(self.layer_specs(), include_builtin=self.config.use_builtin_dictionary)

    # ------------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------------

    def translate(self, name: str, strategy: Optional[Strategy] = None) -> AliasResult:
        """
        Translate a name using the dictionary only.

        Example:
            >>> pipeline.translate("get.user.info.py").alias
            'get.用户.info.py'
        """
        try:
            prepared = self._prepare(name, strategy)
            if isinstance(prepared, AliasResult):
                return prepared
            seg, chosen = prepared
            return self._assemble(name, seg, chosen, self.dictionary)
        except Exception:
            logger.exception(f"Translation failed for {name!r}")
            return fallback_result(name, 'error')

    async def translate_async(
        self,
        name: str,
        strategy: Optional[Strategy] = None,
        force_reask: bool = False,
    ) -> AliasResult:
        """
        Translate a name, asking the oracle for tokens worth the cost.

        Args:
            name: File or folder name
            strategy: literal or natural; config.strategy if None
            force_reask: Ask about every word token, even resolved ones,
                and overwrite learned entries with the new answers

        Returns:
            AliasResult
        """
        try:
            return await self._translate_with_oracle(name, strategy, force_reask)
        except Exception:
            logger.exception(f"Translation failed for {name!r}")
            return fallback_result(name, 'error')

    async def translate_batch_async(
        self,
        names: Sequence[str],
        strategy: Optional[Strategy] = None,
    ) -> List[AliasResult]:
        """
        Translate many names concurrently.

        At most config.batch_concurrency translations run at once. Results
        are returned in input order; a failure affects only its own item.
        """
        semaphore = asyncio.Semaphore(self.config.batch_concurrency)

        async def run_one(name: str) -> AliasResult:
            async with semaphore:
                return await self.translate_async(name, strategy)

        results = await asyncio.gather(*(run_one(name) for name in names), return_exceptions=True)
        out: List[AliasResult] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error(f"Batch item {name!r} failed: {result!r}")
                out.append(fallback_result(name, 'error'))
            else:
                out.append(result)
        return out

    # ------------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------------

    def _prepare(self, name: str, strategy: Optional[Strategy]):
        """Segment and validate; returns (seg, strategy) or an early AliasResult."""
        if not name:
            return fallback_result(name, 'empty name')
        if len(name) > MAX_NAME_LENGTH:
            return fallback_result(name, 'name too long')

        seg = segment(name)
        if not seg.tokens:
            return fallback_result(name, 'no tokens')

        chosen = Strategy(strategy) if strategy is not None else Strategy(self.config.strategy)
        return seg, chosen

    async def _translate_with_oracle(
        self,
        name: str,
        strategy: Optional[Strategy],
        force_reask: bool,
    ) -> AliasResult:
        prepared = self._prepare(name, strategy)
        if isinstance(prepared, AliasResult):
            return prepared
        seg, chosen = prepared

        if self.oracle is None:
            return self._assemble(name, seg, chosen, self.dictionary)

        first = build_alias(chosen, seg, self.dictionary, self.config)
        if force_reask:
            candidates = [t.normalized for t in seg.tokens if t.kind is not TokenKind.NUMERAL]
        else:
            candidates = first.unknown_tokens
        if not candidates:
            return self._assemble(name, seg, chosen, self.dictionary, prebuilt=first)

        to_send, stats = self.guard.filter_unknown(candidates, GuardContext(name, seg.normalized))
        await asyncio.to_thread(self.ledger.save)
        if not to_send:
            return self._assemble(name, seg, chosen, self.dictionary, guard_stats=stats)

        answers = await query_oracle(
            self.oracle,
            name,
            to_send,
            timeout=self.config.oracle_timeout,
            min_confidence=self.config.min_oracle_confidence,
        )
        if not answers:
            return self._assemble(name, seg, chosen, self.dictionary, guard_stats=stats)

        await asyncio.to_thread(self.writeback.learn, answers, force_reask)
        view = self.dictionary.with_overlay(answers_layer(answers))
        return self._assemble(name, seg, chosen, view, guard_stats=stats, oracle_used=True)

    def _assemble(
        self,
        name: str,
        seg: Segmentation,
        strategy: Strategy,
        dictionary: LayeredDictionary,
        prebuilt: Optional[BuildResult] = None,
        guard_stats: Optional[GuardStats] = None,
        oracle_used: bool = False,
    ) -> AliasResult:
        """Build the alias, enforce coverage and pick the result source."""
        built = prebuilt if prebuilt is not None else build_alias(strategy, seg, dictionary, self.config)
        debug = built.debug
        fell_back = False

        if strategy is Strategy.NATURAL:
            coverage_guard = CoverageGuard(dictionary, self.config)
            if not coverage_guard.is_sufficient(name, built.alias, self.config.allowed_coverage_misses):
                literal = build_literal(seg, dictionary, self.config)
                debug = f"{debug} -> coverage fallback -> {literal.debug}"
                built = literal
                fell_back = True

        if guard_stats is not None:
            debug = f"{debug} guard: {format_stats(guard_stats)}"

        if fell_back:
            source = Source.FALLBACK
        elif oracle_used:
            source = Source.ORACLE
        elif built.hits > 0:
            source = Source.DICTIONARY
        else:
            source = Source.RULE

        logger.debug(f"{name} -> {built.alias} [{source.value}] {debug}")
        return AliasResult(
            alias=built.alias,
            confidence=built.confidence,
            coverage=built.coverage,
            unknown_tokens=list(built.unknown_tokens),
            source=source,
            debug_trace=debug,
        )
