"""
alias-split: Localized aliases for machine-style file names

Splits camelCase / snake_case / kebab-case / dot.case names into tokens,
resolves them against a layered dictionary, and only asks an external
translation oracle about tokens that are worth the cost. Oracle answers
are learned, so the same token is never paid for twice.

Basic Usage:
    import alias_split

    result = alias_split.translate("analyze_element_hierarchy.cjs")
    print(f"{result.alias} ({result.source.value}, {result.confidence:.2f})")

    # With an oracle for unknown tokens
    alias_split.configure(oracle=alias_split.MappingOracle({"xml": "可扩展标记语言"}))
    result = asyncio.run(alias_split.translate_async("clean-xml-files.js"))
"""

import threading
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from alias_split.builders import Strategy
from alias_split.config import AliasConfig, ExtensionMode, NumeralMode, load_config
from alias_split.errors import (
    AliasSplitError,
    ConfigError,
    DictionaryError,
    OracleError,
    OracleTimeoutError,
)
from alias_split.oracle import HttpOracle, MappingOracle, Oracle
from alias_split.pipeline import AliasPipeline, AliasResult, Source
from alias_split.segmenter import Segmentation, Token, TokenKind

__version__ = "0.1.0"


# =============================================================================
# Default Pipeline
# =============================================================================

_pipeline: Optional[AliasPipeline] = None
_pipeline_lock = threading.Lock()


def _get_pipeline() -> AliasPipeline:
    """Get or create the module-level pipeline."""
    global _pipeline
    with _pipeline_lock:
        if _pipeline is None:
            _pipeline = AliasPipeline()
        return _pipeline


def configure(config: Optional[AliasConfig] = None, oracle: Optional[Oracle] = None) -> AliasPipeline:
    """
    Replace the module-level pipeline.

    Args:
        config: Settings; defaults if None
        oracle: Oracle used by translate_async

    Returns:
        The new pipeline
    """
    global _pipeline
    pipeline = AliasPipeline(config=config, oracle=oracle)
    with _pipeline_lock:
        _pipeline = pipeline
    return pipeline


# =============================================================================
# Main API
# =============================================================================

def segment(name: str) -> Segmentation:
    """
    Split a name into tokens, delimiters and extension.

    Example:
        >>> seg = alias_split.segment("getUserById.ts")
        >>> [t.raw for t in seg.tokens]
        ['get', 'User', 'By', 'Id']
    """
    from alias_split.segmenter import segment as _segment
    return _segment(name)


def translate(name: str, strategy: Optional[Strategy] = None) -> AliasResult:
    """
    Translate a name with the dictionary only (no oracle call).

    Args:
        name: File or folder name
        strategy: "literal" or "natural"; the configured default if None

    Returns:
        AliasResult

    Example:
        >>> alias_split.translate("user-profile.tsx").alias
        '用户档案.tsx'
    """
    return _get_pipeline().translate(name, strategy)


async def translate_async(
    name: str,
    strategy: Optional[Strategy] = None,
    force_reask: bool = False,
) -> AliasResult:
    """
    Translate a name, asking the configured oracle about unknown tokens.

    Example:
        >>> import asyncio
        >>> result = asyncio.run(alias_split.translate_async("clean-xml-files.js"))
    """
    return await _get_pipeline().translate_async(name, strategy, force_reask)


async def translate_batch_async(
    names: Sequence[str],
    strategy: Optional[Strategy] = None,
) -> List[AliasResult]:
    """Translate many names with bounded oracle concurrency; order is preserved."""
    return await _get_pipeline().translate_batch_async(names, strategy)


def warm_up(verbose: bool = False) -> Tuple[float, dict]:
    """
    Load the dictionary layers ahead of the first translation.

    Args:
        verbose: If True, print timing information

    Returns:
        Tuple of (total_time_seconds, timing_details_dict)
    """
    timings = {}
    total_start = time.perf_counter()

    if verbose:
        print("Loading alias-split dictionary...")

    t0 = time.perf_counter()
    pipeline = _get_pipeline()
    timings['dictionary'] = (time.perf_counter() - t0) * 1000

    if verbose:
        for name, counts in pipeline.dictionary.stats().items():
            print(f"  {name:<16} {counts['words']:>6,} words, {counts['phrases']:>4,} phrases")
        print(f"  Dictionary:     {timings['dictionary']:>7.1f}ms")

    t0 = time.perf_counter()
    pipeline.translate("warmUp_name.ts")
    timings['first_translation'] = (time.perf_counter() - t0) * 1000

    total_time = time.perf_counter() - total_start
    timings['total'] = total_time * 1000

    if verbose:
        print(f"Total warm-up:    {timings['total']:>7.1f}ms")

    return total_time, timings


def get_version() -> str:
    """Get the library version."""
    return __version__


def shutdown():
    """
    Persist the usage ledger and drop the module-level pipeline.

    Call this when your application is shutting down.
    """
    global _pipeline
    with _pipeline_lock:
        pipeline, _pipeline = _pipeline, None
    if pipeline is not None:
        pipeline.ledger.save()


# =============================================================================
# Session Context (for batch processing)
# =============================================================================

@contextmanager
def session_context(
    config: Optional[AliasConfig] = None,
    oracle: Optional[Oracle] = None,
) -> Iterator[AliasPipeline]:
    """
    Context manager for translating many names with one pipeline.

    Loads the dictionary once and saves the usage ledger on exit.

    Example:
        >>> with alias_split.session_context() as pipeline:
        ...     for name in names:
        ...         print(pipeline.translate(name).alias)
    """
    pipeline = AliasPipeline(config=config, oracle=oracle)
    try:
        yield pipeline
    finally:
        pipeline.ledger.save()


# =============================================================================
# Module-level exports
# =============================================================================

__all__ = [
    # Data classes
    "Token",
    "TokenKind",
    "Segmentation",
    "AliasResult",
    "Source",
    "Strategy",
    # Configuration
    "AliasConfig",
    "NumeralMode",
    "ExtensionMode",
    "load_config",
    "configure",
    # Sync API
    "segment",
    "translate",
    "warm_up",
    "get_version",
    # Async API
    "translate_async",
    "translate_batch_async",
    "shutdown",
    # Batch processing
    "session_context",
    "AliasPipeline",
    # Oracles
    "Oracle",
    "HttpOracle",
    "MappingOracle",
    # Exceptions
    "AliasSplitError",
    "ConfigError",
    "DictionaryError",
    "OracleError",
    "OracleTimeoutError",
    # Version
    "__version__",
]
