"""
CLI interface for alias-split.

Usage:
    alias-split analyze_element_hierarchy.cjs
    alias-split --style natural -d StepCard.tsx
    alias-split --json get.user.info.py release-v2-2024-12-31.md
    alias-split --answers answers.json clean-xml-files.js
    ls src | alias-split --segments
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from alias_split import __version__
from alias_split.config import AliasConfig, load_config, oracle_settings_from_env
from alias_split.errors import AliasSplitError
from alias_split.guard import GuardContext, format_stats
from alias_split.oracle import HttpOracle, MappingOracle, Oracle
from alias_split.pipeline import AliasPipeline, AliasResult
from alias_split.segmenter import Segmentation, detect_naming_style, segment


# ============================================================================
# Output Formatting
# ============================================================================

def format_default(name: str, result: AliasResult) -> str:
    """One line per name: name → alias"""
    return f"{name} → {result.alias}"


def format_detailed(name: str, result: AliasResult) -> str:
    """Alias plus confidence, source, coverage and the debug trace."""
    lines = [format_default(name, result), "─" * 40]
    lines.append(
        f"source={result.source.value} confidence={result.confidence:.2f} "
        f"coverage={result.coverage:.0%}"
    )
    if result.unknown_tokens:
        lines.append(f"unknown: {', '.join(result.unknown_tokens)}")
    lines.append(f"  └─ {result.debug_trace}")
    return "\n".join(lines)


def format_segments(name: str, seg: Segmentation) -> str:
    """
    Token split of a name.

    Example:
        StepCard.tsx  ->  Step | Card  .tsx  (PascalCase)
    """
    line = " | ".join(t.raw for t in seg.tokens) or "(no tokens)"
    if seg.extension:
        line += f"  .{seg.extension}"
    return f"{line}  ({detect_naming_style(name)})"


def format_guard(name: str, pipeline: AliasPipeline) -> str:
    """Show what the cost guard would send to the oracle for a name."""
    result = pipeline.translate(name)
    context = GuardContext(name, segment(name).normalized)
    to_send, stats = pipeline.guard.filter_unknown(result.unknown_tokens, context)
    sent = ", ".join(to_send) if to_send else "(nothing)"
    return f"{name}: send {sent}; {format_stats(stats)}"


def format_json(results: Sequence[AliasResult], names: Sequence[str]) -> str:
    """Format results as JSON."""
    data = []
    for name, result in zip(names, results):
        item = {"name": name}
        item.update(result.to_dict())
        data.append(item)
    return json.dumps(data, ensure_ascii=False, indent=2)


# ============================================================================
# Helpers
# ============================================================================

def build_oracle(args: argparse.Namespace, config: AliasConfig) -> Optional[Oracle]:
    """Pick the oracle requested on the command line, if any."""
    if args.answers:
        with open(args.answers, 'r', encoding='utf-8') as f:
            mapping = json.load(f)
        if not isinstance(mapping, dict):
            raise AliasSplitError(f"{args.answers} must hold a JSON object")
        return MappingOracle(mapping)

    if args.oracle:
        settings = oracle_settings_from_env()
        if settings is None:
            raise AliasSplitError("--oracle needs ALIAS_SPLIT_ORACLE_URL to be set")
        return HttpOracle(timeout=config.oracle_timeout, **settings)

    return None


def read_names(args: argparse.Namespace) -> List[str]:
    if args.names:
        return list(args.names)
    return [line.strip() for line in sys.stdin.read().splitlines() if line.strip()]


# ============================================================================
# Main
# ============================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="alias-split",
        description="Localized aliases for machine-style file names",
    )
    parser.add_argument(
        "names",
        nargs="*",
        help="File or folder names (read from stdin if omitted)",
    )
    parser.add_argument(
        "--style",
        choices=["literal", "natural"],
        help="Alias builder (default: from config, else literal)",
    )
    parser.add_argument(
        "--numerals",
        choices=["keep", "localized", "roman"],
        help="How pure numerals are displayed",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON config file",
    )
    parser.add_argument(
        "--answers",
        type=Path,
        help="JSON token -> alias file used as an offline oracle",
    )
    parser.add_argument(
        "--oracle",
        action="store_true",
        help="Ask the HTTP oracle configured by ALIAS_SPLIT_ORACLE_* variables",
    )
    parser.add_argument(
        "--segments", "-s",
        action="store_true",
        help="Only show the token split",
    )
    parser.add_argument(
        "--guard", "-g",
        action="store_true",
        help="Show which unknown tokens would be sent to the oracle",
    )
    parser.add_argument(
        "--detail", "-d",
        action="store_true",
        help="Show confidence, source and the debug trace",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log to stderr",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"alias-split {__version__}",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(message)s',
        )

    names = read_names(args)
    if not names:
        parser.print_help()
        return 1

    if args.segments:
        for name in names:
            print(format_segments(name, segment(name)))
        return 0

    try:
        config = load_config(args.config)
        overrides = {}
        if args.style:
            overrides['strategy'] = args.style
        if args.numerals:
            overrides['numeral_mode'] = args.numerals
        if overrides:
            config = config.with_overrides(**overrides)

        oracle = build_oracle(args, config)
        pipeline = AliasPipeline.from_config(config, oracle=oracle)
    except (AliasSplitError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.guard:
        for name in names:
            print(format_guard(name, pipeline))
        pipeline.ledger.save()
        return 0

    if oracle is not None:
        results = asyncio.run(pipeline.translate_batch_async(names))
    else:
        results = [pipeline.translate(name) for name in names]
    pipeline.ledger.save()

    if args.json:
        print(format_json(results, names))
    else:
        formatter = format_detailed if args.detail else format_default
        for name, result in zip(names, results):
            print(formatter(name, result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
