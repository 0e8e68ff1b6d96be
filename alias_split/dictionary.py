"""
Layered Dictionary for alias-split.

A priority-ordered stack of word/phrase tables:

    project-fixed > project-learned > global-learned > builtin

Each layer is loaded from a JSON document:

    {
      "words":   {"element": {"alias": "元素", "confidence": 1.0}},
      "phrases": {"element hierarchy": {"alias": "元素_层级"}}
    }

Lookups short-circuit at the first layer that produces a hit. Phrases are
matched greedily for the longest token sequence (see trie.PhraseTrie)
before single words are tried, and single words fall back to their
morphological key (see morphology.morphological_key).

Layers and snapshots are immutable. Reloading or learning builds a new
snapshot and swaps it in, so in-flight lookups never see a half-built state.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from alias_split.errors import DictionaryError
from alias_split.morphology import lookup_keys, morphological_key
from alias_split.trie import PhraseTrie, build_phrase_trie

logger = logging.getLogger(__name__)


# ============================================================================
# Entries
# ============================================================================

@dataclass(slots=True, frozen=True)
class DictEntry:
    """
    A dictionary entry.

    Attributes:
        alias: Localized text for the word or phrase
        confidence: How trustworthy the entry is, within [0, 1]
    """
    alias: str
    confidence: float = 1.0

    def to_json(self) -> Dict[str, Any]:
        return {'alias': self.alias, 'confidence': self.confidence}


class LayerName(str, Enum):
    PROJECT_FIXED = 'project-fixed'
    PROJECT_LEARNED = 'project-learned'
    GLOBAL_LEARNED = 'global-learned'
    BUILTIN = 'builtin'
    OVERLAY = 'overlay'


# Highest priority first
LAYER_PRIORITY = (
    LayerName.PROJECT_FIXED,
    LayerName.PROJECT_LEARNED,
    LayerName.GLOBAL_LEARNED,
    LayerName.BUILTIN,
    LayerName.OVERLAY,
)


def get_builtin_dictionary_path() -> Path:
    """Get the path to the packaged default dictionary."""
    return Path(__file__).parent / "data" / "builtin.dict.json"


# ============================================================================
# Layer
# ============================================================================

class DictionaryLayer:
    """
    One prioritized source of dictionary entries.

    Words are indexed by their lower-case key and by their morphological
    key. When two stored words share a morphological key the first one
    loaded keeps it.
    """

    def __init__(
        self,
        name: str,
        words: Optional[Mapping[str, DictEntry]] = None,
        phrases: Optional[Mapping[str, DictEntry]] = None,
    ):
        self.name = name
        self._words: Dict[str, DictEntry] = {}
        self._morph: Dict[str, DictEntry] = {}

        for key, entry in (words or {}).items():
            lower = key.lower().strip()
            if not lower:
                continue
            self._words[lower] = entry
            self._morph.setdefault(morphological_key(lower), entry)

        # Silent-e twins never shadow a real key
        for lower, entry in self._words.items():
            for alternate in lookup_keys(lower)[1:]:
                self._morph.setdefault(alternate, entry)

        self._phrases: PhraseTrie = build_phrase_trie((phrases or {}).items())

    def __repr__(self) -> str:
        return f"DictionaryLayer({self.name!r}, words={len(self._words)}, phrases={len(self._phrases)})"

    @property
    def word_count(self) -> int:
        return len(self._words)

    @property
    def phrase_count(self) -> int:
        return len(self._phrases)

    @property
    def words(self) -> Dict[str, DictEntry]:
        return dict(self._words)

    @property
    def phrases(self) -> Dict[str, DictEntry]:
        return {key: self._phrases.get(key) for key in self._phrases.keys()}

    def match_phrase(self, tokens: Sequence[str], start: int) -> Tuple[Optional[DictEntry], int]:
        return self._phrases.longest_match(tokens, start)

    def lookup_word(self, word: str) -> Optional[DictEntry]:
        """Direct key lookup, then each morphological key (see lookup_keys)."""
        lower = word.lower()
        entry = self._words.get(lower)
        if entry is not None:
            return entry

        for key in lookup_keys(lower):
            entry = self._words.get(key)
            if entry is None:
                entry = self._morph.get(key)
            if entry is not None:
                return entry
        return None

    def to_json(self) -> Dict[str, Any]:
        return {
            'words': {k: v.to_json() for k, v in sorted(self._words.items())},
            'phrases': {k: v.to_json() for k, v in sorted(self.phrases.items())},
        }


# ============================================================================
# Parsing
# ============================================================================

def _parse_entry(key: str, raw: Any) -> DictEntry:
    if isinstance(raw, str):
        return DictEntry(alias=raw)
    if not isinstance(raw, dict) or not isinstance(raw.get('alias'), str):
        raise DictionaryError(f"Entry {key!r} needs a string 'alias'")

    confidence = raw.get('confidence', 1.0)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise DictionaryError(f"Entry {key!r} has a non-numeric confidence")
    return DictEntry(alias=raw['alias'], confidence=min(1.0, max(0.0, float(confidence))))


def parse_dictionary(doc: Any, name: str) -> DictionaryLayer:
    """
    Build a layer from a parsed JSON dictionary document.

    Entries may be {"alias": ..., "confidence": ...} objects or bare strings.

    Raises:
        DictionaryError: If the document does not follow the format
    """
    if not isinstance(doc, dict):
        raise DictionaryError("Dictionary must be a JSON object")

    sections: Dict[str, Dict[str, DictEntry]] = {}
    for section in ('words', 'phrases'):
        raw = doc.get(section, {})
        if not isinstance(raw, dict):
            raise DictionaryError(f"'{section}' must be an object")
        sections[section] = {key: _parse_entry(key, value) for key, value in raw.items()}

    return DictionaryLayer(name, sections['words'], sections['phrases'])


def read_dictionary_file(path: Path) -> Dict[str, Any]:
    """
    Read a dictionary document, returning an empty one if the file is missing.

    Raises:
        DictionaryError: If the file exists but is not valid JSON
    """
    if not path.exists():
        return {'words': {}, 'phrases': {}}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DictionaryError(f"Cannot read {path}: {e}") from e


def load_layer(name: str, path: Path) -> Optional[DictionaryLayer]:
    """
    Load one dictionary layer from disk.

    A missing file yields an empty layer; a malformed one is skipped.

    Returns:
        The layer, or None if it had to be skipped
    """
    try:
        layer = parse_dictionary(read_dictionary_file(Path(path)), name)
    except DictionaryError as e:
        logger.warning(f"Skipping dictionary layer {name} ({path}): {e}")
        return None

    logger.info(f"Loaded layer {name}: {layer.word_count} words, {layer.phrase_count} phrases")
    return layer


def load_builtin_layer() -> Optional[DictionaryLayer]:
    """Load the packaged default dictionary."""
    return load_layer(LayerName.BUILTIN.value, get_builtin_dictionary_path())


# ============================================================================
# Snapshot
# ============================================================================

@dataclass(frozen=True)
class DictionarySnapshot:
    """An immutable, priority-ordered view of the loaded layers."""
    layers: Tuple[DictionaryLayer, ...] = field(default_factory=tuple)

    def resolve_phrase(self, tokens: Sequence[str], start: int) -> Tuple[Optional[DictEntry], int]:
        """
        Longest phrase match at tokens[start].

        The first layer with any phrase match wins; layers are not compared
        by confidence or match length.
        """
        for layer in self.layers:
            entry, count = layer.match_phrase(tokens, start)
            if entry is not None:
                return entry, count
        return None, 0

    def resolve_word(self, word: str) -> Optional[DictEntry]:
        for layer in self.layers:
            entry = layer.lookup_word(word)
            if entry is not None:
                return entry
        return None

    def layer(self, name: str) -> Optional[DictionaryLayer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None


def _priority(layer: DictionaryLayer) -> int:
    try:
        return LAYER_PRIORITY.index(LayerName(layer.name))
    except ValueError:
        return len(LAYER_PRIORITY)


# ============================================================================
# Layered Dictionary
# ============================================================================

class LayeredDictionary:
    """
    The dictionary the pipeline queries.

    Holds the current DictionarySnapshot. All reads go through the snapshot
    taken at call time; load() and replace_layer() swap in a new one.
    """

    def __init__(self, layers: Optional[Iterable[DictionaryLayer]] = None):
        self._snapshot = DictionarySnapshot()
        self._swap_lock = threading.Lock()
        if layers is not None:
            self.load(layers)

    @property
    def snapshot(self) -> DictionarySnapshot:
        return self._snapshot

    @property
    def layers(self) -> Tuple[DictionaryLayer, ...]:
        return self._snapshot.layers

    def load(self, layers: Iterable[DictionaryLayer]) -> None:
        """
        Replace all state with the given layers.

        Args:
            layers: Layers in priority order, highest first
        """
        self._snapshot = DictionarySnapshot(tuple(layers))
        logger.debug(f"Dictionary snapshot: {[layer.name for layer in self._snapshot.layers]}")

    def load_files(self, specs: Iterable[Tuple[str, Path]], include_builtin: bool = True) -> None:
        """
        Load layers from files; unreadable files are skipped.

        Args:
            specs: (layer name, path) pairs in priority order, highest first
            include_builtin: Append the packaged default layer last
        """
        layers: List[DictionaryLayer] = []
        for name, path in specs:
            layer = load_layer(name, path)
            if layer is not None:
                layers.append(layer)

        if include_builtin:
            builtin = load_builtin_layer()
            if builtin is not None:
                layers.append(builtin)

        self.load(layers)

    def replace_layer(self, layer: DictionaryLayer) -> None:
        """Swap in a new version of the layer with the same name (or insert it)."""
        with self._swap_lock:
            kept = [l for l in self._snapshot.layers if l.name != layer.name]
            kept.append(layer)
            kept.sort(key=_priority)
            self._snapshot = DictionarySnapshot(tuple(kept))
        logger.debug(f"Replaced layer {layer.name}")

    def with_overlay(self, overlay: DictionaryLayer) -> 'LayeredDictionary':
        """
        Return a copy with an extra lowest-priority layer.

        Used to apply oracle answers within the same pass without touching
        the shared dictionary.
        """
        copy = LayeredDictionary()
        copy.load(self._snapshot.layers + (overlay,))
        return copy

    def resolve_phrase(self, tokens: Sequence[str], start: int) -> Tuple[Optional[DictEntry], int]:
        """
        Longest phrase match for tokens[start:], scanning layers by priority.

        Returns:
            (entry, matched_count), or (None, 0)
        """
        return self._snapshot.resolve_phrase(tokens, start)

    def resolve_word(self, word: str) -> Optional[DictEntry]:
        """Direct then morphological lookup, scanning layers by priority."""
        return self._snapshot.resolve_word(word)

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {
            layer.name: {'words': layer.word_count, 'phrases': layer.phrase_count}
            for layer in self._snapshot.layers
        }
