"""
Learning writeback for alias-split.

Persists accepted oracle answers into the project-learned dictionary file
and swaps the refreshed layer into the live dictionary, so the next lookup
for the same token needs no oracle call.

The file is only ever appended to: an existing key keeps its entry unless
the caller explicitly forces a re-ask. The read-modify-write runs under a
process-wide lock per file path; the lock is never held while waiting on
the oracle.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional

from alias_split.config import AliasConfig
from alias_split.dictionary import (
    DictEntry,
    LayeredDictionary,
    LayerName,
    parse_dictionary,
    read_dictionary_file,
)
from alias_split.errors import DictionaryError
from alias_split.numerals import is_numeral
from alias_split.oracle import OracleAnswer
from alias_split.storage import write_json_atomic

logger = logging.getLogger(__name__)

_file_locks: Dict[Path, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """One lock per resolved file path, shared by all writers in the process."""
    key = path.resolve()
    with _file_locks_guard:
        if key not in _file_locks:
            _file_locks[key] = threading.Lock()
        return _file_locks[key]


class LearningWriteback:
    """
    Appends oracle answers to the project-learned layer.

    Args:
        path: Project-learned dictionary file, or None to learn in memory only
        dictionary: Live dictionary whose project-learned layer is replaced
        config: Key pattern and confidence threshold
    """

    def __init__(self, path: Optional[Path], dictionary: LayeredDictionary, config: AliasConfig):
        self.path = Path(path) if path is not None else None
        self.dictionary = dictionary
        self.config = config
        self._key_pattern = re.compile(config.learn_key_pattern)
        self._memory_lock = threading.Lock()
        self._memory_doc: Dict[str, Dict[str, dict]] = {'words': {}, 'phrases': {}}

    def validate_key(self, key: str) -> Optional[str]:
        """
        Normalize a learned key, or reject it.

        Returns:
            The lower-cased, whitespace-collapsed key, or None if rejected
        """
        normalized = ' '.join(key.lower().split())
        if not normalized or is_numeral(normalized.replace(' ', '')):
            return None
        if not self._key_pattern.match(normalized):
            return None
        return normalized

    def learn(self, answers: Mapping[str, OracleAnswer], force: bool = False) -> Dict[str, DictEntry]:
        """
        Persist answers and refresh the project-learned layer.

        Args:
            answers: Normalized oracle answers
            force: Overwrite keys that are already learned

        Returns:
            key -> entry for every answer accepted (new or overwritten)
        """
        accepted: Dict[str, DictEntry] = {}
        rejected = []
        for key, answer in answers.items():
            normalized = self.validate_key(key)
            if normalized is None:
                rejected.append(key)
                continue
            if answer.confidence < self.config.min_oracle_confidence:
                continue
            accepted[normalized] = DictEntry(answer.alias, answer.confidence)

        if rejected:
            logger.warning(f"Rejected learned keys: {rejected}")
        if not accepted:
            return {}

        if self.path is None:
            with self._memory_lock:
                self._merge(self._memory_doc, accepted, force)
                doc = {section: dict(entries) for section, entries in self._memory_doc.items()}
        else:
            doc = self._persist(accepted, force)
            if doc is None:
                return accepted

        try:
            layer = parse_dictionary(doc, LayerName.PROJECT_LEARNED.value)
        except DictionaryError as e:
            logger.error(f"Learned dictionary is invalid, layer not refreshed: {e}")
            return accepted

        self.dictionary.replace_layer(layer)
        return accepted

    def _persist(self, accepted: Dict[str, DictEntry], force: bool) -> Optional[dict]:
        """Read-modify-write the learned file under the file lock."""
        with _lock_for(self.path):
            try:
                doc = read_dictionary_file(self.path)
                parse_dictionary(doc, LayerName.PROJECT_LEARNED.value)
            except DictionaryError as e:
                logger.error(f"Not learning into corrupt file {self.path}: {e}")
                return None

            added = self._merge(doc, accepted, force)
            if not added:
                return doc

            try:
                write_json_atomic(self.path, doc)
            except OSError as e:
                logger.error(f"Cannot write learned dictionary {self.path}: {e}")
                return None

        logger.info(f"Learned {added} entries into {self.path}")
        return doc

    @staticmethod
    def _merge(doc: dict, accepted: Dict[str, DictEntry], force: bool) -> int:
        added = 0
        for key, entry in accepted.items():
            section = 'phrases' if ' ' in key else 'words'
            entries = doc.setdefault(section, {})
            if key in entries and not force:
                continue
            entries[key] = entry.to_json()
            added += 1
        return added
