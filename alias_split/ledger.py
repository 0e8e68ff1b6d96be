"""
Usage ledger for the cost guard.

Aggregates GuardStats across calls: cumulative totals (optionally persisted
to a JSON file) and counters for the current session only.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from alias_split.guard import GuardStats
from alias_split.storage import write_json_atomic

logger = logging.getLogger(__name__)


def _empty_session() -> Dict[str, Any]:
    return {'dropped': 0, 'kept': 0, 'reasons': {}}


class UsageLedger:
    """
    Cumulative guard statistics.

    Attributes:
        total_dropped: Tokens dropped since the ledger was started
        total_kept: Tokens forwarded to the oracle since then
        reason_distribution: reason code -> cumulative count
        start_time: Epoch seconds when counting began
        last_update_time: Epoch seconds of the last record()
        session: Counters since this process loaded the ledger
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._reset_state()

    def _reset_state(self) -> None:
        now = time.time()
        self.total_dropped = 0
        self.total_kept = 0
        self.reason_distribution: Dict[str, int] = {}
        self.start_time = now
        self.last_update_time = now
        self.session = _empty_session()

    # ------------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------------

    def record(self, stats: GuardStats) -> None:
        """Add one filter_unknown result to the cumulative and session counters."""
        with self._lock:
            self.total_dropped += stats.dropped
            self.total_kept += stats.kept
            self.session['dropped'] += stats.dropped
            self.session['kept'] += stats.kept
            for reason, count in stats.reasons.items():
                self.reason_distribution[reason] = self.reason_distribution.get(reason, 0) + count
                self.session['reasons'][reason] = self.session['reasons'].get(reason, 0) + count
            self.last_update_time = time.time()

    def savings_rate(self) -> float:
        """Percentage of tokens dropped before reaching the oracle."""
        with self._lock:
            total = self.total_dropped + self.total_kept
            if total == 0:
                return 0.0
            return self.total_dropped / total * 100

    def session_savings_rate(self) -> float:
        with self._lock:
            total = self.session['dropped'] + self.session['kept']
            if total == 0:
                return 0.0
            return self.session['dropped'] / total * 100

    def top_reasons(self, limit: int = 5) -> List[Tuple[str, int, float]]:
        """
        Most frequent drop reasons.

        Returns:
            List of (reason, count, percentage of all drops)
        """
        with self._lock:
            total = self.total_dropped
            ordered = sorted(self.reason_distribution.items(), key=lambda kv: (-kv[1], kv[0]))
            return [
                (reason, count, count / total * 100 if total else 0.0)
                for reason, count in ordered[:limit]
            ]

    def reset_session(self) -> None:
        with self._lock:
            self.session = _empty_session()

    # ------------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'total_dropped': self.total_dropped,
                'total_kept': self.total_kept,
                'reason_distribution': dict(self.reason_distribution),
                'start_time': self.start_time,
                'last_update_time': self.last_update_time,
            }

    def load(self) -> None:
        """
        Load cumulative counters from the ledger file.

        A missing file leaves the counters at zero; an unreadable one is
        logged and ignored. Session counters always start empty.
        """
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Cannot read usage ledger {self.path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Cannot read usage ledger {self.path}: expected an object")
            return
        try:
            total_dropped = int(data.get('total_dropped', 0))
            total_kept = int(data.get('total_kept', 0))
            reasons = {
                str(k): int(v) for k, v in dict(data.get('reason_distribution', {})).items()
            }
            start_time = float(data.get('start_time', self.start_time))
            last_update_time = float(data.get('last_update_time', self.last_update_time))
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Cannot read usage ledger {self.path}: {e}")
            return

        with self._lock:
            self.total_dropped = total_dropped
            self.total_kept = total_kept
            self.reason_distribution = reasons
            self.start_time = start_time
            self.last_update_time = last_update_time
            self.session = _empty_session()

    def save(self) -> None:
        """Write cumulative counters to the ledger file (no-op without a path)."""
        if self.path is None:
            return
        try:
            write_json_atomic(self.path, self.to_json())
        except OSError as e:
            logger.warning(f"Cannot write usage ledger {self.path}: {e}")

    def reset(self) -> None:
        """Clear all counters and persist the empty ledger."""
        with self._lock:
            self._reset_state()
        self.save()
