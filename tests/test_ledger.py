"""Tests for the guard usage ledger."""

import json

import pytest

from alias_split.config import AliasConfig
from alias_split.guard import GuardStats
from alias_split.ledger import UsageLedger
from alias_split.pipeline import AliasPipeline


def stats(kept, dropped, **reasons):
    return GuardStats(total=kept + dropped, kept=kept, dropped=dropped, reasons=dict(reasons))


def test_record_and_rates():
    ledger = UsageLedger()
    ledger.record(stats(1, 3, numeric=2, version=1))
    assert ledger.total_kept == 1
    assert ledger.total_dropped == 3
    assert ledger.savings_rate() == 75.0
    assert ledger.session_savings_rate() == 75.0


def test_empty_rates_are_zero():
    ledger = UsageLedger()
    assert ledger.savings_rate() == 0.0
    assert ledger.session_savings_rate() == 0.0


def test_top_reasons():
    ledger = UsageLedger()
    ledger.record(stats(0, 4, numeric=3, hash=1))
    assert ledger.top_reasons(1) == [("numeric", 3, 75.0)]


def test_save_and_load_round_trip(tmp_path):
    """Cumulative counters persist; session counters start fresh."""
    path = tmp_path / "ledger.json"
    ledger = UsageLedger(path)
    ledger.record(stats(2, 2, stopword=2))
    ledger.save()

    assert not (tmp_path / "ledger.json.tmp").exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["total_dropped"] == 2

    reloaded = UsageLedger(path)
    reloaded.load()
    assert reloaded.total_kept == 2
    assert reloaded.total_dropped == 2
    assert reloaded.reason_distribution == {"stopword": 2}
    assert reloaded.session == {"dropped": 0, "kept": 0, "reasons": {}}


def test_load_corrupt_file_keeps_zero(tmp_path, caplog):
    path = tmp_path / "ledger.json"
    path.write_text("garbage", encoding="utf-8")
    ledger = UsageLedger(path)
    ledger.load()
    assert ledger.total_dropped == 0
    assert "Cannot read usage ledger" in caplog.text


@pytest.mark.parametrize("content", [
    "[1, 2]",
    '"ledger"',
    '{"total_dropped": "lots"}',
    '{"total_kept": null}',
    '{"reason_distribution": [1, 2]}',
])
def test_load_wrong_shape_keeps_zero(tmp_path, caplog, content):
    path = tmp_path / "ledger.json"
    path.write_text(content, encoding="utf-8")
    ledger = UsageLedger(path)
    ledger.load()
    assert ledger.total_dropped == 0
    assert ledger.total_kept == 0
    assert ledger.reason_distribution == {}
    assert "Cannot read usage ledger" in caplog.text


def test_pipeline_starts_with_wrong_shape_ledger(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("[1, 2]", encoding="utf-8")
    pipeline = AliasPipeline(config=AliasConfig(use_builtin_dictionary=False, ledger_path=path))
    assert pipeline.ledger.total_dropped == 0


def test_reset_clears_and_persists(tmp_path):
    path = tmp_path / "ledger.json"
    ledger = UsageLedger(path)
    ledger.record(stats(1, 1, numeric=1))
    ledger.reset()
    assert ledger.total_dropped == 0
    assert json.loads(path.read_text(encoding="utf-8"))["reason_distribution"] == {}


def test_reset_session_only():
    ledger = UsageLedger()
    ledger.record(stats(1, 1, numeric=1))
    ledger.reset_session()
    assert ledger.session_savings_rate() == 0.0
    assert ledger.savings_rate() == 50.0


def test_save_without_path_is_noop():
    UsageLedger().save()
