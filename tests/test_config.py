"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from alias_split.config import (
    AliasConfig,
    CustomRule,
    ExtensionMode,
    NumeralMode,
    load_config,
    oracle_settings_from_env,
)
from alias_split.errors import ConfigError


def test_defaults():
    config = AliasConfig()
    assert config.strategy == "literal"
    assert config.numeral_mode is NumeralMode.KEEP
    assert config.literal_extension_mode is ExtensionMode.KEEP
    assert config.literal_joiner == ""
    assert "the" in config.stopwords
    assert config.literal_ext_suffixes["cjs"] == "脚本"


def test_from_dict_coerces_values(caplog):
    config = AliasConfig.from_dict({
        "numeral_mode": "localized",
        "literal_extension_mode": "suffix",
        "user_whitelist": ["XML", "Foo"],
        "acronym_allowlist": ["api"],
        "custom_rules": [{"pattern": "^tmp", "reason": "scratch"}],
        "natural_ext_suffixes": {"PY": "脚本"},
        "ledger_path": "ledger.json",
        "no_such_key": 1,
    })
    assert config.numeral_mode is NumeralMode.LOCALIZED
    assert config.literal_extension_mode is ExtensionMode.SUFFIX
    assert config.user_whitelist == frozenset({"xml", "foo"})
    assert config.acronym_allowlist == frozenset({"API"})
    assert config.custom_rules == (CustomRule("^tmp", "scratch"),)
    assert config.natural_ext_suffixes == {"py": "脚本"}
    assert config.ledger_path == Path("ledger.json")
    assert "Ignoring unknown config key: no_such_key" in caplog.text


@pytest.mark.parametrize("data", [
    {"strategy": "poetic"},
    {"numeral_mode": "hex"},
    {"literal_extension_mode": "rename"},
    {"min_oracle_confidence": 1.5},
    {"allowed_coverage_misses": -1},
    {"oracle_timeout": 0},
    {"custom_rules": [{"pattern": "^tmp"}]},
])
def test_invalid_values_raise(data):
    with pytest.raises(ConfigError):
        AliasConfig.from_dict(data)


def test_with_overrides_returns_copy():
    config = AliasConfig()
    natural = config.with_overrides(strategy="natural", numeral_mode="roman")
    assert natural.strategy == "natural"
    assert natural.numeral_mode is NumeralMode.ROMAN
    assert config.strategy == "literal"


@pytest.mark.parametrize("requested,expected", [(0, 1), (3, 3), (50, 5)])
def test_batch_concurrency_clamped(requested, expected):
    assert AliasConfig(oracle_concurrency=requested).batch_concurrency == expected


def test_load_config_resolves_relative_paths(tmp_path):
    path = tmp_path / "alias-split.json"
    path.write_text(json.dumps({
        "strategy": "natural",
        "project_learned_path": "dict/learned.json",
        "global_learned_path": str(tmp_path / "global.json"),
    }), encoding="utf-8")

    config = load_config(path)
    assert config.strategy == "natural"
    assert config.project_learned_path == tmp_path / "dict" / "learned.json"
    assert config.global_learned_path == tmp_path / "global.json"


def test_load_config_none_is_default():
    assert load_config(None) == AliasConfig()


@pytest.mark.parametrize("content", ["{oops", "[1, 2]"])
def test_load_config_bad_file(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_oracle_settings_from_env(monkeypatch):
    monkeypatch.delenv("ALIAS_SPLIT_ORACLE_URL", raising=False)
    assert oracle_settings_from_env() is None

    monkeypatch.setenv("ALIAS_SPLIT_ORACLE_URL", "https://llm.example.com/v1")
    monkeypatch.setenv("ALIAS_SPLIT_ORACLE_KEY", "sk-test")
    monkeypatch.delenv("ALIAS_SPLIT_ORACLE_MODEL", raising=False)
    assert oracle_settings_from_env() == {
        "base_url": "https://llm.example.com/v1",
        "api_key": "sk-test",
        "model": "gpt-4o-mini",
    }
