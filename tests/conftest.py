"""Shared test fixtures for alias-split tests."""

import json

import pytest

from alias_split.config import AliasConfig
from alias_split.dictionary import DictEntry, DictionaryLayer, LayeredDictionary
from alias_split.ledger import UsageLedger
from alias_split.pipeline import AliasPipeline


def make_layer(name, words=None, phrases=None):
    """Build a layer from plain key -> alias mappings."""
    return DictionaryLayer(
        name,
        {k: DictEntry(v) for k, v in (words or {}).items()},
        {k: DictEntry(v) for k, v in (phrases or {}).items()},
    )


def make_dictionary(words=None, phrases=None, name="project-fixed"):
    return LayeredDictionary([make_layer(name, words, phrases)])


def write_dict(path, words=None, phrases=None):
    doc = {
        "words": {k: {"alias": v} for k, v in (words or {}).items()},
        "phrases": {k: {"alias": v} for k, v in (phrases or {}).items()},
    }
    path.write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def config():
    """Default config without the packaged dictionary."""
    return AliasConfig(use_builtin_dictionary=False)


@pytest.fixture
def scenario_dictionary():
    """Entries used by the worked examples."""
    return make_dictionary(
        words={
            "analyze": "分析",
            "hierarchy": "层级",
            "simple": "简版",
            "user": "用户",
            "element": "元素",
        },
        phrases={"element hierarchy": "元素_层级"},
    )


@pytest.fixture
def pipeline_factory(config):
    """Build an offline pipeline around a given dictionary."""

    def _factory(dictionary, oracle=None, cfg=None, writeback=None):
        return AliasPipeline(
            config=cfg or config,
            dictionary=dictionary,
            oracle=oracle,
            ledger=UsageLedger(),
            writeback=writeback,
        )

    return _factory
