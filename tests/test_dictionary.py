"""Tests for the phrase trie and the layered dictionary."""

import json

import pytest

from alias_split.dictionary import (
    DictEntry,
    LayeredDictionary,
    get_builtin_dictionary_path,
    load_layer,
    parse_dictionary,
)
from alias_split.errors import DictionaryError
from alias_split.trie import PhraseTrie, build_phrase_trie

from conftest import make_layer, write_dict


# =============================================================================
# Phrase trie
# =============================================================================

def test_trie_longest_match():
    """The longest phrase rooted at the cursor wins."""
    trie = PhraseTrie({"element": "X", "element hierarchy": "Y"})
    assert trie.longest_match(["element", "hierarchy"], 0) == ("Y", 2)
    assert trie.longest_match(["element", "tree"], 0) == ("X", 1)


def test_trie_respects_token_boundaries():
    """A stored phrase must end on a token boundary."""
    trie = PhraseTrie({"element": "X"})
    assert trie.longest_match(["elementary"], 0) == (None, 0)


def test_trie_cursor_and_bounds():
    trie = PhraseTrie({"user profile": "P"})
    assert trie.longest_match(["get", "user", "profile"], 1) == ("P", 2)
    assert trie.longest_match(["get"], 5) == (None, 0)
    assert PhraseTrie({}).longest_match(["a"], 0) == (None, 0)


def test_build_phrase_trie_normalizes_keys():
    trie = build_phrase_trie([("Element   Hierarchy", "Y"), ("  ", "ignored")])
    assert len(trie) == 1
    assert "element hierarchy" in trie
    assert trie.keys("elem") == ["element hierarchy"]


# =============================================================================
# Parsing and loading
# =============================================================================

def test_parse_dictionary_entries():
    """Objects and bare strings are both accepted; confidence is clamped."""
    layer = parse_dictionary({
        "words": {"user": {"alias": "用户", "confidence": 1.7}, "info": "信息"},
        "phrases": {"user profile": {"alias": "用户档案"}},
    }, "builtin")
    assert layer.lookup_word("user") == DictEntry("用户", 1.0)
    assert layer.lookup_word("info") == DictEntry("信息", 1.0)
    assert layer.phrase_count == 1


@pytest.mark.parametrize("doc", [
    [],
    {"words": []},
    {"words": {"user": {"confidence": 1.0}}},
    {"words": {"user": {"alias": "用户", "confidence": "high"}}},
    {"words": {"user": 3}},
])
def test_parse_dictionary_rejects_bad_documents(doc):
    with pytest.raises(DictionaryError):
        parse_dictionary(doc, "broken")


def test_load_layer_missing_file_is_empty(tmp_path):
    layer = load_layer("project-learned", tmp_path / "missing.json")
    assert layer is not None
    assert layer.word_count == 0


def test_load_layer_bad_file_is_skipped(tmp_path, caplog):
    """A malformed file degrades to skipping that layer."""
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_layer("project-fixed", path) is None
    assert "Skipping dictionary layer" in caplog.text


def test_load_files_skips_bad_layer_keeps_others(tmp_path):
    good = write_dict(tmp_path / "good.json", words={"user": "用户"})
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"words": []}), encoding="utf-8")

    dictionary = LayeredDictionary()
    dictionary.load_files([("project-fixed", bad), ("project-learned", good)], include_builtin=False)
    assert [layer.name for layer in dictionary.layers] == ["project-learned"]
    assert dictionary.resolve_word("user").alias == "用户"


def test_builtin_dictionary_loads():
    """The packaged dictionary parses and has entries."""
    layer = load_layer("builtin", get_builtin_dictionary_path())
    assert layer is not None
    assert layer.word_count > 50
    assert layer.lookup_word("user").alias == "用户"


# =============================================================================
# Layered lookups
# =============================================================================

def test_longest_phrase_precedence():
    """Phrase "element hierarchy" beats word "element"."""
    dictionary = LayeredDictionary([
        make_layer("builtin", phrases={"element": "X", "element hierarchy": "Y"}),
    ])
    entry, count = dictionary.resolve_phrase(["element", "hierarchy"], 0)
    assert entry.alias == "Y"
    assert count == 2


def test_first_layer_with_phrase_wins():
    """Layers are scanned by priority, not by match length."""
    dictionary = LayeredDictionary([
        make_layer("project-fixed", phrases={"element": "高"}),
        make_layer("builtin", phrases={"element hierarchy": "低"}),
    ])
    entry, count = dictionary.resolve_phrase(["element", "hierarchy"], 0)
    assert entry.alias == "高"
    assert count == 1


def test_word_priority_order():
    dictionary = LayeredDictionary([
        make_layer("project-fixed", words={"user": "使用者"}),
        make_layer("builtin", words={"user": "用户", "info": "信息"}),
    ])
    assert dictionary.resolve_word("user").alias == "使用者"
    assert dictionary.resolve_word("info").alias == "信息"
    assert dictionary.resolve_word("nothing") is None


def test_morphological_fallback():
    """One stored form covers its inflections."""
    dictionary = LayeredDictionary([make_layer("builtin", words={"element": "元素", "analyze": "分析"})])
    assert dictionary.resolve_word("elements").alias == "元素"
    assert dictionary.resolve_word("analyzing").alias == "分析"


def test_morphological_index_of_stored_inflection():
    """A stored plural also answers for its singular."""
    dictionary = LayeredDictionary([make_layer("builtin", words={"nodes": "节点们"})])
    assert dictionary.resolve_word("node").alias == "节点们"


@pytest.mark.parametrize("word,alias", [
    ("databases", "数据库"),
    ("responses", "响应"),
    ("caches", "缓存"),
    ("caching", "缓存"),
    ("writing", "写入"),
])
def test_silent_e_inflections_resolve(word, alias):
    words = {"database": "数据库", "response": "响应", "cache": "缓存", "write": "写入"}
    dictionary = LayeredDictionary([make_layer("builtin", words=words)])
    assert dictionary.resolve_word(word).alias == alias


def test_stored_silent_e_inflection_answers_for_base():
    dictionary = LayeredDictionary([make_layer("builtin", words={"databases": "数据库们"})])
    assert dictionary.resolve_word("database").alias == "数据库们"


def test_load_is_idempotent_and_replaces_state():
    dictionary = LayeredDictionary()
    layers = [make_layer("builtin", words={"user": "用户"})]
    dictionary.load(layers)
    dictionary.load(layers)
    assert len(dictionary.layers) == 1

    dictionary.load([make_layer("builtin", words={"info": "信息"})])
    assert dictionary.resolve_word("user") is None


def test_replace_layer_keeps_priority_order():
    dictionary = LayeredDictionary([
        make_layer("project-fixed", words={"a1": "甲"}),
        make_layer("builtin", words={"user": "用户"}),
    ])
    dictionary.replace_layer(make_layer("project-learned", words={"user": "学到的"}))
    assert [layer.name for layer in dictionary.layers] == ["project-fixed", "project-learned", "builtin"]
    assert dictionary.resolve_word("user").alias == "学到的"


def test_snapshot_is_not_mutated_by_swap():
    """A snapshot taken before a swap keeps answering from the old state."""
    dictionary = LayeredDictionary([make_layer("project-learned", words={"user": "旧"})])
    before = dictionary.snapshot
    dictionary.replace_layer(make_layer("project-learned", words={"user": "新"}))
    assert before.resolve_word("user").alias == "旧"
    assert dictionary.resolve_word("user").alias == "新"


def test_with_overlay_is_lowest_priority_copy():
    dictionary = LayeredDictionary([make_layer("builtin", words={"user": "用户"})])
    view = dictionary.with_overlay(make_layer("overlay", words={"user": "覆盖", "xml": "标记"}))
    assert view.resolve_word("user").alias == "用户"
    assert view.resolve_word("xml").alias == "标记"
    assert dictionary.resolve_word("xml") is None


def test_stats():
    dictionary = LayeredDictionary([make_layer("builtin", words={"user": "用户"}, phrases={"a b": "甲乙"})])
    assert dictionary.stats() == {"builtin": {"words": 1, "phrases": 1}}
