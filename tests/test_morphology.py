"""Tests for morphological keys."""

import pytest

from alias_split.morphology import lookup_keys, morphological_key


@pytest.mark.parametrize("word,key", [
    ("elements", "element"),
    ("Elements", "element"),
    ("nodes", "node"),
    ("entities", "entity"),
    ("boxes", "box"),
    ("classes", "class"),
    ("matches", "match"),
    ("analyzing", "analyze"),
    ("running", "run"),
    ("installing", "install"),
    ("walked", "walk"),
    ("stopped", "stop"),
    ("parsed", "parse"),
])
def test_inflections(word, key):
    assert morphological_key(word) == key


@pytest.mark.parametrize("word", [
    "status", "analysis", "class", "process", "string", "need", "speed",
])
def test_invariant_words(word):
    """Words that only look inflected are returned as-is."""
    assert morphological_key(word) == word


def test_short_words_untouched():
    assert morphological_key("bus") == "bus"
    assert morphological_key("is") == "is"
    assert morphological_key("red") == "red"


def test_non_alpha_untouched():
    assert morphological_key("v2s") == "v2s"
    assert morphological_key("19") == "19"


def test_inflections_share_key():
    """The stored form and its inflections meet on one key."""
    assert morphological_key("analyze") == morphological_key("analyzing")
    assert morphological_key("element") == morphological_key("elements")


@pytest.mark.parametrize("word,keys", [
    ("databases", ("databas", "database")),
    ("responses", ("respons", "response")),
    ("caching", ("cach", "cache")),
    ("analyzing", ("analyze",)),
    ("database", ("database",)),
])
def test_lookup_keys_add_silent_e(word, keys):
    assert lookup_keys(word) == keys
