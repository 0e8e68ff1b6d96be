"""Tests for name segmentation."""

import pytest

from alias_split.segmenter import (
    TokenKind,
    detect_naming_style,
    rebuild,
    segment,
    split_camel,
    split_extension,
    split_upper_run,
)


ROUND_TRIP_NAMES = [
    "analyze_element_hierarchy.cjs",
    "getUserById.ts",
    "APIController.java",
    "release-v2-2024-12-31.md",
    "file-19-test.txt",
    "get.user.info.py",
    "__init__.py",
    ".gitignore",
    "notes.",
    "README",
    "HTMLDOMParser.js",
    "my  file -- name.TSX",
    "分析_元素_层级.cjs",
    "...",
    "a",
    "x1y2Z3",
]


@pytest.mark.parametrize("name", ROUND_TRIP_NAMES)
def test_round_trip(name):
    """Rebuilding a segmentation reproduces the name byte for byte."""
    seg = segment(name)
    assert len(seg.delimiters) == len(seg.tokens)
    assert rebuild(seg) == name
    assert seg.rebuild() == name


def test_snake_case_with_extension():
    """Separator runs become delimiters and the extension is split off."""
    seg = segment("analyze_element_hierarchy.cjs")
    assert [t.raw for t in seg.tokens] == ["analyze", "element", "hierarchy"]
    assert seg.delimiters == ["_", "_", ""]
    assert seg.extension == "cjs"


def test_camel_case_soft_breaks():
    """camelCase boundaries split tokens with empty delimiters."""
    seg = segment("getUserById")
    assert [t.raw for t in seg.tokens] == ["get", "User", "By", "Id"]
    assert seg.delimiters == ["", "", "", ""]
    assert seg.extension == ""


def test_acronym_before_word():
    """An upper-case run followed by a capitalized word splits before the word."""
    seg = segment("APIController")
    assert [t.raw for t in seg.tokens] == ["API", "Controller"]
    assert seg.tokens[0].kind is TokenKind.ACRONYM
    assert seg.tokens[1].kind is TokenKind.WORD


def test_token_kinds():
    """Numerals are digit-only, acronyms are 2+ capitals."""
    seg = segment("file-19-test-UI-v2")
    kinds = [t.kind for t in seg.tokens]
    assert kinds == [
        TokenKind.WORD, TokenKind.NUMERAL, TokenKind.WORD, TokenKind.ACRONYM, TokenKind.WORD,
    ]
    assert seg.tokens[3].normalized == "ui"


def test_extension_lowercased_but_raw_kept():
    """The extension is lowercased; rebuild still uses the original case."""
    seg = segment("Component.TSX")
    assert seg.extension == "tsx"
    assert seg.raw_extension == "TSX"
    assert seg.rebuild() == "Component.TSX"


def test_leading_dot_is_not_extension():
    """A dot at position 0 does not start an extension."""
    assert split_extension(".gitignore") == (".gitignore", "")
    seg = segment(".gitignore")
    assert seg.extension == ""
    assert seg.leading == "."
    assert [t.raw for t in seg.tokens] == ["gitignore"]


def test_trailing_dot_is_not_extension():
    assert split_extension("notes.") == ("notes.", "")


def test_empty_input():
    """Empty input gives no tokens."""
    seg = segment("")
    assert seg.tokens == []
    assert seg.delimiters == []
    assert seg.extension == ""


def test_no_letters_only_extension():
    """A name without letters or digits keeps only its extension."""
    seg = segment("---.md")
    assert seg.tokens == []
    assert seg.extension == "md"
    assert seg.rebuild() == "---.md"


def test_cjk_is_separator_text():
    """Non-ASCII text is carried as delimiter text."""
    seg = segment("get.用户.info.py")
    assert [t.raw for t in seg.tokens] == ["get", "info"]
    assert seg.delimiters == [".用户.", ""]


def test_upper_run_two_letter_groups():
    """4+ capitals split into 2-letter groups; a trailing letter joins the last group."""
    assert split_upper_run("UIAPI") == ["UI", "API"]
    assert split_upper_run("HTMLDOM") == ["HT", "ML", "DOM"]
    assert split_upper_run("ABCD") == ["AB", "CD"]
    assert split_camel("HTMLDOMParser") == ["HT", "ML", "DOM", "Parser"]


def test_digits_stay_with_letters():
    """Lower-case letters followed by digits are one token."""
    seg = segment("v2")
    assert [t.raw for t in seg.tokens] == ["v2"]
    assert seg.tokens[0].kind is TokenKind.WORD


@pytest.mark.parametrize("name,style", [
    ("getUserById.ts", "camelCase"),
    ("StepCard.tsx", "PascalCase"),
    ("MAX_SIZE", "UPPER_CASE"),
    ("user-profile.vue", "kebab-case"),
    ("user_profile.py", "snake_case"),
    ("user.profile.test.ts", "dot.case"),
    ("user-profile_v2", "mixed"),
])
def test_detect_naming_style(name, style):
    assert detect_naming_style(name) == style
