"""Tests for numeral rendering."""

import pytest

from alias_split.config import NumeralMode
from alias_split.numerals import NumeralRenderer, is_numeral, to_chinese_number, to_roman


@pytest.mark.parametrize("n,expected", [
    (0, "零"),
    (1, "一"),
    (10, "十"),
    (11, "十一"),
    (20, "二十"),
    (101, "一百零一"),
    (110, "一百一十"),
    (1001, "一千零一"),
    (2024, "二千零二十四"),
    (10000, "一万"),
    (10010, "一万零一十"),
    (100000000, "一亿"),
    (100010000, "一亿零一万"),
])
def test_chinese_numbers(n, expected):
    assert to_chinese_number(n) == expected


def test_chinese_number_out_of_range():
    assert to_chinese_number(-1) is None
    assert to_chinese_number(10 ** 16) is None


@pytest.mark.parametrize("n,expected", [
    (1, "I"), (4, "IV"), (9, "IX"), (14, "XIV"), (40, "XL"),
    (1994, "MCMXCIV"), (3999, "MMMCMXCIX"),
])
def test_roman(n, expected):
    assert to_roman(n) == expected


def test_roman_out_of_range():
    assert to_roman(0) is None
    assert to_roman(4000) is None


def test_keep_mode_returns_digits():
    """keep leaves numerals untouched."""
    renderer = NumeralRenderer(NumeralMode.KEEP)
    assert renderer.render("19") == "19"
    assert not renderer.rewrites


def test_localized_mode():
    renderer = NumeralRenderer(NumeralMode.LOCALIZED)
    assert renderer.render("3") == "三"
    assert renderer.rewrites


def test_roman_mode_unrepresentable_unchanged():
    """Numbers the policy cannot express come back as digits."""
    renderer = NumeralRenderer("roman")
    assert renderer.render("12") == "XII"
    assert renderer.render("0") == "0"
    assert renderer.render("5000") == "5000"


def test_non_numeral_input_unchanged():
    renderer = NumeralRenderer(NumeralMode.LOCALIZED)
    assert renderer.render("v2") == "v2"
    assert renderer.render("") == ""


def test_is_numeral():
    assert is_numeral("2024")
    assert not is_numeral("v2")
    assert not is_numeral("")
    assert not is_numeral("²")
