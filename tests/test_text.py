import pytest

from pivot.utils.text import differs_by_one_letter, is_alpha_word, normalize_word


@pytest.mark.parametrize("raw", ["  Gold ", "GOLD", "gold", "\tGiLdEd\n", "", "two words"])
def test_normalize_word_is_idempotent(raw):
    once = normalize_word(raw)
    assert normalize_word(once) == once


def test_normalize_word_trims_and_lowercases():
    assert normalize_word("  CoLd  ") == "cold"


@pytest.mark.parametrize("word,expected", [
    ("cold", True),
    ("", False),
    ("ice cream", False),
    ("co-op", False),
    ("r2d2", False),
    ("Cold", False),
    ("café", False),
])
def test_is_alpha_word(word, expected):
    assert is_alpha_word(word) is expected


@pytest.mark.parametrize("a,b,expected", [
    ("cold", "gold", True),
    ("cold", "cord", True),
    ("cold", "cold", False),
    ("cold", "bolt", False),
    ("cold", "colds", False),
    ("", "", False),
    ("a", "b", True),
])
def test_differs_by_one_letter(a, b, expected):
    assert differs_by_one_letter(a, b) is expected
    assert differs_by_one_letter(b, a) is expected
