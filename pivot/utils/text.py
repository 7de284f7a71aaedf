from __future__ import annotations

import re

_WORD_RE = re.compile(r"^[a-z]+$")


def normalize_word(raw: str) -> str:
    return raw.strip().lower()


def is_alpha_word(word: str) -> bool:
    """
    True for lowercase ASCII letters only (no spaces, digits or symbols).
    Expects an already normalized word.
    """
    return bool(_WORD_RE.match(word))


def differs_by_one_letter(a: str, b: str) -> bool:
    """
    Same length and exactly one differing position.
    """
    if len(a) != len(b):
        return False

    diffs = 0
    for x, y in zip(a, b):
        if x != y:
            diffs += 1
            if diffs > 1:
                return False
    return diffs == 1
