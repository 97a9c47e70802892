"""ISBN-10 and ISBN-13 checksum validation."""

from __future__ import annotations

import re

_DIGITS = frozenset("0123456789")
_NON_ISBN_CHARS = re.compile(r"[^0-9Xx]")


def clean_isbn(text: str) -> str:
    """Drop separators and anything else that can't be part of an ISBN."""
    return _NON_ISBN_CHARS.sub("", text).upper()


def is_valid_isbn10(s: str) -> bool:
    """Mod-11 check: sum of value * (10 - position) must divide by 11.

    The last character may be 'X', standing for a check value of 10.
    """
    if len(s) != 10:
        return False
    total = 0
    for i, ch in enumerate(s):
        if ch in _DIGITS:
            value = int(ch)
        elif i == 9 and ch == "X":
            value = 10
        else:
            return False
        total += value * (10 - i)
    return total % 11 == 0


def is_valid_isbn13(s: str) -> bool:
    """Mod-10 check with alternating 1/3 weights over the first 12 digits."""
    if len(s) != 13 or not all(ch in _DIGITS for ch in s):
        return False
    total = sum(int(ch) * (3 if i % 2 else 1) for i, ch in enumerate(s[:12]))
    check = (10 - total % 10) % 10
    return check == int(s[12])


def is_valid_isbn(s: str) -> bool:
    return is_valid_isbn10(s) or is_valid_isbn13(s)
