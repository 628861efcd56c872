"""
Phonetic encoding for sound-alike name comparison.

Simplified Double Metaphone: a letter-by-letter state machine over the
uppercased, alphabetic-only input that emits at most 4 code characters.
Best-effort English spelling-to-sound heuristics, not a linguistic model;
known false positives and negatives are pinned in tests/test_phonetic.py.
"""

from __future__ import annotations

import re

MAX_CODE_LENGTH = 4
VOWELS = frozenset("AEIOU")

_NON_ALPHA = re.compile(r"[^A-Z]")
_SILENT_START = ("GN", "KN", "PN", "WR", "PS")
# Consonants whose doubled form collapses to a single code letter
_DOUBLED = frozenset("BFLMNR")


def _is_vowel(ch: str) -> bool:
    return ch in VOWELS


def metaphone(word: str) -> str:
    """
    Return the phonetic code (0-4 chars) for a single word.

    Non-alphabetic characters are dropped first, so "O'Brien" and "OBRIEN"
    encode identically. Empty or non-alphabetic input returns "".
    """
    if not word:
        return ""
    word = _NON_ALPHA.sub("", word.upper().strip())
    if not word:
        return ""

    code: list[str] = []
    last = len(word) - 1
    current = 0

    if word.startswith(_SILENT_START):
        current = 1
    if word[0] == "X":
        code.append("S")
        current = 1

    def peek(offset: int) -> str:
        i = current + offset
        return word[i] if 0 <= i <= last else ""

    while len(code) < MAX_CODE_LENGTH and current <= last:
        ch = word[current]
        nxt = peek(1)

        if ch in VOWELS:
            if current == 0:
                code.append(ch)

        elif ch in _DOUBLED:
            code.append(ch)
            if nxt == ch:
                current += 1

        elif ch == "C":
            if word[current:current + 3] == "CIA":
                code.append("X")
                current += 2
            elif nxt == "H":
                code.append("X")
                current += 1
            elif nxt in ("E", "I"):
                code.append("S")
            else:
                code.append("K")

        elif ch == "D":
            if nxt == "G" and peek(2) in ("E", "I", "Y"):
                code.append("J")
                current += 2
            else:
                code.append("T")

        elif ch == "G":
            if nxt == "H":
                if current == 0 or _is_vowel(word[current - 1]):
                    code.append("K")
                current += 1
            elif nxt == "N" and current == last - 1:
                pass  # terminal GN is silent
            elif nxt in ("E", "I", "Y"):
                code.append("J")
            else:
                code.append("K")

        elif ch == "H":
            if (current == 0 or _is_vowel(word[current - 1])) and nxt and _is_vowel(nxt):
                code.append("H")

        elif ch == "J":
            code.append("J")

        elif ch == "K":
            if current == 0 or word[current - 1] != "C":
                code.append("K")

        elif ch == "P":
            if nxt == "H":
                code.append("F")
                current += 1
            else:
                code.append("P")

        elif ch == "Q":
            code.append("K")

        elif ch == "S":
            if word[current:current + 3] == "SIO":
                code.append("X")
                current += 2
            elif nxt == "H":
                code.append("X")
                current += 1
            else:
                code.append("S")

        elif ch == "T":
            if word[current:current + 3] == "TIO":
                code.append("X")
                current += 2
            elif nxt == "H":
                code.append("0")
                current += 1
            elif word[current:current + 3] == "TCH":
                current += 2  # T is silent; C and H consumed with it
            else:
                code.append("T")

        elif ch == "V":
            code.append("F")

        elif ch in ("W", "Y"):
            if nxt and _is_vowel(nxt):
                code.append(ch)

        elif ch == "X":
            code.extend(("K", "S"))

        elif ch == "Z":
            code.append("S")

        current += 1

    return "".join(code)[:MAX_CODE_LENGTH]


def metaphone_match(a: str, b: str) -> bool:
    """True iff both words have the same non-empty phonetic code."""
    code_a = metaphone(a)
    return bool(code_a) and code_a == metaphone(b)
