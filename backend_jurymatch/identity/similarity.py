"""
Edit-distance string similarity.

Third-tier fallback for name and occupation comparison, used only after
exact and phonetic comparison have failed.
"""

from __future__ import annotations


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum single-character insertions, deletions and substitutions to turn a into b."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1]: (max_len - distance) / max_len.

    Compared case-insensitively. Two empty strings are identical (1.0).
    """
    a = (a or "").casefold()
    b = (b or "").casefold()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest
