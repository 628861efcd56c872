"""
Tests for edit-distance similarity (identity.similarity).
"""

from __future__ import annotations

import pytest

from backend_jurymatch.identity.similarity import levenshtein_distance, string_similarity


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
        ("same", "same", 0),
        ("flaw", "lawn", 2),
    ],
)
def test_levenshtein_distance(a, b, expected):
    assert levenshtein_distance(a, b) == expected
    assert levenshtein_distance(b, a) == expected


def test_similarity_formula():
    assert string_similarity("kitten", "sitting") == pytest.approx(4 / 7)


def test_empty_vs_empty_is_identical():
    assert string_similarity("", "") == 1.0


def test_similarity_ignores_case():
    assert string_similarity("Engineer", "ENGINEER") == 1.0


def test_similarity_bounds():
    assert string_similarity("abc", "xyz") == 0.0
    assert 0.0 <= string_similarity("Jonathan", "Johnathan") <= 1.0
