"""
Tests for identity candidate scoring (identity.candidate_scorer).
"""

from __future__ import annotations

import pytest

from backend_jurymatch.core.exceptions import CandidateStateError, InputValidationError
from backend_jurymatch.identity.candidate_scorer import (
    explain,
    rescore,
    score_age,
    score_candidate,
    score_location,
    score_occupation,
)
from backend_jurymatch.identity.entity_linking import score_identity_candidates
from backend_jurymatch.identity.models import CandidateRecord, IdentityQuery

YEAR = 2026


def _bands(f):
    return (
        f.name_score,
        f.age_score,
        f.location_score,
        f.occupation_score,
        f.corroboration_score,
    )


def test_exact_age_and_last_name_only_populated_bands():
    """Age 45 vs 45, exact names, no location/occupation: age 20, name 35, corroboration 0."""
    f = score_candidate(
        {"full_name": "John Smith", "age": 45},
        {"full_name": "John Smith", "age": 45},
        reference_year=YEAR,
    )
    assert f.age_score == 20
    assert f.name_score == 35
    assert "exact last name" in f.name_reason
    assert f.location_score == 0
    assert f.location_reason == "no location data"
    assert f.occupation_score == 0
    assert f.corroboration_score == 0
    assert f.total_score == 55


@pytest.mark.parametrize(
    "target,candidate,expected",
    [
        ("John Robert Smith", "John Robert Smith", 40),
        ("Katherine Smyth", "Katherine Smith", 12 + 15),
        ("Maria Garcia", "Maria Garcis", 8 + 15),
        ("J. Smith", "John Smith", 20 + 3),
        ("John Robert Smith", "John R. Smith", 20 + 15 + 2),
        ("Katherine Smith", "Catherine Smith", 20 + 10),
        ("John Smith", "Mary Jones", 0),
    ],
)
def test_name_band(target, candidate, expected):
    f = score_candidate(target, {"full_name": candidate}, reference_year=YEAR)
    assert f.name_score == expected
    assert f.name_reason


def test_age_band_tiers_and_birth_year():
    q = IdentityQuery(full_name="John Smith", age=45)
    assert score_age(q, CandidateRecord(full_name="x y", age=45), YEAR)[0] == 20
    assert score_age(q, CandidateRecord(full_name="x y", birth_year=YEAR - 47), YEAR)[0] == 15
    assert score_age(q, CandidateRecord(full_name="x y", age=50), YEAR)[0] == 8
    points, reason = score_age(q, CandidateRecord(full_name="x y", age=51), YEAR)
    assert points == 0
    assert "6 years" in reason


def test_location_band_tiers():
    q = IdentityQuery(full_name="John Smith", city="Austin", state="TX", zip_code="78701")
    assert score_location(q, CandidateRecord(full_name="a b", city="austin", state="TX"))[0] == 20
    assert score_location(q, CandidateRecord(full_name="a b", zip_code="78701-1234"))[0] == 20
    assert score_location(q, CandidateRecord(full_name="a b", zip_code="78745"))[0] == 12
    assert score_location(q, CandidateRecord(full_name="a b", city="Dallas", state="TX"))[0] == 5


def test_same_city_name_in_other_state_scores_nothing():
    q = IdentityQuery(full_name="John Smith", city="Portland", state="OR")
    points, reason = score_location(q, CandidateRecord(full_name="a b", city="Portland", state="ME"))
    assert points == 0
    assert "different state" in reason


def test_occupation_band():
    q = IdentityQuery(full_name="John Smith", occupation="Software Engineer")
    assert score_occupation(q, CandidateRecord(full_name="a b", occupation="software engineer"))[0] == 10
    q = IdentityQuery(full_name="John Smith", occupation="teacher")
    assert score_occupation(q, CandidateRecord(full_name="a b", occupation="teaching"))[0] == 5
    assert score_occupation(q, CandidateRecord(full_name="a b", occupation="plumber"))[0] == 0


def test_total_is_exact_band_sum_and_bounded():
    targets = [
        {"full_name": "John Robert Smith", "age": 45, "city": "Austin", "state": "TX", "occupation": "Engineer"},
        {"full_name": "J. Smith"},
        "Smith",
    ]
    candidates = [
        {"full_name": "John Robert Smith", "age": 45, "city": "Austin", "state": "TX", "occupation": "Engineer"},
        {"full_name": "Jon Smyth", "birth_year": 1980, "zip_code": "78701"},
        {"first_name": "Mary", "last_name": "Jones", "age": 20},
        {"full_name": "123"},
    ]
    for t in targets:
        for c in candidates:
            f = score_candidate(t, c, reference_year=YEAR)
            assert 0 <= f.total_score <= 100
            assert f.total_score == sum(_bands(f))
            assert all(f.reasons())


def test_unparseable_candidate_name_scores_zero_name():
    f = score_candidate("John Smith", {"full_name": "123"}, reference_year=YEAR)
    assert f.name_score == 0
    assert "could not be parsed" in f.name_reason


def test_invalid_inputs_raise_validation_error():
    with pytest.raises(InputValidationError):
        score_candidate("John Smith", {"age": 40})  # no name
    with pytest.raises(InputValidationError):
        score_candidate(12345, {"full_name": "John Smith"})
    with pytest.raises(InputValidationError):
        score_candidate("John Smith", ["John Smith"])


def test_camel_case_record_fields_accepted():
    f = score_candidate(
        {"fullName": "John Smith", "zipCode": "78701"},
        {"firstName": "John", "lastName": "Smith", "zipCode": "78701", "candidateId": "c1"},
        reference_year=YEAR,
    )
    assert f.name_score == 35
    assert f.location_score == 20


def test_explain_lists_five_bands():
    f = score_candidate("John Smith", {"full_name": "John Smith"}, reference_year=YEAR)
    out = explain(f)
    assert [b["band"] for b in out["bands"]] == ["name", "age", "location", "occupation", "corroboration"]
    assert sum(b["score"] for b in out["bands"]) == out["total_score"]
    assert sum(b["max"] for b in out["bands"]) == 100


def test_confirm_and_reject_are_terminal():
    [cand] = score_identity_candidates(
        "John Smith", [{"full_name": "John Smith", "age": 45}], min_score=0, reference_year=YEAR
    )
    cand.confirm("analyst@firm")
    assert cand.is_confirmed and cand.is_terminal
    assert cand.decided_by == "analyst@firm"
    with pytest.raises(CandidateStateError):
        cand.reject("someone")
    with pytest.raises(CandidateStateError):
        cand.confirm("someone")
    with pytest.raises(CandidateStateError):
        rescore("John Smith", cand, reference_year=YEAR)


def test_rescore_keeps_corroboration():
    [cand] = score_identity_candidates(
        {"full_name": "John Smith"},
        [
            {"full_name": "John Smith", "phone": "512-555-0101", "source_type": "voter_record"},
            {"full_name": "John Smith", "phone": "(512) 555 0101", "source_type": "fec_donation"},
        ],
        min_score=0,
        reference_year=YEAR,
    )
    assert cand.score_factors.corroboration_score == 3
    factors = rescore({"full_name": "John Smith", "age": 45}, cand, reference_year=YEAR)
    assert factors.corroboration_score == 3
    assert cand.score_factors is factors
