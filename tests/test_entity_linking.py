"""
Tests for record linking and corroboration (identity.entity_linking).
"""

from __future__ import annotations

import pytest

from backend_jurymatch.core.exceptions import InputValidationError
from backend_jurymatch.identity.entity_linking import (
    cluster_records,
    corroboration_bonus,
    link_strength,
    score_identity_candidates,
)
from backend_jurymatch.identity.models import CandidateRecord

YEAR = 2026

TARGET = {
    "subject_id": "juror-7",
    "full_name": "John Smith",
    "age": 45,
    "city": "Austin",
    "state": "TX",
    "occupation": "Engineer",
}

VOTER = {
    "candidateId": "v1",
    "sourceType": "voter_record",
    "fullName": "John Smith",
    "age": 45,
    "city": "Austin",
    "state": "TX",
    "phone": "(512) 555-0101",
}
DONATION = {
    "candidateId": "d1",
    "sourceType": "fec_donation",
    "fullName": "John A Smith",
    "city": "Austin",
    "state": "TX",
    "occupation": "Engineer",
    "phone": "512-555-0101",
}
STRANGER = {
    "candidateId": "x1",
    "sourceType": "people_search",
    "fullName": "Jane Doe",
    "age": 30,
    "city": "Dallas",
    "state": "TX",
}


@pytest.mark.parametrize("sources,expected", [(0, 0), (1, 0), (2, 3), (3, 6), (4, 10), (9, 10)])
def test_corroboration_bonus(sources, expected):
    assert corroboration_bonus(sources) == expected


def test_link_strength_strong_and_moderate_evidence():
    a = CandidateRecord.model_validate(VOTER)
    b = CandidateRecord.model_validate(DONATION)
    # phone 5 + first/last 3 + city 2
    assert link_strength(a, b) == 10
    assert link_strength(a, CandidateRecord.model_validate(STRANGER)) == 0


def test_link_strength_email_is_case_insensitive():
    a = CandidateRecord(full_name="Ann Lee", email="Ann.Lee@Example.com")
    b = CandidateRecord(full_name="A Lee", email="ann.lee@example.com ")
    assert link_strength(a, b) == 5


def test_link_strength_birth_year_needs_surname():
    a = CandidateRecord(full_name="Ann Lee", birth_year=1980)
    assert link_strength(a, CandidateRecord(full_name="Bob Lee", birth_year=1980)) == 5
    assert link_strength(a, CandidateRecord(full_name="Bob Kim", birth_year=1980)) == 0


def test_moderate_evidence_alone_does_not_link():
    a = CandidateRecord(full_name="Ann Lee", city="Austin", age=40)
    b = CandidateRecord(full_name="Ann Lee", city="Austin", age=41)
    # name 3 + age 1 + city 2 = 6 links; without the name it would not
    assert link_strength(a, b) == 6
    c = CandidateRecord(full_name="Bea Park", city="Austin", age=41)
    assert link_strength(a, c) == 3


def test_clusters_are_transitive():
    a = CandidateRecord(full_name="Ann Lee", email="ann@example.com")
    b = CandidateRecord(full_name="Ann Lee", email="ann@example.com", phone="5125550199")
    c = CandidateRecord(full_name="A. Lee", phone="512-555-0199")
    d = CandidateRecord(full_name="Zed Quill")
    assert cluster_records([a, b, c, d]) == [[0, 1, 2], [3]]


def test_score_identity_candidates_links_ranks_and_filters():
    results = score_identity_candidates(TARGET, [STRANGER, DONATION, VOTER], reference_year=YEAR)
    assert [c.candidate_id for c in results] == ["v1"]
    top = results[0]
    # name 35 + age 20 + city 20 + occupation 0, plus 2-source corroboration
    assert top.score_factors.corroboration_score == 3
    assert top.total_score == 78
    assert top.score_factors.corroboration_reason.startswith("confirmed by 2 sources")
    assert [r.candidate_id for r in top.linked_records] == ["d1"]
    assert top.source_types == ["voter_record", "fec_donation"]


def test_min_score_zero_keeps_everything_sorted():
    results = score_identity_candidates(TARGET, [STRANGER, DONATION, VOTER], min_score=0, reference_year=YEAR)
    assert [c.candidate_id for c in results] == ["v1", "x1"]
    scores = [c.total_score for c in results]
    assert scores == sorted(scores, reverse=True)
    for c in results:
        f = c.score_factors
        assert c.total_score == (
            f.name_score + f.age_score + f.location_score + f.occupation_score + f.corroboration_score
        )


def test_ties_break_by_candidate_id():
    records = [
        {"candidateId": "b", "fullName": "John Smith"},
        {"candidateId": "a", "fullName": "John Smith", "sourceType": "other"},
    ]
    # identical records with no contact data link only by name (3): two candidates
    results = score_identity_candidates("John Smith", records, min_score=0, reference_year=YEAR)
    assert [c.candidate_id for c in results] == ["a", "b"]


def test_missing_ids_get_positional_ids():
    results = score_identity_candidates(
        "John Smith", [{"fullName": "John Smith"}, {"fullName": "Mary Jones"}], min_score=0, reference_year=YEAR
    )
    assert {c.candidate_id for c in results} == {"candidate-0", "candidate-1"}


def test_default_min_score_comes_from_settings(monkeypatch):
    from backend_jurymatch.config import reset_settings

    monkeypatch.setenv("JURYMATCH_MIN_CANDIDATE_SCORE", "0")
    reset_settings()
    results = score_identity_candidates(TARGET, [STRANGER], reference_year=YEAR)
    assert [c.candidate_id for c in results] == ["x1"]


def test_empty_candidate_list_returns_empty():
    assert score_identity_candidates(TARGET, []) == []


@pytest.mark.parametrize("bad", [None, "John Smith", {"fullName": "John Smith"}])
def test_candidates_must_be_a_list(bad):
    with pytest.raises(InputValidationError):
        score_identity_candidates(TARGET, bad)


def test_generated_ids_never_reuse_caller_ids():
    records = [
        {"full_name": "John Smith", "age": 45},
        {"candidate_id": "candidate-0", "full_name": "John Smith", "age": 45, "email": "x@y"},
    ]
    results = score_identity_candidates(
        {"full_name": "John Smith", "age": 45}, records, min_score=0, reference_year=YEAR
    )
    ids = [c.candidate_id for c in results]
    assert sorted(ids) == ["candidate-0", "candidate-0-1"]
    assert len(set(ids)) == len(ids)


def test_duplicate_caller_ids_rejected():
    records = [{"candidateId": "c1", "fullName": "John Smith"}, {"candidateId": "c1", "fullName": "Mary Jones"}]
    with pytest.raises(InputValidationError):
        score_identity_candidates(TARGET, records, reference_year=YEAR)
