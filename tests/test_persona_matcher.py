"""
Tests for persona scoring and primary/secondary classification (persona.matcher).
"""

from __future__ import annotations

import pytest

from backend_jurymatch.persona.matcher import classify, decision_signals, score_personas
from backend_jurymatch.persona.models import PRIMARY, SECONDARY
from backend_jurymatch.persona.weight_builder import build_weight_table
from backend_jurymatch.persona.weights import PersonaMeta, SignalPersonaWeight, WeightTable
from backend_jurymatch.signals.catalog import Direction
from backend_jurymatch.signals.models import ExtractedSignal

POS, NEG = Direction.POSITIVE, Direction.NEGATIVE


def _table(rows, personas=()):
    return WeightTable([SignalPersonaWeight(s, p, d, w) for p, s, d, w in rows], personas)


@pytest.fixture
def two_personas() -> WeightTable:
    return _table(
        [
            ("P1", "S1", POS, 0.9),
            ("P1", "S2", POS, 0.1),
            ("P2", "S1", POS, 0.6),
            ("P2", "S3", POS, 0.4),
        ]
    )


def test_matching_persona_ranks_above_unrelated():
    table = _table([("P1", "HIGH", POS, 0.9), ("P2", "UNRELATED", POS, 0.3)])
    scores = score_personas(["HIGH"], table)
    assert [s.persona_id for s in scores] == ["P1", "P2"]
    assert scores[0].confidence == pytest.approx(1.0)
    assert scores[1].confidence == 0.0

    results = classify(["HIGH"], table)
    assert [(r.persona_id, r.designation) for r in results] == [("P1", PRIMARY)]


def test_secondary_clears_both_floors(two_personas):
    results = classify(["S1"], two_personas)
    assert [(r.persona_id, r.designation) for r in results] == [("P1", PRIMARY), ("P2", SECONDARY)]
    assert results[0].confidence == pytest.approx(0.9)
    assert results[1].confidence == pytest.approx(0.6)


def test_secondary_dropped_below_net_floor(two_personas):
    results = classify(["S1"], two_personas, secondary_min_net_score=0.7)
    assert [r.persona_id for r in results] == ["P1"]


def test_secondary_dropped_below_confidence_floor(two_personas):
    results = classify(["S1"], two_personas, secondary_min_confidence=0.65)
    assert [r.persona_id for r in results] == ["P1"]


def test_secondary_floor_from_settings(monkeypatch, two_personas):
    from backend_jurymatch.config import reset_settings

    monkeypatch.setenv("JURYMATCH_SECONDARY_MIN_CONFIDENCE", "0.7")
    reset_settings()
    assert [r.persona_id for r in classify(["S1"], two_personas)] == ["P1"]


def test_negative_weight_lowers_confidence_and_is_reported():
    table = _table([("P", "A", POS, 0.8), ("P", "B", POS, 0.2), ("P", "C", NEG, 0.5)])
    [score] = score_personas(["A", "C"], table)
    assert score.positive_score == pytest.approx(0.8)
    assert score.negative_score == pytest.approx(0.5)
    assert score.confidence == pytest.approx(0.3)
    assert score.key_indicators == ["A"]
    assert score.concerns == ["C"]


def test_confidence_is_clamped_at_zero():
    table = _table([("P", "A", POS, 0.2), ("P", "C", NEG, 0.9)])
    [score] = score_personas(["A", "C"], table)
    assert score.confidence == 0.0
    assert score.net_score < 0
    assert classify(["A", "C"], table) == []


def test_adding_signals_moves_confidence_monotonically():
    table = _table(
        [("P", "A", POS, 0.5), ("P", "B", POS, 0.3), ("P", "D", POS, 0.2), ("P", "N", NEG, 0.4)]
    )

    def conf(ids):
        return score_personas(ids, table)[0].confidence

    assert conf(["A"]) <= conf(["A", "B"]) <= conf(["A", "B", "D"])
    assert conf(["A", "B", "N"]) <= conf(["A", "B"])
    assert conf(["A", "B", "D"]) == pytest.approx(1.0)


def test_explanation_matches_score(two_personas):
    observed = ["S1", "S2", "UNKNOWN"]
    for score in score_personas(observed, two_personas):
        weights = two_personas.weights_for(score.persona_id)
        assert set(score.key_indicators) <= set(observed)
        assert score.positive_score == pytest.approx(
            sum(weights[s][POS] for s in score.key_indicators)
        )
        assert score.negative_score == pytest.approx(
            sum(weights[s][NEG] for s in score.concerns)
        )
    [primary, *_] = classify(observed, two_personas)
    assert primary.key_indicators == ["S1", "S2"]
    assert primary.reasoning.startswith("Matched 2 of 2 indicative signals")
    assert "supporting: S1, S2" in primary.reasoning


def test_ties_break_by_archetype_strength_then_id():
    rows = [(p, "S", POS, 0.5) for p in ("c", "b", "a")]
    personas = [
        PersonaMeta("a", "A", archetype_strength=0.4),
        PersonaMeta("b", "B", archetype_strength=0.8),
        PersonaMeta("c", "C", archetype_strength=0.4),
    ]
    scores = score_personas(["S"], _table(rows, personas))
    assert [s.persona_id for s in scores] == ["b", "a", "c"]


def test_accepts_extracted_signals_and_entry_lists():
    entries = [SignalPersonaWeight("S", "P", POS, 0.5)]
    signals = [ExtractedSignal("S", 0.9, "demographics.occupation")]
    [result] = classify(signals, entries)
    assert result.persona_id == "P"
    assert result.to_dict()["designation"] == PRIMARY


def test_empty_inputs_return_empty(two_personas):
    assert classify([], two_personas) == []
    assert classify(["S1"], WeightTable(())) == []
    assert classify(["NOPE"], two_personas) == []


def test_built_table_opposes_personas(persona_profiles):
    table = build_weight_table(persona_profiles)
    scores = {s.persona_id: s for s in score_personas(["AUTHORITY_DEFERENCE_HIGH"], table)}
    assert scores["authority_deferrer"].confidence == pytest.approx(0.9 / 1.7)
    assert scores["skeptic"].confidence == 0.0
    assert scores["skeptic"].concerns == ["AUTHORITY_DEFERENCE_HIGH"]

    results = classify(["AUTHORITY_DEFERENCE_HIGH"], table)
    assert [(r.persona_id, r.designation) for r in results] == [("authority_deferrer", PRIMARY)]


def test_missing_signals_are_unobserved_indicators(two_personas, persona_profiles):
    scores = {s.persona_id: s for s in score_personas(["S1"], two_personas)}
    assert scores["P1"].missing_signals == [("S2", 0.1)]
    assert scores["P2"].missing_signals == [("S3", 0.4)]

    table = build_weight_table(persona_profiles)
    [primary] = classify(["AUTHORITY_DEFERENCE_HIGH"], table)
    assert primary.missing_signals == [("OCCUPATION_FIRST_RESPONDER", 0.8)]
    assert primary.to_dict()["missing_signals"] == [
        {"signal_id": "OCCUPATION_FIRST_RESPONDER", "weight": 0.8}
    ]


def test_negative_only_signals_are_never_missing():
    table = _table([("P", "A", POS, 0.5), ("P", "N", NEG, 0.4)])
    [score] = score_personas(["A"], table)
    assert score.missing_signals == []


def test_decision_signals_separate_primary_from_alternative(persona_profiles):
    table = build_weight_table(persona_profiles)
    found = decision_signals(["AUTHORITY_DEFERENCE_HIGH"], table, "authority_deferrer", "skeptic")
    assert [(d.signal_id, d.direction) for d in found] == [
        ("AUTHORITY_DEFERENCE_LOW", NEG),
        ("EVIDENCE_ORIENTATION_HIGH", NEG),
        ("OCCUPATION_FIRST_RESPONDER", POS),
    ]
    assert found[0].information_gain == pytest.approx(1.7)
    assert found[0].weight == pytest.approx(-0.8)
    assert found[2].to_dict()["direction"] == "POSITIVE"


def test_decision_signals_skip_observed_and_weak_differences(two_personas):
    # S1 observed; S2 differs by 0.1 only; S3 favors P2 by 0.4
    found = decision_signals(["S1"], two_personas, "P1", "P2")
    assert [(d.signal_id, d.direction) for d in found] == [("S3", NEG)]
    assert decision_signals(["S1"], two_personas, "P1", "P2", limit=0) == []
