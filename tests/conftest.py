"""
Pytest fixtures for JuryMatch tests: settings isolation, fixture catalog,
persona profiles and hand-built weight tables.
"""

from __future__ import annotations

import pytest

from backend_jurymatch.signals.catalog import (
    DimensionCondition,
    ExtractionMethod,
    Pole,
    Signal,
    SignalCatalog,
    SignalCategory,
    ValueType,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Point the weight snapshot at an empty temp location and drop cached
    settings and the process-wide store before and after each test.
    """
    from backend_jurymatch import pipeline
    from backend_jurymatch.config import reset_settings

    for key in (
        "JURYMATCH_MIN_CANDIDATE_SCORE",
        "JURYMATCH_SECONDARY_MIN_CONFIDENCE",
        "JURYMATCH_SECONDARY_MIN_NET_SCORE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JURYMATCH_WEIGHT_TABLE_PATH", str(tmp_path / "missing_weights.csv"))
    reset_settings()
    pipeline.reset_default_store()
    yield
    reset_settings()
    pipeline.reset_default_store()


@pytest.fixture
def fixture_catalog() -> SignalCatalog:
    """Small catalog covering every extraction rule."""
    return SignalCatalog(
        [
            Signal(
                signal_id="JOB_NURSE",
                name="Nurse",
                category=SignalCategory.DEMOGRAPHIC,
                extraction_method=ExtractionMethod.FIELD_MAPPING,
                source_field="occupation",
                patterns=(r"nurse",),
                persona_weight=0.8,
            ),
            Signal(
                signal_id="AGE_YOUNG",
                name="Young",
                category=SignalCategory.DEMOGRAPHIC,
                extraction_method=ExtractionMethod.FIELD_MAPPING,
                value_type=ValueType.NUMERIC,
                source_field="age",
                value_range=(18, 30),
                persona_weight=0.5,
            ),
            Signal(
                signal_id="PET_OWNER",
                name="Pet Owner",
                category=SignalCategory.SOCIAL,
                extraction_method=ExtractionMethod.FIELD_MAPPING,
                source_field="has_pets",
                inference_patterns=(r"\b(?:dog|cat)s?\b",),
                persona_weight=0.4,
            ),
            Signal(
                signal_id="TRUSTING",
                name="Trusting",
                category=SignalCategory.ATTITUDINAL,
                extraction_method=ExtractionMethod.NLP_CLASSIFICATION,
                patterns=(r"trust.*people",),
                dimension_conditions=(DimensionCondition("trust", Pole.HIGH),),
                opposite_signal_id="SUSPICIOUS",
                persona_weight=0.9,
                opposite_weight=0.6,
            ),
            Signal(
                signal_id="SUSPICIOUS",
                name="Suspicious",
                category=SignalCategory.ATTITUDINAL,
                extraction_method=ExtractionMethod.NLP_CLASSIFICATION,
                patterns=(r"never trust",),
                dimension_conditions=(DimensionCondition("trust", Pole.LOW),),
                opposite_signal_id="TRUSTING",
                persona_weight=0.9,
                opposite_weight=0.6,
            ),
            Signal(
                signal_id="VIP",
                name="Flagged by consultant",
                category=SignalCategory.BEHAVIORAL,
                extraction_method=ExtractionMethod.MANUAL,
                persona_weight=1.0,
            ),
        ]
    )


@pytest.fixture
def persona_profiles() -> list[dict]:
    """Two opposed personas in the built-in catalog's terms."""
    return [
        {
            "personaId": "authority_deferrer",
            "name": "Authority Deferrer",
            "archetype": "deferential",
            "archetypeStrength": 0.8,
            "demographics": {"occupation": "police officer"},
            "dimensions": {"authoritarianism": 4.5},
        },
        {
            "personaId": "skeptic",
            "name": "Skeptic",
            "archetype": "contrarian",
            "archetypeStrength": 0.6,
            "dimensions": {"authoritarianism": 1.5},
            "characteristicPhrases": ["Show me the evidence first"],
        },
    ]
