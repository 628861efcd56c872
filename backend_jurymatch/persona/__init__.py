"""
Persona package: signal-persona weight snapshots and persona classification.

The weight builder turns persona definitions into a versioned snapshot
offline; the matcher scores a juror's observed signals against it.
"""

from backend_jurymatch.persona.matcher import classify, decision_signals, score_personas
from backend_jurymatch.persona.models import (
    PRIMARY,
    SECONDARY,
    DecisionSignal,
    PersonaMatchResult,
    PersonaProfile,
    PersonaScore,
)
from backend_jurymatch.persona.weight_builder import build_weight_table, load_personas
from backend_jurymatch.persona.weights import (
    PersonaMeta,
    SignalPersonaWeight,
    WeightTable,
    WeightTableStore,
    load_weight_table,
    write_weight_table,
)

__all__ = [
    "PRIMARY",
    "SECONDARY",
    "DecisionSignal",
    "PersonaMatchResult",
    "PersonaMeta",
    "PersonaProfile",
    "PersonaScore",
    "SignalPersonaWeight",
    "WeightTable",
    "WeightTableStore",
    "build_weight_table",
    "classify",
    "decision_signals",
    "load_personas",
    "load_weight_table",
    "score_personas",
    "write_weight_table",
]
