"""
Persona definitions and classification results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import Field

from backend_jurymatch.signals.catalog import Direction
from backend_jurymatch.signals.models import SubjectAttributes

PRIMARY = "primary"
SECONDARY = "secondary"


class PersonaProfile(SubjectAttributes):
    """A persona archetype definition; read by the same extractor as jurors."""

    persona_id: str = Field(alias="personaId", min_length=1)
    name: str = Field(min_length=1)
    archetype: Optional[str] = None
    archetype_strength: float = Field(default=0.5, ge=0.0, le=1.0, alias="archetypeStrength")


@dataclass
class PersonaScore:
    """
    Unfiltered score row for one persona against one set of observed signals.

    confidence = clamp(net_score / max_positive, 0, 1) and
    strength = positive_score / max_positive, where max_positive is the
    persona's total POSITIVE weight in the snapshot.
    """

    persona_id: str
    persona_name: str
    archetype: Optional[str]
    archetype_strength: float
    positive_score: float
    negative_score: float
    max_positive: float
    confidence: float
    strength: float
    key_indicators: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    missing_signals: list[tuple[str, float]] = field(default_factory=list)
    """Indicative (POSITIVE) signals not observed, heaviest first."""

    @property
    def net_score(self) -> float:
        return self.positive_score - self.negative_score

    def to_dict(self) -> dict[str, Any]:
        return {
            "persona_id": self.persona_id,
            "persona_name": self.persona_name,
            "archetype": self.archetype,
            "archetype_strength": self.archetype_strength,
            "positive_score": round(self.positive_score, 4),
            "negative_score": round(self.negative_score, 4),
            "net_score": round(self.net_score, 4),
            "max_positive": round(self.max_positive, 4),
            "confidence": round(self.confidence, 4),
            "strength": round(self.strength, 4),
            "key_indicators": list(self.key_indicators),
            "concerns": list(self.concerns),
            "missing_signals": [{"signal_id": s, "weight": w} for s, w in self.missing_signals],
        }


@dataclass
class PersonaMatchResult:
    """A primary or secondary persona for a juror, with its explanation."""

    persona_id: str
    persona_name: str
    confidence: float
    strength: float
    reasoning: str
    key_indicators: list[str]
    concerns: list[str]
    designation: str
    missing_signals: list[tuple[str, float]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "persona_id": self.persona_id,
            "persona_name": self.persona_name,
            "confidence": round(self.confidence, 4),
            "strength": round(self.strength, 4),
            "reasoning": self.reasoning,
            "key_indicators": list(self.key_indicators),
            "concerns": list(self.concerns),
            "missing_signals": [{"signal_id": s, "weight": w} for s, w in self.missing_signals],
            "designation": self.designation,
        }


@dataclass(frozen=True)
class DecisionSignal:
    """
    An unobserved signal that separates a persona from an alternative.

    direction is POSITIVE when observing the signal would favor the persona
    over the alternative, NEGATIVE when it would favor the alternative.
    """

    signal_id: str
    weight: float
    direction: Direction
    information_gain: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "signal_id": self.signal_id,
            "weight": round(self.weight, 4),
            "direction": self.direction.value,
            "information_gain": round(self.information_gain, 4),
        }
