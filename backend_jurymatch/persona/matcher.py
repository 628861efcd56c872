"""
Persona match scoring — observed signals against one weight snapshot.

For each persona: positive = sum of its POSITIVE weights on observed
signals, negative = sum of its NEGATIVE weights on observed signals.
confidence = clamp((positive - negative) / max_positive, 0, 1) where
max_positive is the persona's total POSITIVE weight in the snapshot. The
denominator depends only on the snapshot, so confidences are comparable
across runs against the same table version.

key_indicators and concerns are the signal ids that produced positive and
negative, and missing_signals the indicative signals not observed, all read
from the same lookup as the score itself. decision_signals ranks unobserved
signals by how strongly they separate two personas.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Union

from backend_jurymatch.config import get_settings
from backend_jurymatch.jurymatch_logging import get_logger
from backend_jurymatch.persona.models import (
    PRIMARY,
    SECONDARY,
    DecisionSignal,
    PersonaMatchResult,
    PersonaScore,
)
from backend_jurymatch.persona.weights import SignalPersonaWeight, WeightTable
from backend_jurymatch.signals.catalog import Direction
from backend_jurymatch.signals.models import ExtractedSignal

logger = get_logger(__name__)

SignalsLike = Iterable[Union[str, ExtractedSignal]]
TableLike = Union[WeightTable, Iterable[SignalPersonaWeight]]


def _signal_ids(signals: SignalsLike) -> frozenset[str]:
    return frozenset(s.signal_id if isinstance(s, ExtractedSignal) else str(s) for s in signals)


def as_table(table: TableLike) -> WeightTable:
    return table if isinstance(table, WeightTable) else WeightTable(table)


def _ranked(contributions: dict[str, float]) -> list[str]:
    return [sid for sid, _ in sorted(contributions.items(), key=lambda kv: (-kv[1], kv[0]))]


def _missing(
    observed: frozenset[str], weights: Mapping[str, Mapping[Direction, float]]
) -> list[tuple[str, float]]:
    missing = {
        sid: d[Direction.POSITIVE]
        for sid, d in weights.items()
        if sid not in observed and Direction.POSITIVE in d
    }
    return [(sid, missing[sid]) for sid in _ranked(missing)]


def _net_effect(weights: Mapping[Direction, float]) -> float:
    return weights.get(Direction.POSITIVE, 0.0) - weights.get(Direction.NEGATIVE, 0.0)


def score_persona(observed: frozenset[str], table: WeightTable, persona_id: str) -> PersonaScore:
    meta = table.persona(persona_id)
    weights = table.weights_for(persona_id)
    supporting: dict[str, float] = {}
    contradicting: dict[str, float] = {}
    for signal_id in observed:
        by_direction = weights.get(signal_id)
        if not by_direction:
            continue
        if Direction.POSITIVE in by_direction:
            supporting[signal_id] = by_direction[Direction.POSITIVE]
        if Direction.NEGATIVE in by_direction:
            contradicting[signal_id] = by_direction[Direction.NEGATIVE]

    positive = sum(supporting.values())
    negative = sum(contradicting.values())
    denominator = table.max_positive(persona_id)
    if denominator > 0:
        confidence = max(0.0, min(1.0, (positive - negative) / denominator))
        strength = min(1.0, positive / denominator)
    else:
        confidence = strength = 0.0

    return PersonaScore(
        persona_id=persona_id,
        persona_name=meta.name if meta else persona_id,
        archetype=meta.archetype if meta else None,
        archetype_strength=meta.archetype_strength if meta else 0.5,
        positive_score=positive,
        negative_score=negative,
        max_positive=denominator,
        confidence=confidence,
        strength=strength,
        key_indicators=_ranked(supporting),
        concerns=_ranked(contradicting),
        missing_signals=_missing(observed, weights),
    )


def score_personas(signals: SignalsLike, table: TableLike) -> list[PersonaScore]:
    """
    Score every persona in the table, best first.

    Order: confidence desc, archetype_strength desc, persona_id asc.
    """
    table = as_table(table)
    observed = _signal_ids(signals)
    scores = [score_persona(observed, table, p.persona_id) for p in table.personas]
    scores.sort(key=lambda s: (-s.confidence, -s.archetype_strength, s.persona_id))
    return scores


DECISION_MIN_GAIN = 0.3
DECISION_LIMIT = 3


def decision_signals(
    signals: SignalsLike,
    table: TableLike,
    persona_id: str,
    alternative_id: str,
    *,
    limit: int = DECISION_LIMIT,
) -> list[DecisionSignal]:
    """
    Unobserved signals that would best separate persona_id from alternative_id.

    A signal's effect on a persona is its POSITIVE minus its NEGATIVE weight;
    information_gain is the absolute difference of the two personas' effects.
    Signals with gain above 0.3 are returned, largest gain first (ties by id).
    """
    table = as_table(table)
    observed = _signal_ids(signals)
    mine = table.weights_for(persona_id)
    theirs = table.weights_for(alternative_id)

    found: list[DecisionSignal] = []
    for signal_id in sorted(set(mine) | set(theirs)):
        if signal_id in observed:
            continue
        effect = _net_effect(mine.get(signal_id, {}))
        difference = effect - _net_effect(theirs.get(signal_id, {}))
        if abs(difference) <= DECISION_MIN_GAIN:
            continue
        found.append(
            DecisionSignal(
                signal_id=signal_id,
                weight=effect,
                direction=Direction.POSITIVE if difference > 0 else Direction.NEGATIVE,
                information_gain=abs(difference),
            )
        )
    found.sort(key=lambda d: (-d.information_gain, d.signal_id))
    return found[:limit]


def _reasoning(score: PersonaScore, table: WeightTable) -> str:
    total = sum(
        1 for d in table.weights_for(score.persona_id).values() if Direction.POSITIVE in d
    )
    parts = [
        f"Matched {len(score.key_indicators)} of {total} indicative signals "
        f"(net {score.net_score:.2f} of {score.max_positive:.2f})"
    ]
    if score.key_indicators:
        parts.append("supporting: " + ", ".join(score.key_indicators))
    if score.concerns:
        parts.append("contradicting: " + ", ".join(score.concerns))
    return "; ".join(parts)


def _result(score: PersonaScore, table: WeightTable, designation: str) -> PersonaMatchResult:
    return PersonaMatchResult(
        persona_id=score.persona_id,
        persona_name=score.persona_name,
        confidence=score.confidence,
        strength=score.strength,
        reasoning=_reasoning(score, table),
        key_indicators=list(score.key_indicators),
        concerns=list(score.concerns),
        missing_signals=list(score.missing_signals),
        designation=designation,
    )


def classify(
    signals: SignalsLike,
    table: TableLike,
    *,
    secondary_min_confidence: Optional[float] = None,
    secondary_min_net_score: Optional[float] = None,
) -> list[PersonaMatchResult]:
    """
    Primary persona plus an optional secondary.

    The top-ranked persona is primary when its confidence is above zero.
    The runner-up is secondary only when it clears both the confidence and
    net-score floors (defaults from settings). No signals, an empty table,
    or no persona above zero yields [].
    """
    table = as_table(table)
    observed = _signal_ids(signals)
    if not observed or table.is_empty:
        logger.info("personas_classified", signals=len(observed), table_version=table.version, results=0)
        return []

    settings = get_settings()
    min_confidence = (
        settings.secondary_min_confidence if secondary_min_confidence is None else secondary_min_confidence
    )
    min_net = settings.secondary_min_net_score if secondary_min_net_score is None else secondary_min_net_score

    scores = score_personas(observed, table)
    results: list[PersonaMatchResult] = []
    if scores and scores[0].confidence > 0:
        results.append(_result(scores[0], table, PRIMARY))
        if len(scores) > 1:
            runner_up = scores[1]
            if (
                runner_up.confidence > 0
                and runner_up.confidence >= min_confidence
                and runner_up.net_score >= min_net
            ):
                results.append(_result(runner_up, table, SECONDARY))

    logger.info(
        "personas_classified",
        signals=len(observed),
        table_version=table.version,
        results=len(results),
        primary=results[0].persona_id if results else None,
        primary_confidence=round(results[0].confidence, 4) if results else None,
    )
    return results
