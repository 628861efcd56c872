"""
Library entry points: parse_name, score_identity_candidates, classify_personas.

Thin boundary over the identity, signals and persona packages. Errors are
logged here with structured fields and re-raised unchanged. The default
weight snapshot is loaded lazily from settings.weight_table_path into a
process-wide WeightTableStore; a missing file means an empty table (every
classification returns []) until a snapshot is built and reloaded.
"""

from __future__ import annotations

import threading
from typing import Optional, Sequence

from backend_jurymatch.config import get_settings
from backend_jurymatch.core.exceptions import JuryMatchError
from backend_jurymatch.identity import entity_linking, name_parser
from backend_jurymatch.identity.candidate_scorer import RecordLike, TargetLike
from backend_jurymatch.identity.models import IdentityCandidate
from backend_jurymatch.identity.name_parser import ParsedName
from backend_jurymatch.jurymatch_logging import get_logger
from backend_jurymatch.persona.matcher import TableLike, as_table, classify
from backend_jurymatch.persona.models import PersonaMatchResult
from backend_jurymatch.persona.weights import WeightTable, WeightTableStore, load_weight_table
from backend_jurymatch.signals.catalog import SignalCatalog
from backend_jurymatch.signals.extractor import AttributesLike, SignalExtractor, coerce_attributes

logger = get_logger(__name__)

_store: Optional[WeightTableStore] = None
_store_lock = threading.Lock()


def default_store() -> WeightTableStore:
    """Process-wide snapshot store, loaded from settings on first use."""
    global _store
    if _store is not None:
        return _store
    with _store_lock:
        if _store is None:
            path = get_settings().weight_table_path
            if path.exists():
                table = load_weight_table(path)
            else:
                logger.warning("weight_table_missing", path=str(path))
                table = WeightTable(())
            _store = WeightTableStore(table)
    return _store


def reset_default_store() -> None:
    """Forget the process-wide store; the next call reloads from settings."""
    global _store
    with _store_lock:
        _store = None


def parse_name(raw: str) -> ParsedName:
    """Normalize and parse a raw name. Raises EmptyInputError / InputValidationError."""
    try:
        return name_parser.parse_name(raw)
    except JuryMatchError as exc:
        logger.warning("parse_name_failed", code=exc.code, error=exc.message)
        raise


def score_identity_candidates(
    target: TargetLike,
    candidates: Sequence[RecordLike],
    *,
    min_score: Optional[int] = None,
    reference_year: Optional[int] = None,
) -> list[IdentityCandidate]:
    """Score, link and rank candidate records for one juror (best first)."""
    try:
        return entity_linking.score_identity_candidates(
            target, candidates, min_score=min_score, reference_year=reference_year
        )
    except JuryMatchError as exc:
        logger.warning("identity_scoring_failed", code=exc.code, error=exc.message, **exc.details)
        raise


def classify_personas(
    subject_attributes: AttributesLike,
    *,
    table: Optional[TableLike] = None,
    catalog: Optional[SignalCatalog] = None,
    secondary_min_confidence: Optional[float] = None,
    secondary_min_net_score: Optional[float] = None,
) -> list[PersonaMatchResult]:
    """
    Extract signals from a juror's attributes and classify them against a snapshot.

    table defaults to the process-wide store's current snapshot (read once
    per call), catalog to the built-in signal catalog.
    """
    try:
        attrs = coerce_attributes(subject_attributes)
        snapshot = as_table(table) if table is not None else default_store().current()
        signals = SignalExtractor(catalog).extract(attrs)
        results = classify(
            signals,
            snapshot,
            secondary_min_confidence=secondary_min_confidence,
            secondary_min_net_score=secondary_min_net_score,
        )
    except JuryMatchError as exc:
        logger.warning("persona_classification_failed", code=exc.code, error=exc.message)
        raise
    logger.debug(
        "persona_classification_done",
        subject_id=attrs.subject_id,
        signals=[s.signal_id for s in signals],
        table_version=snapshot.version,
        results=[r.persona_id for r in results],
    )
    return results
