"""
Identity candidate scoring — one public record against the target juror.

Five independent bands, each paired with a short reason string so the UI
can show exactly why a candidate scored what it did:

    name          0-40  (last 0-20, first 0-15, middle 0-5)
    age           0-20  (exact 20, within 2 years 15, within 5 years 8)
    location      0-20  (city or ZIP5 20, ZIP3 12, state 5)
    occupation    0-10  (edit similarity > 0.8 10, > 0.5 5)
    corroboration 0-10  (set by entity linking, 0 for a lone record)

Comparison tiers are exact, then phonetic, then edit similarity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Union

from pydantic import ValidationError

from backend_jurymatch.core.exceptions import (
    CandidateStateError,
    EmptyInputError,
    InputValidationError,
)
from backend_jurymatch.identity.models import (
    AGE_MAX,
    CORROBORATION_MAX,
    LOCATION_MAX,
    NAME_MAX,
    OCCUPATION_MAX,
    CandidateRecord,
    IdentityCandidate,
    IdentityQuery,
    ScoreFactors,
)
from backend_jurymatch.identity.name_parser import ParsedName, parse_name
from backend_jurymatch.identity.similarity import string_similarity
from backend_jurymatch.jurymatch_logging import get_logger

logger = get_logger(__name__)

TargetLike = Union[IdentityQuery, ParsedName, str, dict]
RecordLike = Union[CandidateRecord, dict]

# Name sub-bands
LAST_EXACT, LAST_PHONETIC, LAST_SIMILAR = 20, 12, 8
FIRST_EXACT, FIRST_PHONETIC, FIRST_INITIAL, FIRST_SIMILAR = 15, 10, 3, 6
MIDDLE_EXACT, MIDDLE_INITIAL = 5, 2
NAME_SIMILARITY_THRESHOLD = 0.7

AGE_NEAR_YEARS, AGE_NEAR_POINTS = 2, 15
AGE_FAR_YEARS, AGE_FAR_POINTS = 5, 8

ZIP3_POINTS = 12
STATE_POINTS = 5

OCCUPATION_STRONG, OCCUPATION_PARTIAL = 0.8, 0.5
OCCUPATION_PARTIAL_POINTS = 5


@dataclass(frozen=True)
class ScoringTarget:
    """Validated target juror plus its parsed name (parsed once per batch)."""

    query: IdentityQuery
    name: ParsedName


def coerce_target(target: TargetLike) -> ScoringTarget:
    """
    Accept an IdentityQuery, a dict of its fields, a ParsedName, or a raw name string.

    Raises InputValidationError for anything else or for invalid fields, and
    EmptyInputError when the name is empty.
    """
    if isinstance(target, ScoringTarget):
        return target
    if isinstance(target, ParsedName):
        return ScoringTarget(query=IdentityQuery(full_name=target.full_name), name=target)
    if isinstance(target, str):
        parsed = parse_name(target)
        return ScoringTarget(query=IdentityQuery(full_name=target), name=parsed)
    if isinstance(target, dict):
        try:
            target = IdentityQuery.model_validate(target)
        except ValidationError as exc:
            raise InputValidationError.from_pydantic(exc, "identity target") from exc
    if not isinstance(target, IdentityQuery):
        raise InputValidationError(
            "Identity target must be a name string, ParsedName, dict or IdentityQuery",
            received_type=type(target).__name__,
        )
    return ScoringTarget(query=target, name=parse_name(target.display_name()))


def coerce_record(record: RecordLike) -> CandidateRecord:
    if isinstance(record, CandidateRecord):
        return record
    if isinstance(record, dict):
        try:
            return CandidateRecord.model_validate(record)
        except ValidationError as exc:
            raise InputValidationError.from_pydantic(exc, "candidate record") from exc
    raise InputValidationError(
        "Candidate record must be a dict or CandidateRecord",
        received_type=type(record).__name__,
    )


def _normalize(text: str | None) -> str:
    return " ".join((text or "").lower().split())


def score_name(target: ParsedName, candidate: ParsedName) -> tuple[int, str]:
    """Name band (0-40) and its reason."""
    score = 0
    reasons: list[str] = []

    if target.last_name and candidate.last_name:
        if target.last_name == candidate.last_name:
            score += LAST_EXACT
            reasons.append("exact last name")
        elif target.phonetic_last and target.phonetic_last == candidate.phonetic_last:
            score += LAST_PHONETIC
            reasons.append("phonetic last name match")
        elif string_similarity(target.last_name, candidate.last_name) > NAME_SIMILARITY_THRESHOLD:
            score += LAST_SIMILAR
            reasons.append("similar last name")
        else:
            reasons.append("different last name")

    if target.first_name and candidate.first_name:
        if target.first_name == candidate.first_name:
            score += FIRST_EXACT
            reasons.append("exact first name")
        elif target.phonetic_first and target.phonetic_first == candidate.phonetic_first:
            score += FIRST_PHONETIC
            reasons.append("phonetic first name match")
        elif len(target.first_name) == 1 or len(candidate.first_name) == 1:
            if target.first_name[0] == candidate.first_name[0]:
                score += FIRST_INITIAL
                reasons.append("first initial match")
            else:
                reasons.append("first initial mismatch")
        elif string_similarity(target.first_name, candidate.first_name) > NAME_SIMILARITY_THRESHOLD:
            score += FIRST_SIMILAR
            reasons.append("similar first name")
        else:
            reasons.append("different first name")
    else:
        reasons.append("first name missing")

    if target.middle_name and candidate.middle_name:
        if target.middle_name == candidate.middle_name:
            score += MIDDLE_EXACT
            reasons.append("exact middle name")
        elif target.middle_name[0] == candidate.middle_name[0]:
            score += MIDDLE_INITIAL
            reasons.append("middle initial match")
        else:
            reasons.append("different middle name")

    return min(NAME_MAX, score), ", ".join(reasons)


def _candidate_age(record: CandidateRecord, reference_year: int) -> int | None:
    if record.age is not None:
        return record.age
    if record.birth_year is not None:
        return reference_year - record.birth_year
    return None


def score_age(
    query: IdentityQuery, record: CandidateRecord, reference_year: int
) -> tuple[int, str]:
    candidate_age = _candidate_age(record, reference_year)
    if query.age is None or candidate_age is None:
        return 0, "no age data"
    diff = abs(query.age - candidate_age)
    if diff == 0:
        return AGE_MAX, "exact age match"
    if diff <= AGE_NEAR_YEARS:
        return AGE_NEAR_POINTS, f"within {AGE_NEAR_YEARS} years (±{diff})"
    if diff <= AGE_FAR_YEARS:
        return AGE_FAR_POINTS, f"within {AGE_FAR_YEARS} years (±{diff})"
    return 0, f"age differs by {diff} years"


def score_location(query: IdentityQuery, record: CandidateRecord) -> tuple[int, str]:
    q_state, c_state = _normalize(query.state), _normalize(record.state)
    states_conflict = bool(q_state and c_state and q_state != c_state)

    if query.city and record.city and _normalize(query.city) == _normalize(record.city):
        if states_conflict:
            return 0, f"same city name, different state ({record.state})"
        return LOCATION_MAX, f"same city: {record.city}"

    if query.zip_code and record.zip_code:
        q_zip, c_zip = query.zip_code[:5], record.zip_code[:5]
        if q_zip == c_zip:
            return LOCATION_MAX, f"same ZIP code: {c_zip}"
        if q_zip[:3] == c_zip[:3]:
            return ZIP3_POINTS, f"same region (ZIP3: {c_zip[:3]})"

    if q_state and c_state and not states_conflict:
        return STATE_POINTS, f"same state: {record.state}"

    has_pair = any(
        (a and b)
        for a, b in (
            (query.city, record.city),
            (query.zip_code, record.zip_code),
            (query.state, record.state),
        )
    )
    return 0, "different location" if has_pair else "no location data"


def score_occupation(query: IdentityQuery, record: CandidateRecord) -> tuple[int, str]:
    if not query.occupation or not record.occupation:
        return 0, "no occupation data"
    similarity = string_similarity(_normalize(query.occupation), _normalize(record.occupation))
    if similarity > OCCUPATION_STRONG:
        return OCCUPATION_MAX, f"strong occupation match: {record.occupation}"
    if similarity > OCCUPATION_PARTIAL:
        return OCCUPATION_PARTIAL_POINTS, f"partial occupation match: {record.occupation}"
    return 0, f"different occupation: {record.occupation}"


def score_candidate(
    target: TargetLike,
    candidate: RecordLike,
    *,
    reference_year: int | None = None,
) -> ScoreFactors:
    """
    Score one candidate record against the target juror.

    Corroboration is always 0 here; entity linking sets it once records
    from several sources are known to describe the same person.
    """
    scoring_target = coerce_target(target)
    record = coerce_record(candidate)
    year = reference_year or date.today().year
    factors = ScoreFactors(corroboration_reason="single source")

    try:
        candidate_name = parse_name(record.display_name())
    except EmptyInputError:
        factors.name_reason = "candidate name could not be parsed"
    else:
        factors.name_score, factors.name_reason = score_name(scoring_target.name, candidate_name)

    factors.age_score, factors.age_reason = score_age(scoring_target.query, record, year)
    factors.location_score, factors.location_reason = score_location(scoring_target.query, record)
    factors.occupation_score, factors.occupation_reason = score_occupation(
        scoring_target.query, record
    )

    logger.debug(
        "identity_candidate_scored",
        candidate_id=record.candidate_id,
        source_type=record.source_type,
        total_score=factors.total_score,
        name_score=factors.name_score,
        age_score=factors.age_score,
        location_score=factors.location_score,
        occupation_score=factors.occupation_score,
    )
    return factors


def rescore(
    target: TargetLike,
    candidate: IdentityCandidate,
    *,
    reference_year: int | None = None,
) -> ScoreFactors:
    """
    Recompute a candidate's factors, keeping its corroboration band.

    Confirmed and rejected candidates are final and raise CandidateStateError.
    """
    if candidate.is_terminal:
        raise CandidateStateError(
            f"Candidate {candidate.candidate_id} is terminal and cannot be rescored",
            candidate_id=candidate.candidate_id,
        )
    if candidate.record is None:
        raise InputValidationError(
            "Candidate has no source record to rescore", candidate_id=candidate.candidate_id
        )
    factors = score_candidate(target, candidate.record, reference_year=reference_year)
    factors.corroboration_score = candidate.score_factors.corroboration_score
    factors.corroboration_reason = candidate.score_factors.corroboration_reason
    candidate.score_factors = factors
    return factors


def explain(factors: ScoreFactors) -> dict[str, Any]:
    """Band-by-band breakdown with maxima, for match breakdown views."""
    return {
        "total_score": factors.total_score,
        "bands": [
            {"band": "name", "score": factors.name_score, "max": NAME_MAX, "reason": factors.name_reason},
            {"band": "age", "score": factors.age_score, "max": AGE_MAX, "reason": factors.age_reason},
            {"band": "location", "score": factors.location_score, "max": LOCATION_MAX, "reason": factors.location_reason},
            {"band": "occupation", "score": factors.occupation_score, "max": OCCUPATION_MAX, "reason": factors.occupation_reason},
            {"band": "corroboration", "score": factors.corroboration_score, "max": CORROBORATION_MAX, "reason": factors.corroboration_reason},
        ],
    }
