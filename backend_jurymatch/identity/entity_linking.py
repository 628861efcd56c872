"""
Entity linking: group candidate records that describe the same person.

Heuristic link strength between record pairs (no ML): shared contact
details are strong evidence, shared name/age/place/employer are moderate
evidence that must stack. Pairs at or above LINK_THRESHOLD are merged with
union-find; each resulting cluster becomes one IdentityCandidate whose
corroboration band rewards agreement across independent sources.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Iterable, Sequence

from backend_jurymatch.config import get_settings
from backend_jurymatch.core.exceptions import EmptyInputError, InputValidationError
from backend_jurymatch.identity.candidate_scorer import (
    RecordLike,
    TargetLike,
    coerce_record,
    coerce_target,
    score_candidate,
)
from backend_jurymatch.identity.models import (
    CORROBORATION_MAX,
    CandidateRecord,
    IdentityCandidate,
    ScoreFactors,
)
from backend_jurymatch.identity.name_parser import ParsedName, parse_name
from backend_jurymatch.jurymatch_logging import get_logger

logger = get_logger(__name__)

LINK_THRESHOLD = 5
MAX_LINK_STRENGTH = 10
STRONG_LINK = 5

_NON_DIGIT = re.compile(r"\D")

# Independent source count -> corroboration points
_CORROBORATION_BY_SOURCES = {1: 0, 2: 3, 3: 6}


def corroboration_bonus(source_count: int) -> int:
    """0 for one source, 3 for two, 6 for three, 10 for four or more."""
    if source_count <= 1:
        return 0
    return _CORROBORATION_BY_SOURCES.get(source_count, CORROBORATION_MAX)


def _phone_key(phone: str | None) -> str:
    digits = _NON_DIGIT.sub("", phone or "")
    return digits[-10:] if len(digits) >= 7 else ""


def _email_key(email: str | None) -> str:
    return (email or "").strip().lower()


def _upper(text: str | None) -> str:
    return " ".join((text or "").upper().split())


def _safe_parse(record: CandidateRecord) -> ParsedName | None:
    try:
        return parse_name(record.display_name())
    except EmptyInputError:
        return None


def link_strength(
    a: CandidateRecord,
    b: CandidateRecord,
    *,
    name_a: ParsedName | None = None,
    name_b: ParsedName | None = None,
) -> int:
    """
    Strength (0-10) of the evidence that two records are the same person.

    Strong links (+5 each): same email, same phone, same birth year and surname.
    Moderate links: same first+last +3, age within 2 +1, same city +2,
    same ZIP5 +2, same street address +3, same employer +2.
    """
    name_a = name_a if name_a is not None else _safe_parse(a)
    name_b = name_b if name_b is not None else _safe_parse(b)
    same_last = bool(name_a and name_b and name_a.last_name and name_a.last_name == name_b.last_name)
    same_first = bool(
        name_a and name_b and name_a.first_name and name_a.first_name == name_b.first_name
    )

    strength = 0
    if _email_key(a.email) and _email_key(a.email) == _email_key(b.email):
        strength += STRONG_LINK
    if _phone_key(a.phone) and _phone_key(a.phone) == _phone_key(b.phone):
        strength += STRONG_LINK
    if a.birth_year is not None and a.birth_year == b.birth_year and same_last:
        strength += STRONG_LINK

    if same_first and same_last:
        strength += 3
    if a.age is not None and b.age is not None and abs(a.age - b.age) <= 2:
        strength += 1
    if a.city and b.city and _upper(a.city) == _upper(b.city):
        strength += 2
    if a.zip_code and b.zip_code and a.zip_code[:5] == b.zip_code[:5]:
        strength += 2
    if a.address and b.address and _upper(a.address) == _upper(b.address):
        strength += 3
    if a.employer and b.employer and _upper(a.employer) == _upper(b.employer):
        strength += 2

    return min(MAX_LINK_STRENGTH, strength)


class _DisjointSet:
    """Union-find with path compression and union by rank."""

    def __init__(self, size: int) -> None:
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, i: int, j: int) -> None:
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return
        if self.rank[root_i] < self.rank[root_j]:
            root_i, root_j = root_j, root_i
        self.parent[root_j] = root_i
        if self.rank[root_i] == self.rank[root_j]:
            self.rank[root_i] += 1


def cluster_records(
    records: Sequence[CandidateRecord],
    *,
    threshold: int = LINK_THRESHOLD,
) -> list[list[int]]:
    """
    Group record indices whose pairwise link strength reaches threshold.

    Linking is transitive (A~B and B~C puts A, B, C together). Clusters are
    returned in order of their lowest index, members ascending.
    """
    names = [_safe_parse(r) for r in records]
    dsu = _DisjointSet(len(records))
    for i in range(len(records)):
        for j in range(i + 1, len(records)):
            strength = link_strength(records[i], records[j], name_a=names[i], name_b=names[j])
            if strength >= threshold:
                logger.debug(
                    "identity_records_linked",
                    left=records[i].candidate_id,
                    right=records[j].candidate_id,
                    strength=strength,
                )
                dsu.union(i, j)

    groups: dict[int, list[int]] = defaultdict(list)
    for i in range(len(records)):
        groups[dsu.find(i)].append(i)
    return sorted(groups.values(), key=lambda members: members[0])


def _with_ids(records: Iterable[CandidateRecord]) -> list[CandidateRecord]:
    """
    Give id-less records a stable positional id so output is reproducible.

    Generated ids never reuse an id the caller supplied: "candidate-{i}"
    becomes "candidate-{i}-{n}" when taken. Caller ids must be unique.
    """
    records = list(records)
    taken: set[str] = set()
    for rec in records:
        if rec.candidate_id is None:
            continue
        if rec.candidate_id in taken:
            raise InputValidationError(
                f"Duplicate candidate_id {rec.candidate_id}", candidate_id=rec.candidate_id
            )
        taken.add(rec.candidate_id)

    out = []
    for i, rec in enumerate(records):
        if rec.candidate_id is None:
            candidate_id = f"candidate-{i}"
            n = 1
            while candidate_id in taken:
                candidate_id = f"candidate-{i}-{n}"
                n += 1
            taken.add(candidate_id)
            rec = rec.model_copy(update={"candidate_id": candidate_id})
        out.append(rec)
    return out


def _source_types(records: Iterable[CandidateRecord]) -> list[str]:
    seen: list[str] = []
    for rec in records:
        if rec.source_type not in seen:
            seen.append(rec.source_type)
    return seen


def score_identity_candidates(
    target: TargetLike,
    candidates: Sequence[RecordLike],
    *,
    min_score: int | None = None,
    reference_year: int | None = None,
) -> list[IdentityCandidate]:
    """
    Score, link and rank candidate records for one juror.

    Each cluster of linked records yields one IdentityCandidate built from
    its best-scoring record; its corroboration band counts the distinct
    source types in the cluster. Candidates below min_score (default from
    settings) are dropped. Ranked by total_score desc, then candidate_id.
    """
    if isinstance(candidates, (str, bytes, dict)) or not isinstance(candidates, Sequence):
        raise InputValidationError(
            "Candidates must be a list of records", received_type=type(candidates).__name__
        )
    scoring_target = coerce_target(target)
    threshold = get_settings().min_candidate_score if min_score is None else min_score

    records = _with_ids(coerce_record(c) for c in candidates)
    factors = [
        score_candidate(scoring_target, rec, reference_year=reference_year) for rec in records
    ]

    results: list[IdentityCandidate] = []
    for members in cluster_records(records):
        ordered = sorted(members, key=lambda i: (-factors[i].total_score, i))
        primary = ordered[0]
        cluster_records_ = [records[i] for i in ordered]
        sources = _source_types(cluster_records_)

        best = factors[primary]
        merged = ScoreFactors(**{k: v for k, v in vars(best).items()})
        merged.corroboration_score = corroboration_bonus(len(sources))
        if len(sources) > 1:
            merged.corroboration_reason = (
                f"confirmed by {len(sources)} sources ({', '.join(sources)})"
            )
        elif len(cluster_records_) > 1:
            merged.corroboration_reason = (
                f"{len(cluster_records_)} linked records from a single source"
            )
        else:
            merged.corroboration_reason = "single source"

        rec = records[primary]
        results.append(
            IdentityCandidate(
                candidate_id=rec.candidate_id or "",
                full_name=rec.display_name(),
                source_type=rec.source_type,
                score_factors=merged,
                demographics=rec.demographics(),
                record=rec,
                linked_records=cluster_records_[1:],
            )
        )

    kept = [c for c in results if c.total_score >= threshold]
    kept.sort(key=lambda c: (-c.total_score, c.candidate_id))

    logger.info(
        "identity_candidates_scored",
        subject_id=scoring_target.query.subject_id,
        records=len(records),
        clusters=len(results),
        returned=len(kept),
        min_score=threshold,
        top_score=kept[0].total_score if kept else None,
    )
    return kept
