"""
Identity resolution package — match a partial juror record to public-record candidates.

Name parsing, phonetic and edit-distance comparison, per-candidate band
scoring, and linking of records from several sources into one identity.
"""

from backend_jurymatch.identity.candidate_scorer import (
    ScoringTarget,
    explain,
    rescore,
    score_candidate,
)
from backend_jurymatch.identity.entity_linking import (
    cluster_records,
    corroboration_bonus,
    link_strength,
    score_identity_candidates,
)
from backend_jurymatch.identity.models import (
    CandidateRecord,
    IdentityCandidate,
    IdentityQuery,
    ScoreFactors,
)
from backend_jurymatch.identity.name_parser import ParsedName, name_similarity, parse_name
from backend_jurymatch.identity.phonetic import metaphone, metaphone_match
from backend_jurymatch.identity.similarity import levenshtein_distance, string_similarity

__all__ = [
    "CandidateRecord",
    "IdentityCandidate",
    "IdentityQuery",
    "ParsedName",
    "ScoreFactors",
    "ScoringTarget",
    "cluster_records",
    "corroboration_bonus",
    "explain",
    "levenshtein_distance",
    "link_strength",
    "metaphone",
    "metaphone_match",
    "name_similarity",
    "parse_name",
    "rescore",
    "score_candidate",
    "score_identity_candidates",
    "string_similarity",
]
