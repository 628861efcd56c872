"""
Backend JuryMatch — juror identity resolution and persona classification.

Combines weak, independently scored signals into ranked, explainable
confidence scores: public-record candidates for a juror's identity, and
psychological persona archetypes for a juror's attributes. Pure library;
callers own persistence, search and presentation.
"""

__version__ = "0.1.0"

from backend_jurymatch.pipeline import (  # noqa: E402
    classify_personas,
    parse_name,
    score_identity_candidates,
)

__all__ = [
    "__version__",
    "classify_personas",
    "parse_name",
    "score_identity_candidates",
]
