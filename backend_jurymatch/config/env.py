"""
Environment variable loading for JuryMatch.

- JURYMATCH_MIN_CANDIDATE_SCORE: drop identity candidates below this total (default 30)
- JURYMATCH_SECONDARY_MIN_CONFIDENCE: minimum confidence for a secondary persona (default 0.3)
- JURYMATCH_SECONDARY_MIN_NET_SCORE: minimum net signal weight for a secondary persona (default 0.5)
- JURYMATCH_WEIGHT_TABLE_PATH: signal-persona weight snapshot CSV (default data/signal_persona_weights.csv)
- LOG_LEVEL / LOG_FORMAT: read by jurymatch_logging
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_jurymatch/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_MIN_CANDIDATE_SCORE = 30
DEFAULT_SECONDARY_MIN_CONFIDENCE = 0.3
DEFAULT_SECONDARY_MIN_NET_SCORE = 0.5
DEFAULT_WEIGHT_TABLE_PATH = _ROOT / "data" / "signal_persona_weights.csv"


def load_jurymatch_env() -> None:
    """Load .env from project root. Existing environment variables win."""
    if _ENV_PATH.exists():
        load_dotenv(_ENV_PATH, override=False)


def _get_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_min_candidate_score() -> int:
    """Minimum total_score an identity candidate needs to be returned (0-100)."""
    load_jurymatch_env()
    return max(0, min(100, _get_int("JURYMATCH_MIN_CANDIDATE_SCORE", DEFAULT_MIN_CANDIDATE_SCORE)))


def get_secondary_min_confidence() -> float:
    load_jurymatch_env()
    value = _get_float("JURYMATCH_SECONDARY_MIN_CONFIDENCE", DEFAULT_SECONDARY_MIN_CONFIDENCE)
    return max(0.0, min(1.0, value))


def get_secondary_min_net_score() -> float:
    load_jurymatch_env()
    return max(0.0, _get_float("JURYMATCH_SECONDARY_MIN_NET_SCORE", DEFAULT_SECONDARY_MIN_NET_SCORE))


def get_weight_table_path() -> Path:
    """
    Resolve the weight snapshot path.
    Order: JURYMATCH_WEIGHT_TABLE_PATH > packaged default.
    """
    load_jurymatch_env()
    raw = (os.getenv("JURYMATCH_WEIGHT_TABLE_PATH") or "").strip()
    return Path(raw) if raw else DEFAULT_WEIGHT_TABLE_PATH


def get_log_level() -> str:
    load_jurymatch_env()
    return (os.getenv("LOG_LEVEL") or "INFO").strip().upper()


def get_log_format() -> str:
    load_jurymatch_env()
    return (os.getenv("LOG_FORMAT") or "json").strip().lower()
