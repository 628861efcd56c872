"""
Application settings.

Builds one typed, immutable Settings object from the environment getters
in config.env. Cached per process; tests call reset_settings() after
changing environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from backend_jurymatch.config import env


@dataclass(frozen=True)
class Settings:
    """Scoring thresholds and snapshot location."""

    min_candidate_score: int
    """Identity candidates with total_score below this are dropped."""
    secondary_min_confidence: float
    """A runner-up persona needs at least this confidence to be 'secondary'."""
    secondary_min_net_score: float
    """...and at least this much net signal weight, so single weak hits stay noise."""
    weight_table_path: Path
    log_level: str
    log_format: str

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            min_candidate_score=env.get_min_candidate_score(),
            secondary_min_confidence=env.get_secondary_min_confidence(),
            secondary_min_net_score=env.get_secondary_min_net_score(),
            weight_table_path=env.get_weight_table_path(),
            log_level=env.get_log_level(),
            log_format=env.get_log_format(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current application settings (cached)."""
    return Settings.from_env()


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
