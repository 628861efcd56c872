"""
Configuration for Backend JuryMatch.

Loads settings from environment variables and an optional .env file and
exposes a single source of truth for scoring thresholds.
"""

from backend_jurymatch.config.settings import Settings, get_settings, reset_settings  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings"]
