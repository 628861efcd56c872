"""
Structured JSON logging: timestamp, subject_id, event_type, score fields.

structlog with ISO timestamps, log level, and consistent keys so scoring
runs can be aggregated and audited. All modules use get_logger() and pass
the event name first, then key/value fields (subject_id, candidate_id,
persona_id, scores) where relevant.

Uses only Python stdlib logging and structlog; no other backend_jurymatch
imports so it can be imported from anywhere without cycles.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json for aggregation; console for local runs
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Expose structlog's 'event' as event_type in JSON output, the key dashboards filter on."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_structlog(level: int | str = LOG_LEVEL_VALUE, fmt: str = LOG_FORMAT) -> None:
    """Configure structlog processors, renderer and level filter. level may be a name ("DEBUG")."""
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if fmt == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors += [_normalize_event, structlog.processors.JSONRenderer()]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("identity_candidates_scored", subject_id=jid, count=12, top_score=78)

    Output (JSON): {"event_type": "identity_candidates_scored", "subject_id": "...",
    "count": 12, "top_score": 78, "timestamp": "...", "level": "info", "logger": "module.name"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_subject(subject_id: str) -> structlog.BoundLogger:
    """Return a logger with subject_id (juror or persona) bound to every call."""
    return get_logger("backend_jurymatch").bind(subject_id=subject_id)
