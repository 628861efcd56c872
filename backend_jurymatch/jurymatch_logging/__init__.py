"""
Structured logging for Backend JuryMatch.

JSON logs with timestamp, event_type and scoring fields. Use get_logger()
in every module.
"""

from backend_jurymatch.jurymatch_logging.logger import (
    bind_subject,
    configure_structlog,
    get_logger,
)

__all__ = ["bind_subject", "configure_structlog", "get_logger"]
