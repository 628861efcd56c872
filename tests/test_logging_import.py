"""
Test that jurymatch_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from jurymatch_logging and use the logger."""
    from backend_jurymatch.jurymatch_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_subject_binds_id():
    from structlog.testing import capture_logs

    from backend_jurymatch.jurymatch_logging import bind_subject

    with capture_logs() as logs:
        bind_subject("juror-7").info("signals_extracted", count=3)
    assert logs[0]["event"] == "signals_extracted"
    assert logs[0]["subject_id"] == "juror-7"
    assert logs[0]["count"] == 3


def test_console_format_accepts_level_name():
    from backend_jurymatch.jurymatch_logging import configure_structlog, get_logger

    try:
        configure_structlog("DEBUG", "console")
        get_logger("test").debug("console_message", key="value")
    finally:
        configure_structlog()
