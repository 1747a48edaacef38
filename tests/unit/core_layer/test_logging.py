"""
Unit Tests for Logging Module

Tests logger configuration, request context, and logging utilities.
"""

from unittest.mock import MagicMock

import pytest

from hn_cache.core.config.constants import Stage
from hn_cache.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)
        assert hasattr(logger, "info")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_both_formats(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        get_logger(__name__).debug("configured", log_format=log_format)


@pytest.mark.unit
class TestRequestContext:
    """Request ID context management."""

    def test_set_and_clear_request_id(self):
        set_request_id("req-123")
        assert get_request_id() == "req-123"

        clear_request_id()
        assert get_request_id() is None

    def test_processor_injects_request_id(self):
        set_request_id("req-456")
        try:
            event = add_request_id(None, "info", {"event": "x"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-456"

    def test_processor_skips_missing_request_id(self):
        clear_request_id()

        assert "request_id" not in add_request_id(None, "info", {"event": "x"})

    def test_level_name_upper_cased(self):
        assert add_log_level_name(None, "warning", {"level": "warning"})["level"] == "WARNING"


@pytest.mark.unit
class TestLogStage:
    """log_stage helper."""

    def test_stage_enum_is_logged_by_value(self):
        logger = MagicMock()

        log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", key="8863")

        logger.info.assert_called_once_with("Cache hit", stage="1.0_CACHE_LOOKUP", key="8863")

    def test_custom_level(self):
        logger = MagicMock()

        log_stage(logger, Stage.UPSTREAM_FETCH, "Upstream failed", level="ERROR", attempts=4)

        logger.error.assert_called_once_with("Upstream failed", stage="2.0_UPSTREAM_FETCH", attempts=4)

    def test_plain_string_stage(self):
        logger = MagicMock()

        log_stage(logger, "CUSTOM", "message")

        logger.info.assert_called_once_with("message", stage="CUSTOM")
