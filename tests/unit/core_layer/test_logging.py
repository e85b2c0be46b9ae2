"""
Unit Tests for Logging Module

Tests logger configuration, processors and logging utilities.
"""

from unittest.mock import MagicMock

import pytest

from redis_dataloader.core.config.constants import Stage
from redis_dataloader.core.logging.logger import (
    add_log_level_name,
    add_timestamp,
    get_logger,
    log_stage,
    setup_logging,
    truncate_key,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)

        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging(self, log_format):
        """Test that both renderers configure without error."""
        setup_logging(log_level="DEBUG", log_format=log_format)

        get_logger("test").debug("configured", stage="LOADER.INIT")


@pytest.mark.unit
class TestProcessors:
    """Test custom structlog processors."""

    def test_add_timestamp(self):
        event = add_timestamp(None, "info", {"event": "x"})

        assert event["timestamp"].endswith("Z")

    def test_add_log_level_name(self):
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"

    def test_add_log_level_name_without_level(self):
        assert add_log_level_name(None, "info", {"event": "x"}) == {"event": "x"}


@pytest.mark.unit
class TestLogStage:
    """Test stage-tagged logging."""

    def test_log_stage_uses_enum_value(self):
        logger = MagicMock()

        log_stage(logger, Stage.STORE_FALLBACK, "Falling back", level="warning", keys=3)

        logger.warning.assert_called_once_with("Falling back", stage=Stage.STORE_FALLBACK.value, keys=3)

    def test_log_stage_accepts_plain_string(self):
        logger = MagicMock()

        log_stage(logger, "CUSTOM", "Message")

        logger.info.assert_called_once_with("Message", stage="CUSTOM")


@pytest.mark.unit
class TestTruncateKey:
    """Test cache key shortening for log fields."""

    def test_short_key_unchanged(self):
        assert truncate_key("user:42") == "user:42"

    def test_long_key_truncated(self):
        assert truncate_key("q:" + "x" * 100, limit=10) == "q:xxxxxxxx..."
