"""
Tests for the rate-limited logging helper.
"""
import logging
from unittest.mock import MagicMock, patch

from cachetools import TTLCache

from urwa_console._rate_limited_log import rate_limited_log, reset_rate_limits


def _logger(name="test.rate_limit"):
    mock_logger = MagicMock()
    mock_logger.name = name
    return mock_logger


class TestRateLimitedLog:
    """Tests for the rate-limited logging implementation."""

    def test_repeated_message_is_suppressed(self):
        mock_logger = _logger()

        assert rate_limited_log("Fee estimation failed", logger_instance=mock_logger) is True
        assert rate_limited_log("Fee estimation failed", logger_instance=mock_logger) is False

        mock_logger.warning.assert_called_once_with("Fee estimation failed")

    def test_level_and_message_are_part_of_the_key(self):
        mock_logger = _logger()

        rate_limited_log("Test message", level="warning", logger_instance=mock_logger)
        rate_limited_log("Test message", level="error", logger_instance=mock_logger)
        rate_limited_log("Other message", level="warning", logger_instance=mock_logger)

        mock_logger.error.assert_called_once_with("Test message")
        assert mock_logger.warning.call_count == 2

    def test_loggers_do_not_share_suppression(self):
        first, second = _logger("a"), _logger("b")
        rate_limited_log("same", logger_instance=first)
        rate_limited_log("same", logger_instance=second)
        first.warning.assert_called_once()
        second.warning.assert_called_once()

    def test_unknown_level_falls_back_to_warning(self):
        mock_logger = MagicMock(spec=["name", "warning"])
        mock_logger.name = "limited"
        rate_limited_log("odd", level="verbose", logger_instance=mock_logger)
        mock_logger.warning.assert_called_once_with("odd")

    def test_reset(self):
        mock_logger = _logger()
        rate_limited_log("again", logger_instance=mock_logger)
        reset_rate_limits()
        rate_limited_log("again", logger_instance=mock_logger)
        assert mock_logger.warning.call_count == 2

    def test_expiry(self):
        mock_logger = _logger()
        now = [1000.0]
        cache = TTLCache(maxsize=10, ttl=60, timer=lambda: now[0])

        with patch("urwa_console._rate_limited_log._cache_for",
                   return_value=cache):
            rate_limited_log("expiring", logger_instance=mock_logger)
            rate_limited_log("expiring", logger_instance=mock_logger)
            now[0] += 61
            rate_limited_log("expiring", logger_instance=mock_logger)

        assert mock_logger.warning.call_count == 2

    def test_default_logger(self, caplog):
        with caplog.at_level(logging.WARNING, logger="urwa_console._rate_limited_log"):
            rate_limited_log("from default logger")
        assert "from default logger" in caplog.text
