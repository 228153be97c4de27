from unittest.mock import patch

import structlog

from heic_converter import configure_logging
from heic_converter.config import Settings
from heic_converter.utils.logging import (
    LoggingContext,
    add_correlation_id,
    filter_sensitive_data,
    get_logger,
    setup_logging,
)


class TestLoggingConfiguration:
    """Test logging configuration and utilities."""

    def test_setup_logging_json(self):
        with patch("structlog.configure") as mock_configure:
            setup_logging(log_level="INFO", json_logs=True)

            mock_configure.assert_called_once()
            processors = mock_configure.call_args.kwargs["processors"]
            assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_setup_logging_console(self):
        with patch("structlog.configure") as mock_configure:
            setup_logging(log_level="DEBUG", json_logs=False)

            processors = mock_configure.call_args.kwargs["processors"]
            assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_configure_logging_uses_settings(self):
        app_settings = Settings(_env_file=None, log_level="warning", json_logs=True)

        with patch("heic_converter.setup_logging") as mock_setup:
            configure_logging(app_settings)

        mock_setup.assert_called_once_with(log_level="WARNING", json_logs=True)

    def test_filter_redacts_names_and_blobs(self):
        event_dict = {
            "event": "Saved output",
            "filename": "IMG_0001.heic",
            "output_name": "IMG_0001.jpeg",
            "path": "/home/user/photos",
            "data": b"\xff\xd8",
            "size": 1024,
            "note": "IMG_0002.HEIC",
        }

        filtered = filter_sensitive_data(None, None, event_dict)

        assert filtered["filename"] == "***REDACTED***"
        assert filtered["output_name"] == "***REDACTED***"
        assert filtered["path"] == "***REDACTED***"
        assert filtered["data"] == "***REDACTED***"
        assert filtered["note"] == "***FILENAME_REDACTED***"
        assert filtered["size"] == 1024
        assert filtered["event"] == "Saved output"

    def test_filter_nested_values(self):
        filtered = filter_sensitive_data(
            None, None, {"items": [{"error": "/tmp/x"}, {"count": 2, "raw": b"abc"}]}
        )

        assert filtered["items"][0]["error"] == "***PATH_REDACTED***"
        assert filtered["items"][1] == {"count": 2, "raw": "***3 BYTES***"}

    def test_correlation_id_from_context(self):
        with LoggingContext(correlation_id="run-42"):
            event = add_correlation_id(None, None, {})

        assert event["correlation_id"] == "run-42"
        assert "correlation_id" not in structlog.contextvars.get_contextvars()

    def test_correlation_id_generated(self):
        event = add_correlation_id(None, None, {})

        assert len(event["correlation_id"]) == 36

    def test_get_logger(self):
        assert get_logger("heic_converter.test") is not None
