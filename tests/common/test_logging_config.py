"""Tests for logging configuration."""

import pytest
from pydantic import ValidationError
from nanoreader.common.logging_config import LoggingConfig


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_valid_config(self):
        config = LoggingConfig(level="INFO", format="json")
        assert config.level == "INFO"
        assert config.format == "json"

    def test_default_values(self):
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "simple"
        assert config.file is None

    def test_rejects_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")

        with pytest.raises(ValidationError):
            LoggingConfig(level="CRITICAL")

    def test_rejects_invalid_format(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_case_insensitive_log_level(self):
        """Test that log level is case-insensitive."""
        assert LoggingConfig(level="info").level == "INFO"
        assert LoggingConfig(level="Debug").level == "DEBUG"

    def test_case_insensitive_format(self):
        """Test that format is case-insensitive."""
        assert LoggingConfig(format="JSON").format == "json"
        assert LoggingConfig(format="Detailed").format == "detailed"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            LoggingConfig(level="INFO", unknown_field="value")

        assert "extra_forbidden" in str(exc_info.value).lower()

    def test_file_format(self):
        assert LoggingConfig().file_format == "json"
        assert LoggingConfig(file_format="Detailed").file_format == "detailed"

        with pytest.raises(ValidationError):
            LoggingConfig(file_format="simple")

    def test_serialization(self):
        config = LoggingConfig(level="DEBUG", format="detailed", file="/tmp/log.txt")
        assert config.model_dump() == {
            "level": "DEBUG",
            "format": "detailed",
            "file": "/tmp/log.txt",
            "file_format": "json",
        }
