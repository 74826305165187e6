"""
Tests for settings and logging configuration
"""

import logging

import pytest
from pydantic import ValidationError

from pixelflow.config import Settings, SystemSettings, configure_logging, get_settings
from pixelflow.core.enums import BorderMode


class TestSettings:
    """Test environment-driven settings"""

    def test_defaults(self, clean_settings):
        """Test built-in defaults"""
        settings = Settings()
        assert settings.executor.thread_count >= 1
        assert settings.filters.border_mode is BorderMode.EXTEND
        assert settings.filters.constant_value == 0.0
        assert settings.filters.median_window == 3
        assert settings.system.log_level == "INFO"

    def test_environment_overrides(self, clean_settings):
        """Test nested PIXELFLOW_* variables"""
        clean_settings.setenv("PIXELFLOW_EXECUTOR__THREAD_COUNT", "6")
        clean_settings.setenv("PIXELFLOW_FILTERS__BORDER_MODE", "MIRROR")
        clean_settings.setenv("PIXELFLOW_SYSTEM__LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.executor.thread_count == 6
        assert settings.filters.border_mode is BorderMode.MIRROR
        assert settings.system.log_level == "DEBUG"

    def test_invalid_thread_count(self, clean_settings):
        """Test thread counts below 1 are rejected"""
        clean_settings.setenv("PIXELFLOW_EXECUTOR__THREAD_COUNT", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected"""
        with pytest.raises(ValidationError):
            SystemSettings(log_level="loud")

    def test_to_dict(self, clean_settings):
        """Test plain dict export"""
        data = Settings().to_dict()
        assert data["filters"]["border_mode"] == "extend"
        assert set(data) == {"executor", "filters", "system"}

    def test_get_settings_is_cached(self, clean_settings):
        """Test settings are read once"""
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Test logging setup"""

    def test_applies_level(self, clean_settings):
        """Test the root logger honours the configured level"""
        root = logging.getLogger()
        previous_handlers, previous_level = root.handlers[:], root.level
        root.handlers = []
        try:
            settings = Settings(system={"log_level": "WARNING"})
            configure_logging(settings)
            assert root.level == logging.WARNING
        finally:
            root.handlers = previous_handlers
            root.setLevel(previous_level)
