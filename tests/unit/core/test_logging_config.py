"""
Unit Tests for LoggingConfig and setup_service_logger
"""

import logging

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import LoggingConfig
from core.logger import setup_service_logger


pytestmark = pytest.mark.unit


class TestLoggingConfig:

    def test_quiet_logger_names(self):
        config = LoggingConfig(quiet_loggers=" httpx, ,asyncpg ")
        assert config.quiet_logger_names == ["httpx", "asyncpg"]

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("LOG_CONSOLE", "false")
        monkeypatch.setenv("LOG_QUIET_LOGGERS", "httpx")

        config = LoggingConfig.from_env()

        assert config.log_level == "INFO"
        assert config.enable_console is False
        assert config.quiet_logger_names == ["httpx"]
        assert config.environment == "production"

    def test_development_defaults_to_debug(self, monkeypatch):
        monkeypatch.setenv("ENV", "development")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert LoggingConfig.from_env().log_level == "DEBUG"


class TestSetupServiceLogger:

    def test_quiet_loggers_held_at_warning(self):
        config = LoggingConfig(enable_console=False, quiet_loggers="marketplace.test.noisy")

        logger = setup_service_logger("logging_config_test_service", level="debug", config=config)

        assert logger.name == "logging_config_test_service"
        assert logger.level == logging.DEBUG
        assert logging.getLogger("marketplace.test.noisy").level == logging.WARNING
