"""
Service Logger Setup

Configures the standard library logging for a microservice from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("gkey_service", level=config.log_level.upper())
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig

_configured_services = set()


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root handlers once per service and return the service logger.

    Args:
        service_name: Logger name, also used in the log format
        level: Log level override (defaults to LOG_LEVEL)
        config: Logging config (defaults to environment)

    Returns:
        Logger named after the service
    """
    config = config or LoggingConfig.from_env()
    log_level = (level or config.log_level).upper()

    if service_name not in _configured_services:
        formatter = logging.Formatter(config.log_format)
        root = logging.getLogger()
        root.setLevel(log_level)

        if config.enable_console and not any(
            isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            for h in root.handlers
        ):
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        for name in config.quiet_logger_names:
            logging.getLogger(name).setLevel(logging.WARNING)
        _configured_services.add(service_name)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
