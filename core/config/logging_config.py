#!/usr/bin/env python3
"""Logging configuration"""
import os
from dataclasses import dataclass
from typing import List

def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class LoggingConfig:
    """Logging configuration for the gateway and the G-Key service"""
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: str = ""
    enable_console: bool = True

    # Third-party loggers held at WARNING (httpx logs every proxied URL at INFO)
    quiet_loggers: str = "httpx,httpcore"

    # Service identity for logging
    service_name: str = "marketplace"
    environment: str = "development"

    @property
    def quiet_logger_names(self) -> List[str]:
        return [name.strip() for name in self.quiet_loggers.split(",") if name.strip()]

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging config from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            log_format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=_bool(os.getenv("LOG_CONSOLE", "true")),
            quiet_loggers=os.getenv("LOG_QUIET_LOGGERS", "httpx,httpcore"),
            service_name=os.getenv("SERVICE_NAME", "marketplace"),
            environment=env,
        )
