"""
Configuration Manager for Marketplace Microservices

Per-service view over the shared configuration in core.config.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("gkey_service")
    config = config_manager.get_service_config()

    host, port = config_manager.discover_service(
        service_name="postgres_service",
        default_host="localhost",
        default_port=5432,
        env_host_key="POSTGRES_HOST",
        env_port_key="POSTGRES_PORT",
    )
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from core.config import MarketplaceConfig, get_settings

logger = logging.getLogger(__name__)

# Default ports per service
SERVICE_PORTS = {
    "web_gateway": 8300,
    "gkey_service": 8301,
}


@dataclass
class ServiceRuntimeConfig:
    """Resolved runtime settings for one microservice"""
    service_name: str
    service_host: str
    service_port: int
    environment: str
    debug: bool
    log_level: str


class ConfigManager:
    """Resolves configuration for a named microservice"""

    def __init__(self, service_name: str, settings: Optional[MarketplaceConfig] = None):
        self.service_name = service_name
        self.settings = settings or get_settings()

    def _default_port(self) -> int:
        if self.service_name == "web_gateway":
            return self.settings.services.gateway_port
        if self.service_name == "gkey_service":
            return self.settings.services.gkey_service_port
        return SERVICE_PORTS.get(self.service_name, self.settings.default_port)

    def get_service_config(self) -> ServiceRuntimeConfig:
        """Build the runtime config for this service (SERVICE_PORT overrides the default)"""
        port_env = os.getenv("SERVICE_PORT")
        try:
            port = int(port_env) if port_env else self._default_port()
        except ValueError:
            logger.warning(f"Invalid SERVICE_PORT '{port_env}', using default")
            port = self._default_port()

        return ServiceRuntimeConfig(
            service_name=self.service_name,
            service_host=self.settings.default_host,
            service_port=port,
            environment=self.settings.environment,
            debug=self.settings.debug,
            log_level=self.settings.logging.log_level,
        )

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve host/port of a dependency.

        Environment variables win over the supplied defaults.
        """
        host = os.getenv(env_host_key) if env_host_key else None
        port_value = os.getenv(env_port_key) if env_port_key else None

        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid port for {service_name}: '{port_value}', using {default_port}")
            port = default_port

        resolved_host = host or default_host
        logger.debug(f"{self.service_name} resolved {service_name} at {resolved_host}:{port}")
        return resolved_host, port

    def print_config_summary(self, show_secrets: bool = False) -> None:
        """Log a summary of the effective configuration"""
        services = self.settings.services
        auth = self.settings.auth

        def _secret(value: Optional[str]) -> str:
            if not value:
                return "<unset>"
            return value if show_secrets else "***"

        logger.info(f"Configuration for {self.service_name} ({self.settings.environment})")
        logger.info(f"  backend: {services.backend_api_url} (timeout {services.backend_timeout}s)")
        logger.info(f"  postgres: {self.settings.infrastructure.postgres_host}:{self.settings.infrastructure.postgres_port}")
        logger.info(f"  session secret: {_secret(auth.session_secret)}")
        logger.info(f"  jwt secret: {_secret(auth.jwt_secret)}")


__all__ = ["ConfigManager", "ServiceRuntimeConfig", "SERVICE_PORTS"]
