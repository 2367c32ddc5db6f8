#!/usr/bin/env python3
"""
Core Module for the Marketplace Microservices

Shared components for every service in the repository.

COMPONENTS:
    - config/: dataclass configuration loaded from the environment
    - config_manager.py: per-service configuration view
    - logger.py: service logger setup
    - roles.py: roles, portals and capabilities
    - jwt_manager.py: token signing/verification and typed session claims
    - auth_dependencies.py: FastAPI session and capability dependencies
    - service_client_base.py: base httpx client with bearer forwarding
    - postgres_client.py: asyncpg pool wrapper

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("gkey_service")
"""

from .config_manager import ConfigManager, ServiceRuntimeConfig

__all__ = [
    "ConfigManager",
    "ServiceRuntimeConfig",
]

__version__ = "1.0.0"
