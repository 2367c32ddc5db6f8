#!/usr/bin/env python3
"""Modular configuration system for the marketplace services

Configuration hierarchy:
- infra_config: Infrastructure services (PostgreSQL)
- service_config: Backend endpoint, service ports, G-Key sweeper
- auth_config: Session and access token secrets
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .service_config import ServiceConfig
from .auth_config import AuthConfig
from .marketplace_config import MarketplaceConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = MarketplaceConfig.from_env()

def get_settings() -> MarketplaceConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> MarketplaceConfig:
    """Reload settings from environment"""
    global settings
    settings = MarketplaceConfig.from_env()
    return settings

__all__ = [
    # Main config
    'MarketplaceConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'ServiceConfig',
    'AuthConfig',
]
