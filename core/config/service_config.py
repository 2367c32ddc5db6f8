#!/usr/bin/env python3
"""Service configuration

Endpoints and runtime settings for the marketplace services: the backend the
web gateway proxies to, the service ports, and the G-Key cooloff sweeper.
"""
import os
from dataclasses import dataclass

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ServiceConfig:
    """Marketplace service endpoints"""

    # ===========================================
    # Marketplace backend (proxied by the gateway)
    # ===========================================
    backend_url: str = "http://localhost:3001"
    backend_api_prefix: str = "/api/v1"
    backend_timeout: float = 30.0

    # ===========================================
    # Service ports
    # ===========================================
    gateway_port: int = 8300
    gkey_service_port: int = 8301

    # ===========================================
    # G-Key cooloff sweeper
    # ===========================================
    gkey_sweeper_enabled: bool = True
    gkey_sweep_interval_minutes: int = 15

    @property
    def backend_api_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}{self.backend_api_prefix}"

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            backend_url=os.getenv("BACKEND_URL") or os.getenv("NEXT_PUBLIC_API_URL", "http://localhost:3001"),
            backend_api_prefix=os.getenv("BACKEND_API_PREFIX", "/api/v1"),
            backend_timeout=_float(os.getenv("BACKEND_TIMEOUT", "30"), 30.0),

            gateway_port=_int(os.getenv("GATEWAY_PORT", "8300"), 8300),
            gkey_service_port=_int(os.getenv("GKEY_SERVICE_PORT", "8301"), 8301),

            gkey_sweeper_enabled=_bool(os.getenv("GKEY_SWEEPER_ENABLED", "true")),
            gkey_sweep_interval_minutes=_int(os.getenv("GKEY_SWEEP_INTERVAL_MINUTES", "15"), 15),
        )
