#!/usr/bin/env python3
"""Authentication configuration

Secrets for the two token kinds the services accept:
- session tokens minted by the identity provider (read by the web gateway)
- backend access tokens (read by the G-Key service)
"""
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthConfig:
    """Session and access token settings"""
    session_secret: Optional[str] = None
    session_cookie_name: str = "session-token"
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"

    @classmethod
    def from_env(cls) -> 'AuthConfig':
        """Load auth config from environment variables"""
        return cls(
            session_secret=os.getenv("SESSION_SECRET") or os.getenv("NEXTAUTH_SECRET"),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "session-token"),
            jwt_secret=os.getenv("JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        )
