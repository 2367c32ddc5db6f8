"""
G-Key and session fixtures shared by the component and API layers.
"""
from datetime import datetime, timezone
from typing import Optional

from core.jwt_manager import JWTManager

from .common import make_user_id

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_session_token(
    secret: str,
    user_id: Optional[str] = None,
    role: str = "streamer",
    access_token: Optional[str] = "backend-access-token",
    **kwargs,
) -> str:
    """Sign a session token the way the web app does"""
    manager = JWTManager(secret_key=secret)
    return manager.create_token(
        user_id=user_id or make_user_id(),
        role=role,
        access_token=access_token,
        **kwargs,
    )


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
