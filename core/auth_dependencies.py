"""
FastAPI Authentication Dependencies for Microservices

Session extraction and declarative capability checks shared by all services.

Each app puts a SessionAuthenticator on ``app.state.authenticator`` in its
lifespan (or at import time); the dependencies below read it from there.
"""

from fastapi import Depends, HTTPException, Request, status
from typing import Callable, Optional
import logging

from .jwt_manager import JWTManager, SessionClaims
from .roles import Capability

logger = logging.getLogger(__name__)

DEFAULT_SESSION_COOKIE = "session-token"


class SessionAuthenticator:
    """Finds the session token on a request and decodes it into claims"""

    def __init__(self, jwt_manager: JWTManager, cookie_name: str = DEFAULT_SESSION_COOKIE):
        self.jwt_manager = jwt_manager
        self.cookie_name = cookie_name

    def extract_token(self, request: Request) -> Optional[str]:
        """Bearer header first, then the session cookie"""
        authorization = request.headers.get("Authorization")
        if authorization:
            scheme, _, token = authorization.partition(" ")
            if scheme.lower() == "bearer" and token.strip():
                return token.strip()
        return request.cookies.get(self.cookie_name) or None

    def authenticate(self, request: Request) -> Optional[SessionClaims]:
        token = self.extract_token(request)
        if not token:
            return None
        return self.jwt_manager.decode_claims(token)


def _get_authenticator(request: Request) -> SessionAuthenticator:
    authenticator = getattr(request.app.state, "authenticator", None)
    if authenticator is None:
        logger.error("No SessionAuthenticator configured on app.state")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured"
        )
    return authenticator


async def optional_session(request: Request) -> Optional[SessionClaims]:
    """
    可选认证依赖：允许匿名或已认证访问

    Returns:
        SessionClaims or None
    """
    return _get_authenticator(request).authenticate(request)


async def require_session(
    claims: Optional[SessionClaims] = Depends(optional_session),
) -> SessionClaims:
    """
    认证依赖：需要有效会话

    Raises:
        HTTPException 401: 无令牌或令牌无效
    """
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return claims


def require_capability(capability: Capability) -> Callable:
    """
    Build a dependency that requires a valid session holding ``capability``.

    使用示例：
        @app.post("/api/g-keys")
        async def initialize(
            claims: SessionClaims = Depends(require_capability(Capability.HOLD_GKEYS))
        ):
            ...
    """

    async def _check(claims: SessionClaims = Depends(require_session)) -> SessionClaims:
        if not claims.has(capability):
            logger.info(f"User {claims.user_id} with role {claims.role} lacks {capability.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "Forbidden",
                    "required": capability.value,
                    "currentRole": claims.role,
                },
            )
        return claims

    return _check


__all__ = [
    "DEFAULT_SESSION_COOKIE",
    "SessionAuthenticator",
    "optional_session",
    "require_session",
    "require_capability",
]
