"""
JWT Token Manager for the Marketplace Services

Signs and verifies HS256 tokens and validates their payload into
SessionClaims at the boundary.
"""

import jwt
import uuid
import secrets
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .roles import Capability, Role, capabilities_for, parse_role

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types"""
    SESSION = "session"
    ACCESS = "access"


class SessionClaims(BaseModel):
    """Validated claims of a session or backend access token"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("sub", "userId", "user_id", "id"))
    role: Optional[str] = None
    access_token: Optional[str] = Field(None, validation_alias=AliasChoices("accessToken", "access_token"))
    email: Optional[str] = None
    name: Optional[str] = None
    expires_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("exp", "expires_at"))

    @property
    def parsed_role(self) -> Optional[Role]:
        return parse_role(self.role)

    def has(self, capability: Capability) -> bool:
        return capability in capabilities_for(self.role)

    def redacted(self) -> Dict[str, Any]:
        """Claims safe to echo back to a client"""
        return {
            "user_id": self.user_id,
            "role": self.role,
            "email": self.email,
            "name": self.name,
            "has_access_token": bool(self.access_token),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


class JWTManager:
    """
    JWT Token Manager

    Features:
    - HS256 session and access tokens
    - Optional issuer verification
    - Typed claims via SessionClaims
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        issuer: Optional[str] = None,
        session_expiry: int = 86400,  # 1 day
    ):
        """
        Initialize JWT Manager

        Args:
            secret_key: Secret key for signing tokens (will auto-generate if not provided)
            algorithm: JWT algorithm (default: HS256)
            issuer: Token issuer; verified only when set
            session_expiry: Session token expiry in seconds
        """
        self.secret_key = secret_key or self._generate_secret()
        self.algorithm = algorithm
        self.issuer = issuer
        self.session_expiry = session_expiry

        if not secret_key:
            logger.warning(
                "No token secret provided - using generated secret. "
                "This should ONLY be used in development!"
            )

    def _generate_secret(self) -> str:
        """Generate a secure random secret"""
        return secrets.token_urlsafe(64)

    def create_token(
        self,
        user_id: str,
        role: Optional[str] = None,
        access_token: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
        token_type: TokenType = TokenType.SESSION,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token

        Returns:
            JWT string
        """
        now = datetime.now(tz=timezone.utc)
        expires = now + (expires_delta or timedelta(seconds=self.session_expiry))

        payload = {
            "iss": self.issuer,
            "sub": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
            "jti": str(uuid.uuid4()),
            "type": token_type.value,
            "role": role,
            "accessToken": access_token,
            "email": email,
            "name": name,
        }

        # Remove None values
        payload = {k: v for k, v in payload.items() if v is not None}

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

        logger.debug(f"Created {token_type.value} token for user: {user_id}, expires: {expires}")
        return token

    def verify_token(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        """
        Verify and decode a JWT token

        Returns:
            Dictionary with verification result and payload
        """
        options = {"verify_exp": verify_exp}
        kwargs = {}
        if self.issuer:
            kwargs["issuer"] = self.issuer

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options=options,
                **kwargs,
            )
            return {
                "valid": True,
                "payload": payload,
                "user_id": payload.get("sub"),
            }

        except jwt.ExpiredSignatureError:
            return {
                "valid": False,
                "error": "Token has expired"
            }
        except jwt.InvalidIssuerError:
            return {
                "valid": False,
                "error": "Invalid token issuer"
            }
        except jwt.InvalidTokenError as e:
            return {
                "valid": False,
                "error": f"Invalid token: {str(e)}"
            }

    def decode_claims(self, token: str) -> Optional[SessionClaims]:
        """
        Verify a token and validate its payload.

        Returns:
            SessionClaims, or None when the token or its claims are invalid
        """
        result = self.verify_token(token)
        if not result.get("valid"):
            logger.debug(f"Rejected token: {result.get('error')}")
            return None

        try:
            return SessionClaims.model_validate(result["payload"])
        except ValidationError as e:
            logger.debug(f"Token claims failed validation: {e.error_count()} error(s)")
            return None


__all__ = ["TokenType", "SessionClaims", "JWTManager"]
