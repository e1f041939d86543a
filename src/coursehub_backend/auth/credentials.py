"""
Signed credential service.

Tokens are HS256 JWTs (python-jose). Regular tokens carry the user id, email
and role; admin tokens additionally carry the admin session id and level and
use a shorter validity window.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel

from coursehub_backend.errors import AuthenticationError, ErrorCode
from coursehub_backend.model.types import UserRole

logger = logging.getLogger(__name__)

ADMIN_LEVELS = ("admin", "super_admin")


class TokenClaims(BaseModel):
    user_id: str
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime
    session_id: Optional[str] = None
    admin_level: Optional[str] = None


def generate_session_id() -> str:
    return secrets.token_hex(32)


class CredentialService:

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        token_ttl: timedelta = timedelta(days=7),
        admin_token_ttl: timedelta = timedelta(hours=4),
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.token_ttl = token_ttl
        self.admin_token_ttl = admin_token_ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _encode(self, claims: dict, ttl: timedelta) -> str:
        issued_at = self._clock()
        payload = dict(claims)
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + ttl).timestamp())
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_token(self, user_id: str, email: str, role: UserRole) -> str:
        return self._encode(
            {"user_id": user_id, "email": email, "role": UserRole(role).value},
            self.token_ttl
        )

    def issue_admin_token(self, user_id: str, email: str, session_id: str, admin_level: str = "admin") -> str:
        if admin_level not in ADMIN_LEVELS:
            raise ValueError(f"Unknown admin level: {admin_level}")
        return self._encode(
            {
                "user_id": user_id,
                "email": email,
                "role": UserRole.ADMIN.value,
                "session_id": session_id,
                "admin_level": admin_level,
            },
            self.admin_token_ttl
        )

    def verify_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry.

        Raises:
            AuthenticationError: TOKEN_EXPIRED or INVALID_TOKEN
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError(ErrorCode.TOKEN_EXPIRED)
        except JWTError as e:
            logger.debug(f"Rejected token: {e}")
            raise AuthenticationError(ErrorCode.INVALID_TOKEN)

        try:
            return TokenClaims(
                user_id=payload["user_id"],
                email=payload["email"],
                role=payload["role"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                session_id=payload.get("session_id"),
                admin_level=payload.get("admin_level"),
            )
        except (KeyError, ValueError, TypeError):
            raise AuthenticationError(ErrorCode.INVALID_TOKEN)

    def verify_admin_token(self, token: str) -> TokenClaims:
        """Verify a token and require the admin claims and the admin validity window."""
        claims = self.verify_token(token)

        if claims.role != UserRole.ADMIN or not claims.session_id or claims.admin_level not in ADMIN_LEVELS:
            raise AuthenticationError(ErrorCode.INVALID_TOKEN, "Not an admin token")

        if self._clock() - claims.issued_at > self.admin_token_ttl:
            raise AuthenticationError(ErrorCode.TOKEN_EXPIRED, "Admin token expired")

        return claims
