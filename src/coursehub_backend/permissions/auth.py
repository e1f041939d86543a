"""
Authentication dependencies.

Turns the bearer token of a request into a ``Principal``. Admin tokens are
additionally checked against the admin session registry so that a logged out
or force-logged-out session is rejected even while its token is unexpired.
"""

import logging
from functools import lru_cache
from typing import Annotated, Optional
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param

from coursehub_backend.auth.credentials import CredentialService, TokenClaims
from coursehub_backend.auth.sessions import AdminSessionRegistry
from coursehub_backend.errors import AccessDeniedError, AuthenticationError, ErrorCode
from coursehub_backend.model.types import UserRole
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.settings import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_credential_service() -> CredentialService:
    return CredentialService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        token_ttl=settings.JWT_EXPIRY,
        admin_token_ttl=settings.ADMIN_JWT_EXPIRY
    )


def get_session_registry(request: Request) -> AdminSessionRegistry:
    return request.app.state.admin_sessions


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None

    scheme, param = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not param:
        raise AuthenticationError(ErrorCode.INVALID_TOKEN, "Invalid authorization format")
    return param


def parse_authorization_header(request: Request) -> str:
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError(ErrorCode.INVALID_TOKEN, "No authorization provided")
    return token


def authenticate_token(
    token: str,
    credentials: CredentialService,
    registry: AdminSessionRegistry
) -> Principal:
    claims: TokenClaims = credentials.verify_token(token)

    if claims.role == UserRole.ADMIN:
        claims = credentials.verify_admin_token(token)
        if not registry.is_session_valid(claims.session_id, claims.user_id):
            logger.info(f"Rejected admin token for user {claims.user_id}: session not active")
            raise AuthenticationError(ErrorCode.SESSION_INVALID)

    return Principal(
        user_id=claims.user_id,
        email=claims.email,
        role=claims.role,
        session_id=claims.session_id,
        admin_level=claims.admin_level
    )


def get_current_principal(
    token: Annotated[str, Depends(parse_authorization_header)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)]
) -> Principal:
    """Main dependency for getting the current authenticated principal."""
    return authenticate_token(token, credentials, registry)


def get_optional_principal(
    request: Request,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)]
) -> Optional[Principal]:
    """Like ``get_current_principal`` but anonymous requests yield ``None``."""
    token = _bearer_token(request)
    if token is None:
        return None
    return authenticate_token(token, credentials, registry)


def get_current_admin(
    principal: Annotated[Principal, Depends(get_current_principal)]
) -> Principal:
    if not principal.is_admin:
        raise AccessDeniedError(ErrorCode.FORBIDDEN, "Admin access required")
    return principal


def get_current_student(
    principal: Annotated[Principal, Depends(get_current_principal)]
) -> Principal:
    if not principal.is_student:
        raise AccessDeniedError(ErrorCode.FORBIDDEN, "Only students can perform this action")
    return principal
