import logging
from datetime import datetime, timezone
from typing import Annotated, List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from coursehub_backend.api.auth import get_auth_service
from coursehub_backend.api.exceptions import NotFoundException
from coursehub_backend.auth.credentials import CredentialService
from coursehub_backend.auth.sessions import AdminSessionRegistry
from coursehub_backend.database import get_db
from coursehub_backend.interface.auth import (
    AdminLoginResponse, AdminSessionGet, AdminSessionStatus, ForcedLogoutResponse, LoginRequest
)
from coursehub_backend.interface.users import UserGet, UserRoleUpdate
from coursehub_backend.permissions.auth import (
    get_credential_service, get_current_admin, get_session_registry, parse_authorization_header
)
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.admin_service import force_logout
from coursehub_backend.services.audit_service import AuditService
from coursehub_backend.services.auth_service import AuthService

logger = logging.getLogger(__name__)

admin_router = APIRouter()

EXPIRY_WARNING_SECONDS = 15 * 60

def _client(request: Request):
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")

@admin_router.post("/login", response_model=AdminLoginResponse)
def admin_login(
    request: Request,
    data: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)]
):
    ip_address, user_agent = _client(request)
    login, user = service.admin_login(data.email, data.password, registry, ip_address, user_agent)
    return AdminLoginResponse(
        token=login.token,
        session_id=login.session_id,
        admin_level=login.admin_level,
        expires_at=login.expires_at,
        user=UserGet.model_validate(user)
    )

@admin_router.post("/logout", response_model=dict)
def admin_logout(
    request: Request,
    permissions: Annotated[Principal, Depends(get_current_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)]
):
    ip_address, user_agent = _client(request)
    service.admin_logout(permissions, registry, ip_address, user_agent)
    return {"ok": True}

@admin_router.get("/session/status", response_model=AdminSessionStatus)
def admin_session_status(
    permissions: Annotated[Principal, Depends(get_current_admin)],
    token: Annotated[str, Depends(parse_authorization_header)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)]
):
    claims = credentials.verify_admin_token(token)
    remaining = max(0, int((claims.expires_at - datetime.now(timezone.utc)).total_seconds()))
    return AdminSessionStatus(
        session_id=claims.session_id,
        user_id=claims.user_id,
        expires_at=claims.expires_at,
        remaining_seconds=remaining,
        expiring_soon=remaining < EXPIRY_WARNING_SECONDS
    )

@admin_router.get("/sessions", response_model=List[AdminSessionGet])
def list_admin_sessions(
    permissions: Annotated[Principal, Depends(get_current_admin)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)]
):
    return registry.active_sessions()

@admin_router.delete("/sessions/{session_id}", response_model=ForcedLogoutResponse)
def force_logout_session(
    request: Request,
    session_id: str,
    permissions: Annotated[Principal, Depends(get_current_admin)],
    registry: Annotated[AdminSessionRegistry, Depends(get_session_registry)],
    db: Session = Depends(get_db)
):
    ip_address, user_agent = _client(request)
    terminated = force_logout(registry, AuditService(db), session_id, permissions.user_id, ip_address, user_agent)
    if not terminated:
        raise NotFoundException(detail={"reason": "NOT_FOUND", "message": "Session not found"})
    return ForcedLogoutResponse(session_id=session_id, terminated=True, message="Session terminated successfully")

@admin_router.patch("/users/{user_id}/role", response_model=UserGet)
def change_user_role(
    user_id: str,
    data: UserRoleUpdate,
    permissions: Annotated[Principal, Depends(get_current_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)]
):
    return service.change_role(user_id, data.role, changed_by=permissions.user_id)
