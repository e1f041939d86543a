from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.auth.credentials import CredentialService
from coursehub_backend.database import get_db
from coursehub_backend.interface.auth import (
    LoginRequest, SignupRequest, SignupResponse, TokenResponse, VerifyEmailRequest
)
from coursehub_backend.interface.users import UserGet
from coursehub_backend.permissions.auth import get_credential_service, get_current_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.auth_service import AuthService
from coursehub_backend.settings import settings

auth_router = APIRouter()

def get_auth_service(
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    db: Session = Depends(get_db)
) -> AuthService:
    hardcoded_admin = None
    if settings.HARDCODED_ADMIN_EMAIL and settings.HARDCODED_ADMIN_PASSWORD:
        hardcoded_admin = (settings.HARDCODED_ADMIN_EMAIL, settings.HARDCODED_ADMIN_PASSWORD)

    return AuthService(
        db,
        credentials,
        verification_ttl=settings.EMAIL_VERIFICATION_TTL,
        hardcoded_admin=hardcoded_admin
    )

@auth_router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, service: Annotated[AuthService, Depends(get_auth_service)]):
    user = service.signup(data)
    return SignupResponse(user=UserGet.model_validate(user))

@auth_router.post("/verify-email", response_model=UserGet)
def verify_email(data: VerifyEmailRequest, service: Annotated[AuthService, Depends(get_auth_service)]):
    return service.verify_email(data.token)

@auth_router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, service: Annotated[AuthService, Depends(get_auth_service)]):
    token, user = service.login(data.email, data.password)
    return TokenResponse(token=token, user=UserGet.model_validate(user))

@auth_router.get("/me", response_model=UserGet)
def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[AuthService, Depends(get_auth_service)]
):
    return service.get_user(principal.get_user_id_or_throw())
