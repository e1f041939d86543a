"""
Account lifecycle: signup, email verification, login, admin login/logout and
role changes.
"""

import hmac
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from pydantic import BaseModel
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from coursehub_backend.auth.credentials import CredentialService, generate_session_id
from coursehub_backend.auth.sessions import AdminSessionRegistry
from coursehub_backend.errors import AccessDeniedError, AuthenticationError, DomainError, ErrorCode, ValidationFailedError
from coursehub_backend.interface.auth import SignupRequest
from coursehub_backend.model.auth import User
from coursehub_backend.model.base import as_utc, utc_now
from coursehub_backend.model.types import UserRole
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.base import DuplicateError
from coursehub_backend.repositories.user import UserRepository
from coursehub_backend.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def password_problems(password: str) -> List[str]:
    problems = []
    if len(password) < 8:
        problems.append("at least 8 characters")
    if not re.search(r"[A-Z]", password):
        problems.append("an uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("a lowercase letter")
    if not re.search(r"\d", password):
        problems.append("a number")
    return problems


def log_verification_email(user: User, token: str) -> None:
    logger.info(f"Verification email queued for {user.email}")


class AdminLogin(BaseModel):
    token: str
    session_id: str
    admin_level: str
    expires_at: datetime
    user_id: str


class AuthService:

    def __init__(
        self,
        db: Session,
        credentials: CredentialService,
        verification_ttl: timedelta = timedelta(hours=24),
        send_verification: Callable[[User, str], None] = log_verification_email,
        hardcoded_admin: Optional[Tuple[str, str]] = None
    ):
        self.users = UserRepository(db)
        self.audit = AuditService(db)
        self.credentials = credentials
        self.verification_ttl = verification_ttl
        self.send_verification = send_verification
        self.hardcoded_admin = hardcoded_admin

    def signup(self, data: SignupRequest) -> User:
        email = data.email.strip().lower()

        problems = password_problems(data.password)
        if problems:
            raise ValidationFailedError(f"Password must contain {', '.join(problems)}")

        if self.users.find_by_email(email) is not None:
            raise DomainError(ErrorCode.EMAIL_TAKEN)

        token = secrets.token_urlsafe(32)
        try:
            user = self.users.create(User(
                email=email,
                password=generate_password_hash(data.password),
                given_name=data.given_name.strip(),
                family_name=data.family_name.strip(),
                role=UserRole.STUDENT,
                email_verified=False,
                email_verification_token=token,
                email_verification_token_expiry=utc_now() + self.verification_ttl
            ))
        except DuplicateError:
            raise DomainError(ErrorCode.EMAIL_TAKEN)

        self.send_verification(user, token)
        logger.info(f"User {user.id} signed up")
        return user

    def verify_email(self, token: str) -> User:
        user = self.users.find_by_verification_token(token)
        if user is None:
            raise ValidationFailedError("Invalid verification token")

        expiry = as_utc(user.email_verification_token_expiry)
        if expiry is None or expiry < utc_now():
            raise ValidationFailedError("Verification token has expired")

        return self.users.update(user, {
            "email_verified": True,
            "email_verification_token": None,
            "email_verification_token_expiry": None
        })

    def _check_password(self, email: str, password: str) -> User:
        user = self.users.find_by_email(email)
        if user is None or not check_password_hash(user.password, password):
            raise AuthenticationError(ErrorCode.INVALID_CREDENTIALS)
        return user

    def login(self, email: str, password: str) -> Tuple[str, User]:
        user = self._check_password(email, password)

        if not user.email_verified:
            raise AccessDeniedError(ErrorCode.EMAIL_NOT_VERIFIED)

        if user.role == UserRole.ADMIN:
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Administrators must use the admin login")

        token = self.credentials.issue_token(user.id, user.email, user.role)
        logger.info(f"User {user.id} logged in")
        return token, user

    def _hardcoded_admin_user(self, email: str, password: str) -> Optional[User]:
        if self.hardcoded_admin is None:
            return None

        admin_email, admin_password = self.hardcoded_admin
        if email.strip().lower() != admin_email.strip().lower():
            return None
        if not hmac.compare_digest(password.encode(), admin_password.encode()):
            raise AuthenticationError(ErrorCode.INVALID_CREDENTIALS)

        user = self.users.find_by_email(admin_email)
        if user is None:
            user = self.users.create(User(
                email=admin_email.strip().lower(),
                password=generate_password_hash(admin_password),
                given_name="Admin",
                family_name="System",
                role=UserRole.ADMIN,
                email_verified=True
            ))
        return user

    def admin_login(
        self,
        email: str,
        password: str,
        registry: AdminSessionRegistry,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Tuple[AdminLogin, User]:
        """Issue an admin token bound to a freshly registered admin session."""
        user = self._hardcoded_admin_user(email, password)
        admin_level = "super_admin"

        if user is None:
            user = self._check_password(email, password)
            admin_level = "admin"
            if user.role != UserRole.ADMIN:
                logger.warning(f"Non-admin user {user.id} attempted admin login")
                raise AuthenticationError(ErrorCode.INVALID_CREDENTIALS)

        session_id = generate_session_id()
        token = self.credentials.issue_admin_token(user.id, user.email, session_id, admin_level)
        registry.create_session(user.id, session_id)

        self.audit.record(
            "login",
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"admin_level": admin_level, "session_id": session_id}
        )

        claims = self.credentials.verify_admin_token(token)
        return AdminLogin(
            token=token,
            session_id=session_id,
            admin_level=admin_level,
            expires_at=claims.expires_at,
            user_id=user.id
        ), user

    def admin_logout(
        self,
        principal: Principal,
        registry: AdminSessionRegistry,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        registry.destroy_session(principal.session_id)
        self.audit.record(
            "logout",
            user_id=principal.user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"session_id": principal.session_id}
        )

    def change_role(self, user_id: str, role: UserRole, changed_by: Optional[str] = None) -> User:
        role = UserRole(role)
        user = self.users.get_by_id_optional(user_id)
        if user is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "User not found")

        previous = user.role
        user = self.users.update(user, {"role": role})
        self.audit.record(
            "role_change",
            user_id=user.id,
            details={"from": previous.value, "to": role.value, "changed_by": changed_by}
        )
        return user

    def get_user(self, user_id: str) -> User:
        user = self.users.get_by_id_optional(user_id)
        if user is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "User not found")
        return user
