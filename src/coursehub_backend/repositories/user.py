"""
User and audit repositories.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.auth import AuditLog, User


class UserRepository(BaseRepository[User]):
    """Repository for User entity database operations."""

    unique_keys = ("email",)

    def __init__(self, db: Session):
        super().__init__(db, User)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())

    def find_by_verification_token(self, token: str) -> Optional[User]:
        return self.find_one_by(email_verification_token=token)


class AuditLogRepository(BaseRepository[AuditLog]):

    def __init__(self, db: Session):
        super().__init__(db, AuditLog)

    def for_user(self, user_id: str) -> List[AuditLog]:
        return self.find_by(user_id=user_id)
