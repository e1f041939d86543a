from typing import Optional
from pydantic import BaseModel

from coursehub_backend.api.exceptions import NotFoundException
from coursehub_backend.model.types import UserRole


class Principal(BaseModel):
    """Authenticated actor making a request."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.STUDENT

    # Present only on admin tokens
    session_id: Optional[str] = None
    admin_level: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def get_user_id_or_throw(self) -> str:
        """Get user ID or raise exception"""
        if self.user_id is None:
            raise NotFoundException("User ID not found")
        return self.user_id

    def owns(self, course) -> bool:
        """True for the instructor who owns ``course``."""
        return self.is_instructor and self.user_id is not None and course.instructor_id == self.user_id
