"""
Repository pattern implementation for direct database access.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    DuplicateError
)
from .user import UserRepository, AuditLogRepository
from .course import (
    CourseRepository,
    LessonRepository,
    LessonCompletionRepository,
    AssignmentRepository,
    SubmissionRepository,
    FeedbackRepository
)
from .enrollment import EnrollmentRepository, PaymentRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "DuplicateError",
    "UserRepository",
    "AuditLogRepository",
    "CourseRepository",
    "LessonRepository",
    "LessonCompletionRepository",
    "AssignmentRepository",
    "SubmissionRepository",
    "FeedbackRepository",
    "EnrollmentRepository",
    "PaymentRepository",
]
