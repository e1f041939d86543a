from .base import Base, metadata
from .types import UserRole, EnrollmentStatus, PaymentStatus, SubmissionType, SubmissionStatus
from .auth import User, AuditLog
from .course import (
    Course,
    Lesson,
    LessonCompletion,
    Enrollment,
    Assignment,
    Submission,
    Feedback
)
from .payment import Payment

__all__ = [
    'Base',
    'metadata',
    # Enums
    'UserRole',
    'EnrollmentStatus',
    'PaymentStatus',
    'SubmissionType',
    'SubmissionStatus',
    # Auth models
    'User',
    'AuditLog',
    # Course models
    'Course',
    'Lesson',
    'LessonCompletion',
    'Enrollment',
    'Assignment',
    'Submission',
    'Feedback',
    # Payments
    'Payment',
]
