from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmissionType(str, Enum):
    FILE = "file"
    LINK = "link"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    LATE = "late"
    REVIEWED = "reviewed"


def enum_values(enum_class):
    return [member.value for member in enum_class]
