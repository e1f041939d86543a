"""
Domain error types.

Services raise these for expected failures; each carries a machine readable
``code`` next to the human readable message. The HTTP layer translates the
code into a status (see ``coursehub_backend.api.exceptions``).
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    # Entitlement outcomes
    NOT_FOUND = "NOT_FOUND"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    NOT_ENROLLED = "NOT_ENROLLED"
    FORBIDDEN = "FORBIDDEN"

    # Enrollment / payment workflow
    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    COURSE_NOT_AVAILABLE = "COURSE_NOT_AVAILABLE"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    PAID_COURSE_REQUIRES_PAYMENT = "PAID_COURSE_REQUIRES_PAYMENT"
    FREE_COURSE_NO_PAYMENT = "FREE_COURSE_NO_PAYMENT"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"
    PAYMENT_WRONG_COURSE = "PAYMENT_WRONG_COURSE"
    PAYMENT_WRONG_STUDENT = "PAYMENT_WRONG_STUDENT"
    GATEWAY_UNAVAILABLE = "GATEWAY_UNAVAILABLE"

    # Authentication
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    SESSION_INVALID = "SESSION_INVALID"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    EMAIL_TAKEN = "EMAIL_TAKEN"

    # Learning content
    ALREADY_SUBMITTED = "ALREADY_SUBMITTED"
    FEEDBACK_EXISTS = "FEEDBACK_EXISTS"
    VALIDATION_FAILED = "VALIDATION_FAILED"


DEFAULT_MESSAGES = {
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.PAYMENT_REQUIRED: "This is a paid course. Please complete payment first.",
    ErrorCode.NOT_ENROLLED: "You are not enrolled in this course",
    ErrorCode.FORBIDDEN: "Access denied",
    ErrorCode.COURSE_NOT_FOUND: "Course not found",
    ErrorCode.COURSE_NOT_AVAILABLE: "Course is not available for enrollment",
    ErrorCode.ALREADY_ENROLLED: "Student is already enrolled in this course",
    ErrorCode.PAID_COURSE_REQUIRES_PAYMENT: "This is a paid course. Please complete payment to enroll.",
    ErrorCode.FREE_COURSE_NO_PAYMENT: "This course is free. No payment required.",
    ErrorCode.PAYMENT_NOT_FOUND: "Payment not found",
    ErrorCode.PAYMENT_NOT_COMPLETED: "Payment has not been completed",
    ErrorCode.PAYMENT_WRONG_COURSE: "Payment is not for this course",
    ErrorCode.PAYMENT_WRONG_STUDENT: "Payment does not belong to this student",
    ErrorCode.GATEWAY_UNAVAILABLE: "Payment gateway is unavailable",
    ErrorCode.INVALID_TOKEN: "Invalid token",
    ErrorCode.TOKEN_EXPIRED: "Token expired",
    ErrorCode.SESSION_INVALID: "Admin session is invalid or has expired",
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorCode.EMAIL_NOT_VERIFIED: "Please verify your email before logging in",
    ErrorCode.EMAIL_TAKEN: "An account with this email already exists",
    ErrorCode.ALREADY_SUBMITTED: "You have already submitted this assignment",
    ErrorCode.FEEDBACK_EXISTS: "Feedback already exists for this submission",
    ErrorCode.VALIDATION_FAILED: "Validation failed",
}


class DomainError(Exception):
    """Expected failure with a machine readable reason."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or DEFAULT_MESSAGES.get(code, code.value)
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"reason": self.code.value, "message": self.message}


class AccessDeniedError(DomainError):
    """Raised by services when the entitlement evaluator denies access."""
    pass


class EnrollmentError(DomainError):
    """Raised by the enrollment and payment workflow."""
    pass


class AuthenticationError(DomainError):
    """Raised for missing, invalid or revoked credentials."""
    pass


class ValidationFailedError(DomainError):

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_FAILED):
        super().__init__(code, message)
