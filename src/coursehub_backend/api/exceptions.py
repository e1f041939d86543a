from typing import Any, Dict, Optional
from fastapi import HTTPException, status

from coursehub_backend.errors import DomainError, ErrorCode

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers or {"WWW-Authenticate": "Bearer"}
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class PaymentRequiredException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_402_PAYMENT_REQUIRED
        self.detail = detail or "Payment required"

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Conflict"

class ServiceUnavailableException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        self.detail = detail or "Service unavailable error"

_EXCEPTION_BY_CODE = {
    ErrorCode.NOT_FOUND: NotFoundException,
    ErrorCode.COURSE_NOT_FOUND: NotFoundException,
    ErrorCode.COURSE_NOT_AVAILABLE: NotFoundException,
    ErrorCode.PAYMENT_NOT_FOUND: NotFoundException,

    ErrorCode.PAYMENT_REQUIRED: PaymentRequiredException,
    ErrorCode.PAID_COURSE_REQUIRES_PAYMENT: PaymentRequiredException,
    ErrorCode.PAYMENT_NOT_COMPLETED: PaymentRequiredException,

    ErrorCode.NOT_ENROLLED: ForbiddenException,
    ErrorCode.FORBIDDEN: ForbiddenException,
    ErrorCode.PAYMENT_WRONG_STUDENT: ForbiddenException,
    ErrorCode.EMAIL_NOT_VERIFIED: ForbiddenException,

    ErrorCode.INVALID_TOKEN: UnauthorizedException,
    ErrorCode.TOKEN_EXPIRED: UnauthorizedException,
    ErrorCode.SESSION_INVALID: UnauthorizedException,
    ErrorCode.INVALID_CREDENTIALS: UnauthorizedException,

    ErrorCode.ALREADY_ENROLLED: ConflictException,
    ErrorCode.ALREADY_SUBMITTED: ConflictException,
    ErrorCode.FEEDBACK_EXISTS: ConflictException,
    ErrorCode.EMAIL_TAKEN: ConflictException,

    ErrorCode.PAYMENT_WRONG_COURSE: BadRequestException,
    ErrorCode.FREE_COURSE_NO_PAYMENT: BadRequestException,
    ErrorCode.VALIDATION_FAILED: BadRequestException,

    ErrorCode.GATEWAY_UNAVAILABLE: ServiceUnavailableException,
}

def domain_error_to_http_exception(error: DomainError) -> HTTPException:
    exception_class = _EXCEPTION_BY_CODE.get(error.code, BadRequestException)
    return exception_class(detail=error.to_detail())
