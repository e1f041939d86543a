"""
Entitlement evaluation for learning content.

Read access to a Course or Lesson is decided by walking ``CONTENT_ACCESS_RULES``
in order; the first rule that returns an outcome wins. Expected denials are
returned as ``Entitlement`` values. Storage faults during lookups surface as
``RepositoryError``.

Rule order:

1. owner_bypass      instructor owning the course        -> ALLOW
2. admin_bypass      admin                               -> ALLOW
3. publication_gate  course or lesson unpublished        -> NOT_FOUND
4. payment_gate      student, paid course, no payment    -> PAYMENT_REQUIRED
5. enrollment_gate   student without enrollment          -> NOT_ENROLLED
6. student_allow     student                             -> ALLOW
7. default_deny                                          -> FORBIDDEN
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, ErrorCode
from coursehub_backend.model.course import Course, Lesson
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.enrollment import EnrollmentRepository, PaymentRepository


class AccessReason(str, Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    NOT_ENROLLED = "NOT_ENROLLED"
    FORBIDDEN = "FORBIDDEN"


class Entitlement(BaseModel):
    allow: bool
    reason: AccessReason
    rule: Optional[str] = None

    @classmethod
    def granted(cls, rule: Optional[str] = None) -> "Entitlement":
        return cls(allow=True, reason=AccessReason.OK, rule=rule)

    @classmethod
    def denied(cls, reason: AccessReason, rule: Optional[str] = None) -> "Entitlement":
        return cls(allow=False, reason=reason, rule=rule)


@dataclass
class AccessContext:
    principal: Principal
    course: Course
    lesson: Optional[Lesson]
    payments: PaymentRepository
    enrollments: EnrollmentRepository


def owner_bypass(ctx: AccessContext) -> Optional[Entitlement]:
    if ctx.principal.owns(ctx.course):
        return Entitlement.granted()
    return None


def admin_bypass(ctx: AccessContext) -> Optional[Entitlement]:
    if ctx.principal.is_admin:
        return Entitlement.granted()
    return None


def publication_gate(ctx: AccessContext) -> Optional[Entitlement]:
    if not ctx.course.is_published:
        return Entitlement.denied(AccessReason.NOT_FOUND)
    if ctx.lesson is not None and not ctx.lesson.is_published:
        return Entitlement.denied(AccessReason.NOT_FOUND)
    return None


def payment_gate(ctx: AccessContext) -> Optional[Entitlement]:
    if not ctx.principal.is_student or not ctx.course.is_paid:
        return None
    if not ctx.payments.has_completed_payment(ctx.principal.user_id, ctx.course.id):
        return Entitlement.denied(AccessReason.PAYMENT_REQUIRED)
    return None


def enrollment_gate(ctx: AccessContext) -> Optional[Entitlement]:
    if not ctx.principal.is_student:
        return None
    if ctx.enrollments.find_for(ctx.principal.user_id, ctx.course.id) is None:
        return Entitlement.denied(AccessReason.NOT_ENROLLED)
    return None


def student_allow(ctx: AccessContext) -> Optional[Entitlement]:
    if ctx.principal.is_student:
        return Entitlement.granted()
    return None


def default_deny(ctx: AccessContext) -> Optional[Entitlement]:
    return Entitlement.denied(AccessReason.FORBIDDEN)


AccessRule = Tuple[str, Callable[[AccessContext], Optional[Entitlement]]]

CONTENT_ACCESS_RULES: Sequence[AccessRule] = (
    ("owner_bypass", owner_bypass),
    ("admin_bypass", admin_bypass),
    ("publication_gate", publication_gate),
    ("payment_gate", payment_gate),
    ("enrollment_gate", enrollment_gate),
    ("student_allow", student_allow),
    ("default_deny", default_deny),
)


class EntitlementEvaluator:

    def __init__(self, db: Session, rules: Sequence[AccessRule] = CONTENT_ACCESS_RULES):
        self.payments = PaymentRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.rules = rules

    def _evaluate(self, principal: Principal, course: Optional[Course], lesson: Optional[Lesson] = None) -> Entitlement:
        if course is None:
            return Entitlement.denied(AccessReason.NOT_FOUND)

        ctx = AccessContext(
            principal=principal,
            course=course,
            lesson=lesson,
            payments=self.payments,
            enrollments=self.enrollments
        )

        for name, rule in self.rules:
            outcome = rule(ctx)
            if outcome is not None:
                outcome.rule = name
                return outcome

        return Entitlement.denied(AccessReason.FORBIDDEN)

    def evaluate_course_access(self, principal: Principal, course: Optional[Course]) -> Entitlement:
        return self._evaluate(principal, course)

    def evaluate_lesson_access(self, principal: Principal, lesson: Optional[Lesson], course: Optional[Course] = None) -> Entitlement:
        if lesson is None:
            return Entitlement.denied(AccessReason.NOT_FOUND)
        return self._evaluate(principal, course or lesson.course, lesson)

    def evaluate_ownership(self, principal: Principal, course: Optional[Course]) -> Entitlement:
        """Mutation check: admins, or the instructor owning ``course``."""
        if course is None:
            return Entitlement.denied(AccessReason.NOT_FOUND)
        if principal.is_admin:
            return Entitlement.granted("admin_bypass")
        if principal.owns(course):
            return Entitlement.granted("owner_bypass")
        return Entitlement.denied(AccessReason.FORBIDDEN, "default_deny")

    def evaluate_course_creation(self, principal: Principal) -> Entitlement:
        if principal.is_admin or principal.is_instructor:
            return Entitlement.granted()
        return Entitlement.denied(AccessReason.FORBIDDEN)


def require(entitlement: Entitlement, forbidden_message: Optional[str] = None) -> None:
    """Raise ``AccessDeniedError`` carrying the entitlement's reason when denied."""
    if not entitlement.allow:
        code = ErrorCode(entitlement.reason.value)
        raise AccessDeniedError(code, forbidden_message if code == ErrorCode.FORBIDDEN else None)
