"""
Test fixtures for the test suite.

Provides a data factory over a real SQLite session, a controllable clock and
an in-process payment gateway.
"""

import json
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import uuid4
import stripe
from werkzeug.security import generate_password_hash

from coursehub_backend.model import (
    Assignment, Course, Enrollment, Feedback, Lesson, Payment, Submission, User
)
from coursehub_backend.model.types import PaymentStatus, SubmissionType, UserRole
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.payment_gateway import CheckoutSession, PaymentGatewayError, StripePaymentGateway

DEFAULT_PASSWORD = "Passw0rd!"


class FixedClock:
    """Manually advanced clock for registry and credential tests."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)


class Factory:

    def __init__(self, session):
        self.session = session

    def _save(self, entity):
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def user(self, role: UserRole = UserRole.STUDENT, email: Optional[str] = None,
             password: str = DEFAULT_PASSWORD, verified: bool = True) -> User:
        return self._save(User(
            email=email or f"{role.value}-{uuid4().hex[:8]}@example.com",
            password=generate_password_hash(password),
            given_name="Test",
            family_name=role.value.title(),
            role=role,
            email_verified=verified
        ))

    def student(self, **kwargs) -> User:
        return self.user(UserRole.STUDENT, **kwargs)

    def instructor(self, **kwargs) -> User:
        return self.user(UserRole.INSTRUCTOR, **kwargs)

    def admin(self, **kwargs) -> User:
        return self.user(UserRole.ADMIN, **kwargs)

    def course(self, instructor: User, pricing: float = 0, published: bool = True, **kwargs) -> Course:
        values = {"title": "Python Basics", "description": "Learn Python", "currency": "USD"}
        values.update(kwargs)
        return self._save(Course(
            instructor_id=instructor.id,
            pricing=pricing,
            is_published=published,
            **values
        ))

    def lesson(self, course: Course, published: bool = True, order: int = 0, **kwargs) -> Lesson:
        values = {"title": f"Lesson {order}", "content": "Some content"}
        values.update(kwargs)
        return self._save(Lesson(course_id=course.id, is_published=published, order=order, **values))

    def enrollment(self, student: User, course: Course) -> Enrollment:
        return self._save(Enrollment(student_id=student.id, course_id=course.id))

    def payment(self, student: User, course: Course, status: PaymentStatus = PaymentStatus.COMPLETED,
                amount: Optional[float] = None, transaction_id: Optional[str] = None) -> Payment:
        return self._save(Payment(
            student_id=student.id,
            course_id=course.id,
            amount=course.pricing if amount is None else amount,
            currency=course.currency,
            status=status,
            transaction_id=transaction_id
        ))

    def assignment(self, course: Course, submission_type: SubmissionType = SubmissionType.LINK,
                   deadline: Optional[datetime] = None) -> Assignment:
        return self._save(Assignment(
            course_id=course.id,
            title="Homework",
            submission_type=submission_type,
            deadline=deadline
        ))

    def submission(self, assignment: Assignment, student: User) -> Submission:
        return self._save(Submission(
            assignment_id=assignment.id,
            student_id=student.id,
            submission_type=assignment.submission_type,
            link_url="https://example.com/work" if assignment.submission_type == SubmissionType.LINK else None,
            file_url="https://example.com/work.zip" if assignment.submission_type == SubmissionType.FILE else None
        ))

    def feedback(self, submission: Submission, instructor: User, comment: str = "Good work", rating: int = 5) -> Feedback:
        return self._save(Feedback(
            submission_id=submission.id,
            instructor_id=instructor.id,
            comment=comment,
            rating=rating
        ))


def stripe_signature(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    """``Stripe-Signature`` header value for ``payload`` signed with ``secret``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = stripe.WebhookSignature._compute_signature(f"{timestamp}.{payload.decode()}", secret)
    return f"t={timestamp},v1={digest}"


class FakePaymentGateway(StripePaymentGateway):
    """Records checkout requests instead of calling Stripe; webhooks are verified for real."""

    provider = "fake"
    secret = "whsec_test"

    def __init__(self):
        super().__init__(api_key="sk_test_fake", webhook_secret=self.secret)
        self.checkouts: List[dict] = []
        self.fail = False

    async def create_checkout_session(self, payment, course, success_url, cancel_url) -> CheckoutSession:
        if self.fail:
            raise PaymentGatewayError("gateway down")
        session_id = f"cs_test_{len(self.checkouts) + 1}"
        self.checkouts.append({
            "payment_id": payment.id,
            "course_id": course.id,
            "amount": payment.amount,
            "success_url": success_url,
            "cancel_url": cancel_url,
        })
        return CheckoutSession(session_id=session_id, url=f"https://pay.example.com/{session_id}")

    def signed(self, event_type: str, object_id: Optional[str] = None, **metadata):
        """Return (payload, headers) for a webhook delivery."""
        payload = json.dumps({
            "id": f"evt_{uuid4().hex[:12]}",
            "object": "event",
            "type": event_type,
            "data": {"object": {"id": object_id, "metadata": metadata}},
        }).encode()
        headers = {"Stripe-Signature": stripe_signature(payload, self.secret), "Content-Type": "application/json"}
        return payload, headers
