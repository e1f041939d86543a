import logging
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, DomainError, EnrollmentError, ErrorCode
from coursehub_backend.model.payment import Payment
from coursehub_backend.model.types import PaymentStatus
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.base import RepositoryError
from coursehub_backend.repositories.course import CourseRepository
from coursehub_backend.repositories.enrollment import EnrollmentRepository, PaymentRepository
from coursehub_backend.services.enrollment_service import EnrollmentService
from coursehub_backend.services.payment_gateway import (
    CHECKOUT_COMPLETED,
    PAYMENT_FAILED,
    CheckoutSession,
    GatewayEvent,
    PaymentGateway,
    PaymentGatewayError,
)

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self, db: Session, gateway: PaymentGateway):
        self.gateway = gateway
        self.courses = CourseRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.payments = PaymentRepository(db)
        self.enrollment_service = EnrollmentService(db)

    async def create_checkout_session(
        self,
        course_id: str,
        student_id: str,
        success_url: str,
        cancel_url: str
    ) -> Tuple[Payment, CheckoutSession]:
        """Create a pending payment and the gateway checkout page for it."""
        course = self.courses.get_by_id_optional(course_id)
        if course is None:
            raise EnrollmentError(ErrorCode.COURSE_NOT_FOUND)

        if not course.is_paid:
            raise EnrollmentError(ErrorCode.FREE_COURSE_NO_PAYMENT)

        if self.enrollments.find_for(student_id, course.id) is not None:
            raise EnrollmentError(ErrorCode.ALREADY_ENROLLED)

        payment = self.payments.create(Payment(
            student_id=student_id,
            course_id=course.id,
            amount=course.pricing,
            currency=course.currency,
            status=PaymentStatus.PENDING,
            payment_provider=self.gateway.provider
        ))

        try:
            session = await self.gateway.create_checkout_session(payment, course, success_url, cancel_url)
        except PaymentGatewayError:
            self.payments.update(payment, {"status": PaymentStatus.FAILED})
            raise EnrollmentError(ErrorCode.GATEWAY_UNAVAILABLE)

        payment = self.payments.update(payment, {"transaction_id": session.session_id})
        logger.info(f"Checkout session created for payment {payment.id} (course {course.id})")

        return payment, session

    def _find_event_payment(self, event: GatewayEvent) -> Optional[Payment]:
        if event.payment_id:
            payment = self.payments.get_by_id_optional(event.payment_id)
            if payment is not None:
                return payment
        if event.object_id:
            return self.payments.find_by_transaction_id(event.object_id)
        return None

    def handle_gateway_event(self, event: GatewayEvent) -> Optional[Payment]:
        """
        Apply a gateway event.

        Completion marks the payment completed and enrolls the student inline.
        If that enrollment fails the payment is marked failed so the outcome is
        never lost. Unknown event types are ignored.
        """
        if event.type == CHECKOUT_COMPLETED:
            payment = self._find_event_payment(event)
            if payment is None:
                logger.warning(f"Completion event {event.id} references an unknown payment")
                return None

            if payment.status != PaymentStatus.COMPLETED:
                payment = self.payments.update(payment, {"status": PaymentStatus.COMPLETED})
                logger.info(f"Payment {payment.id} completed")

            try:
                self.enrollment_service.enroll_after_payment(payment.id)
            except (DomainError, RepositoryError) as e:
                logger.warning(f"Enrollment after payment {payment.id} failed, marking payment failed: {e}")
                payment = self.payments.update(payment, {"status": PaymentStatus.FAILED})

            return payment

        if event.type == PAYMENT_FAILED:
            payment = self._find_event_payment(event)
            if payment is None:
                logger.warning(f"Failure event {event.id} references an unknown payment")
                return None

            payment = self.payments.update(payment, {"status": PaymentStatus.FAILED})
            logger.info(f"Payment {payment.id} failed")
            return payment

        logger.info(f"Ignoring gateway event type {event.type}")
        return None

    def _check_visibility(self, principal: Principal, payment: Payment) -> Payment:
        if principal.is_admin or payment.student_id == principal.user_id:
            return payment
        course = self.courses.get_by_id_optional(payment.course_id)
        if course is not None and principal.owns(course):
            return payment
        raise AccessDeniedError(ErrorCode.FORBIDDEN, "Access denied to this payment")

    def get_payment(self, payment_id: str, principal: Principal) -> Payment:
        payment = self.payments.get_by_id_optional(payment_id)
        if payment is None:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_FOUND)
        return self._check_visibility(principal, payment)

    def get_payment_by_transaction(self, transaction_id: str, principal: Principal) -> Payment:
        payment = self.payments.find_by_transaction_id(transaction_id)
        if payment is None:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_FOUND)
        return self._check_visibility(principal, payment)
