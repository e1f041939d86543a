"""
Enrollment workflow.

Three entry points create enrollments and each has its own duplicate
contract:

* ``enroll`` (free courses) and ``enroll_with_payment`` (explicit user
  action) treat an existing enrollment as ALREADY_ENROLLED.
* ``enroll_after_payment`` is driven by at-least-once gateway delivery and
  returns the existing enrollment instead.

The unique constraint on (student_id, course_id) backs all three; a lost
insert race is reported through ``DuplicateError`` from the repository.
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from coursehub_backend.errors import EnrollmentError, ErrorCode
from coursehub_backend.model.course import Course, Enrollment
from coursehub_backend.model.payment import Payment
from coursehub_backend.model.types import EnrollmentStatus, PaymentStatus
from coursehub_backend.repositories.base import DuplicateError
from coursehub_backend.repositories.course import CourseRepository
from coursehub_backend.repositories.enrollment import EnrollmentRepository, PaymentRepository

logger = logging.getLogger(__name__)


class EnrollmentService:

    def __init__(self, db: Session):
        self.courses = CourseRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.payments = PaymentRepository(db)

    def _load_course(self, course_id: str) -> Course:
        course = self.courses.get_by_id_optional(course_id)
        if course is None:
            raise EnrollmentError(ErrorCode.COURSE_NOT_FOUND)
        return course

    def _insert(self, student_id: str, course_id: str) -> Enrollment:
        enrollment = self.enrollments.create(Enrollment(
            student_id=student_id,
            course_id=course_id,
            status=EnrollmentStatus.ACTIVE,
            progress_percentage=0
        ))
        logger.info(f"Student {student_id} enrolled in course {course_id}")
        return enrollment

    def _insert_or_conflict(self, student_id: str, course_id: str) -> Enrollment:
        if self.enrollments.find_for(student_id, course_id) is not None:
            raise EnrollmentError(ErrorCode.ALREADY_ENROLLED)
        try:
            return self._insert(student_id, course_id)
        except DuplicateError:
            raise EnrollmentError(ErrorCode.ALREADY_ENROLLED)

    def enroll(self, course_id: str, student_id: str) -> Enrollment:
        """Direct enrollment into a published free course."""
        course = self._load_course(course_id)

        if course.is_paid:
            raise EnrollmentError(ErrorCode.PAID_COURSE_REQUIRES_PAYMENT)

        if not course.is_published:
            raise EnrollmentError(ErrorCode.COURSE_NOT_AVAILABLE)

        return self._insert_or_conflict(student_id, course.id)

    def enroll_with_payment(self, course_id: str, student_id: str, payment_id: str) -> Enrollment:
        """Enrollment backed by a completed payment the student presents."""
        payment = self.payments.get_by_id_optional(payment_id)
        if payment is None:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_FOUND)

        if payment.status != PaymentStatus.COMPLETED:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_COMPLETED)

        if payment.course_id != course_id:
            raise EnrollmentError(ErrorCode.PAYMENT_WRONG_COURSE)

        if payment.student_id != student_id:
            raise EnrollmentError(ErrorCode.PAYMENT_WRONG_STUDENT)

        course = self._load_course(course_id)
        if not course.is_published:
            raise EnrollmentError(ErrorCode.COURSE_NOT_AVAILABLE)

        return self._insert_or_conflict(student_id, course.id)

    def enroll_after_payment(self, payment_id: str, student_id: Optional[str] = None) -> Enrollment:
        """
        Idempotent enrollment for a completed payment.

        Repeated calls return the same enrollment. ``student_id`` restricts the
        call to the student holding the payment.
        """
        payment: Optional[Payment] = self.payments.get_by_id_optional(payment_id)
        if payment is None:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_FOUND)

        if student_id is not None and payment.student_id != student_id:
            raise EnrollmentError(ErrorCode.PAYMENT_WRONG_STUDENT)

        if payment.status != PaymentStatus.COMPLETED:
            raise EnrollmentError(ErrorCode.PAYMENT_NOT_COMPLETED)

        course = self.courses.get_by_id_optional(payment.course_id)
        if course is None or not course.is_published:
            raise EnrollmentError(ErrorCode.COURSE_NOT_AVAILABLE)

        existing = self.enrollments.find_for(payment.student_id, course.id)
        if existing is not None:
            return existing

        try:
            return self._insert(payment.student_id, course.id)
        except DuplicateError:
            winner = self.enrollments.find_for(payment.student_id, course.id)
            if winner is None:
                raise
            return winner

    def list_for_student(self, student_id: str) -> List[Enrollment]:
        return self.enrollments.list_for_student(student_id)
