"""
Tests for the enrollment workflow: free enrollment, enrollment backed by a
completed payment, and the idempotent post-payment enrollment.
"""

import pytest
from unittest.mock import MagicMock

from coursehub_backend.errors import EnrollmentError, ErrorCode
from coursehub_backend.model import Enrollment
from coursehub_backend.model.types import EnrollmentStatus, PaymentStatus
from coursehub_backend.repositories.base import DuplicateError, RepositoryError
from coursehub_backend.services.enrollment_service import EnrollmentService


@pytest.fixture
def service(session):
    return EnrollmentService(session)


@pytest.fixture
def instructor(factory):
    return factory.instructor()


@pytest.fixture
def student(factory):
    return factory.student()


def enrollment_count(session, student, course):
    return session.query(Enrollment).filter(
        Enrollment.student_id == student.id,
        Enrollment.course_id == course.id
    ).count()


class TestEnroll:

    def test_free_published_course(self, service, factory, instructor, student):
        course = factory.course(instructor)

        enrollment = service.enroll(course.id, student.id)

        assert enrollment.student_id == student.id
        assert enrollment.course_id == course.id
        assert enrollment.status == EnrollmentStatus.ACTIVE
        assert enrollment.progress_percentage == 0

    def test_second_enrollment_conflicts(self, service, session, factory, instructor, student):
        course = factory.course(instructor)
        service.enroll(course.id, student.id)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll(course.id, student.id)

        assert excinfo.value.code == ErrorCode.ALREADY_ENROLLED
        assert enrollment_count(session, student, course) == 1

    def test_paid_course_requires_payment(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=30.0)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll(course.id, student.id)

        assert excinfo.value.code == ErrorCode.PAID_COURSE_REQUIRES_PAYMENT

    def test_paid_check_precedes_publication_check(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=30.0, published=False)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll(course.id, student.id)

        assert excinfo.value.code == ErrorCode.PAID_COURSE_REQUIRES_PAYMENT

    def test_unpublished_free_course_is_not_available(self, service, factory, instructor, student):
        course = factory.course(instructor, published=False)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll(course.id, student.id)

        assert excinfo.value.code == ErrorCode.COURSE_NOT_AVAILABLE

    def test_unknown_course(self, service, student):
        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll("missing", student.id)

        assert excinfo.value.code == ErrorCode.COURSE_NOT_FOUND

    def test_lost_insert_race_reports_conflict(self, service, session, factory, instructor, student):
        course = factory.course(instructor)
        factory.enrollment(student, course)
        service.enrollments.find_for = MagicMock(return_value=None)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll(course.id, student.id)

        assert excinfo.value.code == ErrorCode.ALREADY_ENROLLED
        assert enrollment_count(session, student, course) == 1

    def test_storage_failure_is_not_reported_as_conflict(self, service, session, factory, instructor):
        course = factory.course(instructor)

        with pytest.raises(RepositoryError) as excinfo:
            service.enroll(course.id, None)

        assert not isinstance(excinfo.value, DuplicateError)
        assert session.query(Enrollment).count() == 0


class TestEnrollWithPayment:

    def test_completed_payment_enrolls(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)

        enrollment = service.enroll_with_payment(course.id, student.id, payment.id)

        assert enrollment.course_id == course.id

    def test_unknown_payment(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, "missing")

        assert excinfo.value.code == ErrorCode.PAYMENT_NOT_FOUND

    @pytest.mark.parametrize("status", [PaymentStatus.PENDING, PaymentStatus.FAILED])
    def test_payment_not_completed(self, service, factory, instructor, student, status):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course, status=status)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.PAYMENT_NOT_COMPLETED

    def test_payment_for_another_course(self, service, session, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        other = factory.course(instructor, pricing=15.0, title="Other")
        payment = factory.payment(student, other)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.PAYMENT_WRONG_COURSE
        assert enrollment_count(session, student, course) == 0
        assert enrollment_count(session, student, other) == 0

    def test_payment_of_another_student(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(factory.student(), course)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.PAYMENT_WRONG_STUDENT

    def test_pending_payment_reported_before_course_mismatch(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        other = factory.course(instructor, pricing=15.0, title="Other")
        payment = factory.payment(student, other, status=PaymentStatus.PENDING)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.PAYMENT_NOT_COMPLETED

    def test_unpublished_course_is_not_available(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0, published=False)
        payment = factory.payment(student, course)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.COURSE_NOT_AVAILABLE

    def test_existing_enrollment_conflicts(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)
        factory.enrollment(student, course)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_with_payment(course.id, student.id, payment.id)

        assert excinfo.value.code == ErrorCode.ALREADY_ENROLLED


class TestEnrollAfterPayment:

    def test_repeated_calls_return_same_enrollment(self, service, session, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)

        first = service.enroll_after_payment(payment.id)
        second = service.enroll_after_payment(payment.id)

        assert first.id == second.id
        assert enrollment_count(session, student, course) == 1

    def test_existing_enrollment_is_returned(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)
        existing = factory.enrollment(student, course)

        assert service.enroll_after_payment(payment.id).id == existing.id

    def test_pending_payment_is_rejected(self, service, session, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course, status=PaymentStatus.PENDING)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_after_payment(payment.id)

        assert excinfo.value.code == ErrorCode.PAYMENT_NOT_COMPLETED
        assert enrollment_count(session, student, course) == 0

    def test_unknown_payment(self, service):
        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_after_payment("missing")

        assert excinfo.value.code == ErrorCode.PAYMENT_NOT_FOUND

    def test_restricted_to_paying_student(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_after_payment(payment.id, student_id=factory.student().id)

        assert excinfo.value.code == ErrorCode.PAYMENT_WRONG_STUDENT

    def test_unpublished_course_is_not_available(self, service, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0, published=False)
        payment = factory.payment(student, course)

        with pytest.raises(EnrollmentError) as excinfo:
            service.enroll_after_payment(payment.id)

        assert excinfo.value.code == ErrorCode.COURSE_NOT_AVAILABLE

    def test_lost_insert_race_returns_winner(self, service, session, factory, instructor, student):
        course = factory.course(instructor, pricing=40.0)
        payment = factory.payment(student, course)
        winner = factory.enrollment(student, course)
        service.enrollments.find_for = MagicMock(side_effect=[None, winner])

        result = service.enroll_after_payment(payment.id)

        assert result.id == winner.id
        assert enrollment_count(session, student, course) == 1


def test_list_for_student(service, factory, instructor, student):
    first = factory.course(instructor)
    second = factory.course(instructor, title="Second")
    factory.enrollment(student, first)
    factory.enrollment(student, second)
    factory.enrollment(factory.student(), first)

    enrollments = service.list_for_student(student.id)

    assert {e.course_id for e in enrollments} == {first.id, second.id}
