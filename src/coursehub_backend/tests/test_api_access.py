"""
End-to-end access tests through the HTTP API.

Checks that entitlement and workflow outcomes reach the client with the
right status code and ``{"reason", "message"}`` detail.
"""

import pytest
from unittest.mock import patch

from coursehub_backend.model import Course, User
from coursehub_backend.model.types import PaymentStatus
from coursehub_backend.repositories.base import RepositoryError


@pytest.fixture
def instructor(factory):
    return factory.instructor()


@pytest.fixture
def student(factory):
    return factory.student()


def reason(response):
    return response.json()["detail"]["reason"]


class TestAuthentication:

    def test_missing_token(self, client, factory, instructor):
        course = factory.course(instructor)

        response = client.get(f"/courses/{course.id}/content")

        assert response.status_code == 401
        assert reason(response) == "INVALID_TOKEN"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_malformed_header(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Token abc"})

        assert response.status_code == 401

    def test_me(self, client, auth_headers, student):
        response = client.get("/auth/me", headers=auth_headers(student))

        assert response.status_code == 200
        assert response.json()["id"] == student.id

    def test_signup_verify_login_flow(self, client):
        with patch("coursehub_backend.services.auth_service.secrets.token_urlsafe", return_value="verify-me"):
            signup = client.post("/auth/signup", json={
                "email": "learner@example.com",
                "password": "Passw0rd!",
                "given_name": "Grace",
                "family_name": "Hopper"
            })
        assert signup.status_code == 201

        blocked = client.post("/auth/login", json={"email": "learner@example.com", "password": "Passw0rd!"})
        assert blocked.status_code == 403
        assert reason(blocked) == "EMAIL_NOT_VERIFIED"

        assert client.post("/auth/verify-email", json={"token": "verify-me"}).status_code == 200

        login = client.post("/auth/login", json={"email": "learner@example.com", "password": "Passw0rd!"})
        assert login.status_code == 200
        assert login.json()["user"]["role"] == "student"

    def test_duplicate_signup_conflicts(self, client, factory):
        factory.student(email="taken@example.com")

        response = client.post("/auth/signup", json={
            "email": "taken@example.com",
            "password": "Passw0rd!",
            "given_name": "A",
            "family_name": "B"
        })

        assert response.status_code == 409
        assert reason(response) == "EMAIL_TAKEN"

    def test_signup_with_malformed_email_is_422(self, client, session):
        response = client.post("/auth/signup", json={
            "email": "a..b@c.com",
            "password": "Passw0rd!",
            "given_name": "A",
            "family_name": "B"
        })

        assert response.status_code == 422
        assert session.query(User).count() == 0


class TestCourseContent:

    def test_paid_course_without_payment_is_402(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=19.0)

        response = client.get(f"/courses/{course.id}/content", headers=auth_headers(student))

        assert response.status_code == 402
        assert reason(response) == "PAYMENT_REQUIRED"

    def test_not_enrolled_is_403(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor)

        response = client.get(f"/courses/{course.id}/content", headers=auth_headers(student))

        assert response.status_code == 403
        assert reason(response) == "NOT_ENROLLED"

    def test_unpublished_course_is_404(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, published=False)

        for path in (f"/courses/{course.id}", f"/courses/{course.id}/content"):
            response = client.get(path, headers=auth_headers(student))
            assert response.status_code == 404

    def test_owner_sees_draft(self, client, auth_headers, factory, instructor):
        course = factory.course(instructor, published=False, pricing=10.0)

        response = client.get(f"/courses/{course.id}/content", headers=auth_headers(instructor))

        assert response.status_code == 200
        assert response.json()["is_published"] is False

    def test_admin_sees_everything(self, client, auth_headers, factory, instructor):
        course = factory.course(instructor, published=False, pricing=10.0)

        response = client.get(f"/courses/{course.id}/content", headers=auth_headers(factory.admin()))

        assert response.status_code == 200

    def test_storage_fault_is_500(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=10.0)

        with patch(
            "coursehub_backend.repositories.enrollment.PaymentRepository.has_completed_payment",
            side_effect=RepositoryError("connection lost")
        ):
            response = client.get(f"/courses/{course.id}/content", headers=auth_headers(student))

        assert response.status_code == 500
        assert reason(response) == "INTERNAL"

    def test_catalog_lists_only_published(self, client, factory, instructor):
        factory.course(instructor, title="Visible")
        factory.course(instructor, title="Hidden", published=False)

        response = client.get("/courses")

        assert [c["title"] for c in response.json()] == ["Visible"]


class TestCourseManagement:

    def test_instructor_creates_and_publishes(self, client, auth_headers, instructor):
        headers = auth_headers(instructor)

        created = client.post("/courses", json={"title": "Rust", "description": "Systems", "pricing": 199.99, "currency": "usd"}, headers=headers)
        assert created.status_code == 201
        assert created.json()["is_published"] is False
        assert created.json()["currency"] == "USD"

        course_id = created.json()["id"]
        published = client.post(f"/courses/{course_id}/publish", headers=headers)
        assert published.json()["is_published"] is True

    def test_student_cannot_create(self, client, auth_headers, student):
        response = client.post("/courses", json={"title": "x", "description": "y"}, headers=auth_headers(student))

        assert response.status_code == 403

    def test_negative_price_is_rejected(self, client, auth_headers, instructor):
        response = client.post("/courses", json={"title": "x", "description": "y", "pricing": -1}, headers=auth_headers(instructor))

        assert response.status_code == 422

    def test_other_instructor_cannot_edit(self, client, auth_headers, factory, instructor):
        course = factory.course(instructor)

        response = client.patch(f"/courses/{course.id}", json={"title": "Mine now"}, headers=auth_headers(factory.instructor()))

        assert response.status_code == 403
        assert reason(response) == "FORBIDDEN"

    @pytest.mark.parametrize("field", ["title", "description", "pricing", "currency"])
    def test_null_required_field_is_rejected(self, client, auth_headers, session, factory, instructor, field):
        course = factory.course(instructor, pricing=12.5)

        response = client.patch(f"/courses/{course.id}", json={field: None}, headers=auth_headers(instructor))

        assert response.status_code == 422
        session.refresh(course)
        assert course.pricing == 12.5
        assert course.title == "Python Basics"

    def test_null_optional_field_clears_it(self, client, auth_headers, factory, instructor):
        course = factory.course(instructor, duration="6 weeks")

        response = client.patch(f"/courses/{course.id}", json={"duration": None, "pricing": 0}, headers=auth_headers(instructor))

        assert response.status_code == 200
        assert response.json()["duration"] is None

    def test_null_lesson_flag_is_rejected(self, client, auth_headers, factory, instructor):
        lesson = factory.lesson(factory.course(instructor))

        response = client.patch(f"/lessons/{lesson.id}", json={"is_published": None}, headers=auth_headers(instructor))

        assert response.status_code == 422


class TestEnrollmentApi:

    def test_free_enrollment_is_201_then_409(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor)
        headers = auth_headers(student)

        first = client.post(f"/courses/{course.id}/enroll", headers=headers)
        second = client.post(f"/courses/{course.id}/enroll", headers=headers)

        assert first.status_code == 201
        assert first.json()["status"] == "active"
        assert second.status_code == 409
        assert reason(second) == "ALREADY_ENROLLED"

    def test_paid_course_enroll_is_402(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=5.0)

        response = client.post(f"/courses/{course.id}/enroll", headers=auth_headers(student))

        assert response.status_code == 402
        assert reason(response) == "PAID_COURSE_REQUIRES_PAYMENT"

    def test_unknown_course_is_404(self, client, auth_headers, student):
        response = client.post("/courses/missing/enroll", headers=auth_headers(student))

        assert response.status_code == 404
        assert reason(response) == "COURSE_NOT_FOUND"

    def test_wrong_course_payment_is_400(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=5.0)
        other = factory.course(instructor, pricing=7.0)
        payment = factory.payment(student, other)

        response = client.post(
            f"/courses/{course.id}/enroll-with-payment",
            json={"payment_id": payment.id},
            headers=auth_headers(student)
        )

        assert response.status_code == 400
        assert reason(response) == "PAYMENT_WRONG_COURSE"

    def test_pending_payment_is_402(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=5.0)
        payment = factory.payment(student, course, status=PaymentStatus.PENDING)

        response = client.post(
            f"/courses/{course.id}/enroll-with-payment",
            json={"payment_id": payment.id},
            headers=auth_headers(student)
        )

        assert response.status_code == 402
        assert reason(response) == "PAYMENT_NOT_COMPLETED"

    def test_enroll_after_payment_is_idempotent(self, client, auth_headers, factory, instructor, student):
        course = factory.course(instructor, pricing=5.0)
        payment = factory.payment(student, course)
        headers = auth_headers(student)

        first = client.post(f"/payments/{payment.id}/enroll", headers=headers)
        second = client.post(f"/payments/{payment.id}/enroll", headers=headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] == second.json()["id"]

        enrollments = client.get("/students/enrollments", headers=headers).json()
        assert [e["course_id"] for e in enrollments] == [course.id]

    def test_paid_course_scenario(self, client, auth_headers, session, factory, instructor, student):
        headers = auth_headers(student)
        owner_headers = auth_headers(instructor)
        course_id = client.post(
            "/courses",
            json={"title": "Data Science", "description": "Pandas and more", "pricing": 199.99},
            headers=owner_headers
        ).json()["id"]

        response = client.post(f"/courses/{course_id}/enroll", headers=headers)
        assert response.status_code == 402
        assert reason(response) == "PAID_COURSE_REQUIRES_PAYMENT"

        client.post(f"/courses/{course_id}/publish", headers=owner_headers)
        response = client.get(f"/courses/{course_id}/content", headers=headers)
        assert reason(response) == "PAYMENT_REQUIRED"

        course = session.get(Course, course_id)
        payment = factory.payment(student, course, amount=199.99)
        assert client.post(f"/payments/{payment.id}/enroll", headers=headers).status_code == 201

        assert client.get(f"/courses/{course_id}/content", headers=headers).status_code == 200
