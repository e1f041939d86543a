import pytest
from datetime import timedelta
from pydantic import ValidationError

from coursehub_backend.errors import AccessDeniedError, AuthenticationError, DomainError, ErrorCode, ValidationFailedError
from coursehub_backend.interface.auth import SignupRequest
from coursehub_backend.model import AuditLog, User
from coursehub_backend.model.types import UserRole
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.auth_service import AuthService, password_problems
from coursehub_backend.tests.fixtures import DEFAULT_PASSWORD


@pytest.fixture
def outbox():
    return []


@pytest.fixture
def service(session, credentials, outbox):
    return AuthService(
        session,
        credentials,
        send_verification=lambda user, token: outbox.append((user.email, token)),
        hardcoded_admin=("root@example.com", "S3cret-root")
    )


def signup_request(email="new@example.com", password=DEFAULT_PASSWORD):
    return SignupRequest(email=email, password=password, given_name="Ada", family_name="Lovelace")


@pytest.mark.parametrize("password,missing", [
    ("short1A", "at least 8 characters"),
    ("alllowercase1", "an uppercase letter"),
    ("ALLUPPERCASE1", "a lowercase letter"),
    ("NoDigitsHere", "a number"),
])
def test_password_problems(password, missing):
    assert missing in password_problems(password)


def test_strong_password_has_no_problems():
    assert password_problems(DEFAULT_PASSWORD) == []


class TestSignup:

    def test_creates_unverified_student_and_sends_token(self, service, outbox):
        user = service.signup(signup_request(email="New@Example.com"))

        assert user.email == "new@example.com"
        assert user.role == UserRole.STUDENT
        assert user.email_verified is False
        assert user.password != DEFAULT_PASSWORD
        assert outbox == [("new@example.com", user.email_verification_token)]

    def test_duplicate_email(self, service):
        service.signup(signup_request())

        with pytest.raises(DomainError) as excinfo:
            service.signup(signup_request(email="NEW@example.com"))

        assert excinfo.value.code == ErrorCode.EMAIL_TAKEN

    @pytest.mark.parametrize("email", [
        "plain", "a@b", "a b@c.d", "a@b..com", "a@.b.com", "a..b@c.com", "a@b.c,", "a@-b.com"
    ])
    def test_invalid_email_is_rejected_before_signup(self, session, email):
        with pytest.raises(ValidationError):
            signup_request(email=email)

        assert session.query(User).count() == 0

    def test_weak_password(self, service):
        with pytest.raises(ValidationFailedError) as excinfo:
            service.signup(signup_request(password="weak"))

        assert "uppercase" in excinfo.value.message


class TestVerification:

    def test_verify_then_login(self, service, outbox):
        service.signup(signup_request())
        _, token = outbox[0]

        verified = service.verify_email(token)
        jwt_token, user = service.login("new@example.com", DEFAULT_PASSWORD)

        assert verified.email_verified is True
        assert verified.email_verification_token is None
        assert service.credentials.verify_token(jwt_token).user_id == user.id

    def test_unknown_token(self, service):
        with pytest.raises(ValidationFailedError):
            service.verify_email("nope")

    def test_expired_token(self, session, credentials, outbox):
        service = AuthService(
            session, credentials,
            verification_ttl=timedelta(seconds=-1),
            send_verification=lambda user, token: outbox.append((user.email, token))
        )
        service.signup(signup_request())

        with pytest.raises(ValidationFailedError):
            service.verify_email(outbox[0][1])


class TestLogin:

    def test_unverified_user(self, service, factory):
        factory.student(email="pending@example.com", verified=False)

        with pytest.raises(AccessDeniedError) as excinfo:
            service.login("pending@example.com", DEFAULT_PASSWORD)

        assert excinfo.value.code == ErrorCode.EMAIL_NOT_VERIFIED

    @pytest.mark.parametrize("email,password", [
        ("student@example.com", "wrong"),
        ("nobody@example.com", DEFAULT_PASSWORD),
    ])
    def test_bad_credentials(self, service, factory, email, password):
        factory.student(email="student@example.com")

        with pytest.raises(AuthenticationError) as excinfo:
            service.login(email, password)

        assert excinfo.value.code == ErrorCode.INVALID_CREDENTIALS


class TestAdminLogin:

    def test_hardcoded_admin_is_materialized(self, service, session, registry):
        login, user = service.admin_login("root@example.com", "S3cret-root", registry)

        assert login.admin_level == "super_admin"
        assert user.role == UserRole.ADMIN
        assert session.query(User).filter(User.email == "root@example.com").count() == 1
        assert registry.is_session_valid(login.session_id, user.id)

        again, same_user = service.admin_login("root@example.com", "S3cret-root", registry)
        assert same_user.id == user.id
        assert again.session_id != login.session_id

    def test_hardcoded_admin_wrong_password(self, service, registry):
        with pytest.raises(AuthenticationError):
            service.admin_login("root@example.com", "guess", registry)

        assert len(registry) == 0

    def test_logout_removes_session_and_audits(self, service, session, registry, factory):
        admin = factory.admin(email="admin@example.com")
        login, _ = service.admin_login("admin@example.com", DEFAULT_PASSWORD, registry)
        principal = Principal(user_id=admin.id, email=admin.email, role=UserRole.ADMIN, session_id=login.session_id)

        service.admin_logout(principal, registry)

        assert registry.get_session(login.session_id) is None
        actions = [entry.action for entry in session.query(AuditLog).all()]
        assert sorted(actions) == ["login", "logout"]


def test_change_role(service, session, factory):
    student = factory.student()

    user = service.change_role(student.id, "instructor", changed_by="cli")

    assert user.role == UserRole.INSTRUCTOR
    entry = session.query(AuditLog).one()
    assert entry.details == {"from": "student", "to": "instructor", "changed_by": "cli"}


def test_change_role_of_unknown_user(service):
    with pytest.raises(AccessDeniedError) as excinfo:
        service.change_role("missing", UserRole.ADMIN)

    assert excinfo.value.code == ErrorCode.NOT_FOUND
