"""
Pytest configuration and fixtures for all tests.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from coursehub_backend.api.payments import get_payment_gateway
from coursehub_backend.auth.credentials import CredentialService
from coursehub_backend.auth.sessions import AdminSessionRegistry
from coursehub_backend.database import get_db
from coursehub_backend.model import Base
from coursehub_backend.permissions.auth import get_credential_service
from coursehub_backend.server import create_app
from coursehub_backend.tests.fixtures import Factory, FakePaymentGateway, FixedClock


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def Session(engine):
    """Create session factory."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(Session):
    """Create a new database session for a test."""
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def factory(session):
    return Factory(session)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def credentials():
    return CredentialService(secret="test-secret")


@pytest.fixture
def registry(clock):
    return AdminSessionRegistry(clock=clock)


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def app(Session, registry, credentials, gateway):
    app = create_app(registry)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_service] = lambda: credentials
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(credentials, registry):
    """Build Authorization headers for a user; admins get a registered session."""

    def build(user):
        if user.role.value == "admin":
            session_id = f"session-{user.id}"
            registry.create_session(user.id, session_id)
            token = credentials.issue_admin_token(user.id, user.email, session_id)
        else:
            token = credentials.issue_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return build
