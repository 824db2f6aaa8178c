"""Pytest configuration and fixtures."""

import os

# Settings are read once at import time; keep hashing cheap and the DB in memory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db, get_session_factory  # noqa: E402
from app.models.user import ROLE_ADMIN, User  # noqa: E402
from app.services.auth import AuthService  # noqa: E402

TEST_PASSWORD = "P@ssw0rd1"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Worker sessions share the in-memory connection through StaticPool
    app.dependency_overrides[get_session_factory] = lambda: sessionmaker(
        bind=db_session.get_bind(), autocommit=False, autoflush=False
    )
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


def _register(db_session: Session, username: str, email: str, role: str | None = None) -> dict:
    auth_service = AuthService()
    user = auth_service.register(
        db_session,
        username=username,
        email=email,
        password=TEST_PASSWORD,
        first_name="Test",
        last_name="User",
    )
    if role:
        user.role = role
        db_session.commit()
    return {
        "user_id": user.id,
        "username": user.username,
        "email": user.email,
        "password": TEST_PASSWORD,
        "token": auth_service.issue_token(user),
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a regular account and return its details with a token."""
    return _register(db_session, "test_user", "test@example.com")


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """Create an admin account and return its details with a token."""
    return _register(db_session, "site_admin", "admin@example.com", role=ROLE_ADMIN)


@pytest.fixture(name="get_user")
def get_user_fixture(db_session: Session):
    """Return a helper that re-reads an account from the database."""

    def _get(user_id: int) -> User:
        db_session.expire_all()
        return db_session.get(User, user_id)

    return _get


@pytest.fixture(name="rate_limiter")
def rate_limiter_fixture(client: TestClient):
    """Enable the rate limiter for one test, starting from empty counters."""
    from app.rate_limit import limiter

    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()
