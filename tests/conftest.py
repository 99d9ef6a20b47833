# =============================================================================================
# TESTS/CONFTEST.PY - SHARED FIXTURES
# =============================================================================================
# TEST STRATEGY:
# - One in-memory SQLite database per test (tables created, then dropped)
# - StaticPool: every connection is the same one, so the TestClient's worker thread
#   sees the tables the test created
# - FastAPI's get_db dependency is overridden to hand out the test session
# - Access tokens for currency routes are minted directly: those routes trust the
#   token's claims and never look the user up
# =============================================================================================

import os

# Settings are read at import time; configure them before importing the app
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-signing-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.db import Base, get_db, init_db
from app.core.security import hash_password
from app.main import app
from app.models.user import User
from app.services.currency_service import CurrencyService
from app.services.token_service import TokenService

# -------------------------
# Test database setup
# -------------------------
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def test_db():
    """Fresh schema for every test."""
    init_db(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(test_db):
    """Session factory bound to the test engine, for code that opens its own sessions."""
    return TestingSessionLocal


@pytest.fixture
def client(test_db):
    """TestClient wired to the test session."""

    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def token_service(test_db, settings):
    return TokenService(test_db, settings)


@pytest.fixture
def currency_service(test_db):
    return CurrencyService(test_db)


@pytest.fixture
def make_user(test_db):
    """Insert a user directly (bypassing /auth/register) with the given roles."""

    def _make_user(email="user@example.com", password="password123", roles=("viewer",)):
        user = User(email=email, password_hash=hash_password(password), roles=list(roles))
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers(token_service):
    """Build an Authorization header for a caller with the given roles."""

    def _headers(*roles, user_id="test-user-id"):
        token = token_service.generate_access_token(user_id, list(roles))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def editor_headers(auth_headers):
    return auth_headers("viewer", "editor")


@pytest.fixture
def viewer_headers(auth_headers):
    return auth_headers("viewer")
