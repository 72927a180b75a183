"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from datetime import datetime, timezone, timedelta
from typing import Any

import jwt  # PyJWT
import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_auth_gate, get_profile_service, reset_container
from modules.auth.service import AuthGate
from modules.auth.verifier import SecretTokenVerifier
from modules.users.repository import InMemoryUserStore
from modules.users.service import ProfileService
from shared.config import get_settings
from shared.database import reset_client_cache
from shared.models import Principal


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    email_verified: bool = True,
    secret: str = TEST_JWT_SECRET,
    **extra: Any,
) -> str:
    """
    Create a Supabase-style HS256 access token.

    Args:
        user_id: Subject claim; pass "" to mint a token with no subject
        email: Email to include in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as confirmed
        secret: Signing secret
        **extra: Additional claims, overriding the defaults

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    payload.update(extra)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings, clients and services around each test."""
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def principal(test_user_id: str, test_user_email: str) -> Principal:
    return Principal(id=test_user_id, email=test_user_email, email_verified=True)


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def auth_gate() -> AuthGate:
    """Auth gate verifying tokens signed with TEST_JWT_SECRET."""
    return AuthGate(SecretTokenVerifier(TEST_JWT_SECRET), timeout=5.0)


@pytest.fixture
def memory_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def profile_service(memory_store: InMemoryUserStore) -> ProfileService:
    return ProfileService(memory_store, timeout=5.0)


@pytest.fixture
def app(auth_gate: AuthGate, profile_service: ProfileService):
    """Create a fresh app wired to the test gate and an in-memory store."""
    app = create_app()
    app.dependency_overrides[get_auth_gate] = lambda: auth_gate
    app.dependency_overrides[get_profile_service] = lambda: profile_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
