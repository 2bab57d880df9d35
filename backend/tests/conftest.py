"""Pytest configuration and fixtures for backend tests.

Every test builds its own application with fresh stores, so no state
leaks between tests. Stores get a controllable clock so TTL expiry and
window resets can be tested without sleeping.
"""

import os

import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient

# Set test environment variables before importing app modules
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "INFO")

from fittrack.core.config import Settings  # noqa: E402
from fittrack.main import create_app  # noqa: E402
from fittrack.middleware.rate_limit import RateLimiter  # noqa: E402
from fittrack.services.auth import AuthService  # noqa: E402
from fittrack.services.csrf_tokens import CsrfTokenStore  # noqa: E402


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="development",
        cors_origins="http://localhost:5000",
        trusted_proxy_ips="",
    )


@pytest.fixture
def csrf_store(clock, test_settings) -> CsrfTokenStore:
    return CsrfTokenStore(ttl_seconds=test_settings.csrf_token_ttl_seconds, clock=clock)


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(max_keys=1000, clock=clock)


@pytest.fixture
def auth_service() -> AuthService:
    # Cheap hashing parameters keep the auth tests fast
    return AuthService(PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1))


@pytest.fixture
def app(test_settings, csrf_store, rate_limiter, auth_service):
    return create_app(
        settings=test_settings,
        csrf_store=csrf_store,
        rate_limiter=rate_limiter,
        auth_service=auth_service,
    )


@pytest.fixture
def client(app) -> TestClient:
    """Test client without lifespan (no background sweeps)."""
    return TestClient(app)


@pytest.fixture
def csrf_token(client) -> str:
    """A freshly issued token, fetched the way the browser client does."""
    response = client.get("/api/csrf-token")
    assert response.status_code == 200
    return response.json()["csrfToken"]
