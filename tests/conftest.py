"""Shared fixtures: an app over in-memory SQLite and an HTTP client for it."""

import os

# Fallback settings for helpers called without an app
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AI_RESPONSE_DELAY_SECONDS", "0")

import random

import pytest
from httpx import ASGITransport, AsyncClient

from review_pilot.core import Settings
from review_pilot.main import create_app
from review_pilot.services import TemplateResponseGenerator

DEFAULT_PASSWORD = "Password123"


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite:///:memory:",
        ai_response_delay_seconds=0,
    )


@pytest.fixture
def generator() -> TemplateResponseGenerator:
    """Deterministic generator with no simulated latency."""
    return TemplateResponseGenerator(rng=random.Random(1234))


@pytest.fixture
async def app(settings, generator):
    application = create_app(settings=settings, response_generator=generator)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session(app):
    """A session on the app's database, committed on exit."""
    async with app.state.db.session_scope() as s:
        yield s


@pytest.fixture
def signup_user(client):
    """Factory: sign up a user and return their token, headers and ids.

    The client's cookie jar is cleared afterwards so requests only carry
    the credentials a test passes explicitly.
    """
    counter = {"n": 0}

    async def _signup(email: str | None = None, name: str = "Test Owner", password: str = DEFAULT_PASSWORD) -> dict:
        counter["n"] += 1
        email = email or f"owner{counter['n']}@example.com"
        response = await client.post(
            "/auth/signup",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        body = response.json()
        return {
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
            "user": body["user"],
            "organization_id": body["organizationId"],
        }

    return _signup

