"""Test fixtures — a fresh app and in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app via create_app(settings) with an
   in-memory SQLite database (aiosqlite). Nothing is shared between
   tests, so there is nothing to roll back.
2. ASGITransport doesn't run the lifespan, so the fixture creates the
   tables itself.
3. bcrypt runs at 4 rounds so signup/login stay fast.

Auth is never mocked: tests sign up real users and send their real
tokens, so the access guard runs on every protected request.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskhub.config import Settings
from taskhub.db.engine import create_tables
from taskhub.main import create_app

TEST_SECRET = "test-secret-not-for-production"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "jwt_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
        "environment": "test",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings():
    return make_settings()


@pytest_asyncio.fixture()
async def app(settings):
    """App instance with its tables created."""
    app = create_app(settings)
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    """Factory: sign up a user, return its JSON plus ready-made headers."""

    async def _register(name: str = "Test User", email: str | None = None,
                        password: str = "password_123") -> dict:
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/auth/signup",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        user = r.json()
        user["headers"] = auth_headers(user["token"])
        return user

    return _register


@pytest_asyncio.fixture()
async def alice(register):
    return await register(name="Alice", email="alice@example.com")


@pytest_asyncio.fixture()
async def bob(register):
    return await register(name="Bob", email="bob@example.com")
