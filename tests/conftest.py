"""Pytest configuration and shared fixtures.

The database session is replaced by an AsyncMock, so no live Postgres
is needed.
"""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing the app (NullPool, limiter off)
os.environ["TESTING"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-dashboard-api-suite")

from dashboard_api.config import settings

settings.testing = True

from dashboard_api.core.auth import get_token_service
from dashboard_api.core.token_auth import TokenAuthenticationService
from dashboard_api.database import get_db
from dashboard_api.main import app


@pytest.fixture
def mock_db() -> AsyncMock:
    """An AsyncSession stand-in; sync methods are plain MagicMocks."""
    db = AsyncMock()
    db.add = MagicMock()
    db.expunge = MagicMock()
    return db


@pytest_asyncio.fixture
async def client(mock_db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with get_db yielding ``mock_db``."""

    async def _override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def token_service() -> TokenAuthenticationService:
    """The token service the app itself uses."""
    return get_token_service()


@pytest.fixture
def auth_headers(token_service) -> dict[str, str]:
    """Authorization header carrying a valid token for 'tester'."""
    return {"Authorization": f"Bearer {token_service.create_token('tester')}"}
