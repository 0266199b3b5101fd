"""
Pastebin Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    mock_db_session:  AsyncMock session for service unit tests (no DB)
    make_paste:       builds Paste rows with sensible defaults
    frozen_now:       pins the service clock to a fixed UTC instant
    sequential_ids:   replaces millisecond ids with 1, 2, 3, ...
    app:              FastAPI app with its lifespan running against a
                      fresh SQLite file (aiosqlite) per test
    test_client:      HTTPX AsyncClient bound to that app
"""

import itertools
import os
from datetime import datetime, timezone

# Override settings for testing BEFORE any pastebin imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from pastebin.config import settings  # noqa: E402
from pastebin.models.paste import Paste  # noqa: E402


FROZEN_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = paste
        result = await paste_service.read_paste(mock_db_session, "123")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_paste():
    """Factory for Paste rows; keyword arguments override the defaults."""

    def _make(**overrides) -> Paste:
        fields = {
            "id": "1768478400000",
            "content": "hello",
            "expires_at": None,
            "max_views": None,
            "view_count": 0,
            "created_at": FROZEN_NOW,
        }
        fields.update(overrides)
        return Paste(**fields)

    return _make


@pytest.fixture
def frozen_now(monkeypatch):
    """Pins PasteService's notion of 'now' to FROZEN_NOW and returns it."""
    monkeypatch.setattr("pastebin.services.paste_service._utcnow", lambda: FROZEN_NOW)
    return FROZEN_NOW


@pytest.fixture
def sequential_ids(monkeypatch):
    """
    Replaces timestamp ids with a counter.

    Tests that create several pastes would otherwise collide whenever two
    inserts land in the same millisecond.
    """
    counter = itertools.count(1)
    monkeypatch.setattr(
        "pastebin.services.paste_service.generate_paste_id",
        lambda: str(next(counter)),
    )
    return counter


@pytest_asyncio.fixture
async def app(tmp_path, monkeypatch):
    """
    A FastAPI app with its lifespan entered.

    Each test gets its own SQLite file, so the schema bootstrap runs against
    an empty database and no rows leak between tests.
    """
    from pastebin.main import create_app

    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'pastes.db'}")

    application = create_app()
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def test_client(app, sequential_ids):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
