"""
Pastebin Backend: HTTP API Tests
=================================

What:  End-to-end tests through the FastAPI app against a real SQLite file.
How:   HTTPX AsyncClient over ASGITransport; the app lifespan runs, so the
       schema bootstrap creates the pastes table for every test.

What we test:
    ✅ Create → read round trip, status codes and bodies
    ✅ 400 / 404 / 410 / Route not found error bodies
    ✅ View limits and time expiry observed over successive reads
    ✅ Expired pastes never have their view_count touched
    ✅ Id collisions surface as a generic 500
    ✅ Out-of-range expiry, request_id in error bodies, missing table
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from pastebin.config import settings
from pastebin.models.paste import Paste


async def _create(client, **body):
    response = await client.post("/paste", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def _stored_view_count(app, paste_id: str) -> int:
    async with app.state.session_factory() as session:
        result = await session.execute(select(Paste.view_count).where(Paste.id == paste_id))
        return result.scalar_one()


class TestStatusRoutes:

    @pytest.mark.asyncio
    async def test_root_reports_running(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Pastebin Backend is running"}

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/")

        assert len(response.headers["X-Request-ID"]) == 8


class TestCreatePaste:

    @pytest.mark.asyncio
    async def test_create_returns_id_and_link(self, test_client):
        response = await test_client.post("/paste", json={"content": "hello"})

        assert response.status_code == 201
        body = response.json()
        assert body["link"] == f"/paste/{body['id']}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"content": ""}, {"content": None}, {"maxViews": 3}])
    async def test_create_without_content_is_rejected(self, app, test_client, body):
        response = await test_client.post("/paste", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Content is required"

        async with app.state.session_factory() as session:
            result = await session.execute(select(Paste))
            assert result.scalars().all() == []

    @pytest.mark.asyncio
    async def test_create_with_empty_body_is_rejected(self, test_client):
        response = await test_client.post("/paste")

        assert response.status_code == 400
        assert response.json()["error"] == "Content is required"

    @pytest.mark.asyncio
    async def test_create_with_malformed_json_is_rejected(self, test_client):
        response = await test_client.post(
            "/paste",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    @pytest.mark.asyncio
    async def test_create_with_wrongly_typed_limit_is_rejected(self, test_client):
        response = await test_client.post("/paste", json={"content": "x", "maxViews": "many"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("minutes", ["1e10", "-1e10", "NaN", "Infinity", "-Infinity"])
    async def test_create_with_out_of_range_expiry_is_rejected(self, app, test_client, minutes):
        response = await test_client.post(
            "/paste",
            content=f'{{"content": "x", "expiresInMinutes": {minutes}}}'.encode(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

        async with app.state.session_factory() as session:
            result = await session.execute(select(Paste))
            assert result.scalars().all() == []

    @pytest.mark.asyncio
    async def test_create_with_distant_expiry_is_readable(self, test_client):
        created = await _create(test_client, content="a long while", expiresInMinutes=1_000_000)

        response = await test_client.get(created["link"])

        assert response.status_code == 200
        assert response.json()["content"] == "a long while"

    @pytest.mark.asyncio
    async def test_id_collision_is_a_server_error(self, test_client, monkeypatch):
        """Two creations in the same millisecond: the second insert fails with 500."""
        monkeypatch.setattr(
            "pastebin.services.paste_service.generate_paste_id", lambda: "1768478400000"
        )

        first = await test_client.post("/paste", json={"content": "first"})
        second = await test_client.post("/paste", json={"content": "second"})

        assert first.status_code == 201
        assert second.status_code == 500
        assert second.json()["error"] == "Server error"

        read = await test_client.get("/paste/1768478400000")
        assert read.json()["content"] == "first"


class TestReadPaste:

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client):
        created = await _create(test_client, content="hello")

        response = await test_client.get(created["link"])

        assert response.status_code == 200
        assert response.json() == {"content": "hello", "views": 1}

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, test_client):
        response = await test_client.get("/paste/999999")

        assert response.status_code == 404
        assert response.json()["error"] == "Paste not found"

    @pytest.mark.asyncio
    async def test_views_count_up_without_limit(self, app, test_client):
        created = await _create(test_client, content="counted")
        assert await _stored_view_count(app, created["id"]) == 0

        views = []
        for _ in range(5):
            response = await test_client.get(created["link"])
            assert response.status_code == 200
            views.append(response.json()["views"])

        assert views == [1, 2, 3, 4, 5]
        assert await _stored_view_count(app, created["id"]) == 5

    @pytest.mark.asyncio
    async def test_max_views_one(self, app, test_client):
        created = await _create(test_client, content="burn after reading", maxViews=1)

        first = await test_client.get(created["link"])
        second = await test_client.get(created["link"])

        assert first.status_code == 200
        assert first.json()["views"] == 1
        assert second.status_code == 410
        assert second.json()["error"] == "Paste expired"
        assert await _stored_view_count(app, created["id"]) == 1

    @pytest.mark.asyncio
    async def test_past_expiry_is_gone_on_first_read(self, app, test_client):
        created = await _create(test_client, content="too late", expiresInMinutes=-1)

        response = await test_client.get(created["link"])

        assert response.status_code == 410
        assert response.json()["error"] == "Paste expired"
        assert await _stored_view_count(app, created["id"]) == 0

    @pytest.mark.asyncio
    async def test_paste_expires_once_time_passes(self, test_client, monkeypatch):
        created = await _create(test_client, content="ten minutes", expiresInMinutes=10)

        assert (await test_client.get(created["link"])).status_code == 200

        from pastebin.services import paste_service as module

        real_utcnow = module._utcnow
        monkeypatch.setattr(module, "_utcnow", lambda: real_utcnow() + timedelta(minutes=11))

        response = await test_client.get(created["link"])
        assert response.status_code == 410

    @pytest.mark.asyncio
    async def test_expired_reads_are_idempotent(self, app, test_client):
        created = await _create(test_client, content="once", maxViews=1)
        assert (await test_client.get(created["link"])).status_code == 200

        for _ in range(3):
            response = await test_client.get(created["link"])
            assert response.status_code == 410

        assert await _stored_view_count(app, created["id"]) == 1

    @pytest.mark.asyncio
    async def test_pastes_are_independent(self, test_client):
        limited = await _create(test_client, content="limited", maxViews=1)
        open_ = await _create(test_client, content="open")

        await test_client.get(limited["link"])

        assert (await test_client.get(limited["link"])).status_code == 410
        assert (await test_client.get(open_["link"])).json() == {"content": "open", "views": 1}


class TestFallbackRouting:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/nope"),
            ("GET", "/paste/1/extra"),
            ("DELETE", "/paste/1"),
            ("PUT", "/paste"),
        ],
    )
    async def test_unmatched_route(self, test_client, method, path):
        response = await test_client.request(method, path)

        assert response.status_code == 404
        assert response.json()["error"] == "Route not found"


class TestErrorBodies:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, body, status",
        [
            ("GET", "/paste/999999", None, 404),
            ("POST", "/paste", {"content": ""}, 400),
            ("POST", "/paste", {"content": "x", "maxViews": "many"}, 400),
            ("GET", "/nope", None, 404),
        ],
    )
    async def test_request_id_in_body_matches_header(self, test_client, method, path, body, status):
        response = await test_client.request(method, path, json=body)

        assert response.status_code == status
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_client_request_id_in_error_body(self, test_client):
        response = await test_client.get("/paste/999999", headers={"X-Request-ID": "abc12345"})

        assert response.json() == {"error": "Paste not found", "request_id": "abc12345"}

    @pytest.mark.asyncio
    async def test_expired_error_carries_request_id(self, test_client):
        created = await _create(test_client, content="gone", expiresInMinutes=-1)

        response = await test_client.get(created["link"])

        assert response.status_code == 410
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic(self, app, monkeypatch):
        monkeypatch.setattr(
            "pastebin.routes.pastes.paste_service.read_paste",
            AsyncMock(side_effect=RuntimeError("boom: secret internals")),
        )

        # ServerErrorMiddleware re-raises after responding; keep the response
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/paste/1")

        assert response.status_code == 500
        assert response.json()["error"] == "Server error"
        assert "boom" not in response.text


class TestSchemaBootstrapFailure:
    """The app keeps serving when the table could not be created."""

    @pytest.mark.asyncio
    async def test_paste_routes_fail_without_table(self, tmp_path, monkeypatch):
        from pastebin.main import create_app

        monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        monkeypatch.setattr("pastebin.main.init_schema", AsyncMock(return_value=False))

        application = create_app()
        async with application.router.lifespan_context(application):
            transport = ASGITransport(app=application)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                root = await client.get("/")
                read = await client.get("/paste/1")
                create = await client.post("/paste", json={"content": "x"})

        assert root.status_code == 200
        assert read.status_code == 500
        assert read.json()["error"] == "Server error"
        assert create.status_code == 500
        assert create.json()["error"] == "Server error"
