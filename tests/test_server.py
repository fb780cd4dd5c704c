"""Tests for the FastAPI server."""

import pytest
from conftest import FIRST_ID, SECOND_ID, THIRD_ID, jsonl, user
from httpx import ASGITransport, AsyncClient

from aichat_publish.server import app


@pytest.fixture(autouse=True)
def reset_catalog():
    """Reset the catalog instance before each test."""
    import aichat_publish.server as srv
    srv._catalog = None
    yield
    srv._catalog = None


@pytest.mark.asyncio
async def test_get_sessions(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/sessions")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 3
        assert [s["id"] for s in data["sessions"]] == [SECOND_ID, FIRST_ID, THIRD_ID]

        first = data["sessions"][1]
        assert first["summary"] == "Refactored auth module"
        assert first["message_count"] == 6
        assert first["date"] == "2025-01-20T10:00:00Z"
        assert data["sessions"][2]["date"] is None


@pytest.mark.asyncio
async def test_get_sessions_filtered_by_project(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/sessions", params={"project": "/Users/testuser/dev/other"})
        data = resp.json()
        assert data["total"] == 1
        assert data["sessions"][0]["id"] == THIRD_ID


@pytest.mark.asyncio
async def test_get_sessions_search_and_paging(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/sessions", params={"search": "AUTH"})
        data = resp.json()
        assert [s["id"] for s in data["sessions"]] == [FIRST_ID]

        resp = await client.get("/api/sessions", params={"limit": 1, "offset": 1})
        data = resp.json()
        assert data["total"] == 3
        assert [s["id"] for s in data["sessions"]] == [FIRST_ID]


@pytest.mark.asyncio
async def test_get_session_markdown(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(f"/api/session/{FIRST_ID}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["session_id"] == FIRST_ID
        assert data["project_path"] == "/Users/testuser/dev/myapp"
        assert data["markdown"].startswith("# Refactored auth module")


@pytest.mark.asyncio
async def test_get_session_not_found(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/session/does-not-exist")
        assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_session_empty(claude_env):
    project = claude_env / "-Users-testuser-dev-myapp"
    (project / "hollow.jsonl").write_text(jsonl(user("m", "x", isMeta=True)), encoding="utf-8")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/session/hollow")
        assert resp.status_code == 422


@pytest.mark.asyncio
async def test_export_md_endpoint(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(f"/api/export/{SECOND_ID}")
        assert resp.status_code == 200
        assert "text/markdown" in resp.headers.get("content-type", "")
        assert resp.headers["Content-Disposition"] == f'attachment; filename="session-{SECOND_ID}.md"'
        assert resp.text.startswith("# Write tests for the API")


@pytest.mark.asyncio
async def test_export_not_found(claude_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/export/does-not-exist")
        assert resp.status_code == 404
