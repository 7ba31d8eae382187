import httpx
import pytest

from meetassist import create_app


@pytest.mark.asyncio
async def test_health(settings, database, providers):
    app = create_app(settings=settings, database=database, providers=providers)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["environment"] == "test"
    assert "version" in data
    assert data["providers"] == {"transcription": False, "summarization": False, "email": False}


@pytest.mark.asyncio
async def test_database_health(client):
    resp = await client.get("/health/db")
    assert resp.status_code == 200
    assert resp.json()["database_connected"] is True
