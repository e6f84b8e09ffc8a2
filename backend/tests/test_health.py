"""
PhotoShare Backend — Health Endpoint Tests
"""

import pytest

from photoshare import __version__


@pytest.mark.asyncio
async def test_health_reports_components(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["database"] == "connected"
    assert body["cache"] == "disabled"
    assert body["queue"] == "disabled"
    assert body["vision"] == "disabled"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
