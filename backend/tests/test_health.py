"""Tests for GET /health and the rate limiter."""

import pytest
import pytest_asyncio

from accounthub.config import settings
from accounthub.database import dispose_engine


@pytest_asyncio.fixture(autouse=True)
async def fresh_engine_pool():
    # /health uses the module-level engine; drop its connections per test loop
    yield
    await dispose_engine()


@pytest.mark.asyncio
async def test_health_reports_database(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["version"]


@pytest.mark.asyncio
async def test_rate_limit_returns_429(test_client, monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_requests", 10)

    statuses = [(await test_client.get("/groups")).status_code for _ in range(11)]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429

    rejected = await test_client.get("/groups", headers={"X-Request-ID": "limited1"})
    assert rejected.status_code == 429
    assert "Retry-After" in rejected.headers
    assert rejected.headers["X-Request-ID"] == "limited1"
    body = rejected.json()
    assert body["error"] == "rate_limit_exceeded"
    assert body["request_id"] == "limited1"
    assert body["details"]["retry_after"] > 0


@pytest.mark.asyncio
async def test_health_is_not_rate_limited(test_client, monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_requests", 10)

    for _ in range(12):
        response = await test_client.get("/health")

    assert response.status_code == 200
