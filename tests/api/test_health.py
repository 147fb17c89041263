"""Smoke tests for health endpoints and request-id wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ready_without_database_reports_not_configured(client: AsyncClient) -> None:
    """Without DATABASE_URL readiness still answers 200; the cache is reported as disabled."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["database"] == "not_configured"
    assert data["cache"] == "disabled"


async def test_request_id_is_forwarded_or_generated(client: AsyncClient) -> None:
    forwarded = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert forwarded.headers["X-Request-ID"] == "abc-123"
    assert forwarded.headers["X-Correlation-ID"] == "abc-123"

    unsafe = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id; DROP"})
    assert unsafe.headers["X-Request-ID"] != "bad id; DROP"
    assert len(unsafe.headers["X-Request-ID"]) == 36
