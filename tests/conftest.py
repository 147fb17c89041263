"""Pytest configuration and fixtures for gatekeeper.

Env defaults are applied before app.main is imported (settings are read in
create_app). Uses app.main:app for HTTP tests and
app.infrastructure.persistence.database for DB-dependent fixtures.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings

get_settings.cache_clear()

import app.infrastructure.persistence.database as database
from app.infrastructure.security.jwt import create_access_token
from app.main import app
from tests.fakes import FakeCache, RbacStore


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository tests. Rolls back after test.

    Requires DATABASE_URL and a migrated schema (uv run alembic upgrade head).
    Skips when Postgres is not configured; run without DB via
    pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL, then run: uv run alembic upgrade head")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store() -> RbacStore:
    """In-memory RBAC stores with services wired over them (no cache)."""
    return RbacStore()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def cached_store(cache: FakeCache) -> RbacStore:
    """In-memory RBAC stores whose grant resolver uses the fake cache."""
    return RbacStore(cache=cache)


@pytest.fixture
def bearer():
    """Return a function building Authorization headers for a user ID and optional claims."""

    def _headers(user_id: str, **claims) -> dict[str, str]:
        token = create_access_token(user_id, extra_claims=claims or None)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def override_dependencies():
    """Apply FastAPI dependency overrides for one test and clear them afterwards."""
    applied: dict = {}

    def _override(dependency, replacement) -> None:
        applied[dependency] = replacement
        app.dependency_overrides[dependency] = replacement

    yield _override
    for dependency in applied:
        app.dependency_overrides.pop(dependency, None)
