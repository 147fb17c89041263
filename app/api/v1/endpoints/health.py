"""Health check endpoints: liveness and readiness (database reachable, cache state)."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.infrastructure.persistence.database import session_scope
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when the database answers (or is not configured); 503 otherwise.

    The cache is reported but never fails readiness: without Redis the
    engine reads the stores directly.
    """
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache_state = "disabled"
    else:
        cache_state = "ok" if cache.is_available() else "unavailable"

    if not get_settings().sql_configured:
        return ReadinessResponse(database="not_configured", cache=cache_state)
    try:
        async with session_scope() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="database unreachable").model_dump(),
        )
    return ReadinessResponse(cache=cache_state)
