"""Health schemas for the decision service (liveness and readiness)."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """GET /health: the process is up and can answer /authorize."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """GET /health/ready: the RBAC store is reachable.

    The effective-roles cache is reported but never fails readiness; decisions
    fall back to the store when it is unavailable.
    """

    status: str = Field(default="ok", description="Readiness status")
    database: str = Field(default="ok", description="RBAC store: ok | not_configured")
    cache: str = Field(
        default="disabled", description="Effective-roles cache: ok | unavailable | disabled"
    )


class ReadinessErrorResponse(BaseModel):
    """503 from /health/ready when the RBAC store cannot be reached."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason")
