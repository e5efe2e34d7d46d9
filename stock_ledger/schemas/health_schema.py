"""Health check response schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness and readiness probe response."""

    status: str = Field(description="Probe status", json_schema_extra={"example": "ready"})
    ready: bool = Field(description="Whether the service can accept traffic", json_schema_extra={"example": True})
    database: str | None = Field(default=None, description="Database connectivity", json_schema_extra={"example": "ok"})
