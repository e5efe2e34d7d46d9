"""
Common response schemas for consistent API structure.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format."""
    model_config = ConfigDict(from_attributes=True)

    error: str = Field(..., description="Error message", json_schema_extra={"example": "Only 3 units of LAPTOP-X1 available at Main Warehouse (requested 5)"})
    details: list[Any] | dict[str, Any] | str | None = Field(None, description="Additional error details", json_schema_extra={"example": {"message": "The requested quantity is not available"}})
    code: str | None = Field(None, description="Machine-readable error code", json_schema_extra={"example": "INSUFFICIENT_STOCK"})
