"""Location schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class LocationCreateSchema(BaseModel):
    """Schema for creating a new location."""

    code: str = Field(
        ...,
        min_length=1,
        max_length=32,
        description="Short unique code for the location",
        json_schema_extra={"example": "WH-MAIN"}
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Display name of the location",
        json_schema_extra={"example": "Main Warehouse"}
    )
    address: str | None = Field(
        default=None,
        description="Physical address",
        json_schema_extra={"example": "12 Dock Road"}
    )
    description: str | None = Field(
        default=None,
        description="Free-form description",
        json_schema_extra={"example": "Primary receiving site"}
    )


class LocationResponseSchema(BaseModel):
    """Schema for location details."""

    id: int = Field(description="Location id", json_schema_extra={"example": 1})
    code: str = Field(description="Short unique code", json_schema_extra={"example": "WH-MAIN"})
    name: str = Field(description="Display name", json_schema_extra={"example": "Main Warehouse"})
    address: str | None = Field(default=None, description="Physical address")
    description: str | None = Field(default=None, description="Free-form description")
    created_at: datetime = Field(description="When the location was created")

    model_config = ConfigDict(from_attributes=True)


class LocationSummarySchema(BaseModel):
    """Aggregate stock figures for one location."""

    location_id: int = Field(description="Location id", json_schema_extra={"example": 1})
    item_count: int = Field(description="Number of stock records held", json_schema_extra={"example": 12})
    total_units: int = Field(description="Units across all records", json_schema_extra={"example": 340})
    total_value: Decimal = Field(description="Sum of quantity times unit cost", json_schema_extra={"example": "15420.00"})
    low_stock_count: int = Field(description="Records at or below their minimum", json_schema_extra={"example": 2})

    model_config = ConfigDict(from_attributes=True)
