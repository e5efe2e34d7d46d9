"""Movement ledger schemas for request/response validation."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from stock_ledger.models.movement_entry import MovementDirection


class MovementResponseSchema(BaseModel):
    """Schema for a movement ledger entry."""

    id: int = Field(description="Entry id, increasing in append order", json_schema_extra={"example": 42})
    stock_id: int = Field(description="Stock record the entry belongs to", json_schema_extra={"example": 3})
    equipment_key: str = Field(description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    location_id: int = Field(description="Location whose stock changed", json_schema_extra={"example": 1})
    direction: MovementDirection = Field(description="in or out", json_schema_extra={"example": "out"})
    quantity: int = Field(description="Units moved", json_schema_extra={"example": 3})
    reason: str = Field(description="Movement reason", json_schema_extra={"example": "Inter-warehouse transfer"})
    notes: str | None = Field(default=None, description="Free-form notes")
    counterparty_location_id: int | None = Field(default=None, description="Other side of a transfer")
    previous_quantity: int = Field(description="Quantity before the movement", json_schema_extra={"example": 10})
    new_quantity: int = Field(description="Quantity after the movement", json_schema_extra={"example": 7})
    timestamp: datetime = Field(description="When the movement was recorded")
    actor: str = Field(description="Who performed the movement", json_schema_extra={"example": "jdoe"})
    stock_version: int = Field(description="Stock record version written by this movement", json_schema_extra={"example": 4})
    transfer_group_id: str | None = Field(default=None, description="Pairs the two entries of a transfer")

    model_config = ConfigDict(from_attributes=True)


class MovementListQuerySchema(BaseModel):
    """Query parameters for the movement ledger listing."""

    equipment_key: str | None = Field(default=None, min_length=1, description="Filter by equipment key")
    location_id: int | None = Field(default=None, description="Filter by location")
    transfer_group_id: str | None = Field(default=None, min_length=1, description="Filter by transfer")
    since: datetime | None = Field(default=None, description="Only entries recorded at or after this time")
    before_id: int | None = Field(default=None, ge=1, description="Return entries older than this id (next page)")
    limit: int | None = Field(default=None, ge=1, description="Page size; capped by the server maximum")


class MovementPageSchema(BaseModel):
    """One page of ledger entries, newest first."""

    items: list[MovementResponseSchema] = Field(description="Entries on this page")
    next_before_id: int | None = Field(default=None, description="Pass as before_id to fetch the next page")


class MonthlyMovementsQuerySchema(BaseModel):
    """Query parameters for the monthly movement trend."""

    months: int = Field(default=6, ge=1, le=24, description="Number of calendar months, ending with the current one")
    location_id: int | None = Field(default=None, description="Restrict to one location")


class MonthlyMovementsSchema(BaseModel):
    """In and out entry counts for one calendar month."""

    month: date = Field(description="First day of the month", json_schema_extra={"example": "2026-10-01"})
    in_count: int = Field(description="Entries that added stock", json_schema_extra={"example": 14})
    out_count: int = Field(description="Entries that removed stock", json_schema_extra={"example": 9})

    model_config = ConfigDict(from_attributes=True)
