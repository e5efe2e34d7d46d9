"""Transfer schemas for request/response validation."""

from pydantic import BaseModel, ConfigDict, Field


class TransferCreateSchema(BaseModel):
    """Schema for moving stock between two locations."""

    source_location_id: int = Field(..., description="Location the units leave", json_schema_extra={"example": 1})
    destination_location_id: int = Field(..., description="Location the units arrive at", json_schema_extra={"example": 2})
    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    quantity: int = Field(..., gt=0, description="Units to move (must be positive)", json_schema_extra={"example": 3})
    actor: str = Field(..., min_length=1, max_length=100, description="Who requested the transfer", json_schema_extra={"example": "jdoe"})
    notes: str | None = Field(default=None, description="Free-form notes")
    transfer_group_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        description="Client-chosen id; re-submitting the same id returns the original result",
        json_schema_extra={"example": "7f0c2a1e9b7d4c6a8e5f3d2b1a0c9e8f"},
    )


class BatchTransferItemSchema(BaseModel):
    """One line of a batch transfer."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "MONITOR-27"})
    quantity: int = Field(..., gt=0, description="Units to move (must be positive)", json_schema_extra={"example": 2})


class BatchTransferCreateSchema(BaseModel):
    """Schema for moving several keys between the same two locations."""

    source_location_id: int = Field(..., description="Location the units leave", json_schema_extra={"example": 1})
    destination_location_id: int = Field(..., description="Location the units arrive at", json_schema_extra={"example": 2})
    items: list[BatchTransferItemSchema] = Field(..., min_length=1, description="Keys and quantities to move")
    actor: str = Field(..., min_length=1, max_length=100, description="Who requested the transfer", json_schema_extra={"example": "jdoe"})
    notes: str | None = Field(default=None, description="Free-form notes")
    batch_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=48,
        description="Client-chosen batch id; re-submitting replays committed items",
    )


class StockOutcomeSchema(BaseModel):
    """Effect of a transfer on one side's stock record."""

    stock_id: int = Field(description="Stock record id", json_schema_extra={"example": 3})
    location_id: int = Field(description="Location id", json_schema_extra={"example": 1})
    previous_quantity: int = Field(description="Quantity before the transfer", json_schema_extra={"example": 10})
    new_quantity: int = Field(description="Quantity after the transfer", json_schema_extra={"example": 7})
    version: int = Field(description="Record version written by the transfer", json_schema_extra={"example": 4})
    movement_id: int = Field(description="Ledger entry id", json_schema_extra={"example": 42})

    model_config = ConfigDict(from_attributes=True)


class TransferResponseSchema(BaseModel):
    """Schema for a committed transfer."""

    transfer_group_id: str = Field(description="Id shared by the transfer's two ledger entries")
    equipment_key: str = Field(description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    quantity: int = Field(description="Units moved", json_schema_extra={"example": 3})
    source: StockOutcomeSchema = Field(description="Debited side")
    destination: StockOutcomeSchema = Field(description="Credited side")
    replayed: bool = Field(default=False, description="True when this repeats an earlier submission")

    model_config = ConfigDict(from_attributes=True)


class BatchItemResultSchema(BaseModel):
    """Outcome of one batch line."""

    index: int = Field(description="1-based position in the request", json_schema_extra={"example": 1})
    equipment_key: str = Field(description="Equipment identifier")
    quantity: int = Field(description="Units requested")
    succeeded: bool = Field(description="Whether the line committed")
    transfer: TransferResponseSchema | None = Field(default=None, description="Committed transfer")
    error_code: str | None = Field(default=None, description="Error code of a failed line", json_schema_extra={"example": "INSUFFICIENT_STOCK"})
    error_message: str | None = Field(default=None, description="Error message of a failed line")

    model_config = ConfigDict(from_attributes=True)


class BatchTransferResponseSchema(BaseModel):
    """Partial-success report for a batch transfer."""

    batch_id: str = Field(description="Batch id, prefix of each line's transfer group id")
    succeeded_count: int = Field(description="Lines that committed", json_schema_extra={"example": 2})
    failed_count: int = Field(description="Lines that failed", json_schema_extra={"example": 1})
    items: list[BatchItemResultSchema] = Field(description="Per-line outcomes")
