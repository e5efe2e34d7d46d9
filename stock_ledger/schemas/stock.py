"""Stock record and adjustment schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from stock_ledger.models.movement_entry import MovementDirection
from stock_ledger.schemas.movement import MovementResponseSchema


class StockMetadataSchema(BaseModel):
    """Descriptive metadata for a key arriving at a location for the first time."""

    name: str = Field(..., min_length=1, max_length=255, description="Equipment name", json_schema_extra={"example": "ThinkPad X1 Carbon"})
    equipment_type: str = Field(..., min_length=1, max_length=100, description="Equipment category", json_schema_extra={"example": "laptop"})
    supplier: str | None = Field(default=None, max_length=255, description="Supplier name")
    description: str | None = Field(default=None, description="Free-form description")
    unit_cost: Decimal | None = Field(default=None, ge=0, description="Cost of one unit", json_schema_extra={"example": "1299.00"})
    min_threshold: int | None = Field(default=None, ge=0, description="Low-stock threshold", json_schema_extra={"example": 5})
    max_threshold: int | None = Field(default=None, ge=0, description="Restock target", json_schema_extra={"example": 20})


class ReceiveStockSchema(BaseModel):
    """Schema for receiving stock at a location."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    location_id: int = Field(..., description="Receiving location id", json_schema_extra={"example": 1})
    quantity: int = Field(..., gt=0, description="Units received (must be positive)", json_schema_extra={"example": 10})
    actor: str = Field(..., min_length=1, max_length=100, description="Who performed the adjustment", json_schema_extra={"example": "jdoe"})
    reason: str | None = Field(default=None, max_length=100, description="Adjustment reason", json_schema_extra={"example": "Purchase order 4411"})
    notes: str | None = Field(default=None, description="Free-form notes")
    metadata: StockMetadataSchema | None = Field(default=None, description="Required when the key is new at this location")


class IssueStockSchema(BaseModel):
    """Schema for issuing stock from a location."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    location_id: int = Field(..., description="Issuing location id", json_schema_extra={"example": 1})
    quantity: int = Field(..., gt=0, description="Units issued (must be positive)", json_schema_extra={"example": 2})
    actor: str = Field(..., min_length=1, max_length=100, description="Who performed the adjustment", json_schema_extra={"example": "jdoe"})
    reason: str | None = Field(default=None, max_length=100, description="Adjustment reason", json_schema_extra={"example": "Assigned to new hire"})
    notes: str | None = Field(default=None, description="Free-form notes")


class RestockSchema(BaseModel):
    """Schema for a quick restock of a low-stock record."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    location_id: int = Field(..., description="Location id", json_schema_extra={"example": 1})
    actor: str = Field(..., min_length=1, max_length=100, description="Who performed the restock", json_schema_extra={"example": "jdoe"})


class StockRecordSchema(BaseModel):
    """Schema for a stock record."""

    id: int = Field(description="Stock record id", json_schema_extra={"example": 3})
    equipment_key: str = Field(description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    location_id: int = Field(description="Location id", json_schema_extra={"example": 1})
    name: str = Field(description="Equipment name")
    equipment_type: str = Field(description="Equipment category")
    supplier: str | None = Field(default=None, description="Supplier name")
    description: str | None = Field(default=None, description="Free-form description")
    unit_cost: Decimal | None = Field(default=None, description="Cost of one unit")
    min_threshold: int | None = Field(default=None, description="Low-stock threshold")
    max_threshold: int | None = Field(default=None, description="Restock target")
    quantity: int = Field(description="Units on hand", json_schema_extra={"example": 7})
    version: int = Field(description="Record version, incremented on every change", json_schema_extra={"example": 4})
    updated_at: datetime = Field(description="Last change")

    model_config = ConfigDict(from_attributes=True)


class LowStockItemSchema(BaseModel):
    """Schema for a low-stock report line."""

    record: StockRecordSchema = Field(description="The low stock record")
    severity: str = Field(description="out_of_stock, critical or low", json_schema_extra={"example": "critical"})
    suggested_restock: int = Field(description="Units needed to reach the restock target", json_schema_extra={"example": 18})

    model_config = ConfigDict(from_attributes=True)


class StockDistributionEntrySchema(BaseModel):
    """Quantity of one key at one location."""

    location_id: int = Field(description="Location id", json_schema_extra={"example": 1})
    quantity: int = Field(description="Units on hand", json_schema_extra={"example": 7})


class StockDistributionSchema(BaseModel):
    """Per-location quantities of one key."""

    equipment_key: str = Field(description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    total_quantity: int = Field(description="Units across all locations", json_schema_extra={"example": 10})
    locations: list[StockDistributionEntrySchema] = Field(description="Per-location quantities")


class StockValueSchema(BaseModel):
    """Total stock value, optionally for one location."""

    location_id: int | None = Field(default=None, description="Location id, or null for all locations")
    total_value: Decimal = Field(description="Sum of quantity times unit cost", json_schema_extra={"example": "15420.00"})


class LowStockQuerySchema(BaseModel):
    """Query parameters for the low-stock report."""

    location_id: int | None = Field(default=None, description="Restrict to one location")


class StockValueQuerySchema(BaseModel):
    """Query parameters for the stock value total."""

    location_id: int | None = Field(default=None, description="Restrict to one location")


class BulkReceiveItemSchema(BaseModel):
    """One line of a bulk receive."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    quantity: int = Field(..., gt=0, description="Units received (must be positive)", json_schema_extra={"example": 5})
    metadata: StockMetadataSchema | None = Field(default=None, description="Required when the key is new at this location")


class BulkReceiveSchema(BaseModel):
    """Schema for receiving several keys at one location."""

    location_id: int = Field(..., description="Receiving location id", json_schema_extra={"example": 1})
    items: list[BulkReceiveItemSchema] = Field(..., min_length=1, description="Keys and quantities to receive")
    actor: str = Field(..., min_length=1, max_length=100, description="Who performed the adjustment", json_schema_extra={"example": "jdoe"})
    notes: str | None = Field(default=None, description="Notes applied to every line")


class BulkIssueItemSchema(BaseModel):
    """One line of a bulk issue."""

    equipment_key: str = Field(..., min_length=1, max_length=100, description="Equipment identifier", json_schema_extra={"example": "LAPTOP-X1"})
    quantity: int = Field(..., gt=0, description="Units issued (must be positive)", json_schema_extra={"example": 2})


class BulkIssueSchema(BaseModel):
    """Schema for issuing several keys from one location."""

    location_id: int = Field(..., description="Issuing location id", json_schema_extra={"example": 1})
    items: list[BulkIssueItemSchema] = Field(..., min_length=1, description="Keys and quantities to issue")
    actor: str = Field(..., min_length=1, max_length=100, description="Who performed the adjustment", json_schema_extra={"example": "jdoe"})
    notes: str | None = Field(default=None, description="Notes applied to every line")


class BulkAdjustmentLineSchema(BaseModel):
    """Outcome of one bulk adjustment line."""

    index: int = Field(description="1-based position in the request", json_schema_extra={"example": 1})
    equipment_key: str = Field(description="Equipment identifier")
    quantity: int = Field(description="Units requested")
    succeeded: bool = Field(description="Whether the line committed")
    movement: MovementResponseSchema | None = Field(default=None, description="Ledger entry of a committed line")
    error_code: str | None = Field(default=None, description="Error code of a failed line", json_schema_extra={"example": "INSUFFICIENT_STOCK"})
    error_message: str | None = Field(default=None, description="Error message of a failed line")

    model_config = ConfigDict(from_attributes=True)


class BulkAdjustmentResponseSchema(BaseModel):
    """Partial-success report for a bulk receive or issue."""

    location_id: int = Field(description="Location id", json_schema_extra={"example": 1})
    direction: MovementDirection = Field(description="in for a receive, out for an issue")
    succeeded_count: int = Field(description="Lines that committed", json_schema_extra={"example": 3})
    failed_count: int = Field(description="Lines that failed", json_schema_extra={"example": 0})
    items: list[BulkAdjustmentLineSchema] = Field(description="Per-line outcomes")


class TypeBreakdownSchema(BaseModel):
    """Stock figures for one equipment type."""

    equipment_type: str = Field(description="Equipment category", json_schema_extra={"example": "laptop"})
    item_count: int = Field(description="Number of stock records", json_schema_extra={"example": 4})
    total_units: int = Field(description="Units across those records", json_schema_extra={"example": 37})
    total_value: Decimal = Field(description="Sum of quantity times unit cost", json_schema_extra={"example": "44400.00"})

    model_config = ConfigDict(from_attributes=True)


class TypeBreakdownQuerySchema(BaseModel):
    """Query parameters for the per-type breakdown."""

    location_id: int | None = Field(default=None, description="Restrict to one location")
    limit: int | None = Field(default=None, ge=1, description="Return only the most valuable types")
