"""Stock level and adjustment API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, request
from spectree import Response as SpectreeResponse

from stock_ledger.schemas.common import ErrorResponseSchema
from stock_ledger.schemas.movement import MovementResponseSchema
from stock_ledger.schemas.stock import (
    BulkAdjustmentResponseSchema,
    BulkIssueSchema,
    BulkReceiveSchema,
    IssueStockSchema,
    LowStockItemSchema,
    LowStockQuerySchema,
    ReceiveStockSchema,
    RestockSchema,
    StockDistributionSchema,
    StockRecordSchema,
    StockValueQuerySchema,
    StockValueSchema,
    TypeBreakdownQuerySchema,
    TypeBreakdownSchema,
)
from stock_ledger.services.container import ServiceContainer
from stock_ledger.services.stock_adjustment_service import (
    ISSUE_REASON,
    RECEIVE_REASON,
    AdjustmentItem,
    BulkAdjustmentResult,
)
from stock_ledger.utils.error_handling import handle_api_errors
from stock_ledger.utils.spectree_config import api

stock_bp = Blueprint("stock", __name__, url_prefix="/stock")


@stock_bp.route("/receive", methods=["POST"])
@api.validate(json=ReceiveStockSchema, resp=SpectreeResponse(HTTP_201=MovementResponseSchema, HTTP_400=ErrorResponseSchema, HTTP_404=ErrorResponseSchema, HTTP_409=ErrorResponseSchema))
@handle_api_errors
@inject
def receive_stock(stock_adjustment_service=Provide[ServiceContainer.stock_adjustment_service]) -> Any:
    """Receive stock at a location, creating the record on first arrival."""
    data = ReceiveStockSchema.model_validate(request.get_json())
    entry = stock_adjustment_service.receive_stock(
        data.equipment_key,
        data.location_id,
        data.quantity,
        data.actor,
        reason=data.reason or RECEIVE_REASON,
        notes=data.notes,
        metadata=data.metadata.model_dump() if data.metadata else None,
    )
    return MovementResponseSchema.model_validate(entry).model_dump(mode="json"), 201


@stock_bp.route("/issue", methods=["POST"])
@api.validate(json=IssueStockSchema, resp=SpectreeResponse(HTTP_201=MovementResponseSchema, HTTP_400=ErrorResponseSchema, HTTP_404=ErrorResponseSchema, HTTP_409=ErrorResponseSchema))
@handle_api_errors
@inject
def issue_stock(stock_adjustment_service=Provide[ServiceContainer.stock_adjustment_service]) -> Any:
    """Issue stock from a location."""
    data = IssueStockSchema.model_validate(request.get_json())
    entry = stock_adjustment_service.issue_stock(
        data.equipment_key,
        data.location_id,
        data.quantity,
        data.actor,
        reason=data.reason or ISSUE_REASON,
        notes=data.notes,
    )
    return MovementResponseSchema.model_validate(entry).model_dump(mode="json"), 201


@stock_bp.route("/receive/batch", methods=["POST"])
@api.validate(json=BulkReceiveSchema, resp=SpectreeResponse(HTTP_200=BulkAdjustmentResponseSchema, HTTP_400=ErrorResponseSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def receive_stock_batch(stock_adjustment_service=Provide[ServiceContainer.stock_adjustment_service]) -> Any:
    """Receive several keys at one location, reporting each line separately."""
    data = BulkReceiveSchema.model_validate(request.get_json())
    report = stock_adjustment_service.receive_batch(
        data.location_id,
        [
            AdjustmentItem(
                item.equipment_key,
                item.quantity,
                metadata=item.metadata.model_dump() if item.metadata else None,
            )
            for item in data.items
        ],
        actor=data.actor,
        notes=data.notes,
    )
    return _bulk_response(report)


@stock_bp.route("/issue/batch", methods=["POST"])
@api.validate(json=BulkIssueSchema, resp=SpectreeResponse(HTTP_200=BulkAdjustmentResponseSchema, HTTP_400=ErrorResponseSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def issue_stock_batch(stock_adjustment_service=Provide[ServiceContainer.stock_adjustment_service]) -> Any:
    """Issue several keys from one location, reporting each line separately."""
    data = BulkIssueSchema.model_validate(request.get_json())
    report = stock_adjustment_service.issue_batch(
        data.location_id,
        [AdjustmentItem(item.equipment_key, item.quantity) for item in data.items],
        actor=data.actor,
        notes=data.notes,
    )
    return _bulk_response(report)


@stock_bp.route("/restock", methods=["POST"])
@api.validate(json=RestockSchema, resp=SpectreeResponse(HTTP_201=MovementResponseSchema, HTTP_404=ErrorResponseSchema, HTTP_409=ErrorResponseSchema))
@handle_api_errors
@inject
def restock(stock_adjustment_service=Provide[ServiceContainer.stock_adjustment_service]) -> Any:
    """Receive the suggested quantity for a low-stock record."""
    data = RestockSchema.model_validate(request.get_json())
    entry = stock_adjustment_service.restock(data.equipment_key, data.location_id, data.actor)
    return MovementResponseSchema.model_validate(entry).model_dump(mode="json"), 201


@stock_bp.route("/low", methods=["GET"])
@api.validate(query=LowStockQuerySchema, resp=SpectreeResponse(HTTP_200=list[LowStockItemSchema], HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def list_low_stock(stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """List records at or below their minimum threshold."""
    query = LowStockQuerySchema.model_validate(request.args.to_dict())
    items = stock_query_service.list_low_stock(location_id=query.location_id)
    return [LowStockItemSchema.model_validate(item).model_dump(mode="json") for item in items]


@stock_bp.route("/value", methods=["GET"])
@api.validate(query=StockValueQuerySchema, resp=SpectreeResponse(HTTP_200=StockValueSchema, HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def get_stock_value(stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """Total stock value across all locations or for one location."""
    query = StockValueQuerySchema.model_validate(request.args.to_dict())
    total = stock_query_service.total_value(location_id=query.location_id)
    return StockValueSchema(location_id=query.location_id, total_value=total).model_dump(mode="json")


@stock_bp.route("/types", methods=["GET"])
@api.validate(query=TypeBreakdownQuerySchema, resp=SpectreeResponse(HTTP_200=list[TypeBreakdownSchema], HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def get_type_breakdown(stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """Item count, units and value per equipment type, most valuable first."""
    query = TypeBreakdownQuerySchema.model_validate(request.args.to_dict())
    breakdown = stock_query_service.type_breakdown(location_id=query.location_id, limit=query.limit)
    return [TypeBreakdownSchema.model_validate(line).model_dump(mode="json") for line in breakdown]


@stock_bp.route("/<string:equipment_key>/distribution", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=StockDistributionSchema))
@handle_api_errors
@inject
def get_distribution(equipment_key: str, stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """Quantity of one key at every location that holds a record of it."""
    distribution = stock_query_service.distribution(equipment_key)
    return StockDistributionSchema(
        equipment_key=equipment_key,
        total_quantity=sum(distribution.values()),
        locations=[
            {"location_id": location_id, "quantity": quantity}
            for location_id, quantity in distribution.items()
        ],
    ).model_dump()


@stock_bp.route("/<string:equipment_key>/<int:location_id>", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=StockRecordSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def get_stock(equipment_key: str, location_id: int, stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """Get the stock record of a key at a location."""
    record = stock_query_service.get_stock(equipment_key, location_id)
    return StockRecordSchema.model_validate(record).model_dump(mode="json")


def _bulk_response(report: BulkAdjustmentResult) -> dict[str, Any]:
    return BulkAdjustmentResponseSchema(
        location_id=report.location_id,
        direction=report.direction,
        succeeded_count=len(report.succeeded),
        failed_count=len(report.failed),
        items=[
            {
                "index": line.index,
                "equipment_key": line.equipment_key,
                "quantity": line.quantity,
                "succeeded": line.succeeded,
                "movement": (
                    MovementResponseSchema.model_validate(line.movement)
                    if line.movement is not None
                    else None
                ),
                "error_code": line.error_code,
                "error_message": line.error_message,
            }
            for line in report.items
        ],
    ).model_dump(mode="json")
