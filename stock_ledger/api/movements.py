"""Movement ledger API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, request
from spectree import Response as SpectreeResponse

from stock_ledger.config import Settings
from stock_ledger.schemas.common import ErrorResponseSchema
from stock_ledger.schemas.movement import (
    MonthlyMovementsQuerySchema,
    MonthlyMovementsSchema,
    MovementListQuerySchema,
    MovementPageSchema,
    MovementResponseSchema,
)
from stock_ledger.services.container import ServiceContainer
from stock_ledger.services.movement_ledger_service import MovementFilter
from stock_ledger.utils.error_handling import handle_api_errors
from stock_ledger.utils.spectree_config import api

movements_bp = Blueprint("movements", __name__, url_prefix="/movements")


@movements_bp.route("", methods=["GET"])
@api.validate(query=MovementListQuerySchema, resp=SpectreeResponse(HTTP_200=MovementPageSchema, HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def list_movements(
    movement_ledger_service=Provide[ServiceContainer.movement_ledger_service],
    settings: Settings = Provide[ServiceContainer.config],
) -> Any:
    """List ledger entries newest first, one page at a time."""
    query = MovementListQuerySchema.model_validate(request.args.to_dict())
    limit = min(query.limit or settings.MOVEMENT_PAGE_SIZE_DEFAULT, settings.MOVEMENT_PAGE_SIZE_MAX)

    entries = movement_ledger_service.list_movements(
        MovementFilter(
            equipment_key=query.equipment_key,
            location_id=query.location_id,
            transfer_group_id=query.transfer_group_id,
            since=query.since,
            before_id=query.before_id,
            limit=limit,
        )
    )
    next_before_id = entries[-1].id if len(entries) == limit else None
    return MovementPageSchema(
        items=[MovementResponseSchema.model_validate(entry) for entry in entries],
        next_before_id=next_before_id,
    ).model_dump(mode="json")


@movements_bp.route("/monthly", methods=["GET"])
@api.validate(query=MonthlyMovementsQuerySchema, resp=SpectreeResponse(HTTP_200=list[MonthlyMovementsSchema], HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def get_monthly_movements(stock_query_service=Provide[ServiceContainer.stock_query_service]) -> Any:
    """In and out movement counts per calendar month, oldest first."""
    query = MonthlyMovementsQuerySchema.model_validate(request.args.to_dict())
    trend = stock_query_service.monthly_movements(months=query.months, location_id=query.location_id)
    return [MonthlyMovementsSchema.model_validate(month).model_dump(mode="json") for month in trend]
