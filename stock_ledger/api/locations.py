"""Location management API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, request
from spectree import Response as SpectreeResponse

from stock_ledger.schemas.common import ErrorResponseSchema
from stock_ledger.schemas.location import (
    LocationCreateSchema,
    LocationResponseSchema,
    LocationSummarySchema,
)
from stock_ledger.services.container import ServiceContainer
from stock_ledger.utils.error_handling import handle_api_errors
from stock_ledger.utils.spectree_config import api

locations_bp = Blueprint("locations", __name__, url_prefix="/locations")


@locations_bp.route("", methods=["POST"])
@api.validate(json=LocationCreateSchema, resp=SpectreeResponse(HTTP_201=LocationResponseSchema, HTTP_400=ErrorResponseSchema, HTTP_409=ErrorResponseSchema))
@handle_api_errors
@inject
def create_location(location_service=Provide[ServiceContainer.location_service]) -> Any:
    """Create a new warehouse or site."""
    data = LocationCreateSchema.model_validate(request.get_json())
    location = location_service.create_location(
        code=data.code,
        name=data.name,
        address=data.address,
        description=data.description,
    )
    return LocationResponseSchema.model_validate(location).model_dump(), 201


@locations_bp.route("", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=list[LocationResponseSchema]))
@handle_api_errors
@inject
def list_locations(location_service=Provide[ServiceContainer.location_service]) -> Any:
    """List all locations ordered by name."""
    locations = location_service.list_locations()
    return [LocationResponseSchema.model_validate(location).model_dump() for location in locations]


@locations_bp.route("/<int:location_id>", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=LocationResponseSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def get_location(location_id: int, location_service=Provide[ServiceContainer.location_service]) -> Any:
    """Get location details."""
    location = location_service.get_location(location_id)
    return LocationResponseSchema.model_validate(location).model_dump()


@locations_bp.route("/code/<string:code>", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=LocationResponseSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def get_location_by_code(code: str, location_service=Provide[ServiceContainer.location_service]) -> Any:
    """Get location details by its short code."""
    location = location_service.get_location_by_code(code)
    return LocationResponseSchema.model_validate(location).model_dump()


@locations_bp.route("/<int:location_id>/summary", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=LocationSummarySchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def get_location_summary(
    location_id: int,
    location_service=Provide[ServiceContainer.location_service],
    stock_query_service=Provide[ServiceContainer.stock_query_service],
) -> Any:
    """Item count, units, value and low-stock count for one location."""
    location_service.get_location(location_id)
    summary = stock_query_service.location_summary(location_id)
    return LocationSummarySchema.model_validate(summary).model_dump(mode="json")
