"""Stock transfer API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, request
from spectree import Response as SpectreeResponse

from stock_ledger.exceptions import RecordNotFoundException
from stock_ledger.schemas.common import ErrorResponseSchema
from stock_ledger.schemas.transfer import (
    BatchTransferCreateSchema,
    BatchTransferResponseSchema,
    TransferCreateSchema,
    TransferResponseSchema,
)
from stock_ledger.services.container import ServiceContainer
from stock_ledger.services.transfer_service import (
    BatchTransferItem,
    BatchTransferResult,
    TransferRequest,
)
from stock_ledger.utils.error_handling import handle_api_errors
from stock_ledger.utils.spectree_config import api

transfers_bp = Blueprint("transfers", __name__, url_prefix="/transfers")


@transfers_bp.route("", methods=["POST"])
@api.validate(
    json=TransferCreateSchema,
    resp=SpectreeResponse(
        HTTP_200=TransferResponseSchema,
        HTTP_201=TransferResponseSchema,
        HTTP_400=ErrorResponseSchema,
        HTTP_404=ErrorResponseSchema,
        HTTP_409=ErrorResponseSchema,
        HTTP_503=ErrorResponseSchema,
    ),
)
@handle_api_errors
@inject
def create_transfer(transfer_service=Provide[ServiceContainer.transfer_service]) -> Any:
    """Move stock between two locations.

    Returns 201 for a new transfer and 200 when the transfer group id was
    already committed with the same details.
    """
    data = TransferCreateSchema.model_validate(request.get_json())
    result = transfer_service.transfer(
        TransferRequest(
            source_location_id=data.source_location_id,
            destination_location_id=data.destination_location_id,
            equipment_key=data.equipment_key,
            quantity=data.quantity,
            actor=data.actor,
            notes=data.notes,
            transfer_group_id=data.transfer_group_id,
        )
    )
    status = 200 if result.replayed else 201
    return TransferResponseSchema.model_validate(result).model_dump(), status


@transfers_bp.route("/batch", methods=["POST"])
@api.validate(json=BatchTransferCreateSchema, resp=SpectreeResponse(HTTP_200=BatchTransferResponseSchema, HTTP_400=ErrorResponseSchema))
@handle_api_errors
@inject
def create_batch_transfer(transfer_service=Provide[ServiceContainer.transfer_service]) -> Any:
    """Move several keys between the same two locations, one transfer per item."""
    data = BatchTransferCreateSchema.model_validate(request.get_json())
    report = transfer_service.transfer_batch(
        data.source_location_id,
        data.destination_location_id,
        [BatchTransferItem(item.equipment_key, item.quantity) for item in data.items],
        actor=data.actor,
        notes=data.notes,
        batch_id=data.batch_id,
    )
    return _batch_response(report)


@transfers_bp.route("/<string:transfer_group_id>", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=TransferResponseSchema, HTTP_404=ErrorResponseSchema))
@handle_api_errors
@inject
def get_transfer(transfer_group_id: str, transfer_service=Provide[ServiceContainer.transfer_service]) -> Any:
    """Get a committed transfer by its group id."""
    result = transfer_service.get_transfer(transfer_group_id)
    if result is None:
        raise RecordNotFoundException("Transfer", transfer_group_id)
    return TransferResponseSchema.model_validate(result).model_dump()


def _batch_response(report: BatchTransferResult) -> dict[str, Any]:
    return BatchTransferResponseSchema(
        batch_id=report.batch_id,
        succeeded_count=len(report.succeeded),
        failed_count=len(report.failed),
        items=[
            {
                "index": line.index,
                "equipment_key": line.equipment_key,
                "quantity": line.quantity,
                "succeeded": line.succeeded,
                "transfer": (
                    TransferResponseSchema.model_validate(line.transfer)
                    if line.transfer is not None
                    else None
                ),
                "error_code": line.error_code,
                "error_message": line.error_message,
            }
            for line in report.items
        ],
    ).model_dump()
