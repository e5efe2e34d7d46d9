"""Centralized error handling utilities."""

import functools
import logging
from collections.abc import Callable
from typing import Any

from flask import current_app, jsonify
from flask.wrappers import Response
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest

from stock_ledger.exceptions import (
    BusinessLogicException,
    ConcurrentModificationException,
    DuplicateTransferSubmissionException,
    InsufficientStockException,
    InvalidOperationException,
    InvalidQuantityException,
    RecordNotFoundException,
    ResourceConflictException,
    SameLocationException,
    SourceNotFoundException,
    StorageUnavailableException,
)

logger = logging.getLogger(__name__)

# Ordered most specific first; the first match decides the status
_BUSINESS_ERRORS: tuple[tuple[type[BusinessLogicException], int, str], ...] = (
    (InvalidQuantityException, 400, "The quantity must be a positive whole number"),
    (SameLocationException, 400, "Source and destination must differ"),
    (SourceNotFoundException, 404, "The item is not stocked at the source location"),
    (RecordNotFoundException, 404, "The requested resource could not be found"),
    (InsufficientStockException, 409, "The requested quantity is not available"),
    (ConcurrentModificationException, 409, "The stock changed while the request was processed"),
    (DuplicateTransferSubmissionException, 409, "The transfer id was already used for another transfer"),
    (ResourceConflictException, 409, "A resource with those details already exists"),
    (InvalidOperationException, 409, "The requested operation cannot be performed"),
    (StorageUnavailableException, 503, "The stock database is temporarily unavailable"),
)


def _mark_request_failed() -> None:
    """Flag the request session so teardown rolls back instead of committing."""
    try:
        db_session = current_app.container.db_session()
        db_session.info['needs_rollback'] = True
    except Exception:  # noqa: BLE001 - flagging must never mask the original error
        logger.debug("Could not mark session for rollback", exc_info=True)


def business_error_response(error: BusinessLogicException) -> tuple[Response, int]:
    """Build the JSON error body and status for a domain exception."""
    for exc_type, status, detail in _BUSINESS_ERRORS:
        if isinstance(error, exc_type):
            break
    else:
        status, detail = 400, "A stock operation failed"

    response = jsonify({
        "error": error.message,
        "details": {"message": detail},
        "code": error.error_code,
    })
    if isinstance(error, StorageUnavailableException):
        response.headers["Retry-After"] = "1"
    return response, status


def handle_api_errors(func: Callable[..., Any]) -> Callable[..., Response | tuple[Response | str, int]]:
    """Decorator to handle common API errors consistently.

    Any handled error marks the request session for rollback so the
    teardown hook never commits a partially applied change.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except BadRequest:
            _mark_request_failed()
            # JSON parsing errors from request.get_json()
            return jsonify({
                "error": "Invalid JSON",
                "details": {"message": "Request body must be valid JSON"}
            }), 400
        except ValidationError as e:
            _mark_request_failed()
            error_details = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                error_details.append({
                    "message": error["msg"],
                    "field": field
                })

            return jsonify({
                "error": "Validation failed",
                "details": error_details
            }), 400

        except BusinessLogicException as e:
            _mark_request_failed()
            return business_error_response(e)

        except IntegrityError as e:
            _mark_request_failed()
            error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)

            if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg.lower():
                return jsonify({
                    "error": "Resource already exists",
                    "details": {"message": "A record with these values already exists"}
                }), 409
            elif "FOREIGN KEY constraint failed" in error_msg or "foreign key" in error_msg.lower():
                return jsonify({
                    "error": "Invalid reference",
                    "details": {"message": "Referenced resource does not exist"}
                }), 400
            else:
                return jsonify({
                    "error": "Database constraint violation",
                    "details": {"message": "The operation violates a database constraint"}
                }), 400

        except Exception as e:
            _mark_request_failed()
            logger.exception("Unhandled error in API endpoint")
            return jsonify({
                "error": "Internal server error",
                "details": {"message": str(e)}
            }), 500

    return wrapper
