"""Flask application error handlers."""

from flask import Flask, jsonify
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from stock_ledger.exceptions import BusinessLogicException
from stock_ledger.utils.error_handling import business_error_response


def register_error_handlers(app: Flask) -> None:
    """Register Flask error handlers for errors raised outside handle_api_errors."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Handle Pydantic validation errors."""
        error_details = []
        for err in error.errors():
            field = ".".join(str(x) for x in err["loc"])
            error_details.append(f"{field}: {err['msg']}")

        return jsonify({
            "error": "Validation failed",
            "details": error_details
        }), 400

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error: IntegrityError):
        """Handle constraint violations that escaped a service."""
        error_msg = str(error.orig) if hasattr(error, "orig") else str(error)

        if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg.lower():
            return jsonify({
                "error": "Resource already exists",
                "details": "A record with these values already exists"
            }), 409
        elif "CHECK constraint failed" in error_msg or "check constraint" in error_msg.lower():
            # Negative stock or a ledger row whose delta does not match its direction
            return jsonify({
                "error": "Stock invariant violated",
                "details": "The change would leave stock or the ledger inconsistent"
            }), 409
        else:
            return jsonify({
                "error": "Database constraint violation",
                "details": "The operation violates a database constraint"
            }), 400

    @app.errorhandler(BusinessLogicException)
    def handle_business_error(error: BusinessLogicException):
        """Handle domain exceptions that escaped an endpoint."""
        return business_error_response(error)

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({
            "error": "Resource not found",
            "details": "The requested resource could not be found"
        }), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({
            "error": "Method not allowed",
            "details": "The HTTP method is not allowed for this endpoint"
        }), 405

    @app.errorhandler(500)
    def handle_internal_server_error(error):
        return jsonify({
            "error": "Internal server error",
            "details": "An unexpected error occurred"
        }), 500
