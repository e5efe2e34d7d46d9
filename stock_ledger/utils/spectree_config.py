"""Spectree configuration for the stock ledger API."""
from flask import Flask
from spectree import SpecTree

# Global Spectree instance imported by the API modules.
# Initialized by configure_spectree() before the API modules are imported.
api: SpecTree = None  # type: ignore


def configure_spectree(app: Flask) -> SpecTree:
    """Create the SpecTree instance used for request validation and OpenAPI docs."""
    global api

    api = SpecTree(
        backend_name="flask",
        app=app,
        title="Stock Ledger API",
        version="1.0.0",
        description="Equipment stock transfers between warehouse locations",
        path="docs",  # OpenAPI docs available at /docs
        validation_error_status=400,
    )

    return api
