"""Flask application factory for the stock ledger backend."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stock_ledger.config import Settings

from flask_cors import CORS

from stock_ledger.app import App
from stock_ledger.config import get_settings
from stock_ledger.extensions import db
from stock_ledger.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_app(settings: "Settings | None" = None) -> App:
    """Create and configure Flask application."""
    app = App(__name__)

    # Load configuration
    if settings is None:
        settings = get_settings()

    app.config.from_object(settings)

    # Initialize extensions
    db.init_app(app)

    # Import models to register them with SQLAlchemy
    from stock_ledger import models  # noqa: F401

    # Initialize SessionLocal for per-request sessions
    # This needs to be done in app context since db.engine requires it
    with app.app_context():
        from sqlalchemy.orm import Session, sessionmaker

        SessionLocal: sessionmaker[Session] = sessionmaker(
            class_=Session,
            bind=db.engine,
            autoflush=True,
            expire_on_commit=False,
        )

    # Initialize SpecTree for OpenAPI docs
    from stock_ledger.utils.spectree_config import configure_spectree

    configure_spectree(app)

    # Initialize service container after SpecTree
    container = ServiceContainer()
    container.config.override(settings)
    container.session_maker.override(SessionLocal)

    wire_modules = [
        'stock_ledger.api.health', 'stock_ledger.api.locations', 'stock_ledger.api.metrics',
        'stock_ledger.api.movements', 'stock_ledger.api.stock', 'stock_ledger.api.transfers',
    ]

    container.wire(modules=wire_modules)

    app.container = container

    # Configure CORS
    CORS(app, origins=settings.CORS_ORIGINS)

    # Initialize Flask-Log-Request-ID for correlation tracking
    from flask_log_request_id import RequestID
    RequestID(app)

    # Register error handlers
    from stock_ledger.utils.flask_error_handlers import register_error_handlers

    register_error_handlers(app)

    # Register main API blueprint
    from stock_ledger.api import api_bp

    app.register_blueprint(api_bp)

    @app.teardown_request
    def close_session(exc: Exception | None) -> None:
        """Close the database session after each request.

        Stock-changing services commit their own unit of work; this commit
        only persists simple writes such as new locations.
        """
        try:
            db_session = container.db_session()
            needs_rollback = db_session.info.get('needs_rollback', False)

            if exc or needs_rollback:
                db_session.rollback()
            else:
                db_session.commit()

            # Clear rollback flag after processing
            db_session.info.pop('needs_rollback', None)
            db_session.close()

        finally:
            # Ensure the scoped session is removed after each request
            container.db_session.reset()

    return app
