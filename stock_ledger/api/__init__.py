"""API blueprints for the stock ledger."""

from flask import Blueprint

# Create main API blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")


# Import and register all resource blueprints
# Note: Imports are done after api_bp creation to avoid circular imports
from stock_ledger.api.health import health_bp  # noqa: E402
from stock_ledger.api.locations import locations_bp  # noqa: E402
from stock_ledger.api.metrics import metrics_bp  # noqa: E402
from stock_ledger.api.movements import movements_bp  # noqa: E402
from stock_ledger.api.stock import stock_bp  # noqa: E402
from stock_ledger.api.transfers import transfers_bp  # noqa: E402

api_bp.register_blueprint(health_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(locations_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(metrics_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(movements_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(stock_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(transfers_bp)  # type: ignore[attr-defined]
