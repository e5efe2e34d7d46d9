"""SQLAlchemy models for the stock ledger."""

# Import all models here for Alembic auto-generation
from stock_ledger.models.equipment_stock import EquipmentStock
from stock_ledger.models.location import Location
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry

__all__: list[str] = [
    "EquipmentStock",
    "Location",
    "MovementDirection",
    "MovementEntry",
]
