"""Equipment stock model: one item's presence at one location."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_ledger.extensions import db

if TYPE_CHECKING:  # pragma: no cover - only used for type checking
    from stock_ledger.models.location import Location

# Descriptive columns cloned onto a destination record on first arrival
METADATA_FIELDS: tuple[str, ...] = (
    "name",
    "equipment_type",
    "supplier",
    "description",
    "unit_cost",
    "min_threshold",
    "max_threshold",
)


class EquipmentStock(db.Model):  # type: ignore[name-defined]
    """Model representing the quantity of an equipment key held at a location."""

    __tablename__ = "equipment_stock"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    equipment_key: Mapped[str] = mapped_column(String(100), nullable=False)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    equipment_type: Mapped[str] = mapped_column(String(100), nullable=False)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    min_threshold: Mapped[int | None] = mapped_column(nullable=True)
    max_threshold: Mapped[int | None] = mapped_column(nullable=True)
    quantity: Mapped[int] = mapped_column(nullable=False, default=0, server_default="0")
    version: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=1,
        server_default="1",
    )
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "equipment_key",
            "location_id",
            name="uq_equipment_stock_key_location",
        ),
        CheckConstraint("quantity >= 0", name="ck_equipment_stock_quantity_non_negative"),
        CheckConstraint(
            "unit_cost IS NULL OR unit_cost >= 0",
            name="ck_equipment_stock_unit_cost_non_negative",
        ),
        CheckConstraint(
            "min_threshold IS NULL OR min_threshold >= 0",
            name="ck_equipment_stock_min_threshold_non_negative",
        ),
        CheckConstraint(
            "max_threshold IS NULL OR max_threshold >= 0",
            name="ck_equipment_stock_max_threshold_non_negative",
        ),
        Index("ix_equipment_stock_location_id", "location_id"),
    )

    __mapper_args__ = {"version_id_col": version}

    location: Mapped[Location] = relationship("Location", lazy="selectin")

    def metadata_snapshot(self) -> dict[str, object]:
        """Descriptive metadata to seed a record for the same key elsewhere."""
        return {field: getattr(self, field) for field in METADATA_FIELDS}

    @property
    def location_name(self) -> str:
        return self.location.name if self.location else str(self.location_id)

    @property
    def stock_value(self) -> Decimal:
        if self.unit_cost is None:
            return Decimal("0")
        return self.unit_cost * self.quantity

    def __repr__(self) -> str:
        return (
            f"<EquipmentStock {self.equipment_key} @ {self.location_id}: "
            f"qty={self.quantity} v{self.version}>"
        )
