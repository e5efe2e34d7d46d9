"""Movement ledger model: immutable record of a single-direction stock change."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    event,
    func,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_ledger.exceptions import InvalidOperationException
from stock_ledger.extensions import db

if TYPE_CHECKING:  # pragma: no cover - only used for type checking
    from stock_ledger.models.equipment_stock import EquipmentStock


class MovementDirection(str, Enum):
    """Direction of a stock change at one location."""

    IN = "in"
    OUT = "out"


class MovementEntry(db.Model):  # type: ignore[name-defined]
    """Append-only ledger row describing one stock change at one location."""

    __tablename__ = "movement_ledger"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    stock_id: Mapped[int] = mapped_column(
        ForeignKey("equipment_stock.id"), nullable=False
    )
    equipment_key: Mapped[str] = mapped_column(String(100), nullable=False)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id"), nullable=False
    )
    direction: Mapped[MovementDirection] = mapped_column(
        SQLEnum(
            MovementDirection,
            name="movement_direction",
            values_callable=lambda enum_cls: [item.value for item in enum_cls],
            native_enum=False,
        ),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    counterparty_location_id: Mapped[int | None] = mapped_column(
        ForeignKey("locations.id"), nullable=True
    )
    previous_quantity: Mapped[int] = mapped_column(nullable=False)
    new_quantity: Mapped[int] = mapped_column(nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    actor: Mapped[str] = mapped_column(String(100), nullable=False)
    stock_version: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transfer_group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_movement_ledger_quantity_positive"),
        CheckConstraint(
            "new_quantity >= 0 AND previous_quantity >= 0",
            name="ck_movement_ledger_quantities_non_negative",
        ),
        CheckConstraint(
            "(direction = 'in' AND new_quantity - previous_quantity = quantity) OR "
            "(direction = 'out' AND previous_quantity - new_quantity = quantity)",
            name="ck_movement_ledger_signed_delta",
        ),
        UniqueConstraint(
            "transfer_group_id",
            "direction",
            name="uq_movement_ledger_group_direction",
        ),
        Index(
            "ix_movement_ledger_key_location_timestamp",
            "equipment_key",
            "location_id",
            "timestamp",
        ),
        Index("ix_movement_ledger_transfer_group_id", "transfer_group_id"),
    )

    stock: Mapped[EquipmentStock] = relationship("EquipmentStock", lazy="selectin")

    @property
    def delta(self) -> int:
        return self.new_quantity - self.previous_quantity

    def __repr__(self) -> str:
        return (
            f"<MovementEntry {self.id} {self.direction.value} {self.equipment_key} "
            f"@ {self.location_id}: {self.previous_quantity}->{self.new_quantity}>"
        )


@event.listens_for(MovementEntry, "before_update")
def _reject_ledger_update(mapper: Any, connection: Any, target: MovementEntry) -> None:
    raise InvalidOperationException(
        f"modify movement entry {target.id}", "the movement ledger is append-only"
    )


@event.listens_for(MovementEntry, "before_delete")
def _reject_ledger_delete(mapper: Any, connection: Any, target: MovementEntry) -> None:
    raise InvalidOperationException(
        f"delete movement entry {target.id}", "the movement ledger is append-only"
    )
