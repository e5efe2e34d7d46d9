"""Movement ledger access: append-only persistence and newest-first queries."""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from stock_ledger.exceptions import (
    ConcurrentModificationException,
    InvalidOperationException,
)
from stock_ledger.models.equipment_stock import EquipmentStock
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry
from stock_ledger.services.base import BaseService


@dataclass
class MovementFilter:
    """Filter and page window for movement listings."""
    equipment_key: str | None = None
    location_id: int | None = None
    transfer_group_id: str | None = None
    since: datetime | None = None
    before_id: int | None = None
    limit: int = 50


class MovementLedgerService(BaseService):
    """Service class for the append-only movement ledger."""

    def append(
        self,
        stock: EquipmentStock,
        direction: MovementDirection,
        quantity: int,
        previous_quantity: int,
        new_quantity: int,
        reason: str,
        actor: str,
        notes: str | None = None,
        counterparty_location_id: int | None = None,
        transfer_group_id: str | None = None,
    ) -> MovementEntry:
        """Append one ledger entry and flush it to obtain its id."""
        if quantity <= 0:
            raise InvalidOperationException(
                "record movement", "movement quantity must be positive"
            )
        expected_delta = quantity if direction == MovementDirection.IN else -quantity
        if new_quantity - previous_quantity != expected_delta:
            raise InvalidOperationException(
                "record movement",
                f"{direction.value} of {quantity} cannot take stock from "
                f"{previous_quantity} to {new_quantity}",
            )

        entry = MovementEntry(
            stock_id=stock.id,
            equipment_key=stock.equipment_key,
            location_id=stock.location_id,
            direction=direction,
            quantity=quantity,
            reason=reason,
            notes=notes,
            counterparty_location_id=counterparty_location_id,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            actor=actor,
            stock_version=stock.version,
            transfer_group_id=transfer_group_id,
        )
        equipment_key = stock.equipment_key
        location_label = stock.location_name
        self.db.add(entry)
        try:
            self.db.flush()
        except IntegrityError as exc:
            if transfer_group_id is None:
                raise
            # Another request committed this transfer group first
            raise ConcurrentModificationException(equipment_key, location_label) from exc
        return entry

    def list_movements(self, movement_filter: MovementFilter) -> list[MovementEntry]:
        """Return one page of entries, newest first.

        Pages are keyed on the entry id: pass the last id of a page as
        ``before_id`` to fetch the next, older page.
        """
        stmt = select(MovementEntry)
        if movement_filter.equipment_key is not None:
            stmt = stmt.where(MovementEntry.equipment_key == movement_filter.equipment_key)
        if movement_filter.location_id is not None:
            stmt = stmt.where(MovementEntry.location_id == movement_filter.location_id)
        if movement_filter.transfer_group_id is not None:
            stmt = stmt.where(
                MovementEntry.transfer_group_id == movement_filter.transfer_group_id
            )
        if movement_filter.since is not None:
            stmt = stmt.where(MovementEntry.timestamp >= movement_filter.since)
        if movement_filter.before_id is not None:
            stmt = stmt.where(MovementEntry.id < movement_filter.before_id)

        stmt = stmt.order_by(MovementEntry.id.desc()).limit(movement_filter.limit)
        return list(self.db.execute(stmt).scalars().all())

    def iter_movements(
        self, movement_filter: MovementFilter, page_size: int = 100
    ) -> Iterator[MovementEntry]:
        """Lazily walk every matching entry, newest first, one page at a time."""
        before_id = movement_filter.before_id
        while True:
            page = self.list_movements(
                MovementFilter(
                    equipment_key=movement_filter.equipment_key,
                    location_id=movement_filter.location_id,
                    transfer_group_id=movement_filter.transfer_group_id,
                    since=movement_filter.since,
                    before_id=before_id,
                    limit=page_size,
                )
            )
            yield from page
            if len(page) < page_size:
                return
            before_id = page[-1].id

    def get_transfer_group(self, transfer_group_id: str) -> list[MovementEntry]:
        """Return the entries of one transfer in insertion order."""
        stmt = (
            select(MovementEntry)
            .where(MovementEntry.transfer_group_id == transfer_group_id)
            .order_by(MovementEntry.id)
        )
        return list(self.db.execute(stmt).scalars().all())
