"""Equipment catalog access: version-checked reads and writes of stock records."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import and_, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from stock_ledger.exceptions import (
    ConcurrentModificationException,
    InvalidOperationException,
    RecordNotFoundException,
)
from stock_ledger.models.equipment_stock import METADATA_FIELDS, EquipmentStock
from stock_ledger.services.base import BaseService


class StockCatalogService(BaseService):
    """Service class for per-location equipment stock records.

    Records are only mutated through ``compare_and_set``; the mapper's
    ``version_id_col`` makes every UPDATE conditional on the version that was
    read, so a concurrent writer surfaces as ``ConcurrentModificationException``.
    """

    def get_record(self, equipment_key: str, location_id: int) -> EquipmentStock | None:
        """Return the stock record for a key at a location, if any.

        Always refreshes an already loaded instance so the version used for
        the conditional update is the one currently stored.
        """
        stmt = (
            select(EquipmentStock)
            .where(
                and_(
                    EquipmentStock.equipment_key == equipment_key,
                    EquipmentStock.location_id == location_id,
                )
            )
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_record_or_raise(self, equipment_key: str, location_id: int) -> EquipmentStock:
        record = self.get_record(equipment_key, location_id)
        if record is None:
            raise RecordNotFoundException("Stock record", f"{equipment_key} at location {location_id}")
        return record

    def create_if_absent(
        self,
        equipment_key: str,
        location_id: int,
        seed_metadata: Mapping[str, Any],
    ) -> EquipmentStock:
        """Return the existing record or a new pending one at quantity zero.

        A new record is added to the session but not flushed, so it is
        inserted together with its first quantity change at version 1. If a
        concurrent request inserts the same key first, the unique constraint
        rejects the flush and ``compare_and_set`` reports a concurrent
        modification; the retry then reads the winner's record.
        """
        existing = self.get_record(equipment_key, location_id)
        if existing is not None:
            return existing

        missing = [field for field in ("name", "equipment_type") if not seed_metadata.get(field)]
        if missing:
            raise InvalidOperationException(
                f"create stock record for {equipment_key}",
                f"{', '.join(missing)} must be provided for a new item",
            )

        metadata = {field: seed_metadata.get(field) for field in METADATA_FIELDS}
        record = EquipmentStock(
            equipment_key=equipment_key,
            location_id=location_id,
            quantity=0,
            **metadata,
        )
        self.db.add(record)
        return record

    def compare_and_set(
        self,
        record: EquipmentStock,
        expected_version: int | None,
        new_quantity: int,
    ) -> EquipmentStock:
        """Set a record's quantity if its version still matches what was read."""
        if new_quantity < 0:
            raise InvalidOperationException(
                f"set stock of {record.equipment_key} to {new_quantity}",
                "quantity cannot be negative",
            )

        pending = inspect(record).pending
        if not pending and record.version != expected_version:
            raise ConcurrentModificationException(record.equipment_key, record.location_name)

        # A failed flush expires the record, so the error is built from these
        equipment_key = record.equipment_key
        location_label = record.location_name
        record.quantity = new_quantity
        try:
            self.db.flush()
        except StaleDataError as exc:
            raise ConcurrentModificationException(equipment_key, location_label) from exc
        except IntegrityError as exc:
            if not pending:
                raise
            # Lost the race to create this key at this location
            raise ConcurrentModificationException(equipment_key, location_label) from exc
        return record
