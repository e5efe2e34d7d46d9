"""Read-only stock views derived from the catalog and the ledger."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import cast

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session

from stock_ledger.exceptions import RecordNotFoundException
from stock_ledger.models.equipment_stock import EquipmentStock
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry
from stock_ledger.services.base import BaseService
from stock_ledger.services.movement_ledger_service import (
    MovementFilter,
    MovementLedgerService,
)


def suggested_restock(quantity: int, min_threshold: int | None, max_threshold: int | None) -> int:
    """Units needed to reach the maximum, or twice the minimum when no maximum is set."""
    if max_threshold is not None:
        target = max_threshold
    elif min_threshold is not None:
        target = min_threshold * 2
    else:
        return 0
    return max(target - quantity, 0)


def low_stock_severity(quantity: int, min_threshold: int) -> str:
    if quantity == 0:
        return "out_of_stock"
    if quantity <= min_threshold * 0.5:
        return "critical"
    return "low"


@dataclass
class LowStockItem:
    """Stock record at or below its minimum threshold."""
    record: EquipmentStock
    severity: str
    suggested_restock: int


@dataclass
class LocationSummary:
    """Aggregate figures for one location."""
    location_id: int
    item_count: int
    total_units: int
    total_value: Decimal
    low_stock_count: int


@dataclass
class TypeBreakdown:
    """Stock figures for one equipment type."""
    equipment_type: str
    item_count: int
    total_units: int
    total_value: Decimal


@dataclass
class MonthlyMovements:
    """Ledger entries recorded in one calendar month, by direction."""
    month: date
    in_count: int = 0
    out_count: int = 0


class StockQueryService(BaseService):
    """Service class for read-only stock queries.

    Every view is computed by a single SELECT, so it reflects one consistent
    snapshot even while transfers commit concurrently.
    """

    def __init__(self, db: Session, ledger: MovementLedgerService):
        super().__init__(db)
        self.ledger = ledger

    def current_level(self, equipment_key: str, location_id: int) -> int:
        """Quantity of a key at a location; zero if never stocked there."""
        stmt = select(EquipmentStock.quantity).where(
            and_(
                EquipmentStock.equipment_key == equipment_key,
                EquipmentStock.location_id == location_id,
            )
        )
        return self.db.execute(stmt).scalar_one_or_none() or 0

    def get_stock(self, equipment_key: str, location_id: int) -> EquipmentStock:
        stmt = select(EquipmentStock).where(
            and_(
                EquipmentStock.equipment_key == equipment_key,
                EquipmentStock.location_id == location_id,
            )
        )
        record = self.db.execute(stmt).scalar_one_or_none()
        if record is None:
            raise RecordNotFoundException("Stock record", f"{equipment_key} at location {location_id}")
        return record

    def list_low_stock(self, location_id: int | None = None) -> list[LowStockItem]:
        """Records whose quantity is at or below their minimum threshold, emptiest first."""
        stmt = select(EquipmentStock).where(
            and_(
                EquipmentStock.min_threshold.is_not(None),
                EquipmentStock.quantity <= EquipmentStock.min_threshold,
            )
        )
        if location_id is not None:
            stmt = stmt.where(EquipmentStock.location_id == location_id)
        stmt = stmt.order_by(EquipmentStock.quantity, EquipmentStock.equipment_key)

        items = []
        for record in self.db.execute(stmt).scalars().all():
            min_threshold = cast(int, record.min_threshold)
            items.append(
                LowStockItem(
                    record=record,
                    severity=low_stock_severity(record.quantity, min_threshold),
                    suggested_restock=suggested_restock(
                        record.quantity, min_threshold, record.max_threshold
                    ),
                )
            )
        return items

    def distribution(self, equipment_key: str) -> dict[int, int]:
        """Quantity of a key per location."""
        stmt = (
            select(EquipmentStock.location_id, EquipmentStock.quantity)
            .where(EquipmentStock.equipment_key == equipment_key)
            .order_by(EquipmentStock.location_id)
        )
        return {location_id: quantity for location_id, quantity in self.db.execute(stmt).all()}

    def total_quantity(self, equipment_key: str) -> int:
        """Units of a key across all locations."""
        stmt = select(func.coalesce(func.sum(EquipmentStock.quantity), 0)).where(
            EquipmentStock.equipment_key == equipment_key
        )
        return int(self.db.execute(stmt).scalar() or 0)

    def total_value(self, location_id: int | None = None) -> Decimal:
        """Sum of quantity times unit cost; records without a cost count as zero."""
        stmt = select(
            func.coalesce(
                func.sum(EquipmentStock.quantity * func.coalesce(EquipmentStock.unit_cost, 0)),
                0,
            )
        )
        if location_id is not None:
            stmt = stmt.where(EquipmentStock.location_id == location_id)
        return _to_money(self.db.execute(stmt).scalar())

    def location_summary(self, location_id: int) -> LocationSummary:
        """Item count, units, value and low-stock count for one location."""
        low_stock = case(
            (
                and_(
                    EquipmentStock.min_threshold.is_not(None),
                    EquipmentStock.quantity <= EquipmentStock.min_threshold,
                ),
                1,
            ),
            else_=0,
        )
        stmt = select(
            func.count(EquipmentStock.id),
            func.coalesce(func.sum(EquipmentStock.quantity), 0),
            func.coalesce(
                func.sum(EquipmentStock.quantity * func.coalesce(EquipmentStock.unit_cost, 0)),
                0,
            ),
            func.coalesce(func.sum(low_stock), 0),
        ).where(EquipmentStock.location_id == location_id)

        item_count, total_units, total_value, low_stock_count = self.db.execute(stmt).one()
        return LocationSummary(
            location_id=location_id,
            item_count=int(item_count),
            total_units=int(total_units),
            total_value=_to_money(total_value),
            low_stock_count=int(low_stock_count),
        )

    def type_breakdown(self, location_id: int | None = None, limit: int | None = None) -> list[TypeBreakdown]:
        """Item count, units and value per equipment type, most valuable first."""
        total_value = func.coalesce(
            func.sum(EquipmentStock.quantity * func.coalesce(EquipmentStock.unit_cost, 0)),
            0,
        ).label("total_value")
        stmt = select(
            EquipmentStock.equipment_type,
            func.count(EquipmentStock.id),
            func.coalesce(func.sum(EquipmentStock.quantity), 0),
            total_value,
        ).group_by(EquipmentStock.equipment_type)
        if location_id is not None:
            stmt = stmt.where(EquipmentStock.location_id == location_id)
        stmt = stmt.order_by(total_value.desc(), EquipmentStock.equipment_type)
        if limit is not None:
            stmt = stmt.limit(limit)

        return [
            TypeBreakdown(
                equipment_type=equipment_type,
                item_count=int(item_count),
                total_units=int(total_units),
                total_value=_to_money(value),
            )
            for equipment_type, item_count, total_units, value in self.db.execute(stmt).all()
        ]

    def monthly_movements(
        self,
        months: int = 6,
        location_id: int | None = None,
        now: datetime | None = None,
    ) -> list[MonthlyMovements]:
        """In and out entry counts for the last ``months`` calendar months, oldest first.

        Months without movements are included with zero counts. Ledger
        timestamps are naive UTC.
        """
        now = now or datetime.now(UTC).replace(tzinfo=None)
        first_month = _add_months(date(now.year, now.month, 1), -(months - 1))
        buckets = {
            month: MonthlyMovements(month=month)
            for month in (_add_months(first_month, offset) for offset in range(months))
        }

        stmt = select(MovementEntry.timestamp, MovementEntry.direction).where(
            MovementEntry.timestamp >= datetime(first_month.year, first_month.month, 1)
        )
        if location_id is not None:
            stmt = stmt.where(MovementEntry.location_id == location_id)

        for timestamp, direction in self.db.execute(stmt).all():
            bucket = buckets.get(date(timestamp.year, timestamp.month, 1))
            if bucket is None:
                continue
            if direction == MovementDirection.IN:
                bucket.in_count += 1
            else:
                bucket.out_count += 1
        return list(buckets.values())

    def recent_activity(
        self,
        location_id: int | None = None,
        equipment_key: str | None = None,
        limit: int = 20,
    ) -> list[MovementEntry]:
        """Most recent ledger entries for a location and/or key."""
        return self.ledger.list_movements(
            MovementFilter(equipment_key=equipment_key, location_id=location_id, limit=limit)
        )


def _to_money(value: object) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


def _add_months(month: date, offset: int) -> date:
    index = month.year * 12 + month.month - 1 + offset
    return date(index // 12, index % 12 + 1, 1)
