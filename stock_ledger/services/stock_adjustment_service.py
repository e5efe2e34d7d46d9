"""Stock adjustments: receiving and issuing stock at a single location."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from stock_ledger.exceptions import (
    BusinessLogicException,
    InsufficientStockException,
    InvalidOperationException,
    SourceNotFoundException,
)
from stock_ledger.models.equipment_stock import EquipmentStock
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry
from stock_ledger.services.base import BaseService
from stock_ledger.services.location_service import LocationService
from stock_ledger.services.metrics_service import MetricsServiceProtocol
from stock_ledger.services.movement_ledger_service import MovementLedgerService
from stock_ledger.services.stock_catalog_service import StockCatalogService
from stock_ledger.services.stock_query_service import suggested_restock
from stock_ledger.services.transfer_service import validate_quantity
from stock_ledger.services.unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)

RECEIVE_REASON = "Stock In"
ISSUE_REASON = "Stock Out"
RESTOCK_REASON = "Quick Restock"
BULK_RECEIVE_REASON = "Bulk Stock In"
BULK_ISSUE_REASON = "Bulk Stock Out"


@dataclass
class AdjustmentItem:
    """One line of a bulk receive or issue."""
    equipment_key: str
    quantity: int
    metadata: Mapping[str, Any] | None = None


@dataclass
class AdjustmentItemResult:
    """Per-item line of a bulk adjustment report."""
    index: int
    equipment_key: str
    quantity: int
    movement: MovementEntry | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.movement is not None


@dataclass
class BulkAdjustmentResult:
    """Partial-success report for a bulk receive or issue at one location."""
    location_id: int
    direction: MovementDirection
    items: list[AdjustmentItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[AdjustmentItemResult]:
        return [item for item in self.items if item.succeeded]

    @property
    def failed(self) -> list[AdjustmentItemResult]:
        return [item for item in self.items if not item.succeeded]


class StockAdjustmentService(BaseService):
    """Service class for receive and issue adjustments.

    Adjustments follow the same discipline as transfers: one version-checked
    record update plus one ledger entry per commit, retried from fresh reads
    on a conflict.
    """

    def __init__(
        self,
        db: Session,
        location_service: LocationService,
        catalog: StockCatalogService,
        ledger: MovementLedgerService,
        metrics_service: MetricsServiceProtocol,
        max_attempts: int = 3,
        retry_backoff_seconds: float = 0.05,
    ):
        super().__init__(db)
        self.location_service = location_service
        self.catalog = catalog
        self.ledger = ledger
        self.metrics_service = metrics_service
        self.max_attempts = max_attempts
        self.retry_backoff_seconds = retry_backoff_seconds

    def receive_stock(
        self,
        equipment_key: str,
        location_id: int,
        quantity: int,
        actor: str,
        reason: str = RECEIVE_REASON,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> MovementEntry:
        """Add stock at a location, creating the record on first arrival.

        ``metadata`` must provide ``name`` and ``equipment_type`` when the key
        is new at this location; it is ignored for an existing record.
        """
        validate_quantity(quantity)

        def attempt() -> MovementEntry:
            self.location_service.get_location(location_id)
            record = self.catalog.create_if_absent(equipment_key, location_id, metadata or {})
            return self._apply(record, MovementDirection.IN, quantity, actor, reason, notes)

        entry = self._run(f"Receive {equipment_key} at {location_id}", attempt)
        self.metrics_service.record_stock_adjustment("in", quantity)
        logger.info(f"Received {quantity} x {equipment_key} at location {location_id} by {actor}")
        return entry

    def issue_stock(
        self,
        equipment_key: str,
        location_id: int,
        quantity: int,
        actor: str,
        reason: str = ISSUE_REASON,
        notes: str | None = None,
    ) -> MovementEntry:
        """Remove stock from a location."""
        validate_quantity(quantity)

        def attempt() -> MovementEntry:
            location = self.location_service.get_location(location_id)
            record = self.catalog.get_record(equipment_key, location_id)
            if record is None:
                raise SourceNotFoundException(equipment_key, location.name)
            if record.quantity < quantity:
                raise InsufficientStockException(equipment_key, quantity, record.quantity, location.name)
            return self._apply(record, MovementDirection.OUT, quantity, actor, reason, notes)

        entry = self._run(f"Issue {equipment_key} at {location_id}", attempt)
        self.metrics_service.record_stock_adjustment("out", quantity)
        logger.info(f"Issued {quantity} x {equipment_key} at location {location_id} by {actor}")
        return entry

    def restock(self, equipment_key: str, location_id: int, actor: str) -> MovementEntry:
        """Receive the suggested restock quantity for a low-stock record.

        The quantity is worked out from the record read inside each attempt,
        so a retry after a concurrent change never overshoots the target.
        """

        def attempt() -> MovementEntry:
            record = self.catalog.get_record_or_raise(equipment_key, location_id)
            quantity = suggested_restock(record.quantity, record.min_threshold, record.max_threshold)
            if quantity <= 0:
                raise InvalidOperationException(
                    f"restock {equipment_key} at {record.location_name}",
                    "the stock level is already at its target",
                )
            return self._apply(
                record,
                MovementDirection.IN,
                quantity,
                actor,
                RESTOCK_REASON,
                "Quick restock from low stock alert",
            )

        entry = self._run(f"Restock {equipment_key} at {location_id}", attempt)
        self.metrics_service.record_stock_adjustment("in", entry.quantity)
        logger.info(f"Restocked {entry.quantity} x {equipment_key} at location {location_id} by {actor}")
        return entry

    def receive_batch(
        self,
        location_id: int,
        items: Sequence[AdjustmentItem],
        actor: str,
        notes: str | None = None,
    ) -> BulkAdjustmentResult:
        """Receive several keys at one location, one commit per item."""
        return self._bulk(
            location_id,
            items,
            MovementDirection.IN,
            lambda item, item_notes: self.receive_stock(
                item.equipment_key,
                location_id,
                item.quantity,
                actor,
                reason=BULK_RECEIVE_REASON,
                notes=item_notes,
                metadata=item.metadata,
            ),
            f"Bulk receive - {notes or 'No notes'}",
        )

    def issue_batch(
        self,
        location_id: int,
        items: Sequence[AdjustmentItem],
        actor: str,
        notes: str | None = None,
    ) -> BulkAdjustmentResult:
        """Issue several keys from one location, one commit per item."""
        return self._bulk(
            location_id,
            items,
            MovementDirection.OUT,
            lambda item, item_notes: self.issue_stock(
                item.equipment_key,
                location_id,
                item.quantity,
                actor,
                reason=BULK_ISSUE_REASON,
                notes=item_notes,
            ),
            f"Bulk dispatch - {notes or 'No notes'}",
        )

    def _bulk(
        self,
        location_id: int,
        items: Sequence[AdjustmentItem],
        direction: MovementDirection,
        adjust: Any,
        notes: str,
    ) -> BulkAdjustmentResult:
        # Fails the whole request up front for an unknown location
        self.location_service.get_location(location_id)

        report = BulkAdjustmentResult(location_id=location_id, direction=direction)
        for index, item in enumerate(items, start=1):
            line = AdjustmentItemResult(index=index, equipment_key=item.equipment_key, quantity=item.quantity)
            try:
                line.movement = adjust(item, notes)
            except BusinessLogicException as e:
                logger.warning(
                    f"Bulk {direction.value} at {location_id} item {index} ({item.equipment_key}) failed: {e.message}"
                )
                line.error_code = e.error_code
                line.error_message = e.message
            report.items.append(line)
        return report

    def _apply(
        self,
        record: EquipmentStock,
        direction: MovementDirection,
        quantity: int,
        actor: str,
        reason: str,
        notes: str | None,
    ) -> MovementEntry:
        expected_version = record.version
        previous = record.quantity
        new_quantity = previous + quantity if direction == MovementDirection.IN else previous - quantity
        self.catalog.compare_and_set(record, expected_version, new_quantity)
        return self.ledger.append(
            record,
            direction,
            quantity,
            previous,
            new_quantity,
            reason=reason,
            actor=actor,
            notes=notes,
        )

    def _run(self, description: str, attempt: Any) -> MovementEntry:
        return run_in_transaction(
            self.db,
            attempt,
            description=description,
            max_attempts=self.max_attempts,
            backoff_seconds=self.retry_backoff_seconds,
        )
