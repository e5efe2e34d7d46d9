"""Transfer coordinator: moves stock between locations as one atomic unit."""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from time import perf_counter

from sqlalchemy.orm import Session

from stock_ledger.exceptions import (
    BusinessLogicException,
    DuplicateTransferSubmissionException,
    InsufficientStockException,
    InvalidQuantityException,
    SameLocationException,
    SourceNotFoundException,
)
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry
from stock_ledger.services.base import BaseService
from stock_ledger.services.location_service import LocationService
from stock_ledger.services.metrics_service import MetricsServiceProtocol
from stock_ledger.services.movement_ledger_service import MovementLedgerService
from stock_ledger.services.stock_catalog_service import StockCatalogService
from stock_ledger.services.unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)

TRANSFER_REASON = "Inter-warehouse transfer"


def validate_quantity(quantity: object) -> int:
    """Return ``quantity`` if it is a positive integer, else raise."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityException(quantity)
    return quantity


@dataclass
class TransferRequest:
    """A request to move units of one equipment key between two locations."""
    source_location_id: int
    destination_location_id: int
    equipment_key: str
    quantity: int
    actor: str
    notes: str | None = None
    transfer_group_id: str | None = None


@dataclass
class StockOutcome:
    """Effect of a transfer on one side's stock record."""
    stock_id: int
    location_id: int
    previous_quantity: int
    new_quantity: int
    version: int
    movement_id: int


@dataclass
class TransferResult:
    """Committed (or replayed) transfer."""
    transfer_group_id: str
    equipment_key: str
    quantity: int
    source: StockOutcome
    destination: StockOutcome
    replayed: bool = False


@dataclass
class BatchTransferItem:
    equipment_key: str
    quantity: int


@dataclass
class BatchItemResult:
    """Per-item line of a batch transfer report."""
    index: int
    equipment_key: str
    quantity: int
    transfer: TransferResult | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.transfer is not None


@dataclass
class BatchTransferResult:
    """Partial-success report for a batch of independent transfers."""
    batch_id: str
    items: list[BatchItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[BatchItemResult]:
        return [item for item in self.items if item.succeeded]

    @property
    def failed(self) -> list[BatchItemResult]:
        return [item for item in self.items if not item.succeeded]


class TransferService(BaseService):
    """Service class coordinating stock transfers between locations.

    A transfer debits the source record, credits the destination record
    (creating it on first arrival with the source's metadata) and appends a
    paired ``out``/``in`` ledger entry, all in one commit. Both record updates
    are conditioned on the versions read at the start of the attempt; a
    conflicting writer causes the attempt to be rolled back and re-run from
    fresh reads, up to ``max_attempts`` times.
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
        """Initialize service with database session and dependencies.

        Args:
            db: SQLAlchemy database session
            location_service: Instance of LocationService
            catalog: Instance of StockCatalogService
            ledger: Instance of MovementLedgerService
            metrics_service: Instance of MetricsService for recording metrics
            max_attempts: Attempts made before a retryable error is surfaced
            retry_backoff_seconds: Base delay between attempts, doubled each retry
        """
        super().__init__(db)
        self.location_service = location_service
        self.catalog = catalog
        self.ledger = ledger
        self.metrics_service = metrics_service
        self.max_attempts = max_attempts
        self.retry_backoff_seconds = retry_backoff_seconds

    def transfer(self, request: TransferRequest) -> TransferResult:
        """Move stock from the source to the destination location.

        Raises:
            InvalidQuantityException: quantity is not a positive integer
            SameLocationException: source and destination are the same
            SourceNotFoundException: the source holds no record of the item
            InsufficientStockException: the source holds fewer units than requested
            ConcurrentModificationException: retry budget exhausted on version conflicts
            StorageUnavailableException: retry budget exhausted on storage errors
            DuplicateTransferSubmissionException: group id reused for another transfer
        """
        start = perf_counter()
        try:
            validate_quantity(request.quantity)
            if request.source_location_id == request.destination_location_id:
                raise SameLocationException(self._location_label(request.source_location_id))

            transfer_group_id = request.transfer_group_id or uuid.uuid4().hex
            result = run_in_transaction(
                self.db,
                lambda: self._attempt_transfer(request, transfer_group_id),
                description=f"Transfer {transfer_group_id}",
                max_attempts=self.max_attempts,
                backoff_seconds=self.retry_backoff_seconds,
                on_retry=lambda e: self.metrics_service.record_transfer_retry(e.error_code.lower()),
            )
        except BusinessLogicException as e:
            self.metrics_service.record_transfer(
                e.error_code.lower(), request.quantity, perf_counter() - start
            )
            raise

        outcome = "replayed" if result.replayed else "committed"
        self.metrics_service.record_transfer(outcome, result.quantity, perf_counter() - start)
        logger.info(
            f"Transfer {result.transfer_group_id} {outcome}: {result.quantity} x "
            f"{result.equipment_key} from {result.source.location_id} to "
            f"{result.destination.location_id} by {request.actor}"
        )
        return result

    def transfer_batch(
        self,
        source_location_id: int,
        destination_location_id: int,
        items: Sequence[BatchTransferItem],
        actor: str,
        notes: str | None = None,
        batch_id: str | None = None,
    ) -> BatchTransferResult:
        """Run one independent transfer per item and report each outcome.

        Items share the ``batch_id`` prefix of their transfer group ids, so
        re-submitting the same batch replays the items that already committed.
        """
        report = BatchTransferResult(batch_id=batch_id or uuid.uuid4().hex)

        for index, item in enumerate(items, start=1):
            line = BatchItemResult(index=index, equipment_key=item.equipment_key, quantity=item.quantity)
            try:
                line.transfer = self.transfer(
                    TransferRequest(
                        source_location_id=source_location_id,
                        destination_location_id=destination_location_id,
                        equipment_key=item.equipment_key,
                        quantity=item.quantity,
                        actor=actor,
                        notes=notes,
                        transfer_group_id=f"{report.batch_id}:{index}",
                    )
                )
            except BusinessLogicException as e:
                logger.warning(f"Batch {report.batch_id} item {index} ({item.equipment_key}) failed: {e.message}")
                line.error_code = e.error_code
                line.error_message = e.message
            report.items.append(line)

        self.metrics_service.record_batch_transfer(len(report.succeeded), len(report.failed))
        return report

    def get_transfer(self, transfer_group_id: str) -> TransferResult | None:
        """Rebuild a committed transfer from its ledger entries."""
        entries = self.ledger.get_transfer_group(transfer_group_id)
        if not entries:
            return None
        return self._result_from_entries(transfer_group_id, entries, replayed=False)

    def _attempt_transfer(self, request: TransferRequest, transfer_group_id: str) -> TransferResult:
        if request.transfer_group_id is not None:
            prior = self.ledger.get_transfer_group(transfer_group_id)
            if prior:
                return self._replay(request, transfer_group_id, prior)

        source = self.catalog.get_record(request.equipment_key, request.source_location_id)
        if source is None:
            raise SourceNotFoundException(
                request.equipment_key, self._location_label(request.source_location_id)
            )
        destination_location = self.location_service.get_location(request.destination_location_id)

        source_version = source.version
        source_previous = source.quantity
        source_new = source_previous - request.quantity
        if source_new < 0:
            raise InsufficientStockException(
                request.equipment_key, request.quantity, source_previous, source.location_name
            )

        destination = self.catalog.create_if_absent(
            request.equipment_key,
            request.destination_location_id,
            source.metadata_snapshot(),
        )
        destination_version = destination.version
        destination_previous = destination.quantity
        destination_new = destination_previous + request.quantity

        # A new destination is inserted by the first flush, so credit it before the debit
        self.catalog.compare_and_set(destination, destination_version, destination_new)
        self.catalog.compare_and_set(source, source_version, source_new)

        out_entry = self.ledger.append(
            source,
            MovementDirection.OUT,
            request.quantity,
            source_previous,
            source_new,
            reason=TRANSFER_REASON,
            actor=request.actor,
            notes=request.notes or f"Transfer to {destination_location.name}",
            counterparty_location_id=request.destination_location_id,
            transfer_group_id=transfer_group_id,
        )
        in_entry = self.ledger.append(
            destination,
            MovementDirection.IN,
            request.quantity,
            destination_previous,
            destination_new,
            reason=TRANSFER_REASON,
            actor=request.actor,
            notes=request.notes or f"Transfer from {source.location_name}",
            counterparty_location_id=request.source_location_id,
            transfer_group_id=transfer_group_id,
        )
        return self._result_from_entries(transfer_group_id, [out_entry, in_entry], replayed=False)

    def _replay(
        self,
        request: TransferRequest,
        transfer_group_id: str,
        entries: list[MovementEntry],
    ) -> TransferResult:
        result = self._result_from_entries(transfer_group_id, entries, replayed=True)
        if (
            result.equipment_key != request.equipment_key
            or result.quantity != request.quantity
            or result.source.location_id != request.source_location_id
            or result.destination.location_id != request.destination_location_id
        ):
            raise DuplicateTransferSubmissionException(transfer_group_id)
        logger.info(f"Transfer {transfer_group_id} was already committed, returning original result")
        return result

    def _result_from_entries(
        self,
        transfer_group_id: str,
        entries: list[MovementEntry],
        replayed: bool,
    ) -> TransferResult:
        by_direction = {entry.direction: entry for entry in entries}
        out_entry = by_direction[MovementDirection.OUT]
        in_entry = by_direction[MovementDirection.IN]
        return TransferResult(
            transfer_group_id=transfer_group_id,
            equipment_key=out_entry.equipment_key,
            quantity=out_entry.quantity,
            source=self._outcome(out_entry),
            destination=self._outcome(in_entry),
            replayed=replayed,
        )

    @staticmethod
    def _outcome(entry: MovementEntry) -> StockOutcome:
        return StockOutcome(
            stock_id=entry.stock_id,
            location_id=entry.location_id,
            previous_quantity=entry.previous_quantity,
            new_quantity=entry.new_quantity,
            version=entry.stock_version,
            movement_id=entry.id,
        )

    def _location_label(self, location_id: int) -> str:
        location = self.location_service.find_location(location_id)
        return location.name if location is not None else f"location {location_id}"
