"""Tests for receive, issue and restock adjustments."""

from decimal import Decimal

import pytest
from flask import Flask
from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from stock_ledger.exceptions import (
    InsufficientStockException,
    InvalidOperationException,
    InvalidQuantityException,
    RecordNotFoundException,
    SourceNotFoundException,
)
from stock_ledger.models.movement_entry import MovementDirection, MovementEntry
from stock_ledger.services.container import ServiceContainer
from stock_ledger.services.stock_adjustment_service import (
    BULK_ISSUE_REASON,
    BULK_RECEIVE_REASON,
    ISSUE_REASON,
    RECEIVE_REASON,
    RESTOCK_REASON,
    AdjustmentItem,
)

NEW_LAPTOP = {
    "name": "ThinkPad X1 Carbon",
    "equipment_type": "laptop",
    "unit_cost": Decimal("1299.00"),
    "min_threshold": 2,
}


class TestStockAdjustmentService:
    """Test cases for StockAdjustmentService."""

    def test_receive_creates_record(self, app: Flask, session: Session, container: ServiceContainer, make_location):
        site = make_location("Main Warehouse")

        entry = container.stock_adjustment_service().receive_stock(
            "LAPTOP", site.id, 10, actor="jdoe", metadata=NEW_LAPTOP
        )

        record = container.stock_catalog_service().get_record("LAPTOP", site.id)
        assert record.quantity == 10
        assert record.version == 1
        assert record.unit_cost == Decimal("1299.00")
        assert entry.direction == MovementDirection.IN
        assert (entry.previous_quantity, entry.new_quantity) == (0, 10)
        assert entry.reason == RECEIVE_REASON
        assert entry.stock_version == 1

    def test_receive_adds_to_existing_record(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 4)

        entry = container.stock_adjustment_service().receive_stock(
            "LAPTOP", site.id, 3, actor="jdoe", reason="PO 4411"
        )

        assert (entry.previous_quantity, entry.new_quantity) == (4, 7)
        assert entry.reason == "PO 4411"
        assert entry.stock_version == 2

    def test_receive_new_key_without_metadata(self, app: Flask, session: Session, container: ServiceContainer, make_location):
        site = make_location("Main Warehouse")

        with pytest.raises(InvalidOperationException):
            container.stock_adjustment_service().receive_stock("LAPTOP", site.id, 3, actor="jdoe")

        assert session.execute(select(func.count(MovementEntry.id))).scalar_one() == 0

    def test_receive_unknown_location(self, app: Flask, session: Session, container: ServiceContainer):
        with pytest.raises(RecordNotFoundException):
            container.stock_adjustment_service().receive_stock(
                "LAPTOP", 999, 3, actor="jdoe", metadata=NEW_LAPTOP
            )

    def test_receive_invalid_quantity(self, app: Flask, session: Session, container: ServiceContainer, make_location):
        site = make_location("Main Warehouse")

        with pytest.raises(InvalidQuantityException):
            container.stock_adjustment_service().receive_stock(
                "LAPTOP", site.id, 0, actor="jdoe", metadata=NEW_LAPTOP
            )

    def test_issue_stock(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 4)

        entry = container.stock_adjustment_service().issue_stock("LAPTOP", site.id, 4, actor="jdoe")

        assert entry.direction == MovementDirection.OUT
        assert entry.reason == ISSUE_REASON
        assert (entry.previous_quantity, entry.new_quantity) == (4, 0)
        assert container.stock_catalog_service().get_record("LAPTOP", site.id).quantity == 0

    def test_issue_more_than_available(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 2)

        with pytest.raises(InsufficientStockException):
            container.stock_adjustment_service().issue_stock("LAPTOP", site.id, 3, actor="jdoe")

        assert container.stock_catalog_service().get_record("LAPTOP", site.id).quantity == 2

    def test_issue_unstocked_key(self, app: Flask, session: Session, container: ServiceContainer, make_location):
        site = make_location("Main Warehouse")

        with pytest.raises(SourceNotFoundException):
            container.stock_adjustment_service().issue_stock("LAPTOP", site.id, 1, actor="jdoe")

    def test_restock_to_max_threshold(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 3, min_threshold=5, max_threshold=20)

        entry = container.stock_adjustment_service().restock("LAPTOP", site.id, actor="jdoe")

        assert entry.quantity == 17
        assert entry.new_quantity == 20
        assert entry.reason == RESTOCK_REASON

    def test_restock_without_max_doubles_minimum(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 1, min_threshold=4)

        entry = container.stock_adjustment_service().restock("LAPTOP", site.id, actor="jdoe")

        assert entry.new_quantity == 8

    def test_restock_at_target(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 20, min_threshold=5, max_threshold=20)

        with pytest.raises(InvalidOperationException, match="already at its target"):
            container.stock_adjustment_service().restock("LAPTOP", site.id, actor="jdoe")

    def test_restock_recomputes_quantity_after_conflict(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        """A restock racing another receipt tops up to the target, never past it."""
        site = make_location("Main Warehouse")
        record = make_stock("LAPTOP", site, 2, min_threshold=5, max_threshold=20)
        service = container.stock_adjustment_service()
        original = service.catalog.get_record
        calls = {"n": 0}

        def get_record(equipment_key: str, location_id: int):
            found = original(equipment_key, location_id)
            if calls["n"] == 0:
                calls["n"] += 1
                session.execute(
                    text("UPDATE equipment_stock SET quantity = 15, version = version + 1 WHERE id = :id"),
                    {"id": record.id},
                )
                session.commit()
            return found

        service.catalog.get_record = get_record  # type: ignore[method-assign]

        entry = service.restock("LAPTOP", site.id, actor="jdoe")

        assert (entry.previous_quantity, entry.new_quantity) == (15, 20)
        assert entry.quantity == 5
        session.expire_all()
        assert container.stock_catalog_service().get_record("LAPTOP", site.id).quantity == 20

    def test_restock_after_conflict_filled_the_gap(
        self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock
    ):
        site = make_location("Main Warehouse")
        record = make_stock("LAPTOP", site, 2, min_threshold=5, max_threshold=20)
        service = container.stock_adjustment_service()
        original = service.catalog.get_record
        calls = {"n": 0}

        def get_record(equipment_key: str, location_id: int):
            found = original(equipment_key, location_id)
            if calls["n"] == 0:
                calls["n"] += 1
                session.execute(
                    text("UPDATE equipment_stock SET quantity = 20, version = version + 1 WHERE id = :id"),
                    {"id": record.id},
                )
                session.commit()
            return found

        service.catalog.get_record = get_record  # type: ignore[method-assign]

        with pytest.raises(InvalidOperationException, match="already at its target"):
            service.restock("LAPTOP", site.id, actor="jdoe")

        assert session.execute(select(func.count(MovementEntry.id))).scalar_one() == 0
        assert container.stock_catalog_service().get_record("LAPTOP", site.id).quantity == 20

    def test_receive_batch(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("MONITOR", site, 1)

        report = container.stock_adjustment_service().receive_batch(
            site.id,
            [
                AdjustmentItem("LAPTOP", 5, metadata=NEW_LAPTOP),
                AdjustmentItem("MONITOR", 2),
                AdjustmentItem("DOCK", 1),
            ],
            actor="jdoe",
            notes="PO 4411",
        )

        assert report.direction == MovementDirection.IN
        assert [line.succeeded for line in report.items] == [True, True, False]
        assert report.items[2].error_code == "INVALID_OPERATION"
        assert report.items[0].movement.reason == BULK_RECEIVE_REASON
        assert report.items[0].movement.notes == "Bulk receive - PO 4411"
        assert (report.items[1].movement.previous_quantity, report.items[1].movement.new_quantity) == (1, 3)
        assert container.stock_catalog_service().get_record("DOCK", site.id) is None

    def test_issue_batch(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 4)
        make_stock("MONITOR", site, 1)

        report = container.stock_adjustment_service().issue_batch(
            site.id,
            [AdjustmentItem("LAPTOP", 3), AdjustmentItem("MONITOR", 2)],
            actor="jdoe",
        )

        assert len(report.succeeded) == 1
        assert report.failed[0].error_code == "INSUFFICIENT_STOCK"
        assert report.items[0].movement.reason == BULK_ISSUE_REASON
        assert report.items[0].movement.notes == "Bulk dispatch - No notes"
        assert container.stock_catalog_service().get_record("LAPTOP", site.id).quantity == 1
        assert container.stock_catalog_service().get_record("MONITOR", site.id).quantity == 1

    def test_bulk_adjustment_unknown_location(self, app: Flask, session: Session, container: ServiceContainer):
        with pytest.raises(RecordNotFoundException):
            container.stock_adjustment_service().issue_batch(999, [AdjustmentItem("LAPTOP", 1)], actor="jdoe")
