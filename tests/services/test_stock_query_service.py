"""Tests for read-only stock queries."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from flask import Flask
from sqlalchemy.orm import Session

from stock_ledger.exceptions import RecordNotFoundException
from stock_ledger.services.container import ServiceContainer
from stock_ledger.services.stock_query_service import low_stock_severity, suggested_restock


@pytest.mark.parametrize(
    ("quantity", "min_threshold", "max_threshold", "expected"),
    [
        (3, 5, 20, 17),
        (1, 4, None, 7),
        (25, 5, 20, 0),
        (0, None, None, 0),
        (0, None, 10, 10),
    ],
)
def test_suggested_restock(quantity, min_threshold, max_threshold, expected):
    assert suggested_restock(quantity, min_threshold, max_threshold) == expected


@pytest.mark.parametrize(
    ("quantity", "min_threshold", "expected"),
    [(0, 10, "out_of_stock"), (5, 10, "critical"), (6, 10, "low"), (10, 10, "low")],
)
def test_low_stock_severity(quantity, min_threshold, expected):
    assert low_stock_severity(quantity, min_threshold) == expected


class TestStockQueryService:
    """Test cases for StockQueryService."""

    def test_current_level(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 6)
        query = container.stock_query_service()

        assert query.current_level("LAPTOP", site.id) == 6
        assert query.current_level("MONITOR", site.id) == 0

    def test_get_stock_missing(self, app: Flask, session: Session, container: ServiceContainer, make_location):
        site = make_location("Main Warehouse")

        with pytest.raises(RecordNotFoundException):
            container.stock_query_service().get_stock("LAPTOP", site.id)

    def test_list_low_stock(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 0, min_threshold=4)
        make_stock("MONITOR", north, 2, min_threshold=4, max_threshold=12)
        make_stock("DOCK", north, 9, min_threshold=4)
        make_stock("CABLE", south, 3, min_threshold=4)
        make_stock("MOUSE", south, 1)
        query = container.stock_query_service()

        items = query.list_low_stock()

        assert [(item.record.equipment_key, item.severity, item.suggested_restock) for item in items] == [
            ("LAPTOP", "out_of_stock", 8),
            ("MONITOR", "critical", 10),
            ("CABLE", "low", 5),
        ]
        assert [item.record.equipment_key for item in query.list_low_stock(location_id=south.id)] == ["CABLE"]

    def test_distribution_and_total(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 4)
        make_stock("LAPTOP", south, 7)
        query = container.stock_query_service()

        assert query.distribution("LAPTOP") == {north.id: 4, south.id: 7}
        assert query.total_quantity("LAPTOP") == 11
        assert query.total_quantity("MONITOR") == 0

    def test_total_value(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 2, unit_cost=Decimal("1000.50"))
        make_stock("MONITOR", north, 3, unit_cost=Decimal("250.00"))
        make_stock("CABLE", south, 10, unit_cost=None)
        query = container.stock_query_service()

        assert query.total_value() == Decimal("2751.00")
        assert query.total_value(location_id=south.id) == Decimal("0.00")

    def test_location_summary(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        empty = make_location("Empty")
        make_stock("LAPTOP", north, 2, unit_cost=Decimal("1000.00"), min_threshold=3)
        make_stock("MONITOR", north, 5, unit_cost=Decimal("200.00"), min_threshold=1)
        query = container.stock_query_service()

        summary = query.location_summary(north.id)
        assert summary.item_count == 2
        assert summary.total_units == 7
        assert summary.total_value == Decimal("3000.00")
        assert summary.low_stock_count == 1

        empty_summary = query.location_summary(empty.id)
        assert empty_summary.item_count == 0
        assert empty_summary.total_units == 0
        assert empty_summary.total_value == Decimal("0.00")

    def test_recent_activity(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 5)
        adjustments = container.stock_adjustment_service()
        adjustments.issue_stock("LAPTOP", north.id, 1, actor="a")
        adjustments.issue_stock("LAPTOP", north.id, 2, actor="a")

        activity = container.stock_query_service().recent_activity(location_id=north.id, limit=1)

        assert len(activity) == 1
        assert activity[0].quantity == 2
        assert container.stock_query_service().recent_activity(location_id=south.id) == []

    def test_type_breakdown(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 2, unit_cost=Decimal("1000.00"))
        make_stock("LAPTOP", south, 1, unit_cost=Decimal("1000.00"))
        make_stock("MONITOR", north, 4, equipment_type="monitor", unit_cost=Decimal("250.00"))
        make_stock("CABLE", south, 30, equipment_type="cable", unit_cost=None)
        query = container.stock_query_service()

        breakdown = query.type_breakdown()

        assert [(row.equipment_type, row.item_count, row.total_units, row.total_value) for row in breakdown] == [
            ("laptop", 2, 3, Decimal("3000.00")),
            ("monitor", 1, 4, Decimal("1000.00")),
            ("cable", 1, 30, Decimal("0.00")),
        ]
        assert [row.equipment_type for row in query.type_breakdown(limit=2)] == ["laptop", "monitor"]
        assert [(row.equipment_type, row.total_units) for row in query.type_breakdown(location_id=south.id)] == [
            ("laptop", 1),
            ("cable", 30),
        ]

    def test_monthly_movements_current_month(self, app: Flask, session: Session, container: ServiceContainer, make_location, make_stock):
        north = make_location("North")
        make_stock("LAPTOP", north, 5)
        adjustments = container.stock_adjustment_service()
        adjustments.receive_stock("LAPTOP", north.id, 3, actor="a")
        adjustments.issue_stock("LAPTOP", north.id, 1, actor="a")
        adjustments.issue_stock("LAPTOP", north.id, 2, actor="a")
        query = container.stock_query_service()

        months = query.monthly_movements(months=3)

        today = datetime.now(UTC)
        assert len(months) == 3
        assert months[-1].month == date(today.year, today.month, 1)
        assert sum(month.in_count for month in months) == 1
        assert sum(month.out_count for month in months) == 2
        assert query.monthly_movements(months=3, location_id=north.id + 100)[-1].out_count == 0

    def test_monthly_movements_fills_empty_months(self, app: Flask, session: Session, container: ServiceContainer):
        months = container.stock_query_service().monthly_movements(months=4, now=datetime(2027, 2, 15))

        assert [month.month for month in months] == [
            date(2026, 11, 1),
            date(2026, 12, 1),
            date(2027, 1, 1),
            date(2027, 2, 1),
        ]
        assert all(month.in_count == 0 and month.out_count == 0 for month in months)
