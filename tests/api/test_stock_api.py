"""Tests for stock level and adjustment API endpoints."""

from decimal import Decimal

from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.orm import Session


class TestStockAPI:
    """Test cases for stock API endpoints."""

    def test_receive_new_item(self, app: Flask, client: FlaskClient, session: Session, make_location):
        site = make_location("Main Warehouse")

        response = client.post("/api/stock/receive", json={
            "equipment_key": "LAPTOP",
            "location_id": site.id,
            "quantity": 5,
            "actor": "jdoe",
            "metadata": {"name": "ThinkPad X1", "equipment_type": "laptop", "unit_cost": "1299.00"},
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["direction"] == "in"
        assert data["new_quantity"] == 5
        assert data["reason"] == "Stock In"

        record = client.get(f"/api/stock/LAPTOP/{site.id}")
        assert record.status_code == 200
        assert record.get_json()["quantity"] == 5
        assert Decimal(record.get_json()["unit_cost"]) == Decimal("1299.00")

    def test_receive_new_item_without_metadata(self, app: Flask, client: FlaskClient, session: Session, make_location):
        site = make_location("Main Warehouse")

        response = client.post("/api/stock/receive", json={
            "equipment_key": "LAPTOP",
            "location_id": site.id,
            "quantity": 5,
            "actor": "jdoe",
        })

        assert response.status_code == 409
        assert response.get_json()["code"] == "INVALID_OPERATION"

    def test_issue_stock(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 3)

        ok = client.post("/api/stock/issue", json={
            "equipment_key": "LAPTOP", "location_id": site.id, "quantity": 2, "actor": "jdoe",
        })
        too_many = client.post("/api/stock/issue", json={
            "equipment_key": "LAPTOP", "location_id": site.id, "quantity": 2, "actor": "jdoe",
        })

        assert ok.status_code == 201
        assert ok.get_json()["new_quantity"] == 1
        assert too_many.status_code == 409
        assert too_many.get_json()["code"] == "INSUFFICIENT_STOCK"

    def test_restock(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 1, min_threshold=3, max_threshold=10)

        response = client.post("/api/stock/restock", json={
            "equipment_key": "LAPTOP", "location_id": site.id, "actor": "jdoe",
        })

        assert response.status_code == 201
        assert response.get_json()["new_quantity"] == 10
        assert response.get_json()["reason"] == "Quick Restock"

    def test_get_stock_missing(self, app: Flask, client: FlaskClient, session: Session, make_location):
        site = make_location("Main Warehouse")

        response = client.get(f"/api/stock/LAPTOP/{site.id}")

        assert response.status_code == 404

    def test_low_stock(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 1, min_threshold=4)
        make_stock("MONITOR", site, 9, min_threshold=4)

        response = client.get(f"/api/stock/low?location_id={site.id}")

        assert response.status_code == 200
        data = response.get_json()
        assert len(data) == 1
        assert data[0]["record"]["equipment_key"] == "LAPTOP"
        assert data[0]["severity"] == "critical"
        assert data[0]["suggested_restock"] == 7

    def test_distribution(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        north = make_location("North")
        south = make_location("South")
        make_stock("LAPTOP", north, 4)
        make_stock("LAPTOP", south, 6)

        response = client.get("/api/stock/LAPTOP/distribution")

        assert response.status_code == 200
        data = response.get_json()
        assert data["total_quantity"] == 10
        assert data["locations"] == [
            {"location_id": north.id, "quantity": 4},
            {"location_id": south.id, "quantity": 6},
        ]

    def test_stock_value(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 2, unit_cost=Decimal("500.00"))

        response = client.get("/api/stock/value")

        assert response.status_code == 200
        assert Decimal(response.get_json()["total_value"]) == Decimal("1000.00")

    def test_receive_batch(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 1)

        response = client.post("/api/stock/receive/batch", json={
            "location_id": site.id,
            "actor": "jdoe",
            "notes": "Quarterly delivery",
            "items": [
                {"equipment_key": "LAPTOP", "quantity": 4},
                {"equipment_key": "DOCK", "quantity": 2},
            ],
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data["direction"] == "in"
        assert data["succeeded_count"] == 1
        assert data["failed_count"] == 1
        assert data["items"][0]["movement"]["new_quantity"] == 5
        assert data["items"][0]["movement"]["reason"] == "Bulk Stock In"
        assert data["items"][1]["succeeded"] is False
        assert data["items"][1]["error_code"] == "INVALID_OPERATION"

    def test_issue_batch(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 3)
        make_stock("MONITOR", site, 1)

        response = client.post("/api/stock/issue/batch", json={
            "location_id": site.id,
            "actor": "jdoe",
            "items": [
                {"equipment_key": "LAPTOP", "quantity": 2},
                {"equipment_key": "MONITOR", "quantity": 5},
            ],
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data["direction"] == "out"
        assert data["succeeded_count"] == 1
        assert data["items"][0]["movement"]["new_quantity"] == 1
        assert data["items"][1]["error_code"] == "INSUFFICIENT_STOCK"

    def test_bulk_adjustment_validation(self, app: Flask, client: FlaskClient, session: Session, make_location):
        site = make_location("Main Warehouse")

        empty = client.post("/api/stock/issue/batch", json={"location_id": site.id, "actor": "jdoe", "items": []})
        unknown = client.post("/api/stock/receive/batch", json={
            "location_id": 999,
            "actor": "jdoe",
            "items": [{"equipment_key": "LAPTOP", "quantity": 1}],
        })

        assert empty.status_code == 400
        assert unknown.status_code == 404

    def test_type_breakdown(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 2, unit_cost=Decimal("500.00"))
        make_stock("MONITOR", site, 3, equipment_type="monitor", unit_cost=Decimal("100.00"))

        response = client.get("/api/stock/types?limit=1")

        assert response.status_code == 200
        data = response.get_json()
        assert len(data) == 1
        assert data[0]["equipment_type"] == "laptop"
        assert data[0]["total_units"] == 2
        assert Decimal(data[0]["total_value"]) == Decimal("1000.00")
