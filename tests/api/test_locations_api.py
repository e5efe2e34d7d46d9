"""Tests for location API endpoints."""

from decimal import Decimal

from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.orm import Session


class TestLocationsAPI:
    """Test cases for location API endpoints."""

    def test_create_and_get_location(self, app: Flask, client: FlaskClient, session: Session):
        response = client.post("/api/locations", json={"code": "WH-1", "name": "Main Warehouse"})

        assert response.status_code == 201
        created = response.get_json()
        assert created["code"] == "WH-1"

        fetched = client.get(f"/api/locations/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()["name"] == "Main Warehouse"

    def test_create_duplicate_code(self, app: Flask, client: FlaskClient, session: Session):
        client.post("/api/locations", json={"code": "WH-1", "name": "Main Warehouse"})

        response = client.post("/api/locations", json={"code": "WH-1", "name": "Other"})

        assert response.status_code == 409
        assert response.get_json()["code"] == "RESOURCE_CONFLICT"

    def test_create_location_missing_name(self, app: Flask, client: FlaskClient):
        response = client.post("/api/locations", json={"code": "WH-1"})

        assert response.status_code == 400

    def test_list_locations(self, app: Flask, client: FlaskClient, session: Session, make_location):
        make_location("South")
        make_location("North")

        response = client.get("/api/locations")

        assert response.status_code == 200
        assert [location["name"] for location in response.get_json()] == ["North", "South"]

    def test_get_unknown_location(self, app: Flask, client: FlaskClient):
        response = client.get("/api/locations/999")

        assert response.status_code == 404
        assert response.get_json()["code"] == "RECORD_NOT_FOUND"

    def test_location_summary(self, app: Flask, client: FlaskClient, session: Session, make_location, make_stock):
        site = make_location("Main Warehouse")
        make_stock("LAPTOP", site, 2, unit_cost=Decimal("100.00"), min_threshold=5)

        response = client.get(f"/api/locations/{site.id}/summary")

        assert response.status_code == 200
        data = response.get_json()
        assert data["item_count"] == 1
        assert data["total_units"] == 2
        assert Decimal(data["total_value"]) == Decimal("200.00")
        assert data["low_stock_count"] == 1

    def test_get_location_by_code(self, app: Flask, client: FlaskClient, session: Session, make_location):
        site = make_location("Main Warehouse", code="WH-1")

        response = client.get("/api/locations/code/WH-1")
        missing = client.get("/api/locations/code/WH-9")

        assert response.status_code == 200
        assert response.get_json()["id"] == site.id
        assert missing.status_code == 404
