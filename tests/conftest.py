"""Pytest configuration and fixtures."""

import sqlite3
from collections.abc import Callable, Generator
from decimal import Decimal

import pytest
from flask import Flask
from prometheus_client import REGISTRY
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from stock_ledger import create_app
from stock_ledger.config import Settings
from stock_ledger.database import init_db
from stock_ledger.models.equipment_stock import EquipmentStock
from stock_ledger.models.location import Location
from stock_ledger.services.container import ServiceContainer


@pytest.fixture(autouse=True)
def clear_prometheus_registry():
    """Clear Prometheus registry before and after each test to ensure isolation.

    Metrics cannot be registered twice in the same registry, and every app
    instance creates its own metrics service.
    """
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            pass
    yield
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            pass


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        SECRET_KEY="test-secret-key",
        DEBUG=True,
        FLASK_ENV="testing",
        CORS_ORIGINS=["http://localhost:3000"],
        TRANSFER_MAX_ATTEMPTS=3,
        MOVEMENT_PAGE_SIZE_DEFAULT=50,
        MOVEMENT_PAGE_SIZE_MAX=500,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with in-memory database."""
    return _build_test_settings()


@pytest.fixture(scope="session")
def template_connection() -> Generator[sqlite3.Connection, None, None]:
    """Create a template SQLite database once with the full schema."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)

    settings = _build_test_settings().model_copy()
    settings.DATABASE_URL = "sqlite://"
    settings.set_engine_options_override({
        "poolclass": StaticPool,
        "creator": lambda: conn,
    })

    template_app = create_app(settings)
    with template_app.app_context():
        init_db()

    yield conn

    conn.close()


@pytest.fixture
def app(test_settings: Settings, template_connection: sqlite3.Connection) -> Generator[Flask, None, None]:
    """Create Flask app for testing using a fresh copy of the template database."""
    clone_conn = sqlite3.connect(":memory:", check_same_thread=False)
    template_connection.backup(clone_conn)

    settings = test_settings.model_copy()
    settings.DATABASE_URL = "sqlite://"
    settings.set_engine_options_override({
        "poolclass": StaticPool,
        "creator": lambda: clone_conn,
    })

    app = create_app(settings)

    try:
        yield app
    finally:
        with app.app_context():
            from stock_ledger.extensions import db as flask_db

            flask_db.session.remove()

        clone_conn.close()


@pytest.fixture
def session(container: ServiceContainer) -> Generator[Session, None, None]:
    """Create a new database session for a test."""

    session = container.db_session()

    exc = None
    try:
        yield session
    except Exception as e:
        exc = e

    if exc:
        session.rollback()
    else:
        session.commit()
    session.close()

    container.db_session.reset()


@pytest.fixture
def client(app: Flask):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app: Flask) -> ServiceContainer:
    """Access to the DI container for testing with session provided."""
    container = app.container

    with app.app_context():
        from sqlalchemy.orm import sessionmaker

        from stock_ledger.extensions import db as flask_db

        SessionLocal = sessionmaker(
            bind=flask_db.engine, autoflush=True, expire_on_commit=False
        )

    container.session_maker.override(SessionLocal)

    return container


@pytest.fixture
def make_location(session: Session) -> Callable[..., Location]:
    """Factory creating committed locations."""
    counter = {"n": 0}

    def _make(name: str, code: str | None = None) -> Location:
        counter["n"] += 1
        location = Location(code=code or f"LOC-{counter['n']}", name=name)
        session.add(location)
        session.commit()
        return location

    return _make


@pytest.fixture
def make_stock(session: Session) -> Callable[..., EquipmentStock]:
    """Factory creating committed stock records at version 1."""

    def _make(
        equipment_key: str,
        location: Location,
        quantity: int,
        *,
        name: str = "ThinkPad X1 Carbon",
        equipment_type: str = "laptop",
        unit_cost: Decimal | None = Decimal("1200.00"),
        min_threshold: int | None = None,
        max_threshold: int | None = None,
        supplier: str | None = "Lenovo",
    ) -> EquipmentStock:
        record = EquipmentStock(
            equipment_key=equipment_key,
            location_id=location.id,
            name=name,
            equipment_type=equipment_type,
            supplier=supplier,
            unit_cost=unit_cost,
            min_threshold=min_threshold,
            max_threshold=max_threshold,
            quantity=quantity,
        )
        session.add(record)
        session.commit()
        return record

    return _make
