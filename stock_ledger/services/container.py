"""Dependency injection container for services."""

from dependency_injector import containers, providers
from sqlalchemy.orm import sessionmaker

from stock_ledger.config import Settings
from stock_ledger.services.location_service import LocationService
from stock_ledger.services.metrics_service import MetricsService
from stock_ledger.services.movement_ledger_service import MovementLedgerService
from stock_ledger.services.stock_adjustment_service import StockAdjustmentService
from stock_ledger.services.stock_catalog_service import StockCatalogService
from stock_ledger.services.stock_query_service import StockQueryService
from stock_ledger.services.transfer_service import TransferService


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration and database session providers
    config = providers.Dependency(instance_of=Settings)
    session_maker = providers.Dependency(instance_of=sessionmaker)
    db_session = providers.ContextLocalSingleton(
        session_maker.provided.call()
    )

    # Metrics service - Singleton so collectors are registered once
    metrics_service = providers.Singleton(MetricsService)

    # Service providers - Factory creates new instances for each request
    location_service = providers.Factory(LocationService, db=db_session)
    stock_catalog_service = providers.Factory(StockCatalogService, db=db_session)
    movement_ledger_service = providers.Factory(MovementLedgerService, db=db_session)

    stock_query_service = providers.Factory(
        StockQueryService,
        db=db_session,
        ledger=movement_ledger_service,
    )

    # Transfer coordinator and adjustments share the retry budget
    transfer_service = providers.Factory(
        TransferService,
        db=db_session,
        location_service=location_service,
        catalog=stock_catalog_service,
        ledger=movement_ledger_service,
        metrics_service=metrics_service,
        max_attempts=config.provided.TRANSFER_MAX_ATTEMPTS,
        retry_backoff_seconds=config.provided.TRANSFER_RETRY_BACKOFF_SECONDS,
    )
    stock_adjustment_service = providers.Factory(
        StockAdjustmentService,
        db=db_session,
        location_service=location_service,
        catalog=stock_catalog_service,
        ledger=movement_ledger_service,
        metrics_service=metrics_service,
        max_attempts=config.provided.TRANSFER_MAX_ATTEMPTS,
        retry_backoff_seconds=config.provided.TRANSFER_RETRY_BACKOFF_SECONDS,
    )
