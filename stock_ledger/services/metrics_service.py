"""Prometheus metrics service for collecting and exposing stock ledger metrics."""

import logging
from abc import ABC, abstractmethod

from prometheus_client import Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


class MetricsServiceProtocol(ABC):
    """Protocol for metrics service implementations."""

    @abstractmethod
    def initialize_metrics(self):
        """Initialize metric objects."""
        pass

    @abstractmethod
    def record_transfer(self, outcome: str, quantity: int, duration: float) -> None:
        """Record the outcome of a transfer request."""
        pass

    @abstractmethod
    def record_transfer_retry(self, reason: str) -> None:
        """Record a transfer attempt that will be retried."""
        pass

    @abstractmethod
    def record_stock_adjustment(self, direction: str, quantity: int) -> None:
        """Record a receive or issue adjustment."""
        pass

    def record_batch_transfer(self, succeeded: int, failed: int) -> None:
        """Record a batch transfer report."""
        return None

    @abstractmethod
    def get_metrics_text(self) -> str:
        """Generate metrics in Prometheus text format."""
        pass


class MetricsService(MetricsServiceProtocol):
    """Service class for Prometheus metrics collection."""

    def __init__(self):
        self.initialize_metrics()

    def initialize_metrics(self):
        """Initialize all Prometheus metric objects."""
        self.transfers_total = Counter(
            'stock_transfers_total',
            'Transfer requests by outcome',
            ['outcome']
        )
        self.transfer_retries_total = Counter(
            'stock_transfer_retries_total',
            'Transfer attempts retried after a retryable failure',
            ['reason']
        )
        self.units_transferred_total = Counter(
            'stock_units_transferred_total',
            'Units moved between locations by committed transfers'
        )
        self.transfer_duration_seconds = Histogram(
            'stock_transfer_duration_seconds',
            'Wall time of transfer requests including retries'
        )
        self.stock_adjustments_total = Counter(
            'stock_adjustments_total',
            'Receive and issue adjustments by direction',
            ['direction']
        )
        self.stock_adjustment_units_total = Counter(
            'stock_adjustment_units_total',
            'Units received or issued by direction',
            ['direction']
        )
        self.batch_transfer_items_total = Counter(
            'stock_batch_transfer_items_total',
            'Batch transfer items by result',
            ['result']
        )

    def record_transfer(self, outcome: str, quantity: int, duration: float) -> None:
        try:
            self.transfers_total.labels(outcome=outcome).inc()
            self.transfer_duration_seconds.observe(duration)
            if outcome == "committed":
                self.units_transferred_total.inc(quantity)
        except Exception as e:
            logger.error(f"Error recording transfer metric: {e}")

    def record_transfer_retry(self, reason: str) -> None:
        try:
            self.transfer_retries_total.labels(reason=reason).inc()
        except Exception as e:
            logger.error(f"Error recording transfer retry metric: {e}")

    def record_stock_adjustment(self, direction: str, quantity: int) -> None:
        try:
            self.stock_adjustments_total.labels(direction=direction).inc()
            self.stock_adjustment_units_total.labels(direction=direction).inc(quantity)
        except Exception as e:
            logger.error(f"Error recording stock adjustment metric: {e}")

    def record_batch_transfer(self, succeeded: int, failed: int) -> None:
        try:
            self.batch_transfer_items_total.labels(result="succeeded").inc(succeeded)
            self.batch_transfer_items_total.labels(result="failed").inc(failed)
        except Exception as e:
            logger.error(f"Error recording batch transfer metric: {e}")

    def get_metrics_text(self) -> str:
        """Generate metrics in Prometheus text format.

        Returns:
            Metrics data in Prometheus exposition format
        """
        return generate_latest().decode('utf-8')
