"""Periodic Powerpal poll that keeps the device gauges current.

Each cycle fetches the device info document, decodes it into DeviceStats
and overwrites all device gauges. A failed fetch or decode leaves the
gauges at the values of the last successful poll.
"""

import logging
import threading
from enum import Enum

from prometheus_client import Gauge
from pydantic import ValidationError

from powerpal_exporter.exceptions import DecodeError
from powerpal_exporter.schemas.device_stats import DeviceStats
from powerpal_exporter.services.metrics_service import MetricsService
from powerpal_exporter.services.powerpal_client import PowerpalClient
from powerpal_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)


class PollOutcome(str, Enum):
    """Result of a single poll cycle."""

    UPDATED = "updated"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"


class DeviceMetricsService:
    """Owns the device gauges and the background thread that refreshes them.

    Example usage:
        service = container.device_metrics_service()
        service.start(interval_seconds=30)
    """

    def __init__(
        self,
        powerpal_client: PowerpalClient,
        metrics_service: MetricsService,
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
    ):
        self.powerpal_client = powerpal_client
        self.metrics_service = metrics_service
        self.lifecycle_coordinator = lifecycle_coordinator

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

        self._init_metrics()

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)
        lifecycle_coordinator.register_shutdown_waiter(
            "DeviceMetricsService", self._wait_for_poll_thread
        )

    def _init_metrics(self) -> None:
        """Create the device gauges on the application registry."""
        registry = self.metrics_service.registry

        self.available_days = Gauge(
            "powerpal_available_days",
            "The number of days of data available within Powerpal for this device",
            registry=registry,
        )
        self.first_reading_timestamp = Gauge(
            "powerpal_reading_timestamp_first",
            "The timestamp of the first reading",
            registry=registry,
        )
        self.last_reading_timestamp = Gauge(
            "powerpal_reading_timestamp_last",
            "The timestamp of the last reading",
            registry=registry,
        )
        self.cost = Gauge(
            "powerpal_cost",
            "The cost at the last reading per second",
            registry=registry,
        )
        self.watt_hours = Gauge(
            "powerpal_watt_hours",
            "The watt hours being consumed at the last reading per second",
            registry=registry,
        )
        self.cost_total = Gauge(
            "powerpal_cost_total",
            "The total cost recorded by this device",
            registry=registry,
        )
        self.watt_hours_total = Gauge(
            "powerpal_watt_hours_total",
            "The total watt hours recorded by this device",
            registry=registry,
        )
        self.reading_count = Gauge(
            "powerpal_reading_count",
            "The total number of readings recorded by this device",
            registry=registry,
        )

    def poll_once(self) -> PollOutcome:
        """Run one fetch, decode and update cycle synchronously."""
        result = self.powerpal_client.fetch_device_info()
        if not result.ok or result.body is None:
            # Already logged and counted by the client
            return PollOutcome.FETCH_FAILED

        try:
            stats = DeviceStats.model_validate_json(result.body)
        except ValidationError as e:
            error = DecodeError(f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}")
            logger.error(error.message)
            self.metrics_service.record_api_error()
            return PollOutcome.DECODE_FAILED

        self.update_gauges(stats)
        logger.debug(
            "Updated device gauges",
            extra={"serial_number": stats.serial_number, "available_days": stats.available_days},
        )
        return PollOutcome.UPDATED

    def update_gauges(self, stats: DeviceStats) -> None:
        """Overwrite every device gauge from a decoded document."""
        # Convert all values before setting any gauge
        values = [
            (self.available_days, float(stats.available_days)),
            (self.first_reading_timestamp, float(stats.first_reading_timestamp)),
            (self.last_reading_timestamp, float(stats.last_reading_timestamp)),
            (self.cost, float(stats.last_reading_cost)),
            (self.watt_hours, float(stats.last_reading_watt_hours)),
            (self.cost_total, float(stats.total_cost)),
            (self.watt_hours_total, float(stats.total_watt_hours)),
            (self.reading_count, float(stats.total_meter_reading_count)),
        ]

        for gauge, value in values:
            gauge.set(value)

    def start(self, interval_seconds: int) -> None:
        """Start polling now and then every ``interval_seconds``."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                logger.warning("Device metrics poller already running")
                return

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._poll_loop,
                args=(interval_seconds,),
                daemon=True,
                name="DeviceMetricsPoller",
            )
            self._thread.start()

        logger.info(
            "Started device metrics poller",
            extra={"interval_seconds": interval_seconds},
        )

    def stop(self) -> None:
        """Stop the loop once the current cycle finishes."""
        self._stop_event.set()

    def _poll_loop(self, interval_seconds: int) -> None:
        while not self._stop_event.is_set():
            if self.lifecycle_coordinator.is_shutting_down():
                break

            try:
                self.poll_once()
            except Exception as e:
                logger.error(
                    "Device metrics poll failed",
                    exc_info=True,
                    extra={"error": str(e)},
                )

            if self._stop_event.wait(interval_seconds):
                break

        logger.info("Stopped device metrics poller")

    def _wait_for_poll_thread(self, timeout: float) -> bool:
        with self._lock:
            thread = self._thread
        if thread is None:
            return True
        thread.join(timeout=timeout)
        return not thread.is_alive()

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        match event:
            case LifecycleEvent.PREPARE_SHUTDOWN:
                self.stop()
            case LifecycleEvent.SHUTDOWN:
                self.powerpal_client.close()
