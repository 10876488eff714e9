"""Prometheus metrics service for the exporter.

The service owns two explicit registries instead of relying on the global
prometheus_client registry:

- ``registry`` holds the application metrics served at ``/powerpal``: the
  device gauges, the Powerpal API self-metrics and build info.
- ``runtime_registry`` holds process, platform and GC collectors together
  with the API self-metrics and shutdown metrics, served at ``/metrics``.

Services own their own metrics and register them on ``registry``:

    class MyService:
        def __init__(self, metrics_service: MetricsService):
            self.my_gauge = Gauge(
                "my_gauge", "Description", registry=metrics_service.registry
            )
"""

import logging
import platform
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    Info,
    PlatformCollector,
    ProcessCollector,
    Summary,
    generate_latest,
)

from powerpal_exporter import __version__
from powerpal_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)

# Label value for the only Powerpal endpoint the exporter calls
API_DEVICE_ENDPOINT = "api_device"


class MetricsService:
    """Owner of the metric registries and the exporter's self-metrics."""

    def __init__(self, lifecycle_coordinator: LifecycleCoordinatorProtocol):
        """Initialize metrics service.

        Args:
            lifecycle_coordinator: Coordinator for shutdown notifications.
        """
        self._shutdown_start_time: float | None = None

        self.registry = CollectorRegistry()
        self.runtime_registry = CollectorRegistry()

        ProcessCollector(registry=self.runtime_registry)
        PlatformCollector(registry=self.runtime_registry)
        GCCollector(registry=self.runtime_registry)

        self._initialize_metrics()

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)

    def _initialize_metrics(self) -> None:
        """Initialize Prometheus metric objects."""
        self.build_info = Info(
            "powerpal_exporter_build",
            "Version of the Powerpal exporter",
            registry=self.registry,
        )
        self.build_info.info(
            {"version": __version__, "python_version": platform.python_version()}
        )

        self.api_duration_seconds = Summary(
            "powerpal_api_duration_seconds",
            "Duration of request to Powerpal API by exporter",
            ["endpoint"],
            registry=self.registry,
        )
        self.api_errors_total = Counter(
            "powerpal_api_errors_total",
            "Errors in requests to the Powerpal API",
            registry=self.registry,
        )

        # Self-metrics are also served alongside the runtime metrics
        self.runtime_registry.register(self.api_duration_seconds)
        self.runtime_registry.register(self.api_errors_total)

        self.application_shutting_down = Gauge(
            "application_shutting_down",
            "Whether application is shutting down (1=yes, 0=no)",
            registry=self.runtime_registry,
        )
        self.graceful_shutdown_duration_seconds = Histogram(
            "graceful_shutdown_duration_seconds",
            "Duration of graceful shutdowns",
            registry=self.runtime_registry,
        )

    def get_metrics_text(self) -> str:
        """Generate runtime metrics in Prometheus text format."""
        return generate_latest(self.runtime_registry).decode("utf-8")

    def get_powerpal_metrics_text(self) -> str:
        """Generate the exporter's application metrics in Prometheus text format."""
        return generate_latest(self.registry).decode("utf-8")

    def record_api_duration(self, endpoint: str, duration: float) -> None:
        """Record the duration of a Powerpal API request.

        Args:
            endpoint: Endpoint label value
            duration: Duration in seconds
        """
        self.api_duration_seconds.labels(endpoint=endpoint).observe(duration)

    def record_api_error(self) -> None:
        """Count one failed Powerpal API poll."""
        self.api_errors_total.inc()

    def set_shutdown_state(self, is_shutting_down: bool) -> None:
        self.application_shutting_down.set(1 if is_shutting_down else 0)
        if is_shutting_down:
            self._shutdown_start_time = time.perf_counter()

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        match event:
            case LifecycleEvent.PREPARE_SHUTDOWN:
                self.set_shutdown_state(True)
            case LifecycleEvent.SHUTDOWN:
                self._record_shutdown_duration()

    def _record_shutdown_duration(self) -> None:
        if self._shutdown_start_time:
            duration = time.perf_counter() - self._shutdown_start_time
            self.graceful_shutdown_duration_seconds.observe(duration)
            logger.info("Graceful shutdown took %.3fs", duration)
