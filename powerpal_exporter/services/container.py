"""Dependency injection container for the exporter."""

from dependency_injector import containers, providers

from powerpal_exporter.config import Settings
from powerpal_exporter.services.device_metrics_service import DeviceMetricsService
from powerpal_exporter.services.metrics_service import MetricsService
from powerpal_exporter.services.powerpal_client import PowerpalClient
from powerpal_exporter.utils.lifecycle_coordinator import LifecycleCoordinator


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration - must be overridden by create_app()
    config = providers.Dependency(instance_of=Settings)

    # Lifecycle coordinator - signal handling and shutdown notifications
    lifecycle_coordinator = providers.Singleton(
        LifecycleCoordinator,
        graceful_shutdown_timeout=config.provided.graceful_shutdown_timeout,
    )

    # Metrics service - owns the registries and the API self-metrics
    metrics_service = providers.Singleton(
        MetricsService,
        lifecycle_coordinator=lifecycle_coordinator,
    )

    # Powerpal API client; tests override the transport with httpx.MockTransport
    powerpal_transport = providers.Object(None)
    powerpal_client = providers.Singleton(
        PowerpalClient,
        settings=config,
        metrics_service=metrics_service,
        transport=powerpal_transport,
    )

    # Device metrics service - owns the device gauges and the poll thread
    device_metrics_service = providers.Singleton(
        DeviceMetricsService,
        powerpal_client=powerpal_client,
        metrics_service=metrics_service,
        lifecycle_coordinator=lifecycle_coordinator,
    )


def start_background_services(container: ServiceContainer) -> None:
    """Create the device gauges and start the device poller.

    Called once at startup so the full metric set is registered before the
    first scrape.
    """
    settings = container.config()
    container.device_metrics_service().start(settings.refresh_seconds)
