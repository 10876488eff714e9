"""Pytest fixtures for the exporter tests.

The Powerpal API is replaced by httpx.MockTransport so no test leaves the
process.
"""

from collections.abc import Generator

import pytest
from flask import Flask

from powerpal_exporter import create_app
from powerpal_exporter.config import Settings
from powerpal_exporter.services.container import ServiceContainer
from powerpal_exporter.services.device_metrics_service import DeviceMetricsService
from powerpal_exporter.services.metrics_service import MetricsService
from powerpal_exporter.services.powerpal_client import PowerpalClient
from tests.testing_utils import PowerpalApiStub, TestLifecycleCoordinator


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        token="test-token",
        device="000123ab",
        powerpal_host="readings.example.com",
        refresh_seconds=30,
        listen_address="127.0.0.1:9915",
        access_log=False,
        waitress_threads=2,
        graceful_shutdown_timeout=5,
        log_level="debug",
    )


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return _build_test_settings()


@pytest.fixture
def powerpal_api() -> PowerpalApiStub:
    """Fake Powerpal API, serving DEVICE_PAYLOAD unless told otherwise."""
    return PowerpalApiStub()


@pytest.fixture
def lifecycle_coordinator() -> TestLifecycleCoordinator:
    return TestLifecycleCoordinator()


@pytest.fixture
def metrics_service(lifecycle_coordinator: TestLifecycleCoordinator) -> MetricsService:
    return MetricsService(lifecycle_coordinator=lifecycle_coordinator)


@pytest.fixture
def powerpal_client(
    test_settings: Settings,
    metrics_service: MetricsService,
    powerpal_api: PowerpalApiStub,
) -> Generator[PowerpalClient, None, None]:
    client = PowerpalClient(
        settings=test_settings,
        metrics_service=metrics_service,
        transport=powerpal_api.transport(),
    )
    yield client
    client.close()


@pytest.fixture
def device_metrics_service(
    powerpal_client: PowerpalClient,
    metrics_service: MetricsService,
    lifecycle_coordinator: TestLifecycleCoordinator,
) -> Generator[DeviceMetricsService, None, None]:
    service = DeviceMetricsService(
        powerpal_client=powerpal_client,
        metrics_service=metrics_service,
        lifecycle_coordinator=lifecycle_coordinator,
    )
    yield service
    service.stop()


@pytest.fixture
def app(test_settings: Settings, powerpal_api: PowerpalApiStub) -> Generator[Flask, None, None]:
    """Create Flask app wired to the fake Powerpal API, without the poll thread."""
    application = create_app(test_settings, skip_background_services=True)
    application.container.powerpal_transport.override(powerpal_api.transport())

    # Register the device gauges as start_background_services() would
    application.container.device_metrics_service()

    try:
        yield application
    finally:
        application.container.device_metrics_service().stop()
        application.container.powerpal_client().close()


@pytest.fixture
def client(app: Flask):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app: Flask) -> ServiceContainer:
    """Access to the DI container for testing."""
    return app.container
