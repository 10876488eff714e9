"""Tests for MetricsService registries and shutdown metrics."""

import platform

from powerpal_exporter import __version__
from powerpal_exporter.services.metrics_service import MetricsService
from tests.testing_utils import TestLifecycleCoordinator, sample


class TestMetricsService:
    def test_registries_are_independent_per_instance(self):
        first = MetricsService(TestLifecycleCoordinator())
        second = MetricsService(TestLifecycleCoordinator())

        first.record_api_error()

        assert sample(first.registry, "powerpal_api_errors_total") == 1.0
        assert sample(second.registry, "powerpal_api_errors_total") == 0.0

    def test_self_metrics_shared_by_both_registries(self, metrics_service):
        metrics_service.record_api_error()
        metrics_service.record_api_duration("api_device", 0.25)

        for registry in (metrics_service.registry, metrics_service.runtime_registry):
            assert sample(registry, "powerpal_api_errors_total") == 1.0
            assert sample(
                registry, "powerpal_api_duration_seconds_sum", {"endpoint": "api_device"}
            ) == 0.25

    def test_build_info(self, metrics_service):
        labels = {"version": __version__, "python_version": platform.python_version()}

        assert sample(metrics_service.registry, "powerpal_exporter_build_info", labels) == 1.0

    def test_metrics_text(self, metrics_service):
        assert "powerpal_exporter_build_info" in metrics_service.get_powerpal_metrics_text()
        assert "powerpal_exporter_build_info" not in metrics_service.get_metrics_text()

    def test_shutdown_metrics(self):
        lifecycle_coordinator = TestLifecycleCoordinator()
        service = MetricsService(lifecycle_coordinator)

        assert sample(service.runtime_registry, "application_shutting_down") == 0.0

        lifecycle_coordinator.simulate_full_shutdown()

        assert sample(service.runtime_registry, "application_shutting_down") == 1.0
        assert sample(service.runtime_registry, "graceful_shutdown_duration_seconds_count") == 1.0
