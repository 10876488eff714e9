"""Runtime metrics endpoint for Prometheus scraping."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response

from powerpal_exporter.api import METRICS_CONTENT_TYPE
from powerpal_exporter.services.metrics_service import MetricsService

metrics_bp = Blueprint("metrics", __name__, url_prefix="/metrics")


@metrics_bp.route("", methods=["GET"])
@inject
def get_metrics(
    metrics_service: MetricsService = Provide["metrics_service"],
) -> Any:
    """Return process, runtime and exporter self-metrics.

    Returns:
        Response with metrics data in Prometheus exposition format
    """
    return Response(
        metrics_service.get_metrics_text(),
        content_type=METRICS_CONTENT_TYPE,
    )
