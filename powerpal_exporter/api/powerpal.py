"""Powerpal device metrics endpoint for Prometheus scraping."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response

from powerpal_exporter.api import METRICS_CONTENT_TYPE
from powerpal_exporter.services.metrics_service import MetricsService

powerpal_bp = Blueprint("powerpal", __name__, url_prefix="/powerpal")


@powerpal_bp.route("", methods=["GET"])
@inject
def get_powerpal_metrics(
    metrics_service: MetricsService = Provide["metrics_service"],
) -> Any:
    """Return the device gauges from the last successful poll.

    Rendering reads the current gauge values only; it never triggers a poll.
    """
    return Response(
        metrics_service.get_powerpal_metrics_text(),
        content_type=METRICS_CONTENT_TYPE,
    )
