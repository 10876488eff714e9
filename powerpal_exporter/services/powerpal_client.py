"""Client for the Powerpal device API.

One authenticated GET per call. Failures are never raised to the caller;
they are returned inside a FetchResult, logged, and counted on the API
error counter exactly once.
"""

import logging
import time
from dataclasses import dataclass

import httpx

from powerpal_exporter.config import Settings
from powerpal_exporter.exceptions import (
    BodyReadError,
    PowerpalApiError,
    RequestBuildError,
    TransportError,
    UpstreamStatusError,
)
from powerpal_exporter.services.metrics_service import API_DEVICE_ENDPOINT, MetricsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one device info request: a body or the failure that occurred."""

    body: bytes | None = None
    error: PowerpalApiError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PowerpalClient:
    """Fetches the raw device info document from the Powerpal API."""

    def __init__(
        self,
        settings: Settings,
        metrics_service: MetricsService,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Supplies host, device identifier and token
            metrics_service: Receives request durations and error counts
            transport: Optional httpx transport, used by tests
        """
        self.settings = settings
        self.metrics_service = metrics_service
        self._client = httpx.Client(transport=transport)

    def fetch_device_info(self) -> FetchResult:
        """Request ``/api/v1/device/<device>`` and return the response body.

        The request duration is recorded whenever the request is sent,
        including when it fails in transit or returns a non-200 status.
        """
        try:
            request = self._client.build_request(
                "GET",
                self.settings.device_url,
                headers={"Authorization": self.settings.token},
            )
        except (httpx.InvalidURL, ValueError) as e:
            return self._failure(RequestBuildError(str(e)))

        start = time.perf_counter()
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            self._record_duration(start)
            return self._failure(TransportError(str(e)))

        self._record_duration(start)

        try:
            if response.status_code != 200:
                return self._failure(
                    UpstreamStatusError(response.status_code, response.reason_phrase)
                )

            try:
                body = response.read()
            except httpx.HTTPError as e:
                return self._failure(BodyReadError(str(e)))
        finally:
            response.close()

        logger.debug("Fetched %d bytes of device info", len(body))
        return FetchResult(body=body)

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def _record_duration(self, start: float) -> None:
        self.metrics_service.record_api_duration(
            API_DEVICE_ENDPOINT, time.perf_counter() - start
        )

    def _failure(self, error: PowerpalApiError) -> FetchResult:
        if isinstance(error, UpstreamStatusError):
            logger.error("%s: %s", error.message, error.reason)
        else:
            logger.error(error.message)
        self.metrics_service.record_api_error()
        return FetchResult(error=error)
