"""Exceptions raised by the exporter."""


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass


class PowerpalApiError(Exception):
    """Base class for failures talking to the Powerpal API.

    These never cross the poller boundary as raised exceptions; they are
    carried inside a FetchResult so callers can branch on the failure kind.
    """

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class RequestBuildError(PowerpalApiError):
    """The HTTP request could not be constructed (e.g. invalid host)."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Error creating HTTP request: {cause}", error_code="REQUEST_BUILD_FAILED")


class TransportError(PowerpalApiError):
    """The request could not reach the upstream API."""

    def __init__(self, cause: str) -> None:
        super().__init__(
            f"Error requesting device information from API: {cause}",
            error_code="TRANSPORT_FAILED",
        )


class UpstreamStatusError(PowerpalApiError):
    """The upstream API answered with a status other than 200."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Got status code {status_code} from API", error_code="UPSTREAM_STATUS")


class BodyReadError(PowerpalApiError):
    """The response body could not be read in full."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Error reading API response: {cause}", error_code="BODY_READ_FAILED")


class DecodeError(PowerpalApiError):
    """The response body is not the expected JSON document."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Error parsing API response: {cause}", error_code="DECODE_FAILED")
