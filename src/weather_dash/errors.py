"""Error taxonomy shared by the proxy service and the dashboard core."""

from typing import Any, Optional


class WeatherDashError(Exception):
    """Base class for all weather dashboard errors."""
    pass


class ProxyError(WeatherDashError):
    """Error that the proxy service turns into an HTTP response.

    Attributes:
        status_code: HTTP status to answer with
        payload: JSON body to answer with
    """

    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"{status_code}: {payload}")


class MissingParameter(ProxyError):
    """Required query parameters were not supplied."""

    def __init__(self, message: str):
        super().__init__(400, {"error": message})


class UpstreamError(ProxyError):
    """Provider answered with a non-2xx status; status and body are forwarded."""
    pass


class ProxyFailure(ProxyError):
    """Local exception while serving a proxy request."""

    def __init__(self, message: str):
        super().__init__(500, {"error": message})


class NetworkFailure(WeatherDashError):
    """A dashboard fetch was rejected or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PreferenceStoreError(WeatherDashError):
    """Recoverable failure of a preference store operation."""
    pass


class CapacityExceeded(PreferenceStoreError):
    """The saved-location list is already full."""
    pass


class DuplicateLocation(PreferenceStoreError):
    """A saved location with the same name already exists."""
    pass


class IndexOutOfRange(PreferenceStoreError):
    """No saved location at the requested position."""
    pass


class LocationNotFound(PreferenceStoreError):
    """No saved location with the requested name."""
    pass


class ComparisonUnavailable(WeatherDashError):
    """Fewer than two saved locations to compare."""
    pass
