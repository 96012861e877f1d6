"""API client for Drayton Wiser heat hubs.

This module provides the transport to the controller's local REST API,
the error types raised across the integration, and the temperature
conversions between °C and the controller's wire units.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import BRAND_NAME, SERVICE_PATHS

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400


class WiserError(Exception):
    """Base exception for Wiser Heat errors."""


class WiserConfigError(WiserError):
    """Exception raised when the controller ip or secret is missing."""


class WiserInvalidServiceError(WiserError):
    """Exception raised for an unknown controller service name."""


class WiserTransportError(WiserError):
    """Exception raised when a request to the controller fails.

    Attributes:
        status: HTTP status code, if the controller answered.
        body: Response body, if the controller answered.

    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        """Initialize the error with the controller's answer, if any."""
        super().__init__(message)
        self.status = status
        self.body = body


class WiserInvalidRoomError(WiserError):
    """Exception raised when a room id or name does not resolve."""


class WiserInvalidModeError(WiserError):
    """Exception raised for an unrecognized room or system mode."""


class WiserFullFetchError(WiserError):
    """Exception raised when the full snapshot needed by a write cannot be read."""


class WiserWriteFailedError(WiserError):
    """Exception raised when one or more controller writes are rejected."""


def to_wiser_temp(celsius: float) -> int:
    """Convert °C to the controller's tenths-of-a-degree units."""
    return round(celsius * 10)


def from_wiser_temp(value: float) -> float:
    """Convert the controller's tenths-of-a-degree units to °C (1 dp)."""
    return round(value / 10, 1)


def create_headers(secret: str) -> dict[str, str]:
    """Create HTTP headers for controller requests.

    Args:
        secret: Static API secret of the controller.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    return {
        "SECRET": secret,
        "Content-Type": "application/json;charset=UTF-8",
    }


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def validate_response(response: httpx.Response) -> Any:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        WiserTransportError: If the status is an error or the body is not JSON.

    """
    if is_http_error(response.status_code):
        error_msg = (
            f"{response.request.method} {response.request.url} -> "
            f"{response.status_code} {response.reason_phrase}"
        )
        raise WiserTransportError(
            error_msg,
            status=response.status_code,
            body=response.text,
        )

    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON from {response.request.url}: {err}"
        raise WiserTransportError(
            error_msg,
            status=response.status_code,
            body=response.text,
        ) from err


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the controller.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=5.0)
    # Retry's default method list excludes PATCH, so writes are sent once.
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


class WiserApiClient:
    """Client for one controller, configured once with its ip and secret."""

    def __init__(
        self,
        session: httpx.AsyncClient,
        ip: str | None,
        secret: str | None,
    ) -> None:
        """Initialize the client.

        Raises:
            WiserConfigError: If ip or secret is missing.

        """
        if not ip or not secret:
            error_msg = "Both ip and secret must be provided"
            raise WiserConfigError(error_msg)

        self._session = session
        self._secret = secret
        self.base_url = f"http://{ip}"

    async def _async_request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._session.request(
                method,
                url,
                headers=create_headers(self._secret),
                json=payload,
            )
        except httpx.RequestError as err:
            error_msg = f"{method} {url} failed: {err}"
            raise WiserTransportError(error_msg) from err

        return validate_response(response)

    async def async_get(self, path: str) -> Any:
        """GET a controller path and return the parsed JSON."""
        _LOGGER.debug("GET %s", path)
        return await self._async_request("GET", path)

    async def async_patch(self, path: str, payload: dict[str, Any]) -> Any:
        """PATCH a controller path and return the parsed JSON."""
        _LOGGER.debug("PATCH %s: %s", path, payload)
        return await self._async_request("PATCH", path, payload)

    async def async_get_service(self, service: str) -> dict[str, Any]:
        """Get the current controller data for a named service.

        Returns:
            Dictionary keyed by the service name.

        Raises:
            WiserInvalidServiceError: If the service name is unknown.
            WiserTransportError: If the request fails.

        """
        if service not in SERVICE_PATHS:
            error_msg = (
                f"Invalid service name: {service}, must be one of: "
                f"[{', '.join(SERVICE_PATHS)}]"
            )
            raise WiserInvalidServiceError(error_msg)

        return {service: await self.async_get(SERVICE_PATHS[service])}

    async def async_get_full(self) -> dict[str, Any]:
        """Get the full domain dump of the controller."""
        return await self.async_get(SERVICE_PATHS["full"])

    async def async_test_connection(self) -> bool:
        """Check that the configured address answers as a Wiser hub."""
        brand = await self.async_get(SERVICE_PATHS["brandName"])
        connection_ok = brand == BRAND_NAME
        _LOGGER.debug("Brand name probe returned %r, valid: %s", brand, connection_ok)
        return connection_ok
