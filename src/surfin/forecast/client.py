"""Thin adapter over the upstream forecast provider's HTTP API.

Issues exactly one request per call and classifies failures. Retry policy
belongs to callers; this module never retries.

API shape:
    https://magicseaweed.com/api/{API_KEY}/forecast/?spot_id=450&units=us
"""

import logging
import time
from typing import Optional

import requests
from pydantic import ValidationError

from surfin.forecast.models import Forecast, UnitSystem
from surfin.forecast.schemas import REQUESTED_FIELDS, parse_forecast

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://magicseaweed.com/api/"

# Request timeout in seconds
REQUEST_TIMEOUT = 10.0


class UpstreamError(Exception):
    """Base class for provider failures."""


class UpstreamTimeout(UpstreamError):
    """The provider did not answer within the request timeout."""


class RateLimited(UpstreamError):
    """The provider rejected the request for exceeding its rate limit."""


class InvalidSpot(UpstreamError):
    """The provider does not know the requested spot id."""


class ProviderError(UpstreamError):
    """Any other provider or transport failure.

    Attributes:
        status: HTTP status code, None for transport/config failures
    """

    def __init__(self, status: Optional[int], message: str = ""):
        self.status = status
        super().__init__(message or f"Provider returned HTTP {status}")


class MalformedResponse(UpstreamError):
    """The response body did not parse into a forecast."""


class ForecastClient:
    """Fetches raw forecasts for a spot id and unit system.

    Example:
        >>> client = ForecastClient(api_key="...")
        >>> forecast = client.fetch(450, UnitSystem.US)
        >>> len(forecast.periods)
        40
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize client.

        Args:
            api_key: Provider API key
            base_url: Provider API root, must end with "/"
            timeout: Per-request timeout in seconds
            session: Optional requests session (connection pooling, tests)
        """
        self.api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def forecast_url(self) -> str:
        return f"{self.base_url}{self.api_key}/forecast/"

    def fetch(self, spot_id: int, unit_system: UnitSystem | str) -> Forecast:
        """Fetch the forecast for a spot.

        Args:
            spot_id: Provider spot id
            unit_system: "us", "uk" or "eu"

        Returns:
            Forecast with unclassified periods

        Raises:
            UpstreamTimeout, RateLimited, InvalidSpot, ProviderError,
            MalformedResponse
        """
        unit_system = UnitSystem(unit_system)
        if not self.api_key:
            raise ProviderError(None, "MSW_API_KEY is not configured")

        params = {
            "spot_id": spot_id,
            "units": unit_system.value,
            "fields": ",".join(REQUESTED_FIELDS),
        }

        start_time = time.time()
        try:
            response = self.session.get(self.forecast_url(), params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise UpstreamTimeout(f"Provider timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise ProviderError(None, f"Request failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"GET forecast spot_id={spot_id} units={unit_system.value}: "
                     f"HTTP {response.status_code} ({duration_ms}ms)")

        if response.status_code == 429:
            raise RateLimited(f"Rate limited fetching spot {spot_id}")
        if response.status_code == 404:
            raise InvalidSpot(f"Unknown spot id {spot_id}")
        if not response.ok:
            raise ProviderError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Response for spot {spot_id} is not JSON") from e

        _raise_for_error_body(payload, spot_id)

        try:
            return parse_forecast(payload, spot_id, unit_system)
        except ValidationError as e:
            raise MalformedResponse(
                f"Response for spot {spot_id} failed validation: {e.error_count()} errors"
            ) from e


def _raise_for_error_body(payload: object, spot_id: int) -> None:
    """Raise for the provider's in-band error envelope.

    The provider sometimes answers 200 with
    ``{"error_response": {"code": 501, "error_msg": "..."}}``.
    """
    if not isinstance(payload, dict) or "error_response" not in payload:
        return

    error = payload["error_response"] or {}
    code = error.get("code") if isinstance(error, dict) else None
    message = str(error.get("error_msg", "")) if isinstance(error, dict) else str(error)

    if "spot" in message.lower():
        raise InvalidSpot(f"Spot {spot_id}: {message}")
    raise ProviderError(code if isinstance(code, int) else None, message or "Provider error")
