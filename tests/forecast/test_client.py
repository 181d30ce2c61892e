"""Tests for the provider HTTP client.

The requests session is mocked; nothing here touches the network.
"""

import os
from unittest.mock import MagicMock, Mock

import pytest
import requests

from surfin.forecast.client import (
    DEFAULT_API_URL,
    ForecastClient,
    InvalidSpot,
    MalformedResponse,
    ProviderError,
    RateLimited,
    UpstreamError,
    UpstreamTimeout,
)
from surfin.forecast.models import UnitSystem

from conftest import make_payload


def make_response(status_code=200, payload=None, json_error=False):
    """Mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


def make_client(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return ForecastClient(api_key="test-key", session=session), session


class TestRequest:
    """Tests for the outgoing request."""

    def test_url_and_params(self):
        client, session = make_client(make_response(payload=make_payload()))

        client.fetch(450, UnitSystem.EU)

        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0] == f"{DEFAULT_API_URL}test-key/forecast/"
        assert kwargs["params"]["spot_id"] == 450
        assert kwargs["params"]["units"] == "eu"
        assert "fadedRating" in kwargs["params"]["fields"]
        assert kwargs["timeout"] == client.timeout

    def test_accepts_unit_string(self):
        client, session = make_client(make_response(payload=make_payload()))

        forecast = client.fetch(450, "uk")

        assert forecast.unit_system == UnitSystem.UK

    def test_base_url_gets_trailing_slash(self):
        client = ForecastClient(api_key="k", base_url="http://localhost:9000/api")

        assert client.forecast_url() == "http://localhost:9000/api/k/forecast/"

    def test_exactly_one_request_on_failure(self):
        """The client never retries."""
        client, session = make_client(make_response(status_code=500))

        with pytest.raises(ProviderError):
            client.fetch(450, UnitSystem.US)

        assert session.get.call_count == 1

    def test_missing_api_key(self):
        session = MagicMock()
        client = ForecastClient(api_key=None, session=session)

        with pytest.raises(ProviderError, match="MSW_API_KEY"):
            client.fetch(450, UnitSystem.US)

        session.get.assert_not_called()


class TestSuccess:
    """Tests for successful responses."""

    def test_returns_unclassified_forecast(self):
        client, _ = make_client(make_response(payload=make_payload((0, 2, 4))))

        forecast = client.fetch(450, UnitSystem.US)

        assert forecast.spot_id == 450
        assert [p.faded_stars for p in forecast.periods] == [0, 2, 4]
        assert all(p.color is None for p in forecast.periods)

    def test_empty_forecast(self):
        client, _ = make_client(make_response(payload=[]))

        assert client.fetch(450, UnitSystem.US).is_empty


class TestErrorClassification:
    """Each failure maps to exactly one error type."""

    def test_timeout(self):
        client, _ = make_client(error=requests.Timeout("read timed out"))

        with pytest.raises(UpstreamTimeout):
            client.fetch(450, UnitSystem.US)

    def test_connection_error(self):
        client, _ = make_client(error=requests.ConnectionError("refused"))

        with pytest.raises(ProviderError) as exc_info:
            client.fetch(450, UnitSystem.US)

        assert exc_info.value.status is None

    def test_rate_limited(self):
        client, _ = make_client(make_response(status_code=429))

        with pytest.raises(RateLimited):
            client.fetch(450, UnitSystem.US)

    def test_unknown_spot(self):
        client, _ = make_client(make_response(status_code=404))

        with pytest.raises(InvalidSpot):
            client.fetch(999999, UnitSystem.US)

    @pytest.mark.parametrize("status", [401, 500, 502, 503])
    def test_other_status(self, status):
        client, _ = make_client(make_response(status_code=status))

        with pytest.raises(ProviderError) as exc_info:
            client.fetch(450, UnitSystem.US)

        assert exc_info.value.status == status

    def test_body_not_json(self):
        client, _ = make_client(make_response(json_error=True))

        with pytest.raises(MalformedResponse):
            client.fetch(450, UnitSystem.US)

    def test_body_fails_validation(self):
        client, _ = make_client(make_response(payload=[{"timestamp": "soon"}]))

        with pytest.raises(MalformedResponse):
            client.fetch(450, UnitSystem.US)

    def test_error_envelope_for_spot(self):
        payload = {"error_response": {"code": 501, "error_msg": "Invalid spot id"}}
        client, _ = make_client(make_response(payload=payload))

        with pytest.raises(InvalidSpot):
            client.fetch(999999, UnitSystem.US)

    def test_error_envelope_other(self):
        payload = {"error_response": {"code": 500, "error_msg": "Invalid API key"}}
        client, _ = make_client(make_response(payload=payload))

        with pytest.raises(ProviderError) as exc_info:
            client.fetch(450, UnitSystem.US)

        assert exc_info.value.status == 500
        assert "API key" in str(exc_info.value)

    def test_all_errors_share_a_base(self):
        for error in (UpstreamTimeout, RateLimited, InvalidSpot, ProviderError, MalformedResponse):
            assert issubclass(error, UpstreamError)


@pytest.mark.live
class TestLive:
    """Real provider requests (need --run-live and MSW_API_KEY)."""

    def test_fetch_folly_beach(self):
        api_key = os.environ.get("MSW_API_KEY")
        if not api_key:
            pytest.skip("MSW_API_KEY not set")

        forecast = ForecastClient(api_key=api_key).fetch(450, UnitSystem.US)

        assert not forecast.is_empty
        assert all(0 <= p.faded_stars <= 5 for p in forecast.periods)
