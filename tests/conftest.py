"""Shared pytest fixtures for surfin tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- integration: Tests with temporary DuckDB files and the HTTP app
- live: Real provider API tests, slow, requires network and MSW_API_KEY

Run live tests with: pytest -m live --run-live
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Sequence

import pytest

from surfin.cache.forecast import ForecastCache
from surfin.forecast.models import Forecast, UnitSystem
from surfin.forecast.schemas import parse_forecast
from surfin.service import SurfService
from surfin.spots.index import SpotIndex
from surfin.spots.models import Spot

# Reference time for freshness tests
T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

# 2024-06-01 00:00 UTC
BASE_TIMESTAMP = 1717200000
# Spot-local clock for Folly Beach (UTC-4)
LOCAL_OFFSET = -4 * 3600


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live API tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "integration: tests with DuckDB files or the HTTP app")
    config.addinivalue_line("markers", "live: real API tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        # --run-live given: don't skip live tests
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# =============================================================================
# Provider payloads
# =============================================================================

def make_period(
    index: int,
    faded: int = 0,
    solid: int = 2,
    min_height: float = 2.0,
    max_height: float = 3.0,
    unit: str = "ft",
    secondary: bool = True,
) -> dict:
    """One provider forecast entry, three hours after the previous one."""
    timestamp = BASE_TIMESTAMP + index * 3 * 3600
    components = {
        "primary": {
            "height": 3.5,
            "period": 10,
            "direction": 95.5,
            "compassDirection": "W",
        },
    }
    if secondary:
        components["secondary"] = {
            "height": 1.5,
            "period": 6,
            "direction": 40.2,
            "compassDirection": "SW",
        }
    return {
        "timestamp": timestamp,
        "localTimestamp": timestamp + LOCAL_OFFSET,
        "fadedRating": faded,
        "solidRating": solid,
        "swell": {
            "minBreakingHeight": min_height,
            "maxBreakingHeight": max_height,
            "unit": unit,
            "components": components,
        },
        "wind": {
            "speed": 8,
            "direction": 180,
            "compassDirection": "N",
            "unit": "mph",
            "gusts": 12,
        },
        "condition": {"temperature": 75, "unit": "f"},
    }


def make_payload(faded: Sequence[int] = (0, 2, 4), **kwargs) -> list[dict]:
    """Provider payload with one period per faded-star value."""
    return [make_period(i, faded=f, **kwargs) for i, f in enumerate(faded)]


@pytest.fixture
def provider_payload() -> list[dict]:
    """Three periods with faded stars 0, 2 and 4."""
    return make_payload()


@pytest.fixture
def week_payload() -> list[dict]:
    """Five days of three-hourly periods with varying heights."""
    return [
        make_period(
            i,
            faded=i % 6,
            solid=i % 3,
            min_height=(i % 5) * 0.5,
            max_height=(i % 5) * 0.5 + 1.0,
        )
        for i in range(40)
    ]


# =============================================================================
# Fake collaborators
# =============================================================================

class FakeClient:
    """ForecastClient stand-in counting upstream calls.

    Attributes:
        faded: Faded-star values of the returned periods
        error: Raised instead of returning a forecast when set
        gate: Fetches for blocked spots wait on this event
        blocked: Spot ids whose fetch waits on the gate (None = all)
    """

    def __init__(
        self,
        faded: Sequence[int] = (0, 2, 4),
        error: Optional[Exception] = None,
        gate: Optional[threading.Event] = None,
        blocked: Optional[set[int]] = None,
    ):
        self.faded = faded
        self.error = error
        self.gate = gate
        self.blocked = blocked
        self.calls: list[tuple[int, UnitSystem]] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def fetch(self, spot_id: int, unit_system: UnitSystem) -> Forecast:
        with self._lock:
            self.calls.append((spot_id, UnitSystem(unit_system)))

        if self.gate is not None and (self.blocked is None or spot_id in self.blocked):
            assert self.gate.wait(timeout=5), "gate never opened"

        if self.error is not None:
            raise self.error
        return parse_forecast(make_payload(self.faded), spot_id, UnitSystem(unit_system))


class FakeClock:
    """Settable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Spots
# =============================================================================

SAMPLE_SPOT_RECORDS = [
    {
        "id": 450,
        "name": "Folly Beach",
        "aliases": ["Folly", "Folly-Beach", "FollyBeach", "folly-beach-sc"],
        "lat": 32.6552,
        "lon": -79.9404,
        "utc_offset": -14400,
    },
    {
        "id": 4186,
        "name": "Folly Beach Pier",
        "aliases": ["Folly Pier"],
        "lat": 32.6535,
        "lon": -79.9397,
        "utc_offset": -14400,
    },
    {
        "id": 4203,
        "name": "Ormond Beach",
        "aliases": ["ormond"],
        "lat": 29.2858,
        "lon": -81.0459,
        "utc_offset": -14400,
    },
    {
        "id": 4287,
        "name": "Jetty Park",
        "aliases": ["jetty-park-fl"],
        "lat": 28.4072,
        "lon": -80.5911,
        "utc_offset": -14400,
    },
    {
        "id": 3917,
        "name": "Jetty Park",
        "aliases": ["jetty-park-nj"],
        "lat": 39.7622,
        "lon": -74.1060,
        "utc_offset": -14400,
    },
    {
        "id": 616,
        "name": "Pipeline",
        "aliases": ["Banzai Pipeline", "pipe"],
        "lat": 21.6650,
        "lon": -158.0530,
        "utc_offset": -36000,
    },
]


@pytest.fixture
def spot_records() -> list[dict]:
    """Snapshot records (copy, safe to modify)."""
    return [dict(r) for r in SAMPLE_SPOT_RECORDS]


@pytest.fixture
def snapshot_path(tmp_path, spot_records) -> Path:
    """Snapshot file in the wrapped {"spots": [...]} form."""
    path = tmp_path / "spots.json"
    path.write_text(json.dumps({"generated_at": "2024-05-01T00:00:00Z", "spots": spot_records}))
    return path


@pytest.fixture
def index(snapshot_path) -> SpotIndex:
    return SpotIndex.from_snapshot(snapshot_path)


@pytest.fixture
def folly(index) -> Spot:
    return index.find_by_id(450)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def data_dir(project_root) -> Path:
    """Get the data directory."""
    return project_root / "data"


# =============================================================================
# Service
# =============================================================================

@pytest.fixture
def service(index, fake_client, clock):
    """SurfService over the sample index with a fake provider."""
    cache = ForecastCache(fake_client, clock=clock)
    service = SurfService(index, cache)
    yield service
    service.close()
