"""Tests for background cache refresh."""

from datetime import timedelta

import pytest

from surfin.cache.database import CacheDatabase
from surfin.cache.forecast import ForecastCache
from surfin.cache.refresh import (
    RefreshResult,
    get_cache_status,
    main,
    print_status,
    refresh_spots,
)
from surfin.forecast.client import ProviderError
from surfin.forecast.models import UnitSystem

from conftest import T0, FakeClient


@pytest.fixture
def temp_db(tmp_path):
    db = CacheDatabase(tmp_path / "cache.duckdb")
    yield db
    db.close()


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def cache(client, temp_db, clock):
    cache = ForecastCache(client, db=temp_db, clock=clock)
    yield cache
    cache.close()


class TestRefreshResult:
    """Tests for RefreshResult dataclass."""

    def test_success_rate(self):
        result = RefreshResult(total=4, success=3, failed=1, skipped=0, duration_ms=100)

        assert result.success_rate == 75.0

    def test_success_rate_empty(self):
        result = RefreshResult(total=0, success=0, failed=0, skipped=0, duration_ms=0)

        assert result.success_rate == 0.0

    def test_str(self):
        result = RefreshResult(total=3, success=2, failed=1, skipped=0, duration_ms=42)

        assert str(result) == "Refresh complete: 2/3 successful, 1 failed, 0 skipped (42ms)"


class TestRefreshSpots:
    """Tests for refresh_spots()."""

    def test_refreshes_missing(self, cache, client):
        result = refresh_spots(cache, [450, 4203], UnitSystem.US)

        assert result.total == 2
        assert result.success == 2
        assert result.failed == 0
        assert client.call_count == 2

    def test_skips_fresh(self, cache, client):
        refresh_spots(cache, [450, 4203])

        result = refresh_spots(cache, [450, 4203])

        assert result.skipped == 2
        assert result.success == 0
        assert client.call_count == 2

    def test_force(self, cache, client):
        refresh_spots(cache, [450])

        result = refresh_spots(cache, [450], force=True)

        assert result.success == 1
        assert client.call_count == 2

    def test_refetches_stale(self, cache, client, clock):
        refresh_spots(cache, [450])
        clock.advance(hours=4)

        result = refresh_spots(cache, [450])

        assert result.success == 1
        assert client.call_count == 2

    def test_failure_without_entry(self, cache, client):
        client.error = ProviderError(503)

        result = refresh_spots(cache, [450, 4203])

        assert result.failed == 2
        assert result.success == 0

    def test_failure_with_stale_entry(self, cache, client, clock):
        """A stale entry kept after a failed refetch still counts as a failure."""
        refresh_spots(cache, [450])
        clock.advance(hours=4)
        client.error = ProviderError(503)

        result = refresh_spots(cache, [450])

        assert result.failed == 1

    def test_persists_to_database(self, cache, temp_db):
        refresh_spots(cache, [450], UnitSystem.EU)

        assert temp_db.get_forecast(450, UnitSystem.EU) is not None

    def test_empty_list(self, cache):
        result = refresh_spots(cache, [])

        assert result.total == 0


class TestCacheStatus:
    """Tests for get_cache_status()."""

    def test_status(self, cache, temp_db, index):
        refresh_spots(cache, [450, 616])

        status = get_cache_status(temp_db, index, now=T0 + timedelta(hours=1))

        assert status["forecast_count"] == 2
        assert status["fresh_count"] == 2
        assert status["failed_fetches"] == 0
        assert status["latest_fetch_time"] == T0
        names = {f["spot_id"]: f["name"] for f in status["forecasts"]}
        assert names == {450: "Folly Beach", 616: "Pipeline"}

    def test_stale_entries(self, cache, temp_db):
        refresh_spots(cache, [450])

        status = get_cache_status(temp_db, now=T0 + timedelta(hours=5))

        assert status["fresh_count"] == 0
        forecast = status["forecasts"][0]
        assert forecast["name"] is None
        assert forecast["age_hours"] == pytest.approx(5.0)
        assert not forecast["fresh"]

    def test_failed_fetches_counted(self, cache, client, temp_db):
        client.error = ProviderError(500)
        refresh_spots(cache, [450])

        assert get_cache_status(temp_db)["failed_fetches"] == 1

    def test_print_status(self, cache, temp_db, index, capsys):
        refresh_spots(cache, [450])

        print_status(get_cache_status(temp_db, index, now=T0))

        out = capsys.readouterr().out
        assert "Folly Beach" in out
        assert "OK" in out


class TestMain:
    """Tests for the surfin-refresh entry point."""

    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, snapshot_path, tmp_path):
        monkeypatch.setenv("SURFIN_SPOTS_PATH", str(snapshot_path))
        monkeypatch.setenv("SURFIN_DB_PATH", str(tmp_path / "main.duckdb"))
        monkeypatch.delenv("MSW_API_KEY", raising=False)

    def test_requires_a_target(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    def test_status(self, capsys):
        assert main(["--status", "-q"]) == 0

        assert "Surf Forecast Cache Status" in capsys.readouterr().out

    def test_status_without_database(self, monkeypatch):
        monkeypatch.setenv("SURFIN_DB_PATH", "none")

        assert main(["--status", "-q"]) == 1

    def test_failed_refresh_exit_code(self):
        """Without an API key every fetch fails."""
        assert main(["450", "-q"]) == 1

    def test_missing_snapshot(self, tmp_path):
        assert main(["450", "-q", "--spots", str(tmp_path / "missing.json")]) == 1
