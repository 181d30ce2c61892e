"""Forecast caching layer for surfin.

In-memory, single-flight cache of provider forecasts with optional DuckDB
persistence so cached forecasts survive restarts.

Pre-warming can be run via:
    surfin-refresh --all

Or scheduled via cron:
    0 */3 * * * surfin-refresh --all
"""

from surfin.cache.database import CacheDatabase
from surfin.cache.forecast import (
    FRESHNESS_WINDOW,
    CachedForecast,
    CacheEntry,
    FetchError,
    ForecastCache,
)
from surfin.cache.refresh import RefreshResult, get_cache_status, refresh_spots

__all__ = [
    "CacheDatabase",
    "CacheEntry",
    "CachedForecast",
    "FRESHNESS_WINDOW",
    "FetchError",
    "ForecastCache",
    "RefreshResult",
    "get_cache_status",
    "refresh_spots",
]
