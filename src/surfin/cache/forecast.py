"""Time-bounded, single-flight cache of provider forecasts.

Entries are keyed by (spot id, unit system) and stay fresh for 3 hours. When
an entry is stale or missing, exactly one upstream fetch runs per key; every
caller asking for that key meanwhile waits on the same Future and receives the
same Forecast (or the same failure). Different keys never wait on each other:
the lock only guards the dictionaries and is never held across network I/O.

A caller that stops waiting (sync timeout, asyncio cancellation) does not
cancel the fetch; it completes and populates the cache for later callers.
"""

import asyncio
import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

import duckdb

from surfin.cache.database import CacheDatabase
from surfin.forecast.client import InvalidSpot, ProviderError, UpstreamError
from surfin.forecast.models import Forecast, UnitSystem
from surfin.forecast.rating import Classifier, annotate_forecast, classify_rating

logger = logging.getLogger(__name__)

# Forecast freshness window (provider models update a few times a day)
FRESHNESS_WINDOW = timedelta(hours=3)

# Concurrent upstream fetches (distinct keys)
DEFAULT_FETCH_WORKERS = 8

Key = tuple[int, UnitSystem]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ForecastFetcher(Protocol):
    """Anything with ForecastClient's fetch signature."""

    def fetch(self, spot_id: int, unit_system: UnitSystem) -> Forecast: ...


class FetchError(Exception):
    """Raised when a forecast could not be fetched and nothing is cached.

    Attributes:
        spot_id: Requested spot id
        unit_system: Requested unit system
        cause: The upstream failure
    """

    def __init__(self, spot_id: int, unit_system: UnitSystem, cause: UpstreamError):
        self.spot_id = spot_id
        self.unit_system = unit_system
        self.cause = cause
        super().__init__(
            f"Couldn't fetch forecast for spot {spot_id} ({unit_system.value}): {cause}"
        )

    @property
    def retryable(self) -> bool:
        """Whether asking again later can succeed."""
        return not isinstance(self.cause, InvalidSpot)


@dataclass(frozen=True)
class CacheEntry:
    """A completed forecast and when it was fetched."""

    forecast: Forecast
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at

    def is_fresh(self, now: datetime, window: timedelta = FRESHNESS_WINDOW) -> bool:
        return self.age(now) < window


@dataclass(frozen=True)
class CachedForecast:
    """Result of a cache lookup.

    Attributes:
        forecast: Classified forecast
        fetched_at: When the forecast was fetched upstream
        stale: True when served past the freshness window after a failed refresh
        error: The failure that forced a stale serve, else None
    """

    forecast: Forecast
    fetched_at: datetime
    stale: bool = False
    error: Optional[UpstreamError] = None


class ForecastCache:
    """In-memory forecast cache with optional DuckDB write-through.

    Example:
        >>> cache = ForecastCache(ForecastClient(api_key="..."))
        >>> result = cache.get_or_fetch(450, "us")
        >>> [p.color for p in result.forecast.periods][:3]
        [<Color.GREEN: 'green'>, <Color.BLUE: 'blue'>, <Color.RED: 'red'>]
    """

    def __init__(
        self,
        client: ForecastFetcher,
        db: Optional[CacheDatabase] = None,
        freshness_window: timedelta = FRESHNESS_WINDOW,
        classifier: Classifier = classify_rating,
        clock: Callable[[], datetime] = utcnow,
        max_entries: Optional[int] = None,
        max_workers: int = DEFAULT_FETCH_WORKERS,
    ):
        """Initialize cache.

        Args:
            client: Upstream fetcher (ForecastClient)
            db: Optional CacheDatabase for persistence across restarts
            freshness_window: Age after which an entry is refetched
            classifier: Maps faded stars to a Color
            clock: Returns the current aware UTC datetime
            max_entries: Optional LRU bound on in-memory entries
            max_workers: Threads available for concurrent upstream fetches
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.client = client
        self.db = db
        self.freshness_window = freshness_window
        self.classifier = classifier
        self.max_entries = max_entries
        self._clock = clock

        self._entries: OrderedDict[Key, CacheEntry] = OrderedDict()
        self._inflight: dict[Key, Future] = {}
        # Keys already looked up in the database, hit or miss
        self._db_checked: set[Key] = set()
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="forecast-fetch"
        )
        self._stats = {
            "hits": 0,
            "misses": 0,
            "coalesced": 0,
            "fetches": 0,
            "failures": 0,
            "stale_served": 0,
        }

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_or_fetch(
        self,
        spot_id: int,
        unit_system: UnitSystem | str,
        timeout: Optional[float] = None,
    ) -> CachedForecast:
        """Get a fresh forecast, fetching upstream at most once per key.

        Args:
            spot_id: Provider spot id
            unit_system: "us", "uk" or "eu"
            timeout: Seconds to wait for an in-flight fetch; the fetch keeps
                running if the wait times out

        Returns:
            CachedForecast (stale=True if a refresh failed and an old entry
            was served instead)

        Raises:
            FetchError: If the fetch failed and nothing is cached
            concurrent.futures.TimeoutError: If timeout elapsed before the
                fetch finished
        """
        key = self._key(spot_id, unit_system)
        hit, future = self._lookup_or_start(key)
        if hit is not None:
            return hit

        try:
            entry = future.result(timeout=timeout)
        except UpstreamError as err:
            return self._fallback(key, err)
        return CachedForecast(entry.forecast, entry.fetched_at)

    async def aget_or_fetch(self, spot_id: int, unit_system: UnitSystem | str) -> CachedForecast:
        """Async variant of get_or_fetch.

        Cancelling the awaiting task leaves the shared fetch running.
        """
        key = self._key(spot_id, unit_system)
        if self._needs_warm(key):
            # DuckDB reads block; keep them off the event loop
            await asyncio.to_thread(self._warm_from_db, key)
        hit, future = self._lookup_or_start(key, warm=False)
        if hit is not None:
            return hit

        try:
            entry = await asyncio.shield(asyncio.wrap_future(future))
        except UpstreamError as err:
            return self._fallback(key, err)
        return CachedForecast(entry.forecast, entry.fetched_at)

    def refresh(
        self,
        spot_id: int,
        unit_system: UnitSystem | str,
        timeout: Optional[float] = None,
    ) -> CachedForecast:
        """Fetch upstream even if the entry is fresh.

        Joins a fetch already in flight for the key. Failure handling is the
        same as get_or_fetch.
        """
        key = self._key(spot_id, unit_system)
        _, future = self._lookup_or_start(key, force=True)

        try:
            entry = future.result(timeout=timeout)
        except UpstreamError as err:
            return self._fallback(key, err)
        return CachedForecast(entry.forecast, entry.fetched_at)

    def peek(self, spot_id: int, unit_system: UnitSystem | str) -> Optional[CacheEntry]:
        """Current entry for a key, fresh or not, without fetching."""
        key = self._key(spot_id, unit_system)
        self._warm_from_db(key)
        with self._lock:
            return self._entries.get(key)

    def is_fresh(self, spot_id: int, unit_system: UnitSystem | str) -> bool:
        entry = self.peek(spot_id, unit_system)
        return entry is not None and entry.is_fresh(self._clock(), self.freshness_window)

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            stats = dict(self._stats)
            stats["entries"] = len(self._entries)
            stats["in_flight"] = len(self._inflight)
        return stats

    def close(self) -> None:
        """Wait for in-flight fetches and release worker threads."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ForecastCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _key(spot_id: int, unit_system: UnitSystem | str) -> Key:
        return (int(spot_id), UnitSystem(unit_system))

    def _lookup_or_start(
        self, key: Key, force: bool = False, warm: bool = True
    ) -> tuple[Optional[CachedForecast], Optional[Future]]:
        """Return a fresh hit, or the Future of the (possibly new) fetch for key."""
        if warm:
            self._warm_from_db(key)
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if not force and entry is not None and entry.is_fresh(now, self.freshness_window):
                self._entries.move_to_end(key)
                self._stats["hits"] += 1
                logger.debug(f"Cache HIT for spot {key[0]} ({key[1].value})")
                return CachedForecast(entry.forecast, entry.fetched_at), None

            future = self._inflight.get(key)
            if future is None:
                self._stats["misses"] += 1
                state = "STALE" if entry is not None else "MISS"
                logger.debug(f"Cache {state} for spot {key[0]} ({key[1].value}), fetching")
                future = self._executor.submit(self._fetch, key)
                self._inflight[key] = future
            else:
                self._stats["coalesced"] += 1
                logger.debug(f"Joining in-flight fetch for spot {key[0]} ({key[1].value})")

        return None, future

    def _fetch(self, key: Key) -> CacheEntry:
        """Runs on a worker thread; the in-flight marker is cleared on exit."""
        try:
            return self._fetch_and_store(key)
        finally:
            with self._lock:
                self._inflight.pop(key, None)

    def _fetch_and_store(self, key: Key) -> CacheEntry:
        spot_id, unit_system = key
        start_time = time.time()

        with self._lock:
            self._stats["fetches"] += 1

        try:
            forecast = self.client.fetch(spot_id, unit_system)
            fetched_at = self._clock()
            forecast = annotate_forecast(replace(forecast, fetched_at=fetched_at), self.classifier)
        except UpstreamError as e:
            self._record_failure(key, start_time, e)
            raise
        except Exception as e:
            # Bugs and classifier errors surface as provider failures
            logger.exception(f"Unexpected error fetching spot {spot_id} ({unit_system.value})")
            err = ProviderError(None, f"Unexpected error: {e}")
            self._record_failure(key, start_time, err)
            raise err from e

        duration_ms = int((time.time() - start_time) * 1000)
        entry = CacheEntry(forecast, fetched_at)

        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            self._evict()

        logger.info(
            f"Cached forecast for spot {spot_id} ({unit_system.value}): "
            f"{len(forecast.periods)} periods in {duration_ms}ms"
        )
        self._persist(entry)
        self._log_fetch(key, "success", duration_ms)
        return entry

    def _record_failure(self, key: Key, start_time: float, err: UpstreamError) -> None:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(f"Forecast fetch failed for spot {key[0]} ({key[1].value}): {err}")
        with self._lock:
            self._stats["failures"] += 1
        self._log_fetch(key, "error", duration_ms, str(err)[:500])  # Truncate long errors

    def _fallback(self, key: Key, err: UpstreamError) -> CachedForecast:
        """Serve the stale entry after a failed refresh, or raise."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._stats["stale_served"] += 1

        if entry is None:
            raise FetchError(key[0], key[1], err) from err

        age = entry.age(self._clock())
        logger.warning(
            f"Serving stale forecast for spot {key[0]} ({key[1].value}), "
            f"{age.total_seconds() / 3600:.1f}h old: {err}"
        )
        return CachedForecast(entry.forecast, entry.fetched_at, stale=True, error=err)

    def _evict(self) -> None:
        """Drop least recently used entries beyond max_entries (lock held)."""
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._db_checked.discard(evicted)
            logger.debug(f"Evicted spot {evicted[0]} ({evicted[1].value}) from cache")

    def _needs_warm(self, key: Key) -> bool:
        if self.db is None:
            return False
        with self._lock:
            return key not in self._entries and key not in self._db_checked

    def _warm_from_db(self, key: Key) -> None:
        """Load a persisted entry into memory on first access."""
        if not self._needs_warm(key):
            return

        try:
            forecast = self.db.get_forecast(*key)
        except duckdb.Error as e:
            logger.warning(f"Couldn't read cached forecast for spot {key[0]}: {e}")
            return

        with self._lock:
            self._db_checked.add(key)
            if forecast is None:
                return
            if key not in self._entries:
                self._entries[key] = CacheEntry(forecast, forecast.fetched_at)
                self._evict()
        logger.debug(f"Warmed spot {key[0]} ({key[1].value}) from {self.db.db_path}")

    def _persist(self, entry: CacheEntry) -> None:
        if self.db is None:
            return
        try:
            self.db.store_forecast(entry.forecast)
        except duckdb.Error as e:
            logger.warning(f"Couldn't persist forecast for spot {entry.forecast.spot_id}: {e}")

    def _log_fetch(
        self,
        key: Key,
        status: str,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        if self.db is None:
            return
        try:
            self.db.log_fetch(key[0], key[1], status, duration_ms, error_message)
        except duckdb.Error as e:
            logger.warning(f"Couldn't write fetch log: {e}")
