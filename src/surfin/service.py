"""Facade wiring spot lookup, forecast cache and rendering together.

This is the surface the CLI and HTTP front ends talk to:

    resolve(query)                        -> Resolved | Ambiguous | NotFound
    get_forecast(spot_id, unit_system)    -> CachedForecast (raises FetchError)
    render(forecast, output_format)       -> str
    locate(lat, lon)                      -> Spot
"""

import logging
from typing import Iterable, Optional, Sequence

from surfin.cache.database import CacheDatabase
from surfin.cache.forecast import CachedForecast, ForecastCache
from surfin.config import Settings
from surfin.forecast.client import ForecastClient
from surfin.forecast.models import Forecast, UnitSystem
from surfin.spots.index import SpotIndex
from surfin.spots.locator import GeoLocator
from surfin.spots.models import Spot
from surfin.spots.resolver import AliasResolver, ResolveResult
from surfin.visualization.base import OutputFormat
from surfin.visualization.render import render, render_spots

logger = logging.getLogger(__name__)


def stale_notes(result: CachedForecast) -> list[str]:
    """Warning lines for a forecast served past its freshness window."""
    if not result.stale:
        return []
    fetched = result.fetched_at.strftime("%Y-%m-%d %H:%M UTC")
    return [f"Showing cached forecast from {fetched}; refresh failed ({result.error})"]


class SurfService:
    """Front-end operations over one spot index and one forecast cache.

    Example:
        >>> service = SurfService.from_settings()
        >>> result = service.resolve("Folly-Beach")
        >>> forecast = service.get_forecast(result.spot.id, "us")
        >>> print(service.render(forecast.forecast, "terminal", spot=result.spot))
    """

    def __init__(
        self,
        index: SpotIndex,
        cache: ForecastCache,
        db: Optional[CacheDatabase] = None,
    ):
        self.index = index
        self.cache = cache
        self.db = db
        self.resolver = AliasResolver(index)
        self.locator = GeoLocator(index)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SurfService":
        """Build the service from configuration.

        Raises:
            LoadError: If the spot snapshot can't be loaded (fatal)
        """
        settings = settings or Settings.from_env()
        index = SpotIndex.from_snapshot(settings.spots_path)

        if not settings.api_key:
            logger.warning("MSW_API_KEY is not set; only cached forecasts can be served")

        client = ForecastClient(
            api_key=settings.api_key,
            base_url=settings.api_url,
            timeout=settings.request_timeout,
        )
        db = CacheDatabase(settings.db_path) if settings.db_path is not None else None
        cache = ForecastCache(
            client,
            db=db,
            freshness_window=settings.freshness_window,
            max_entries=settings.cache_max_entries,
            max_workers=settings.fetch_workers,
        )
        return cls(index, cache, db)

    def resolve(self, query: str) -> ResolveResult:
        return self.resolver.resolve(query)

    def get_forecast(
        self,
        spot_id: int,
        unit_system: UnitSystem | str = UnitSystem.US,
        timeout: Optional[float] = None,
    ) -> CachedForecast:
        """Classified forecast for a spot, fetched at most once per 3 hours.

        Raises:
            FetchError: If the provider failed and nothing is cached
        """
        return self.cache.get_or_fetch(spot_id, unit_system, timeout=timeout)

    async def aget_forecast(
        self,
        spot_id: int,
        unit_system: UnitSystem | str = UnitSystem.US,
    ) -> CachedForecast:
        return await self.cache.aget_or_fetch(spot_id, unit_system)

    def render(
        self,
        forecast: Forecast,
        output_format: OutputFormat | str = OutputFormat.TERMINAL,
        spot: Optional[Spot] = None,
        notes: Sequence[str] = (),
    ) -> str:
        """Render a forecast; the spot is looked up by id when not given."""
        if spot is None:
            spot = self.index.find_by_id(forecast.spot_id)
        return render(forecast, output_format, spot=spot, notes=notes)

    def render_result(
        self,
        result: CachedForecast,
        output_format: OutputFormat | str = OutputFormat.TERMINAL,
        spot: Optional[Spot] = None,
    ) -> str:
        """Render a cache result, flagging stale forecasts."""
        return self.render(result.forecast, output_format, spot=spot, notes=stale_notes(result))

    def render_spots(
        self,
        spots: Optional[Iterable[Spot]] = None,
        output_format: OutputFormat | str = OutputFormat.TERMINAL,
        title: Optional[str] = None,
    ) -> str:
        """Render a spot listing (all spots by default)."""
        return render_spots(self.index.spots if spots is None else spots, output_format, title)

    def locate(self, lat: float, lon: float) -> Spot:
        """Nearest spot to a coordinate.

        Raises:
            NoSpotsAvailable: If the index is empty
            ValueError: If the coordinate is out of range
        """
        return self.locator.nearest(lat, lon)

    def close(self) -> None:
        self.cache.close()
        if self.db is not None:
            self.db.close()

    def __enter__(self) -> "SurfService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
