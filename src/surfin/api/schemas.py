"""Pydantic schemas for the JSON API.

Defines all response models used by the forecast API.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from surfin.cache.forecast import CachedForecast
from surfin.forecast.models import ForecastPeriod, SwellComponent
from surfin.forecast.rating import rating_label
from surfin.spots.models import Spot


class SpotInfo(BaseModel):
    """Spot metadata in responses.

    Attributes:
        id: Provider spot id
        name: Canonical spot name
        lat: Latitude
        lon: Longitude
        aliases: Normalized aliases
        distance_km: Distance from the requested coordinate (locate only)
    """

    id: int
    name: str
    lat: float
    lon: float
    aliases: list[str] = Field(default_factory=list)
    distance_km: Optional[float] = Field(
        default=None,
        description="Distance from the requested coordinate in km",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": 450,
                    "name": "Folly Beach",
                    "lat": 32.655,
                    "lon": -79.94,
                    "aliases": ["folly", "folly-beach", "folly-beach-sc", "follybeach"],
                }
            ]
        }
    }

    @classmethod
    def from_spot(cls, spot: Spot, distance_km: Optional[float] = None) -> "SpotInfo":
        return cls(
            id=spot.id,
            name=spot.canonical_name,
            lat=spot.lat,
            lon=spot.lon,
            aliases=sorted(spot.aliases),
            distance_km=round(distance_km, 2) if distance_km is not None else None,
        )


class SwellComponentInfo(BaseModel):
    """One swell train."""

    height: float
    period: float
    direction: float
    compass_direction: str

    @classmethod
    def from_component(cls, component: Optional[SwellComponent]) -> Optional["SwellComponentInfo"]:
        if component is None:
            return None
        return cls(
            height=component.height,
            period=component.period,
            direction=component.direction,
            compass_direction=component.compass_direction,
        )


class PeriodInfo(BaseModel):
    """One classified forecast period."""

    timestamp: datetime
    local_timestamp: datetime = Field(..., description="Spot-local wall clock time")
    faded_stars: int = Field(..., ge=0, le=5)
    solid_stars: int = Field(..., ge=0, le=5)
    color: Optional[Literal["green", "blue", "red"]] = None
    rating: Optional[str] = Field(default=None, description="Clean, Fair or Poor")
    surf_min: float
    surf_max: float
    surf_unit: str
    primary_swell: Optional[SwellComponentInfo] = None
    secondary_swell: Optional[SwellComponentInfo] = None
    wind_speed: float
    wind_gusts: Optional[float] = None
    wind_direction: float
    wind_compass_direction: str
    wind_unit: str
    temperature: float
    temperature_unit: str

    @classmethod
    def from_period(cls, period: ForecastPeriod) -> "PeriodInfo":
        return cls(
            timestamp=period.timestamp,
            local_timestamp=period.local_timestamp,
            faded_stars=period.faded_stars,
            solid_stars=period.solid_stars,
            color=period.color.value if period.color else None,
            rating=rating_label(period.color) if period.color else None,
            surf_min=period.swell.min_breaking_height,
            surf_max=period.swell.max_breaking_height,
            surf_unit=period.swell.unit,
            primary_swell=SwellComponentInfo.from_component(period.swell.primary),
            secondary_swell=SwellComponentInfo.from_component(period.swell.secondary),
            wind_speed=period.wind.speed,
            wind_gusts=period.wind.gusts,
            wind_direction=period.wind.direction,
            wind_compass_direction=period.wind.compass_direction,
            wind_unit=period.wind.unit,
            temperature=period.condition.temperature,
            temperature_unit=period.condition.unit,
        )


class ForecastResponse(BaseModel):
    """Full forecast response.

    Attributes:
        spot_id: Provider spot id
        spot: Spot metadata when the spot is in the snapshot
        unit_system: us, uk or eu
        fetched_at: When the forecast was fetched upstream
        stale: True if served past its freshness window after a failed refresh
        error: Why a stale forecast was served
        periods: Classified forecast periods
    """

    spot_id: int
    spot: Optional[SpotInfo] = None
    unit_system: Literal["us", "uk", "eu"]
    fetched_at: datetime
    stale: bool = False
    error: Optional[str] = None
    periods: list[PeriodInfo] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: CachedForecast, spot: Optional[Spot] = None) -> "ForecastResponse":
        forecast = result.forecast
        return cls(
            spot_id=forecast.spot_id,
            spot=SpotInfo.from_spot(spot) if spot is not None else None,
            unit_system=forecast.unit_system.value,
            fetched_at=result.fetched_at,
            stale=result.stale,
            error=str(result.error) if result.error else None,
            periods=[PeriodInfo.from_period(p) for p in forecast.periods],
        )


class ResolveResponse(BaseModel):
    """Spot resolution result.

    Attributes:
        query: The raw query
        status: resolved, ambiguous or not_found
        spot: The spot when resolved
        candidates: Matching spots when ambiguous, suggestions when not found
    """

    query: str
    status: Literal["resolved", "ambiguous", "not_found"]
    spot: Optional[SpotInfo] = None
    candidates: list[SpotInfo] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Service status ('healthy' or 'unhealthy')
        spot_count: Number of spots in the index
        cached_forecasts: Forecasts held in memory
        version: API version
    """

    status: str = Field(
        default="healthy",
        description="Service status",
    )
    spot_count: int = Field(
        default=0,
        description="Spots in the index",
    )
    cached_forecasts: int = Field(
        default=0,
        description="Forecasts held in the in-memory cache",
    )
    version: str = Field(
        default="0.1.0",
        description="API version",
    )


class ErrorResponse(BaseModel):
    """Error response schema.

    Attributes:
        error: Error type/code
        message: Human-readable error message
        retryable: Whether asking again later can succeed
    """

    error: str = Field(
        ...,
        description="Error type",
    )
    message: str = Field(
        ...,
        description="Error message",
    )
    retryable: bool = Field(
        default=False,
        description="Whether retrying later can succeed",
    )
