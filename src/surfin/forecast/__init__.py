"""Swell forecasts: data model, rating classification and provider client."""

from surfin.forecast.client import (
    ForecastClient,
    InvalidSpot,
    MalformedResponse,
    ProviderError,
    RateLimited,
    UpstreamError,
    UpstreamTimeout,
)
from surfin.forecast.models import (
    Condition,
    Forecast,
    ForecastPeriod,
    Swell,
    SwellComponent,
    UnitSystem,
    Wind,
)
from surfin.forecast.rating import (
    RATING_SCALE,
    Color,
    annotate_forecast,
    classify_rating,
    rating_label,
)
from surfin.forecast.schemas import parse_forecast

__all__ = [
    "Color",
    "Condition",
    "Forecast",
    "ForecastClient",
    "ForecastPeriod",
    "InvalidSpot",
    "MalformedResponse",
    "ProviderError",
    "RATING_SCALE",
    "RateLimited",
    "Swell",
    "SwellComponent",
    "UnitSystem",
    "UpstreamError",
    "UpstreamTimeout",
    "Wind",
    "annotate_forecast",
    "classify_rating",
    "parse_forecast",
    "rating_label",
]
