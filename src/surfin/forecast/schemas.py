"""Pydantic schemas for the upstream forecast provider's JSON payload.

Only the fields surfin consumes are modelled; unknown fields are ignored.
Field names follow the provider's camelCase via aliases.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter

from surfin.forecast.models import (
    Condition,
    Forecast,
    ForecastPeriod,
    Swell,
    SwellComponent,
    UnitSystem,
    Wind,
)

# Fields requested from the provider (keeps responses small)
REQUESTED_FIELDS = [
    "timestamp",
    "localTimestamp",
    "fadedRating",
    "solidRating",
    "swell.minBreakingHeight",
    "swell.maxBreakingHeight",
    "swell.unit",
    "swell.components.primary.*",
    "swell.components.secondary.*",
    "wind.*",
    "condition.temperature",
    "condition.unit",
]


class SwellComponentSchema(BaseModel):
    height: float
    period: float
    direction: float
    compass_direction: str = Field(..., alias="compassDirection")

    model_config = {"populate_by_name": True}


class SwellComponentsSchema(BaseModel):
    primary: Optional[SwellComponentSchema] = None
    secondary: Optional[SwellComponentSchema] = None


class SwellSchema(BaseModel):
    min_breaking_height: float = Field(..., ge=0, alias="minBreakingHeight")
    max_breaking_height: float = Field(..., ge=0, alias="maxBreakingHeight")
    unit: str
    components: SwellComponentsSchema = Field(default_factory=SwellComponentsSchema)

    model_config = {"populate_by_name": True}


class WindSchema(BaseModel):
    speed: float = Field(..., ge=0)
    direction: float
    compass_direction: str = Field(..., alias="compassDirection")
    unit: str
    gusts: Optional[float] = None

    model_config = {"populate_by_name": True}


class ConditionSchema(BaseModel):
    temperature: float
    unit: str


class PeriodSchema(BaseModel):
    """One entry of the provider's forecast array."""

    timestamp: int
    local_timestamp: int = Field(..., alias="localTimestamp")
    faded_rating: int = Field(..., ge=0, le=5, alias="fadedRating")
    solid_rating: int = Field(..., ge=0, le=5, alias="solidRating")
    swell: SwellSchema
    wind: WindSchema
    condition: ConditionSchema

    model_config = {"populate_by_name": True}

    def to_period(self) -> ForecastPeriod:
        """Convert into the domain model."""
        epoch = datetime(1970, 1, 1)
        components = self.swell.components
        return ForecastPeriod(
            timestamp=datetime.fromtimestamp(self.timestamp, tz=timezone.utc),
            # The provider encodes local wall-clock time as a fake epoch
            local_timestamp=epoch + timedelta(seconds=self.local_timestamp),
            faded_stars=self.faded_rating,
            solid_stars=self.solid_rating,
            swell=Swell(
                min_breaking_height=self.swell.min_breaking_height,
                max_breaking_height=self.swell.max_breaking_height,
                unit=self.swell.unit,
                primary=_component(components.primary),
                secondary=_component(components.secondary),
            ),
            wind=Wind(
                speed=self.wind.speed,
                direction=self.wind.direction,
                compass_direction=self.wind.compass_direction,
                unit=self.wind.unit,
                gusts=self.wind.gusts,
            ),
            condition=Condition(
                temperature=self.condition.temperature,
                unit=self.condition.unit,
            ),
        )


ForecastPayload = TypeAdapter(list[PeriodSchema])


def parse_forecast(
    payload: object,
    spot_id: int,
    unit_system: UnitSystem,
    fetched_at: Optional[datetime] = None,
) -> Forecast:
    """Validate a decoded provider payload and build a Forecast.

    Periods are ordered by timestamp.

    Raises:
        pydantic.ValidationError: If the payload doesn't match the schema
    """
    periods = sorted(
        (p.to_period() for p in ForecastPayload.validate_python(payload)),
        key=lambda p: p.timestamp,
    )
    return Forecast(
        spot_id=spot_id,
        unit_system=unit_system,
        periods=tuple(periods),
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


def _component(schema: Optional[SwellComponentSchema]) -> Optional[SwellComponent]:
    if schema is None:
        return None
    return SwellComponent(
        height=schema.height,
        period=schema.period,
        direction=schema.direction,
        compass_direction=schema.compass_direction,
    )
