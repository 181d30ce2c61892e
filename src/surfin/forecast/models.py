"""Data models for swell forecasts."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from surfin.forecast.rating import Color


class UnitSystem(str, Enum):
    """Unit system requested from the provider and stamped on the forecast.

    us: ft / mph / F, uk: ft / mph / C, eu: m / kph / C
    """

    US = "us"
    UK = "uk"
    EU = "eu"


@dataclass(frozen=True)
class SwellComponent:
    """One swell train (primary, secondary)."""

    height: float
    period: float
    direction: float
    compass_direction: str


@dataclass(frozen=True)
class Swell:
    """Breaking wave heights and swell trains for a period."""

    min_breaking_height: float
    max_breaking_height: float
    unit: str
    primary: Optional[SwellComponent] = None
    secondary: Optional[SwellComponent] = None


@dataclass(frozen=True)
class Wind:
    """Wind at the spot."""

    speed: float
    direction: float
    compass_direction: str
    unit: str
    gusts: Optional[float] = None


@dataclass(frozen=True)
class Condition:
    """Weather conditions (air temperature only)."""

    temperature: float
    unit: str


@dataclass(frozen=True)
class ForecastPeriod:
    """One timestamped forecast entry.

    Attributes:
        timestamp: Period start (UTC, timezone-aware)
        local_timestamp: Period start in spot-local wall clock time (naive)
        faded_stars: Provider faded-star count (0-5)
        solid_stars: Provider solid-star count (0-5)
        swell: Surf height and swell trains
        wind: Wind conditions
        condition: Air temperature
        color: Classification, None until the rating classifier has run
    """

    timestamp: datetime
    local_timestamp: datetime
    faded_stars: int
    solid_stars: int
    swell: Swell
    wind: Wind
    condition: Condition
    color: Optional[Color] = None

    def to_record(self) -> dict[str, Any]:
        """Flatten into a JSON-serializable record."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "local_timestamp": self.local_timestamp.isoformat(),
            "faded_stars": self.faded_stars,
            "solid_stars": self.solid_stars,
            "swell_min": self.swell.min_breaking_height,
            "swell_max": self.swell.max_breaking_height,
            "swell_unit": self.swell.unit,
            "primary": _component_record(self.swell.primary),
            "secondary": _component_record(self.swell.secondary),
            "wind_speed": self.wind.speed,
            "wind_gusts": self.wind.gusts,
            "wind_direction": self.wind.direction,
            "wind_compass": self.wind.compass_direction,
            "wind_unit": self.wind.unit,
            "temperature": self.condition.temperature,
            "temperature_unit": self.condition.unit,
            "color": self.color.value if self.color else None,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "ForecastPeriod":
        """Inverse of to_record()."""
        return cls(
            timestamp=datetime.fromisoformat(record["timestamp"]),
            local_timestamp=datetime.fromisoformat(record["local_timestamp"]),
            faded_stars=record["faded_stars"],
            solid_stars=record["solid_stars"],
            swell=Swell(
                min_breaking_height=record["swell_min"],
                max_breaking_height=record["swell_max"],
                unit=record["swell_unit"],
                primary=_component_from_record(record.get("primary")),
                secondary=_component_from_record(record.get("secondary")),
            ),
            wind=Wind(
                speed=record["wind_speed"],
                direction=record["wind_direction"],
                compass_direction=record["wind_compass"],
                unit=record["wind_unit"],
                gusts=record.get("wind_gusts"),
            ),
            condition=Condition(
                temperature=record["temperature"],
                unit=record["temperature_unit"],
            ),
            color=Color(record["color"]) if record.get("color") else None,
        )


@dataclass(frozen=True)
class Forecast:
    """Ordered forecast periods for one spot in one unit system."""

    spot_id: int
    unit_system: UnitSystem
    periods: tuple[ForecastPeriod, ...] = ()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_empty(self) -> bool:
        return not self.periods

    def __len__(self) -> int:
        return len(self.periods)


def _component_record(component: Optional[SwellComponent]) -> Optional[dict]:
    if component is None:
        return None
    return {
        "height": component.height,
        "period": component.period,
        "direction": component.direction,
        "compass_direction": component.compass_direction,
    }


def _component_from_record(record: Optional[dict]) -> Optional[SwellComponent]:
    if not record:
        return None
    return SwellComponent(**record)
