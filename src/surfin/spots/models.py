"""Data models for surf spots."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Spot:
    """A forecast location known to the provider.

    Attributes:
        id: Provider-assigned spot identifier (unique)
        canonical_name: Display name, e.g. "Folly Beach"
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        utc_offset_seconds: Offset of spot-local time from UTC
        aliases: Normalized alternative names registered for this spot
    """

    id: int
    canonical_name: str
    lat: float
    lon: float
    utc_offset_seconds: int = 0
    aliases: frozenset[str] = field(default_factory=frozenset)


class SpotRecord(BaseModel):
    """One record of the crawled spot snapshot file."""

    id: int = Field(..., ge=0)
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    aliases: list[str] = Field(default_factory=list)
    utc_offset: int = Field(default=0, ge=-14 * 3600, le=14 * 3600)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 450,
                    "name": "Folly Beach",
                    "aliases": ["folly", "folly-beach-sc"],
                    "lat": 32.6552,
                    "lon": -79.9404,
                    "utc_offset": -14400,
                }
            ]
        },
    }


class SpotSnapshot(BaseModel):
    """Wrapped snapshot form: ``{"spots": [...], "generated_at": ...}``."""

    spots: list[SpotRecord]
    generated_at: Optional[str] = None
