"""Spot metadata: snapshot index, alias resolution and nearest-spot lookup."""

from surfin.spots.index import LoadError, SpotIndex
from surfin.spots.locator import GeoLocator, NoSpotsAvailable, distance_km, nearest_spot
from surfin.spots.models import Spot, SpotRecord
from surfin.spots.normalize import compact, normalize
from surfin.spots.resolver import (
    AliasResolver,
    Ambiguous,
    NotFound,
    Resolved,
    ResolveResult,
)

__all__ = [
    "AliasResolver",
    "Ambiguous",
    "GeoLocator",
    "LoadError",
    "NoSpotsAvailable",
    "NotFound",
    "ResolveResult",
    "Resolved",
    "Spot",
    "SpotIndex",
    "SpotRecord",
    "compact",
    "distance_km",
    "nearest_spot",
    "normalize",
]
