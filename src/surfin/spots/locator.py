"""Nearest-spot lookup by great-circle distance.

Used when a request carries no spot identifier, only a coordinate. A linear
scan over the index is fine for the spot counts involved (tens to low
thousands); the scan is vectorised with numpy.
"""

import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np

from surfin.spots.models import Spot
from surfin.utils.geo import haversine, haversine_many, validate_coordinates

if TYPE_CHECKING:
    from surfin.spots.index import SpotIndex

logger = logging.getLogger(__name__)


class NoSpotsAvailable(Exception):
    """Raised when a nearest-spot lookup runs against an empty index."""


def nearest_spot(spots: Sequence[Spot], lat: float, lon: float) -> Spot:
    """Find the spot closest to (lat, lon).

    Args:
        spots: Candidate spots
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees

    Returns:
        Closest spot; equal distances resolve to the lowest spot id

    Raises:
        NoSpotsAvailable: If spots is empty
        ValueError: If the coordinate is out of range
    """
    validate_coordinates(lat, lon)
    if not spots:
        raise NoSpotsAvailable("Spot index is empty")

    # np.argmin returns the first minimum, so order by id for the tie-break
    ordered = sorted(spots, key=lambda s: s.id)
    distances = haversine_many(
        lat,
        lon,
        [s.lat for s in ordered],
        [s.lon for s in ordered],
    )
    return ordered[int(np.argmin(distances))]


class GeoLocator:
    """Nearest-spot lookup over a SpotIndex.

    Example:
        >>> locator = GeoLocator(index)
        >>> locator.nearest(32.65, -79.94).canonical_name
        'Folly Beach'
    """

    def __init__(self, index: "SpotIndex"):
        self.index = index

    def nearest(self, lat: float, lon: float) -> Spot:
        """Closest spot to the coordinate (see nearest_spot)."""
        spot = nearest_spot(self.index.spots, lat, lon)
        logger.debug(
            f"Nearest spot to ({lat}, {lon}) is {spot.canonical_name} ({spot.id}), "
            f"{distance_km(spot, lat, lon):.1f}km away"
        )
        return spot


def distance_km(spot: Spot, lat: float, lon: float) -> float:
    """Great-circle distance in km from a spot to a coordinate."""
    return haversine(spot.lat, spot.lon, lat, lon)
