"""Geographic utilities and constants."""

from math import asin, cos, radians, sin, sqrt
from typing import Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0


def validate_coordinates(lat: float, lon: float) -> None:
    """Raise ValueError unless (lat, lon) is a valid WGS84 coordinate."""
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude out of range [-90, 90]: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"Longitude out of range [-180, 180]: {lon}")


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great circle distance in km between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(min(1.0, a)))

    return EARTH_RADIUS_KM * c


def haversine_many(
    lat: float,
    lon: float,
    lats: Sequence[float],
    lons: Sequence[float],
) -> np.ndarray:
    """Vectorised haversine from one point to many.

    Args:
        lat, lon: Origin coordinates (degrees)
        lats, lons: Target coordinates (degrees), equal length

    Returns:
        Array of distances in kilometers, aligned with the targets
    """
    lat_r = np.radians(lat)
    lats_r = np.radians(np.asarray(lats, dtype=float))
    dlat = lats_r - lat_r
    dlon = np.radians(np.asarray(lons, dtype=float)) - np.radians(lon)

    a = np.sin(dlat / 2) ** 2 + np.cos(lat_r) * np.cos(lats_r) * np.sin(dlon / 2) ** 2
    c = 2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))

    return EARTH_RADIUS_KM * c
