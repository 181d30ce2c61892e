"""Shared utilities for surfin."""

from .geo import EARTH_RADIUS_KM, haversine, haversine_many, validate_coordinates
from .io import DEFAULT_DB_PATH, DEFAULT_SPOTS_PATH

__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_SPOTS_PATH",
    "EARTH_RADIUS_KM",
    "haversine",
    "haversine_many",
    "validate_coordinates",
]
