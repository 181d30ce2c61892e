"""HTTP API for surfin.

This module provides:

- create_app: Factory function to create FastAPI application
- get_service: Global SurfService built from environment settings
- ForecastResponse, ResolveResponse, SpotInfo: JSON response schemas

Note: FastAPI-dependent exports (create_app, get_service) are lazy-loaded
to allow importing schemas without FastAPI installed.
"""

# Schemas can be imported directly (only depend on pydantic)
from surfin.api.schemas import (
    ErrorResponse,
    ForecastResponse,
    HealthResponse,
    PeriodInfo,
    ResolveResponse,
    SpotInfo,
    SwellComponentInfo,
)


# Lazy imports for FastAPI-dependent components
def __getattr__(name):
    """Lazy load FastAPI-dependent components."""
    if name in ("create_app", "get_service"):
        from surfin.api.app import create_app, get_service
        if name == "create_app":
            return create_app
        return get_service
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_app",
    "get_service",
    "ErrorResponse",
    "ForecastResponse",
    "HealthResponse",
    "PeriodInfo",
    "ResolveResponse",
    "SpotInfo",
    "SwellComponentInfo",
]
