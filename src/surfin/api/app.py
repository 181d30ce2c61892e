"""FastAPI application serving surf forecasts.

Provides endpoints for:
- Rendered forecasts by spot name, alias or id (terminal text or HTML)
- Nearest-spot forecasts by coordinate
- JSON resolution, forecast and locate endpoints
- Health checks

Example:
    $ curl localhost:8000/folly-beach
    $ curl "localhost:8000/?lat=32.65&lon=-79.94"
    # Run with: surfin-server  (or uvicorn surfin.api.app:app --reload)
"""

import argparse
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from surfin import __version__
from surfin.api.schemas import (
    ErrorResponse,
    ForecastResponse,
    HealthResponse,
    ResolveResponse,
    SpotInfo,
)
from surfin.cache.forecast import FetchError
from surfin.config import Settings
from surfin.forecast.models import UnitSystem
from surfin.service import SurfService
from surfin.spots.locator import NoSpotsAvailable, distance_km
from surfin.spots.models import Spot
from surfin.spots.resolver import Ambiguous, NotFound
from surfin.visualization.base import OutputFormat
from surfin.visualization.render import get_renderer, render_message

logger = logging.getLogger(__name__)

# API version
API_VERSION = __version__

# User agents that get terminal output by default
TERMINAL_AGENTS = ("curl", "wget", "httpie")


def preferred_format(user_agent: Optional[str]) -> OutputFormat:
    """Terminal output for command line HTTP clients, HTML otherwise."""
    agent = (user_agent or "").lower()
    if agent.startswith(TERMINAL_AGENTS):
        return OutputFormat.TERMINAL
    return OutputFormat.MARKUP


def fetch_error_status(error: FetchError) -> int:
    """503 for transient provider failures, 404 when the provider rejects the spot."""
    return 503 if error.retryable else 404


# Global service
_service: Optional[SurfService] = None


def get_service() -> SurfService:
    """Get or create global service from environment settings."""
    global _service
    if _service is None:
        _service = SurfService.from_settings(Settings.from_env())
    return _service


def create_app(service: Optional[SurfService] = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        service: Service to serve from. Defaults to the global service,
            built from environment settings on first use.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Surfin",
        description="Surf forecasts for terminals and browsers",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.service = service

    def current() -> SurfService:
        if app.state.service is None:
            app.state.service = get_service()
        return app.state.service

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with custom response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            ).model_dump(),
        )

    def error_json(status_code: int, error: str, message: str, **extra) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=error, message=message, **extra).model_dump(),
        )

    async def rendered_forecast(
        spot: Spot,
        units: UnitSystem,
        output_format: OutputFormat,
    ) -> Response:
        service = current()
        media_type = get_renderer(output_format).media_type
        try:
            result = await service.aget_forecast(spot.id, units)
        except FetchError as e:
            hint = "Try again in a few minutes." if e.retryable else "The provider doesn't know this spot."
            body = render_message(
                [f"Couldn't fetch the forecast for {spot.canonical_name}.", str(e.cause), hint],
                output_format,
            )
            headers = {"Retry-After": "60"} if e.retryable else None
            return Response(body, status_code=fetch_error_status(e), media_type=media_type,
                            headers=headers)

        return Response(service.render_result(result, output_format, spot=spot), media_type=media_type)

    # -------------------------------------------------------------------------
    # Info
    # -------------------------------------------------------------------------

    @app.get("/", tags=["forecasts"])
    async def root(
        request: Request,
        lat: Optional[float] = Query(None, ge=-90, le=90, description="Latitude"),
        lon: Optional[float] = Query(None, ge=-180, le=180, description="Longitude"),
        units: UnitSystem = Query(UnitSystem.US, description="Unit system"),
        output_format: Optional[OutputFormat] = Query(None, alias="format"),
    ):
        """Forecast for the nearest spot when lat/lon are given, API info otherwise."""
        if lat is None and lon is None:
            return {
                "name": "Surfin",
                "version": API_VERSION,
                "docs": "/docs",
                "usage": ["/{spot}", "/?lat={lat}&lon={lon}", "/spots"],
            }
        if lat is None or lon is None:
            raise HTTPException(status_code=400, detail="Both lat and lon are required")

        try:
            spot = current().locate(lat, lon)
        except NoSpotsAvailable as e:
            raise HTTPException(status_code=503, detail=str(e))

        fmt = output_format or preferred_format(request.headers.get("user-agent"))
        return await rendered_forecast(spot, units, fmt)

    @app.get("/health", response_model=HealthResponse, tags=["info"])
    async def health_check():
        """Health check endpoint."""
        service = current()
        return HealthResponse(
            status="healthy",
            spot_count=len(service.index),
            cached_forecasts=service.cache.get_stats()["entries"],
            version=API_VERSION,
        )

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    @app.get("/spots", tags=["spots"])
    async def list_spots(
        request: Request,
        output_format: Optional[OutputFormat] = Query(None, alias="format"),
    ):
        """Rendered "name : id" listing of every spot."""
        fmt = output_format or preferred_format(request.headers.get("user-agent"))
        return Response(
            current().render_spots(output_format=fmt),
            media_type=get_renderer(fmt).media_type,
        )

    # -------------------------------------------------------------------------
    # JSON API
    # -------------------------------------------------------------------------

    @app.get("/api/resolve", response_model=ResolveResponse, tags=["spots"])
    async def resolve(q: str = Query(..., description="Spot name, alias or id")):
        """Resolve a spot query without fetching a forecast."""
        result = current().resolve(q)
        if isinstance(result, Ambiguous):
            return ResolveResponse(
                query=q,
                status="ambiguous",
                candidates=[SpotInfo.from_spot(s) for s in result.candidates],
            )
        if isinstance(result, NotFound):
            return ResolveResponse(
                query=q,
                status="not_found",
                candidates=[SpotInfo.from_spot(s) for s in result.suggestions],
            )
        return ResolveResponse(query=q, status="resolved", spot=SpotInfo.from_spot(result.spot))

    @app.get(
        "/api/forecast/{spot_id}",
        response_model=ForecastResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Unknown spot"},
            503: {"model": ErrorResponse, "description": "Provider unavailable"},
        },
        tags=["forecasts"],
    )
    async def forecast(
        spot_id: int,
        units: UnitSystem = Query(UnitSystem.US, description="Unit system"),
    ):
        """Classified forecast for a spot id."""
        service = current()
        try:
            result = await service.aget_forecast(spot_id, units)
        except FetchError as e:
            return error_json(
                fetch_error_status(e),
                type(e.cause).__name__,
                str(e),
                retryable=e.retryable,
            )
        return ForecastResponse.from_result(result, service.index.find_by_id(spot_id))

    @app.get(
        "/api/locate",
        response_model=SpotInfo,
        responses={503: {"model": ErrorResponse, "description": "No spots loaded"}},
        tags=["spots"],
    )
    async def locate(
        lat: float = Query(..., ge=-90, le=90, description="Latitude"),
        lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    ):
        """Nearest spot to a coordinate."""
        try:
            spot = current().locate(lat, lon)
        except NoSpotsAvailable as e:
            raise HTTPException(status_code=503, detail=str(e))
        return SpotInfo.from_spot(spot, distance_km(spot, lat, lon))

    # -------------------------------------------------------------------------
    # Rendered forecast (catch-all, registered last)
    # -------------------------------------------------------------------------

    @app.get("/{spot}", tags=["forecasts"])
    async def spot_forecast(
        spot: str,
        request: Request,
        units: UnitSystem = Query(UnitSystem.US, description="Unit system"),
        output_format: Optional[OutputFormat] = Query(None, alias="format"),
    ):
        """Rendered forecast for a spot name, alias or id.

        Ambiguous queries answer 300 with the candidate list; unknown spots
        answer 404 with suggestions.
        """
        service = current()
        fmt = output_format or preferred_format(request.headers.get("user-agent"))
        media_type = get_renderer(fmt).media_type
        result = service.resolve(spot)

        if isinstance(result, Ambiguous):
            title = f'"{spot}" matches {len(result.candidates)} spots; use one of these ids:'
            return Response(
                service.render_spots(result.candidates, fmt, title=title),
                status_code=300,
                media_type=media_type,
            )

        if isinstance(result, NotFound):
            if result.suggestions:
                body = service.render_spots(
                    result.suggestions, fmt, title=f'No spot matches "{spot}". Did you mean:'
                )
            else:
                body = render_message(
                    [f'No spot matches "{spot}".', "See /spots for every known spot."], fmt
                )
            return Response(body, status_code=404, media_type=media_type)

        return await rendered_forecast(result.spot, units, fmt)

    return app


# Default app instance for uvicorn
app = create_app()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the HTTP server with uvicorn."""
    import uvicorn

    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Serve surf forecasts over HTTP")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger.info(f"Serving on http://{args.host}:{args.port}")
    uvicorn.run(
        "surfin.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if args.verbose else "info",
    )
    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
