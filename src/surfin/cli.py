"""Command line interface.

Usage:
    surfin folly-beach               # Forecast for a spot (name, alias or id)
    surfin 450 --units eu            # Metric units
    surfin --near 32.65 -79.94       # Nearest spot to a coordinate
    surfin --list                    # All known spots ("name : id")
    surfin ormond --format markup    # HTML instead of ANSI text

Exit codes: 0 success, 1 spot not found / ambiguous / fetch failed,
2 usage error.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from surfin.cache.forecast import FetchError
from surfin.config import Settings
from surfin.forecast.models import UnitSystem
from surfin.service import SurfService
from surfin.spots.index import LoadError
from surfin.spots.locator import NoSpotsAvailable
from surfin.spots.models import Spot
from surfin.spots.resolver import Ambiguous, NotFound
from surfin.visualization.base import OutputFormat

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="surfin",
        description="Surf forecasts in your terminal",
        epilog="""
Examples:
  surfin folly-beach
  surfin 450 --units eu
  surfin --near 32.65 -79.94
  surfin --list
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "spot",
        nargs="?",
        help="Spot name, alias or numeric id",
    )
    parser.add_argument(
        "--units",
        choices=[u.value for u in UnitSystem],
        default=UnitSystem.US.value,
        help="Unit system (default: us)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TERMINAL.value,
        help="Output format (default: terminal)",
    )
    parser.add_argument(
        "--near",
        nargs=2,
        type=float,
        metavar=("LAT", "LON"),
        help="Use the spot nearest to a coordinate",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List all spots and their ids",
    )
    parser.add_argument(
        "--spots",
        type=Path,
        default=None,
        help="Spot snapshot path",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help='Cache database path ("none" disables the disk cache)',
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.spot is None and args.near is None and not args.list:
        parser.error("give a spot, --near LAT LON or --list")
    if args.spot is not None and args.near is not None:
        parser.error("give either a spot or --near, not both")

    # Logs go to stderr; stdout carries the forecast
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = Settings.from_env(spots_path=args.spots, db_path=args.db)
    try:
        service = SurfService.from_settings(settings)
    except LoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED

    with service:
        if args.list:
            print(service.render_spots(output_format=args.output_format), end="")
            return EXIT_OK

        if args.near is not None:
            lat, lon = args.near
            try:
                spot = service.locate(lat, lon)
            except ValueError as e:
                print(f"error: {e}", file=sys.stderr)
                return EXIT_USAGE
            except NoSpotsAvailable as e:
                print(f"error: {e}", file=sys.stderr)
                return EXIT_FAILED
        else:
            spot = _resolve(service, args.spot, args.output_format)
            if spot is None:
                return EXIT_FAILED

        return _show_forecast(service, spot, args.units, args.output_format)


def _resolve(service: SurfService, query: str, output_format: str) -> Optional[Spot]:
    """Resolve a query, printing candidates or suggestions on failure."""
    result = service.resolve(query)

    if isinstance(result, Ambiguous):
        title = f'"{query}" matches {len(result.candidates)} spots; run again with one of these ids:'
        print(service.render_spots(result.candidates, output_format, title=title), end="")
        return None

    if isinstance(result, NotFound):
        print(f'No spot matches "{query}".', file=sys.stderr)
        if result.suggestions:
            print(
                service.render_spots(result.suggestions, output_format, title="Did you mean:"),
                end="",
            )
        else:
            print("Run `surfin --list` to see all spots.", file=sys.stderr)
        return None

    return result.spot


def _show_forecast(service: SurfService, spot: Spot, units: str, output_format: str) -> int:
    try:
        result = service.get_forecast(spot.id, units)
    except FetchError as e:
        hint = "try again in a few minutes" if e.retryable else "the provider doesn't know this spot"
        print(f"Couldn't fetch the forecast for {spot.canonical_name}: {e.cause} ({hint})",
              file=sys.stderr)
        return EXIT_FAILED

    print(service.render_result(result, output_format, spot=spot), end="")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
