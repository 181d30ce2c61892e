"""Background refresh for cache pre-warming.

Fetches forecasts for a list of spots so the first user request is served
from cache. Run periodically via cron, e.g. every 3 hours:

    0 */3 * * * surfin-refresh 450 4203 --units us

Usage:
    surfin-refresh 450 4203          # Refresh stale/missing spots
    surfin-refresh --all             # Every spot in the snapshot
    surfin-refresh 450 --force       # Refetch even if fresh
    surfin-refresh --status          # Show cache status
"""

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from surfin.cache.database import CacheDatabase
from surfin.cache.forecast import FRESHNESS_WINDOW, FetchError, ForecastCache
from surfin.forecast.models import UnitSystem
from surfin.spots.index import SpotIndex
from surfin.utils.io import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Result of a refresh operation."""

    total: int
    success: int
    failed: int
    skipped: int
    duration_ms: int

    @property
    def success_rate(self) -> float:
        """Percentage of successful refreshes."""
        if self.total == 0:
            return 0.0
        return (self.success / self.total) * 100

    def __str__(self) -> str:
        return (
            f"Refresh complete: {self.success}/{self.total} successful, "
            f"{self.failed} failed, {self.skipped} skipped "
            f"({self.duration_ms}ms)"
        )


def refresh_spots(
    cache: ForecastCache,
    spot_ids: Iterable[int],
    unit_system: UnitSystem | str = UnitSystem.US,
    force: bool = False,
) -> RefreshResult:
    """Refresh forecasts for spots with stale or missing cache entries.

    Args:
        cache: ForecastCache instance
        spot_ids: Spots to refresh
        unit_system: Unit system to fetch
        force: Force refresh even if cache is fresh

    Returns:
        RefreshResult with counts of successful/failed refreshes
    """
    spot_ids = list(spot_ids)
    unit_system = UnitSystem(unit_system)
    start_time = time.time()

    total = len(spot_ids)
    success = 0
    failed = 0
    skipped = 0

    logger.info(f"Starting forecast refresh for {total} spots ({unit_system.value})...")

    for i, spot_id in enumerate(spot_ids, 1):
        if not force and cache.is_fresh(spot_id, unit_system):
            logger.debug(f"[{i}/{total}] spot {spot_id}: cache fresh")
            skipped += 1
            continue

        logger.info(f"[{i}/{total}] spot {spot_id}: fetching...")
        try:
            result = cache.refresh(spot_id, unit_system)
        except FetchError as e:
            logger.error(f"[{i}/{total}] spot {spot_id}: failed - {e.cause}")
            failed += 1
            continue

        if result.stale:
            logger.warning(f"[{i}/{total}] spot {spot_id}: failed, stale entry kept - {result.error}")
            failed += 1
        else:
            logger.info(f"[{i}/{total}] spot {spot_id}: cached ({len(result.forecast)} periods)")
            success += 1

    duration_ms = int((time.time() - start_time) * 1000)

    result = RefreshResult(
        total=total,
        success=success,
        failed=failed,
        skipped=skipped,
        duration_ms=duration_ms,
    )

    logger.info(str(result))
    return result


def get_cache_status(
    db: CacheDatabase,
    index: Optional[SpotIndex] = None,
    now: Optional[datetime] = None,
    freshness_window: timedelta = FRESHNESS_WINDOW,
) -> dict:
    """Get current cache status.

    Args:
        db: CacheDatabase instance
        index: Spot index used to name spots (optional)
        now: Reference time for freshness (defaults to current UTC time)
        freshness_window: Age after which a forecast counts as stale

    Returns:
        Dict with cache statistics and per-forecast status
    """
    now = now or datetime.now(timezone.utc)
    stats = db.get_stats()

    forecasts = []
    for spot_id, unit_system, fetch_time in db.get_fetch_times():
        spot = index.find_by_id(spot_id) if index is not None else None
        age = now - fetch_time
        forecasts.append({
            "spot_id": spot_id,
            "name": spot.canonical_name if spot else None,
            "unit_system": unit_system,
            "fetch_time": fetch_time,
            "age_hours": age.total_seconds() / 3600,
            "fresh": age < freshness_window,
        })

    return {
        "db_path": stats["db_path"],
        "forecast_count": stats["forecast_count"],
        "fresh_count": sum(1 for f in forecasts if f["fresh"]),
        "failed_fetches": stats["failed_fetches"],
        "latest_fetch_time": stats["latest_fetch_time"],
        "forecasts": forecasts,
    }


def print_status(status: dict) -> None:
    """Print cache status in human-readable format."""
    print()
    print("=" * 60)
    print("Surf Forecast Cache Status")
    print("=" * 60)
    print(f"Database: {status['db_path']}")
    print()
    print(f"Cached forecasts (fresh): {status['fresh_count']}/{status['forecast_count']}")
    print(f"Failed fetches logged: {status['failed_fetches']}")

    if status["latest_fetch_time"]:
        print(f"Latest fetch: {status['latest_fetch_time']:%Y-%m-%d %H:%M UTC}")

    print()
    print("Forecast Status:")
    print("-" * 60)

    for forecast in status["forecasts"]:
        state = "OK" if forecast["fresh"] else "STALE"
        name = forecast["name"] or f"spot {forecast['spot_id']}"
        print(
            f"  {name:<25} {forecast['spot_id']:>5} {forecast['unit_system']:<3} "
            f"{state:<6} ({forecast['age_hours']:.1f}h old)"
        )

    print("=" * 60)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for background refresh."""
    parser = argparse.ArgumentParser(
        description="Pre-warm the surf forecast cache",
        epilog="""
Examples:
  surfin-refresh 450 4203          # Refresh two spots
  surfin-refresh --all --units eu  # Every spot, metric units
  surfin-refresh --status          # Show status

Cron setup (refresh every 3 hours):
  0 */3 * * * surfin-refresh --all >> /var/log/surfin-refresh.log 2>&1
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "spot_ids",
        nargs="*",
        type=int,
        help="Spot ids to refresh",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Refresh every spot in the snapshot",
    )
    parser.add_argument(
        "--units",
        choices=[u.value for u in UnitSystem],
        default=UnitSystem.US.value,
        help="Unit system to fetch (default: us)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force refresh even if cache is fresh",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show current cache status",
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
        help=f"Database path (default: {DEFAULT_DB_PATH})",
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

    args = parser.parse_args(argv)

    # Configure logging
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.status and not args.all and not args.spot_ids:
        parser.error("give spot ids, --all or --status")

    # Imported here: the service module imports this package
    from surfin.config import Settings
    from surfin.service import SurfService
    from surfin.spots.index import LoadError

    settings = Settings.from_env(spots_path=args.spots, db_path=args.db)
    if settings.db_path is None:
        logger.warning("Disk cache is disabled (SURFIN_DB_PATH); refreshed forecasts won't persist")

    try:
        service = SurfService.from_settings(settings)
    except LoadError as e:
        logger.error(str(e))
        return 1

    with service:
        if args.status:
            if service.db is None:
                logger.error("No cache database configured")
                return 1
            status = get_cache_status(
                service.db, service.index, freshness_window=service.cache.freshness_window
            )
            print_status(status)
            return 0

        spot_ids = [s.id for s in service.index] if args.all else args.spot_ids
        result = refresh_spots(service.cache, spot_ids, args.units, force=args.force)
        return 1 if result.failed > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
