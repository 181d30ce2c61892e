"""DuckDB persistence for cached provider forecasts."""

import json
import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import duckdb

from surfin.forecast.models import Forecast, ForecastPeriod, UnitSystem
from surfin.utils.io import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

# SQL schema - DuckDB uses sequences for auto-increment
SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS seq_fetch_log_id START 1;

-- One row per (spot, unit system), overwritten on refresh
CREATE TABLE IF NOT EXISTS forecasts (
    spot_id INTEGER NOT NULL,
    unit_system VARCHAR NOT NULL,
    fetch_time TIMESTAMP NOT NULL,
    period_count INTEGER NOT NULL,
    periods VARCHAR NOT NULL,
    PRIMARY KEY (spot_id, unit_system)
);

-- Fetch log for debugging/monitoring
CREATE TABLE IF NOT EXISTS fetch_log (
    id INTEGER DEFAULT nextval('seq_fetch_log_id') PRIMARY KEY,
    spot_id INTEGER NOT NULL,
    unit_system VARCHAR NOT NULL,
    timestamp TIMESTAMP NOT NULL,
    status VARCHAR NOT NULL,
    duration_ms INTEGER,
    error_message VARCHAR
);

CREATE INDEX IF NOT EXISTS idx_fetch_log_time ON fetch_log(timestamp);
"""


def _to_db_time(value: datetime) -> datetime:
    """Aware UTC datetime -> naive UTC for TIMESTAMP columns."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_time(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc)


class CacheDatabase:
    """DuckDB cache database manager.

    Persists the latest forecast per (spot id, unit system) so the in-memory
    cache can be warmed after a restart, and logs every upstream fetch.

    DuckDB connections are not safe for concurrent use, so every statement
    runs under an instance lock.

    Example:
        >>> db = CacheDatabase()
        >>> db.get_forecast(450, UnitSystem.US)
        Forecast(spot_id=450, ...)
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize database connection.

        Args:
            db_path: Path to DuckDB file. Creates if doesn't exist.
        """
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn = None
        self._init_schema()

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get database connection (lazy initialization with retry)."""
        if self._conn is None:
            self._conn = self._connect_with_retry()
        return self._conn

    def _connect_with_retry(self, max_retries: int = 3) -> duckdb.DuckDBPyConnection:
        """Connect to database with retry logic for lock handling."""
        last_error = None
        for attempt in range(max_retries):
            try:
                return duckdb.connect(str(self.db_path))
            except duckdb.IOException as e:
                last_error = e
                if "lock" in str(e).lower() and attempt < max_retries - 1:
                    wait_time = 0.5 * (2 ** attempt)  # Exponential backoff
                    logger.warning(f"Database locked, retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    raise
        raise last_error

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._lock:
            for statement in SCHEMA_SQL.split(";"):
                statement = statement.strip()
                if statement:
                    self.conn.execute(statement)
        logger.info(f"Cache database initialized at {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # -------------------------------------------------------------------------
    # Forecast Operations
    # -------------------------------------------------------------------------

    def get_forecast(self, spot_id: int, unit_system: UnitSystem | str) -> Optional[Forecast]:
        """Get the stored forecast for a key, regardless of age.

        Args:
            spot_id: Provider spot id
            unit_system: Unit system the forecast was fetched in

        Returns:
            Forecast with its original fetched_at, or None
        """
        unit_system = UnitSystem(unit_system)
        with self._lock:
            result = self.conn.execute(
                """
                SELECT fetch_time, periods
                FROM forecasts
                WHERE spot_id = ? AND unit_system = ?
                """,
                [spot_id, unit_system.value],
            ).fetchone()

        if result is None:
            return None

        periods = tuple(ForecastPeriod.from_record(r) for r in json.loads(result[1]))
        return Forecast(
            spot_id=spot_id,
            unit_system=unit_system,
            periods=periods,
            fetched_at=_from_db_time(result[0]),
        )

    def store_forecast(self, forecast: Forecast) -> None:
        """Insert or replace the stored forecast for its key."""
        periods = json.dumps([p.to_record() for p in forecast.periods])

        with self._lock:
            self.conn.execute(
                """
                INSERT INTO forecasts (spot_id, unit_system, fetch_time, period_count, periods)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (spot_id, unit_system)
                DO UPDATE SET
                    fetch_time = EXCLUDED.fetch_time,
                    period_count = EXCLUDED.period_count,
                    periods = EXCLUDED.periods
                """,
                [
                    forecast.spot_id,
                    forecast.unit_system.value,
                    _to_db_time(forecast.fetched_at),
                    len(forecast.periods),
                    periods,
                ],
            )

    def get_fetch_times(self) -> list[tuple[int, str, datetime]]:
        """(spot_id, unit_system, fetch_time) for every stored forecast."""
        with self._lock:
            rows = self.conn.execute(
                "SELECT spot_id, unit_system, fetch_time FROM forecasts ORDER BY spot_id, unit_system"
            ).fetchall()
        return [(row[0], row[1], _from_db_time(row[2])) for row in rows]

    # -------------------------------------------------------------------------
    # Logging Operations
    # -------------------------------------------------------------------------

    def log_fetch(
        self,
        spot_id: int,
        unit_system: UnitSystem | str,
        status: str,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        """Log an upstream fetch attempt."""
        with self._lock:
            self.conn.execute(
                """
                INSERT INTO fetch_log (spot_id, unit_system, timestamp, status, duration_ms, error_message)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    spot_id,
                    UnitSystem(unit_system).value,
                    _to_db_time(datetime.now(timezone.utc)),
                    status,
                    duration_ms,
                    error_message,
                ],
            )

    def get_fetch_log(self, limit: int = 50) -> list[dict]:
        """Most recent fetch log entries, newest first."""
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT spot_id, unit_system, timestamp, status, duration_ms, error_message
                FROM fetch_log
                ORDER BY id DESC
                LIMIT ?
                """,
                [limit],
            ).fetchall()
        return [
            {
                "spot_id": row[0],
                "unit_system": row[1],
                "timestamp": _from_db_time(row[2]),
                "status": row[3],
                "duration_ms": row[4],
                "error_message": row[5],
            }
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            forecast_count = self.conn.execute("SELECT COUNT(*) FROM forecasts").fetchone()[0]
            failed_count = self.conn.execute(
                "SELECT COUNT(*) FROM fetch_log WHERE status = 'error'"
            ).fetchone()[0]
            latest = self.conn.execute("SELECT MAX(fetch_time) FROM forecasts").fetchone()[0]

        return {
            "forecast_count": forecast_count,
            "failed_fetches": failed_count,
            "latest_fetch_time": _from_db_time(latest) if latest else None,
            "db_path": str(self.db_path),
        }
