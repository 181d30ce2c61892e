"""Runtime configuration.

Values have sensible defaults and can be overridden through environment
variables (see ``Settings.from_env``):

    MSW_API_KEY                 Provider API key (required for live fetches)
    SURFIN_API_URL              Provider API root
    SURFIN_SPOTS_PATH           Spot snapshot JSON
    SURFIN_DB_PATH              DuckDB cache file, "none" to disable
    SURFIN_REQUEST_TIMEOUT      Provider request timeout (seconds)
    SURFIN_FRESHNESS_HOURS      Forecast freshness window (hours)
    SURFIN_CACHE_MAX_ENTRIES    In-memory LRU bound (unset = unbounded)
    SURFIN_FETCH_WORKERS        Concurrent upstream fetches
    SURFIN_HOST / SURFIN_PORT   HTTP server bind address
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from surfin.cache.forecast import DEFAULT_FETCH_WORKERS
from surfin.forecast.client import DEFAULT_API_URL, REQUEST_TIMEOUT
from surfin.utils.io import DEFAULT_DB_PATH, DEFAULT_SPOTS_PATH

# Environment variable -> Settings field
ENV_VARS = {
    "MSW_API_KEY": "api_key",
    "SURFIN_API_URL": "api_url",
    "SURFIN_SPOTS_PATH": "spots_path",
    "SURFIN_DB_PATH": "db_path",
    "SURFIN_REQUEST_TIMEOUT": "request_timeout",
    "SURFIN_FRESHNESS_HOURS": "freshness_hours",
    "SURFIN_CACHE_MAX_ENTRIES": "cache_max_entries",
    "SURFIN_FETCH_WORKERS": "fetch_workers",
    "SURFIN_HOST": "host",
    "SURFIN_PORT": "port",
}

# SURFIN_DB_PATH values that disable disk persistence
_DISABLED = {"", "none", "off", "false", "0"}


class Settings(BaseModel):
    """Immutable runtime configuration."""

    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    spots_path: Path = DEFAULT_SPOTS_PATH
    db_path: Optional[Path] = DEFAULT_DB_PATH
    request_timeout: float = Field(REQUEST_TIMEOUT, gt=0)
    freshness_hours: float = Field(3.0, gt=0)
    cache_max_entries: Optional[int] = Field(None, ge=1)
    fetch_workers: int = Field(DEFAULT_FETCH_WORKERS, ge=1)
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)

    model_config = {"frozen": True}

    @property
    def freshness_window(self) -> timedelta:
        return timedelta(hours=self.freshness_hours)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Field values that win over the environment
                (e.g. command line flags); None values are ignored

        Raises:
            pydantic.ValidationError: If a variable has an invalid value
        """
        environ = os.environ if environ is None else environ
        values: dict = {}

        for var, name in ENV_VARS.items():
            if var in environ:
                values[name] = environ[var]

        values.update({k: v for k, v in overrides.items() if v is not None})

        db_path = values.get("db_path")
        if db_path is not None and str(db_path).strip().lower() in _DISABLED:
            values["db_path"] = None
        if values.get("cache_max_entries") == "":
            values.pop("cache_max_entries")
        return cls(**values)
