"""Default data paths."""

from pathlib import Path

# Project root is 4 levels up from this file
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

DEFAULT_SPOTS_PATH = _PROJECT_ROOT / "data" / "spots.json"
DEFAULT_DB_PATH = _PROJECT_ROOT / "data" / "cache" / "surfin.duckdb"
