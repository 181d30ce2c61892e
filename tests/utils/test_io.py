"""Tests for default data paths."""

from surfin.utils.io import DEFAULT_DB_PATH, DEFAULT_SPOTS_PATH


class TestDefaultPaths:
    """Tests for the bundled data locations."""

    def test_spots_path(self, project_root):
        assert DEFAULT_SPOTS_PATH == project_root / "data" / "spots.json"

    def test_spots_snapshot_shipped(self):
        assert DEFAULT_SPOTS_PATH.is_file()

    def test_db_path_under_data(self, data_dir):
        assert DEFAULT_DB_PATH.parent == data_dir / "cache"
        assert DEFAULT_DB_PATH.suffix == ".duckdb"
