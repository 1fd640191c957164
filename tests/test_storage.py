"""Tests for snapshot naming and lookup."""

from datetime import datetime

from backupkern.backup.storage import SnapshotLocator, next_snapshot_name

NOW = datetime(2024, 3, 1, 12, 30, 5)


class TestNextSnapshotName:
    """Test snapshot name generation."""

    def test_timestamp_name(self):
        """Names follow <prefix>_<date>_<time>."""
        assert next_snapshot_name("home", now=NOW) == "home_2024-03-01_12-30-05"

    def test_name_sorts_after_latest(self):
        """A later timestamp is used as is."""
        assert next_snapshot_name("home", "home_2024-03-01_12-30-04", NOW) == "home_2024-03-01_12-30-05"

    def test_same_second_gets_suffix(self):
        """A name that would not sort after the latest is derived from it."""
        latest = "home_2024-03-01_12-30-05"

        name = next_snapshot_name("home", latest, NOW)

        assert name == "home_2024-03-01_12-30-05-1"
        assert name > latest

    def test_clock_moved_back(self):
        """Ordering stays monotonic if the clock goes backwards."""
        latest = "home_2025-01-01_00-00-00"

        assert next_snapshot_name("home", latest, NOW) > latest

    def test_suffixed_names_sort_before_next_second(self):
        """A suffixed name still sorts before the following second."""
        suffixed = next_snapshot_name("home", "home_2024-03-01_12-30-05", NOW)

        assert suffixed < next_snapshot_name("home", now=datetime(2024, 3, 1, 12, 30, 6))


class TestSnapshotLocator:
    """Test finding snapshots on disk."""

    def test_missing_base_has_no_snapshots(self, tmp_path):
        """A base that does not exist yields nothing."""
        locator = SnapshotLocator(tmp_path / "missing", "backup")

        assert locator.latest() is None
        assert locator.list_snapshots() == []

    def test_latest_is_greatest_name(self, tmp_path):
        """The lexicographically greatest snapshot name wins."""
        for name in ["backup_2024-01-02_00-00-00", "backup_2024-01-10_00-00-00", "backup_2023-12-31_23-59-59"]:
            (tmp_path / name).mkdir()

        locator = SnapshotLocator(tmp_path, "backup")

        assert locator.latest() == tmp_path / "backup_2024-01-10_00-00-00"
        assert [p.name for p in locator.list_snapshots()] == [
            "backup_2024-01-10_00-00-00",
            "backup_2024-01-02_00-00-00",
            "backup_2023-12-31_23-59-59",
        ]

    def test_skips_partial_foreign_and_files(self, tmp_path):
        """Unfinished runs, other prefixes, hand-made names and plain files are skipped."""
        (tmp_path / "backup_2024-01-01_00-00-00").mkdir()
        (tmp_path / "backup_2024-02-01_00-00-00.partial").mkdir()
        (tmp_path / "other_2025-01-01_00-00-00").mkdir()
        (tmp_path / "backup_old").mkdir()
        (tmp_path / "backup_work_2025-01-01_00-00-00").mkdir()
        (tmp_path / "backup_2024-03-01_00-00-00.yaml").write_text("state: done\n")

        locator = SnapshotLocator(tmp_path, "backup")

        assert locator.latest() == tmp_path / "backup_2024-01-01_00-00-00"

    def test_longer_prefix_is_not_a_snapshot(self, tmp_path):
        """Snapshots of a prefix that extends this one belong to another config."""
        (tmp_path / "home_2024-01-01_00-00-00").mkdir()
        (tmp_path / "home_work_2023-01-01_00-00-00").mkdir()

        assert SnapshotLocator(tmp_path, "home").latest() == tmp_path / "home_2024-01-01_00-00-00"
        assert SnapshotLocator(tmp_path, "home_work").latest() == tmp_path / "home_work_2023-01-01_00-00-00"

    def test_collision_suffixes_are_snapshots(self, tmp_path):
        """Names carrying -1 suffixes still count and sort after their base."""
        (tmp_path / "backup_2024-01-01_00-00-00").mkdir()
        (tmp_path / "backup_2024-01-01_00-00-00-1-1").mkdir()

        locator = SnapshotLocator(tmp_path, "backup")

        assert locator.latest() == tmp_path / "backup_2024-01-01_00-00-00-1-1"

    def test_new_name_avoids_existing_partial(self, tmp_path):
        """A leftover working directory with the same name is not reused."""
        locator = SnapshotLocator(tmp_path, "backup")
        (tmp_path / "backup_2024-03-01_12-30-05.partial").mkdir()

        assert locator.new_name(NOW) == "backup_2024-03-01_12-30-05-1"

    def test_create_and_finalize(self, tmp_path):
        """A working directory becomes a snapshot once finalized."""
        locator = SnapshotLocator(tmp_path, "backup")
        name = locator.new_name(NOW)

        partial = locator.create_partial(name)
        assert partial.is_dir()
        assert locator.latest() is None

        final = locator.finalize(name)

        assert final == tmp_path / name
        assert not partial.exists()
        assert locator.latest() == final
