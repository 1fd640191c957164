"""Snapshot layout under a destination base directory."""

import re
import typing as t
from datetime import datetime
from pathlib import Path

from ..util.logging import get_logger
from ..util.timeutil import snapshot_timestamp

logger = get_logger(__name__)

PARTIAL_SUFFIX = ".partial"
REPORT_SUFFIX = ".yaml"

# Matches the output of snapshot_timestamp(), plus any collision suffixes
SNAPSHOT_STAMP_PATTERN = r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}(?:-1)*"


def next_snapshot_name(
    prefix: str,
    latest: t.Optional[str] = None,
    now: t.Optional[datetime] = None
) -> str:
    """Build a snapshot name that sorts after *latest*.

    Names are ``<prefix>_<YYYY-MM-DD>_<HH-MM-SS>``. When that would not sort
    strictly after the latest existing name (two runs in the same second, or
    a clock set back), ``-1`` is appended to the latest name instead.

    Args:
        prefix: Snapshot name prefix
        latest: Name of the most recent existing snapshot, if any
        now: Time to derive the name from (uses current time if None)
    """
    name = f"{prefix}_{snapshot_timestamp(now)}"
    if latest is not None and name <= latest:
        name = f"{latest}-1"
    return name


class SnapshotLocator:
    """Finds snapshots under a destination base directory."""

    def __init__(self, base_path: Path, prefix: str) -> None:
        """Initialize the locator.

        Args:
            base_path: Directory holding one subdirectory per snapshot
            prefix: Snapshot name prefix; other directories are not snapshots
        """
        self.base_path = Path(base_path)
        self.prefix = prefix
        self._name_re = re.compile(rf"{re.escape(prefix)}_{SNAPSHOT_STAMP_PATTERN}")

    def is_snapshot_name(self, name: str) -> bool:
        return self._name_re.fullmatch(name) is not None

    def list_snapshots(self) -> t.List[Path]:
        """List finished snapshot directories, newest first."""
        if not self.base_path.is_dir():
            return []

        snapshots = [
            d for d in self.base_path.iterdir()
            if self.is_snapshot_name(d.name) and d.is_dir() and not d.is_symlink()
        ]
        return sorted(snapshots, key=lambda d: d.name, reverse=True)

    def latest(self) -> t.Optional[Path]:
        """Get the most recent snapshot, or None if there is none yet."""
        snapshots = self.list_snapshots()
        return snapshots[0] if snapshots else None

    def partial_path(self, name: str) -> Path:
        return self.base_path / f"{name}{PARTIAL_SUFFIX}"

    def snapshot_path(self, name: str) -> Path:
        return self.base_path / name

    def report_path(self, name: str) -> Path:
        return self.base_path / f"{name}{REPORT_SUFFIX}"

    def new_name(self, now: t.Optional[datetime] = None) -> str:
        """Pick a name for a new snapshot that is not taken by any directory."""
        latest = self.latest()
        name = next_snapshot_name(self.prefix, latest.name if latest else None, now)
        while self.snapshot_path(name).exists() or self.partial_path(name).exists():
            name = f"{name}-1"
        return name

    def create_partial(self, name: str) -> Path:
        """Create the working directory for snapshot *name*.

        Raises:
            OSError: if the directory cannot be created
        """
        path = self.partial_path(name)
        path.mkdir()
        logger.debug(f"Created working directory {path}")
        return path

    def finalize(self, name: str) -> Path:
        """Give a finished snapshot its final name."""
        final = self.snapshot_path(name)
        self.partial_path(name).rename(final)
        return final
