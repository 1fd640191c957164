"""Utility functions for time operations."""

from datetime import datetime, timezone
from typing import Optional

SNAPSHOT_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"


def now_iso() -> str:
    """Get current timestamp in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


def format_duration(seconds: float) -> str:
    """Format duration in human readable format."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def snapshot_timestamp(now: Optional[datetime] = None) -> str:
    """Format a local timestamp for use in a snapshot directory name."""
    if now is None:
        now = datetime.now()
    return now.strftime(SNAPSHOT_TIME_FORMAT)


def iso_to_timestamp(iso_string: str) -> float:
    """Convert ISO 8601 string to Unix timestamp."""
    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return dt.timestamp()
