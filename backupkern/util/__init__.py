"""Utility module initialization."""

from .logging import get_logger, setup_logging
from .paths import expand_path, format_size, is_within, is_writable
from .timeutil import format_duration, iso_to_timestamp, now_iso, snapshot_timestamp

__all__ = [
    # logging
    "get_logger",
    "setup_logging",
    # paths
    "expand_path",
    "format_size",
    "is_within",
    "is_writable",
    # timeutil
    "format_duration",
    "iso_to_timestamp",
    "now_iso",
    "snapshot_timestamp",
]
