"""Utility functions for path operations."""

import os
from pathlib import Path
from typing import Union


def expand_path(path: Union[str, Path]) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(os.path.expanduser(str(path))))


def is_within(path: Path, root: Path) -> bool:
    """Return True if *path* equals *root* or lies beneath it.

    Comparison is by path components, so ``/a/bc`` is not within ``/a/b``.
    """
    return path == root or root in path.parents


def is_writable(path: Path) -> bool:
    """Check whether new entries can be created inside directory *path*."""
    return os.access(path, os.W_OK | os.X_OK)


def format_size(size_bytes: int) -> str:
    """Format file size in human readable format."""
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size = float(size_bytes)
    while size >= 1024.0 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    return f"{size:.1f} {size_names[i]}"
