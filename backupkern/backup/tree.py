"""Filesystem tree abstraction used by the comparator."""

import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

ErrorCallback = Callable[[Path, str, OSError], None]


class EntryKind(str, Enum):
    """Kind of filesystem object, as reported by ``lstat``."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        if stat.S_ISREG(mode):
            return cls.FILE
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        return cls.OTHER


@dataclass(frozen=True)
class TreeEntry:
    """One object found while walking a tree."""

    path: Path
    relative_path: Path
    kind: EntryKind
    size: int
    mtime_ns: int
    mode: int = 0

    @property
    def name(self) -> str:
        return self.relative_path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)


class FileTree:
    """Read-only view of a directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def entries(self, relative: Path, on_error: Optional[ErrorCallback] = None) -> List[TreeEntry]:
        """List the entries of the directory at *relative*, sorted by name.

        An entry that cannot be examined is passed to *on_error* as
        (relative path, "stat", error) and left out of the result. Without a
        callback the error propagates.

        Raises:
            OSError: if the directory cannot be listed.
        """
        raise NotImplementedError

    def lookup(self, relative: Path) -> Optional[TreeEntry]:
        """Return the entry at *relative*, or None if nothing is there."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root='{self.root}')"


class LocalTree(FileTree):
    """A tree on the local filesystem. Symlinks are never followed."""

    def _entry(self, path: Path, relative: Path, st: os.stat_result) -> TreeEntry:
        return TreeEntry(
            path=path,
            relative_path=relative,
            kind=EntryKind.from_mode(st.st_mode),
            size=st.st_size,
            mtime_ns=st.st_mtime_ns,
            mode=st.st_mode,
        )

    def entries(self, relative: Path, on_error: Optional[ErrorCallback] = None) -> List[TreeEntry]:
        directory = self.root / relative
        result = []
        with os.scandir(directory) as it:
            for dir_entry in it:
                try:
                    st = dir_entry.stat(follow_symlinks=False)
                except FileNotFoundError:
                    # Removed since the listing started
                    continue
                except OSError as e:
                    if on_error is None:
                        raise
                    on_error(relative / dir_entry.name, "stat", e)
                    continue
                result.append(self._entry(Path(dir_entry.path), relative / dir_entry.name, st))
        result.sort(key=lambda e: e.name)
        return result

    def lookup(self, relative: Path) -> Optional[TreeEntry]:
        path = self.root / relative
        try:
            st = os.lstat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        return self._entry(path, relative, st)
