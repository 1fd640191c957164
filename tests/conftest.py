"""Shared fixtures for backupkern tests."""

from pathlib import Path

import pytest

from backupkern.backup.tree import EntryKind, FileTree, TreeEntry
from backupkern.config import BackupConfig


class MemoryTree(FileTree):
    """In-memory tree: maps relative paths to (kind, size, mtime_ns)."""

    def __init__(self, root, files=None):
        super().__init__(Path(root))
        self.nodes = {}
        self.listed = []
        self.unreadable = set()
        self.unstatable = set()
        for path, attrs in (files or {}).items():
            self.add(path, *attrs)

    def add(self, path, kind=EntryKind.FILE, size=0, mtime_ns=0, mode=0o100644):
        relative = Path(path)
        for parent in reversed(list(relative.parents)[:-1]):
            self.nodes.setdefault(parent, (EntryKind.DIRECTORY, 0, 0, 0o040755))
        self.nodes[relative] = (kind, size, mtime_ns, mode)

    def _entry(self, relative):
        kind, size, mtime_ns, mode = self.nodes[relative]
        return TreeEntry(self.root / relative, relative, kind, size, mtime_ns, mode)

    def entries(self, relative, on_error=None):
        relative = Path(relative)
        self.listed.append(relative)
        if relative in self.unreadable:
            raise PermissionError(13, "Permission denied", str(self.root / relative))
        if relative != Path(".") and self.nodes.get(relative, (None,))[0] is not EntryKind.DIRECTORY:
            raise FileNotFoundError(2, "No such file or directory", str(self.root / relative))
        children = []
        for p in self.nodes:
            if p.parent != relative or p == Path("."):
                continue
            if p in self.unstatable:
                error = OSError(5, "Input/output error", str(self.root / p))
                if on_error is None:
                    raise error
                on_error(p, "stat", error)
                continue
            children.append(p)
        return sorted((self._entry(p) for p in children), key=lambda e: e.name)

    def lookup(self, relative):
        relative = Path(relative)
        return self._entry(relative) if relative in self.nodes else None


@pytest.fixture
def memory_tree():
    """Factory for in-memory trees."""
    return MemoryTree


@pytest.fixture
def source_dir(tmp_path):
    """A source directory with a small tree of files."""
    source = tmp_path / "home"
    (source / "docs").mkdir(parents=True)
    (source / "a.txt").write_bytes(b"a" * 100)
    (source / "docs" / "notes.txt").write_text("notes\n")
    (source / "docs" / "todo.md").write_text("- nothing\n")
    return source


@pytest.fixture
def destination_dir(tmp_path):
    """An empty destination base directory."""
    destination = tmp_path / "backups"
    destination.mkdir()
    return destination


@pytest.fixture
def make_config(source_dir, destination_dir):
    """Build a configuration for the source and destination fixtures."""
    def _make(**overrides):
        options = {"source": source_dir, "destination": [destination_dir]}
        options.update(overrides)
        return BackupConfig(**options)
    return _make
