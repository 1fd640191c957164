"""Classification of a source tree against the previous snapshot."""

import typing as t
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..util.logging import get_logger
from .rules import PathMatcher
from .tree import EntryKind, ErrorCallback, FileTree, TreeEntry

logger = get_logger(__name__)


class Classification(str, Enum):
    """Verdict for one source entry."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    NEW = "new"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ClassifiedEntry:
    """A source entry together with its verdict."""

    entry: TreeEntry
    classification: Classification
    previous: t.Optional[TreeEntry] = None

    @property
    def relative_path(self) -> Path:
        return self.entry.relative_path

    def __repr__(self) -> str:
        return f"ClassifiedEntry('{self.relative_path}', {self.entry.kind.value}, {self.classification.value})"


def _log_error(relative: Path, operation: str, error: OSError) -> None:
    logger.warning(f"Cannot {operation} {relative}: {error}")


def _log_previous_error(relative: Path, operation: str, error: OSError) -> None:
    logger.debug(f"Cannot {operation} {relative} in previous snapshot: {error}")


class TreeComparator:
    """Walks a source tree in lock-step with the previous snapshot.

    ``compare()`` yields one :class:`ClassifiedEntry` per source entry,
    depth-first, with every directory before its children. Nothing is
    written and nothing is cached between calls, so calling ``compare()``
    again with unchanged trees gives the same sequence.

    Files are compared by kind, size and modification time only; a file whose
    content changes without touching its mtime is reported as unchanged.
    """

    def __init__(
        self,
        source: FileTree,
        previous: t.Optional[FileTree],
        matcher: PathMatcher,
        compare_mode: bool = False,
        on_error: t.Optional[ErrorCallback] = None
    ) -> None:
        """Initialize the comparator.

        Args:
            source: Tree being backed up
            previous: Latest snapshot, or None on the first backup
            matcher: Decides which source paths are ignored
            compare_mode: Also treat permission changes as changes
            on_error: Called with (relative path, operation, error) when a
                directory cannot be listed or an entry cannot be examined;
                defaults to logging a warning
        """
        self.source = source
        self.previous = previous
        self.matcher = matcher
        self.compare_mode = compare_mode
        self.on_error = on_error or _log_error

    def classify(self, entry: TreeEntry, previous: t.Optional[TreeEntry]) -> Classification:
        """Classify a single non-ignored entry against its previous version."""
        if previous is None:
            return Classification.NEW
        if previous.kind is not entry.kind:
            return Classification.CHANGED
        if entry.kind is EntryKind.DIRECTORY:
            return Classification.UNCHANGED
        if entry.size != previous.size or entry.mtime_ns != previous.mtime_ns:
            return Classification.CHANGED
        if self.compare_mode and entry.permissions != previous.permissions:
            return Classification.CHANGED
        return Classification.UNCHANGED

    def compare(self) -> t.Iterator[ClassifiedEntry]:
        """Yield the classification of every entry below the source root."""
        yield from self._walk(Path("."), self.previous is not None)

    def _previous_entries(self, relative: Path) -> t.Dict[str, TreeEntry]:
        try:
            return {e.name: e for e in self.previous.entries(relative, _log_previous_error)}
        except OSError as e:
            # Missing data in the old snapshot only costs a fresh copy
            logger.debug(f"Cannot list previous snapshot at {relative}: {e}")
            return {}

    def _walk(self, relative: Path, has_previous: bool) -> t.Iterator[ClassifiedEntry]:
        try:
            entries = self.source.entries(relative, self.on_error)
        except OSError as e:
            self.on_error(relative, "list directory", e)
            return

        previous_entries = self._previous_entries(relative) if has_previous else {}

        for entry in entries:
            if self.matcher.is_ignored(entry.path):
                yield ClassifiedEntry(entry, Classification.IGNORED)
                continue

            previous = previous_entries.get(entry.name)
            yield ClassifiedEntry(entry, self.classify(entry, previous), previous)

            if entry.is_dir:
                yield from self._walk(
                    entry.relative_path,
                    previous is not None and previous.is_dir
                )
