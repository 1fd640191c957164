"""Materialization plan: the filesystem actions a classification implies."""

import typing as t
from dataclasses import dataclass
from pathlib import Path

from .scanner import Classification, ClassifiedEntry
from .tree import EntryKind


@dataclass(frozen=True)
class MakeDir:
    """Create a directory in the new snapshot."""

    target: Path


@dataclass(frozen=True)
class HardLink:
    """Link a file of the previous snapshot into the new one.

    ``fallback`` is the source file to copy instead if linking fails.
    """

    source: Path
    target: Path
    fallback: Path


@dataclass(frozen=True)
class Copy:
    """Copy an entry from the source tree into the new snapshot."""

    source: Path
    target: Path
    kind: EntryKind


PlanAction = t.Union[MakeDir, HardLink, Copy]


def plan_entry(item: ClassifiedEntry) -> t.Optional[PlanAction]:
    """Return the action for one classified entry, or None if it is ignored.

    Targets are relative to the snapshot root. Only regular files are ever
    linked; directories are always created and symlinks always recreated.
    Applied to the comparator's stream in order, every ``MakeDir`` comes
    before the actions that target paths beneath it.
    """
    if item.classification is Classification.IGNORED:
        return None

    entry = item.entry
    if entry.kind is EntryKind.DIRECTORY:
        return MakeDir(entry.relative_path)

    if (
        item.classification is Classification.UNCHANGED
        and entry.kind is EntryKind.FILE
        and item.previous is not None
    ):
        return HardLink(item.previous.path, entry.relative_path, entry.path)

    return Copy(entry.path, entry.relative_path, entry.kind)
