"""Backup module initialization."""

from .attributes import (
    AttributeCopier,
    AttributeCopyError,
    CommandAttributeCopier,
    StatAttributeCopier,
    get_attribute_copier,
)
from .executor import BackupEngine, BackupError, UnsupportedEntryError
from .plan import Copy, HardLink, MakeDir, PlanAction, plan_entry
from .report import BackupResult, EntryError, RunState, save_report
from .rules import GlobRule, IgnoreRule, PathMatcher, PrefixRule, parse_rule
from .scanner import Classification, ClassifiedEntry, TreeComparator
from .storage import SnapshotLocator, next_snapshot_name
from .tree import EntryKind, FileTree, LocalTree, TreeEntry

__all__ = [
    # attributes
    "AttributeCopier",
    "AttributeCopyError",
    "CommandAttributeCopier",
    "StatAttributeCopier",
    "get_attribute_copier",
    # executor
    "BackupEngine",
    "BackupError",
    "UnsupportedEntryError",
    # plan
    "Copy",
    "HardLink",
    "MakeDir",
    "PlanAction",
    "plan_entry",
    # report
    "BackupResult",
    "EntryError",
    "RunState",
    "save_report",
    # rules
    "GlobRule",
    "IgnoreRule",
    "PathMatcher",
    "PrefixRule",
    "parse_rule",
    # scanner
    "Classification",
    "ClassifiedEntry",
    "TreeComparator",
    # storage
    "SnapshotLocator",
    "next_snapshot_name",
    # tree
    "EntryKind",
    "FileTree",
    "LocalTree",
    "TreeEntry",
]
