"""Tests for turning classifications into filesystem actions."""

from pathlib import Path

from backupkern.backup.plan import Copy, HardLink, MakeDir, plan_entry
from backupkern.backup.rules import PathMatcher
from backupkern.backup.scanner import TreeComparator
from backupkern.backup.tree import EntryKind

F = EntryKind.FILE


def _plan(source, previous=None, patterns=()):
    matcher = PathMatcher.from_patterns(patterns, source.root)
    items = TreeComparator(source, previous, matcher).compare()
    return [a for a in map(plan_entry, items) if a is not None]


class TestPlanEntry:
    """Test per-entry actions."""

    def test_unchanged_file_is_linked_from_previous(self, memory_tree):
        """Unchanged regular files link to the previous snapshot's copy."""
        source = memory_tree("/src", {"a.txt": (F, 1, 1)})
        previous = memory_tree("/snap", {"a.txt": (F, 1, 1)})

        assert _plan(source, previous) == [
            HardLink(Path("/snap/a.txt"), Path("a.txt"), Path("/src/a.txt"))
        ]

    def test_new_and_changed_files_are_copied(self, memory_tree):
        """Files without a matching previous version are copied from the source."""
        source = memory_tree("/src", {"new.txt": (F, 1, 1), "old.txt": (F, 2, 2)})
        previous = memory_tree("/snap", {"old.txt": (F, 1, 1)})

        assert _plan(source, previous) == [
            Copy(Path("/src/new.txt"), Path("new.txt"), F),
            Copy(Path("/src/old.txt"), Path("old.txt"), F),
        ]

    def test_unchanged_symlink_is_copied(self, memory_tree):
        """Symlinks are never hard-linked."""
        source = memory_tree("/src", {"link": (EntryKind.SYMLINK, 3, 3)})
        previous = memory_tree("/snap", {"link": (EntryKind.SYMLINK, 3, 3)})

        assert _plan(source, previous) == [Copy(Path("/src/link"), Path("link"), EntryKind.SYMLINK)]

    def test_directories_are_always_created_first(self, memory_tree):
        """Every MakeDir precedes the actions beneath it, even for unchanged trees."""
        files = {"d/e/f.txt": (F, 1, 1), "d/g.txt": (F, 1, 1)}
        source = memory_tree("/src", files)
        previous = memory_tree("/snap", files)

        actions = _plan(source, previous)

        assert actions[:2] == [MakeDir(Path("d")), MakeDir(Path("d/e"))]
        created = set()
        for action in actions:
            assert action.target.parent == Path(".") or action.target.parent in created
            if isinstance(action, MakeDir):
                created.add(action.target)

    def test_ignored_entries_have_no_action(self, memory_tree):
        """Ignored paths and their contents produce nothing."""
        source = memory_tree("/src", {"secrets/key": (F, 1, 1), "notes.txt": (F, 1, 1)})

        assert _plan(source, patterns=["/secrets"]) == [
            Copy(Path("/src/notes.txt"), Path("notes.txt"), F)
        ]
