"""Backup execution engine."""

import os
import shutil
import typing as t
from pathlib import Path

from tqdm import tqdm

from ..config import BackupConfig
from ..util.logging import get_logger
from ..util.paths import format_size, is_within, is_writable
from ..util.timeutil import now_iso
from .attributes import AttributeCopier, AttributeCopyError, get_attribute_copier
from .plan import Copy, HardLink, MakeDir, PlanAction, plan_entry
from .report import BackupResult, RunState, save_report
from .rules import PathMatcher
from .scanner import Classification, ClassifiedEntry, TreeComparator
from .storage import SnapshotLocator
from .tree import EntryKind, LocalTree

logger = get_logger(__name__)


class BackupError(Exception):
    """A backup run could not start or could not be finished."""
    pass


class UnsupportedEntryError(OSError):
    """Entry of a kind that is never opened or copied (pipe, socket, device)."""
    pass


OPERATIONS = {
    MakeDir: "create directory",
    HardLink: "link",
    Copy: "copy",
}


class BackupEngine:
    """Creates one snapshot of the configured source directory."""

    def __init__(
        self,
        config: BackupConfig,
        attribute_copier: t.Optional[AttributeCopier] = None,
        show_progress: bool = False
    ) -> None:
        """Initialize the engine.

        Args:
            config: Settings for the run
            attribute_copier: Applies permissions and mtimes to copies
                (built from the configuration if None)
            show_progress: Display a progress counter on the terminal
        """
        self.config = config
        if attribute_copier is None:
            attribute_copier = get_attribute_copier(config.attribute_copier, config.command_timeout)
        self.attribute_copier = attribute_copier
        self.show_progress = show_progress
        self.state = RunState.START

    def select_destination(self) -> Path:
        """Return the first configured destination base that exists."""
        for candidate in self.config.destination:
            if candidate.is_dir():
                return candidate
            logger.debug(f"Destination not available: {candidate}")

        tried = ", ".join(str(d) for d in self.config.destination)
        raise BackupError(f"No location to back up to (tried: {tried})")

    def build_matcher(self, base: Path) -> PathMatcher:
        """Create the matcher, also excluding *base* if it lies inside the source."""
        source = self.config.source
        extra = []
        source_resolved = source.resolve()
        base_resolved = base.resolve()
        if is_within(base_resolved, source_resolved):
            if base_resolved == source_resolved:
                raise BackupError(f"Destination {base} is the source directory itself")
            extra.append(source / base_resolved.relative_to(source_resolved))
        return PathMatcher.from_patterns(self.config.ignore, source, extra_paths=extra)

    def _set_state(self, result: BackupResult, state: RunState) -> None:
        self.state = state
        result.state = state
        logger.debug(f"Run state: {state.value}")

    def run(self, dry_run: bool = False) -> BackupResult:
        """Run the backup.

        Args:
            dry_run: Classify and plan without writing anything

        Returns:
            BackupResult with counters and per-entry errors

        Raises:
            BackupError: if the source or destination is unusable, or the
                snapshot directory cannot be created or finalized
        """
        source = self.config.source
        if not source.is_dir():
            raise BackupError(f"Source directory not found: {source}")
        if not os.access(source, os.R_OK | os.X_OK):
            raise BackupError(f"Source directory is not readable: {source}")

        base = self.select_destination()
        if not dry_run and not is_writable(base):
            raise BackupError(f"Destination is not writable: {base}")

        matcher = self.build_matcher(base)
        locator = SnapshotLocator(base, self.config.prefix)
        previous = locator.latest()
        name = locator.new_name()

        result = BackupResult(
            snapshot_name=name,
            previous_snapshot=str(previous) if previous else None,
            source=str(source),
            dry_run=dry_run,
        )

        root: t.Optional[Path] = None
        if not dry_run:
            try:
                root = locator.create_partial(name)
            except OSError as e:
                raise BackupError(f"Cannot create snapshot directory in {base}: {e}") from e

        logger.info(f"Backup running: {source} -> {base / name}")
        logger.info(f"Previous snapshot: {previous.name if previous else 'none'}")

        comparator = TreeComparator(
            LocalTree(source),
            LocalTree(previous) if previous else None,
            matcher,
            compare_mode=self.config.compare_mode,
            on_error=result.add_error,
        )

        self._set_state(result, RunState.WALKING)
        failed_dirs: t.Set[Path] = set()

        with tqdm(desc="Backing up", unit="entry", disable=not self.show_progress) as pbar:
            for item in comparator.compare():
                pbar.set_postfix_str(item.entry.name, refresh=False)
                self._process(item, root, result, failed_dirs)
                pbar.update(1)

        self._set_state(result, RunState.FINALIZING)

        if root is not None:
            try:
                final = locator.finalize(name)
            except OSError as e:
                raise BackupError(f"Cannot finalize snapshot {root}: {e}") from e
            result.snapshot_path = str(final)

        result.finished_at = now_iso()
        self._set_state(result, RunState.DONE)

        if root is not None and self.config.write_report:
            try:
                save_report(result, locator.report_path(name))
            except OSError as e:
                logger.warning(f"Could not write run report: {e}")

        logger.info(
            f"Backup {name} complete: {result.linked_files} linked, "
            f"{result.copied_files} copied ({format_size(result.bytes_copied)}), "
            f"{result.ignored} ignored, {len(result.errors)} errors"
        )
        return result

    def _process(
        self,
        item: ClassifiedEntry,
        root: t.Optional[Path],
        result: BackupResult,
        failed_dirs: t.Set[Path]
    ) -> None:
        relative = item.relative_path

        if item.classification is Classification.IGNORED:
            logger.debug(f"Ignored: {relative}")
            result.ignored += 1
            return

        # Nothing can be created below a directory that failed
        if relative.parent in failed_dirs:
            if item.entry.is_dir:
                failed_dirs.add(relative)
            return

        action = plan_entry(item)
        try:
            self._execute(action, root, result)
        except AttributeCopyError as e:
            result.add_error(relative, "copy attributes of", e)
        except OSError as e:
            if isinstance(action, MakeDir):
                failed_dirs.add(relative)
            result.add_error(relative, OPERATIONS[type(action)], e)

    def _execute(self, action: PlanAction, root: t.Optional[Path], result: BackupResult) -> None:
        if isinstance(action, MakeDir):
            if root is not None:
                (root / action.target).mkdir()
            result.directories += 1

        elif isinstance(action, HardLink):
            if root is None:
                result.linked_files += 1
                return
            target = root / action.target
            try:
                os.link(action.source, target)
            except OSError as e:
                logger.debug(f"Linking {action.target} failed ({e}), copying instead")
                result.link_failovers += 1
                self._copy(action.fallback, target, EntryKind.FILE, result)
            else:
                result.linked_files += 1

        elif isinstance(action, Copy):
            if action.kind is EntryKind.OTHER:
                raise UnsupportedEntryError(f"unsupported file type: {action.source}")
            if root is None:
                result.copied_files += 1
                return
            self._copy(action.source, root / action.target, action.kind, result)

    def _copy(self, source: Path, target: Path, kind: EntryKind, result: BackupResult) -> None:
        if kind is EntryKind.SYMLINK:
            os.symlink(os.readlink(source), target)
        else:
            shutil.copyfile(source, target, follow_symlinks=False)
            result.bytes_copied += target.stat().st_size
        result.copied_files += 1

        self.attribute_copier.apply(source, target)
