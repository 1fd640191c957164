"""Ignore rules and the path matcher built from them."""

import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from ..util.logging import get_logger
from ..util.paths import expand_path, is_within

logger = get_logger(__name__)

GLOB_CHARS = frozenset("*?[")


class IgnoreRule:
    """Base class for ignore rules."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    def matches(self, path: Path, relative: Optional[Path]) -> bool:
        """Return True if *path* is excluded by this rule.

        Args:
            path: Absolute path being tested
            relative: The same path relative to the source root, or None if
                it lies outside the source root
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.pattern}')"


class PrefixRule(IgnoreRule):
    """Ignores a path and everything beneath it.

    Absolute patterns are tried against the absolute path first and then
    anchored at the source root, so ``/secrets`` also covers
    ``<source>/secrets``. Relative patterns are always anchored at the source
    root.
    """

    def __init__(self, pattern: str, anchor: bool = True):
        super().__init__(pattern)
        expanded = expand_path(pattern)
        self.absolute: Optional[Path] = expanded if expanded.is_absolute() else None
        if not anchor:
            self.anchored = Path(".")
        elif expanded.is_absolute():
            self.anchored = Path(*expanded.parts[1:])
        else:
            self.anchored = expanded

    def matches(self, path: Path, relative: Optional[Path]) -> bool:
        if self.absolute is not None and is_within(path, self.absolute):
            return True
        if relative is None or self.anchored == Path("."):
            return False
        return is_within(relative, self.anchored)


class GlobRule(IgnoreRule):
    """Shell-style pattern matched against full, relative and base names."""

    def matches(self, path: Path, relative: Optional[Path]) -> bool:
        candidates = [str(PurePosixPath(path)), path.name]
        if relative is not None:
            candidates.append(str(PurePosixPath(relative)))
        return any(fnmatch.fnmatchcase(c, self.pattern) for c in candidates)


def parse_rule(pattern: str) -> IgnoreRule:
    """Build the rule type that fits *pattern*."""
    if GLOB_CHARS.intersection(pattern):
        return GlobRule(pattern)
    return PrefixRule(pattern.rstrip("/") or "/")


class PathMatcher:
    """Decides whether absolute paths are excluded from a backup.

    The matcher holds no state besides its rules, so the same path always
    gets the same answer no matter where in the walk it is asked.
    """

    def __init__(self, rules: Iterable[IgnoreRule], source_root: Path):
        self.rules: List[IgnoreRule] = list(rules)
        self.source_root = Path(source_root)

    @classmethod
    def from_patterns(
        cls,
        patterns: Iterable[str],
        source_root: Path,
        extra_paths: Iterable[Path] = ()
    ) -> "PathMatcher":
        """Create a matcher from configured patterns.

        Args:
            patterns: Ignore patterns from the configuration
            source_root: Root of the tree being backed up
            extra_paths: Absolute paths to ignore unconditionally, such as
                the destination base when it lies inside the source
        """
        rules = [parse_rule(p) for p in patterns if p and p.strip()]
        for extra in extra_paths:
            rules.append(PrefixRule(str(extra), anchor=False))
        for rule in rules:
            logger.debug(f"Ignore rule: {rule!r}")
        return cls(rules, source_root)

    def relative(self, path: Path) -> Optional[Path]:
        try:
            return path.relative_to(self.source_root)
        except ValueError:
            return None

    def is_ignored(self, path: Path) -> bool:
        """Return True if *path* equals or falls under any ignore rule."""
        path = Path(path)
        relative = self.relative(path)
        if relative == Path("."):
            relative = None
        return any(rule.matches(path, relative) for rule in self.rules)
