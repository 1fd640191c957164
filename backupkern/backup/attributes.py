"""Transfer of permissions and timestamps onto copied entries."""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from ..util.logging import get_logger

logger = get_logger(__name__)


class AttributeCopyError(Exception):
    """Permissions or timestamps could not be applied to a copy."""
    pass


class AttributeCopier:
    """Base class for attribute copiers."""

    def apply(self, source: Path, destination: Path) -> None:
        """Copy permission bits and modification time from *source* to *destination*.

        Raises:
            AttributeCopyError: if the attributes could not be applied
        """
        raise NotImplementedError


class StatAttributeCopier(AttributeCopier):
    """Uses ``shutil.copystat``. Symlinks get their own times, not their target's."""

    def apply(self, source: Path, destination: Path) -> None:
        try:
            shutil.copystat(source, destination, follow_symlinks=False)
        except OSError as e:
            raise AttributeCopyError(f"copystat failed for {destination}: {e}") from e


class CommandAttributeCopier(AttributeCopier):
    """Uses ``chmod --reference`` and ``touch -r`` from GNU coreutils.

    Each command is bounded by *timeout* seconds when one is given.
    """

    def __init__(self, timeout: Optional[float] = None, chmod: str = "chmod", touch: str = "touch"):
        self.timeout = timeout
        self.chmod = chmod
        self.touch = touch

    def _run_command(self, cmd: List[str]) -> None:
        try:
            logger.debug(f"Running: {' '.join(cmd)}")
            subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=True)
        except subprocess.CalledProcessError as e:
            raise AttributeCopyError(f"{cmd[0]} failed: {e.stderr.strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise AttributeCopyError(f"{cmd[0]} timed out after {self.timeout}s") from e
        except OSError as e:
            raise AttributeCopyError(f"cannot run {cmd[0]}: {e}") from e

    def apply(self, source: Path, destination: Path) -> None:
        if not destination.is_symlink():
            self._run_command([self.chmod, f"--reference={source}", "--", str(destination)])
        self._run_command([self.touch, "-h", "-r", str(source), "--", str(destination)])


def get_attribute_copier(name: str, timeout: Optional[float] = None) -> AttributeCopier:
    """Create the attribute copier selected in the configuration."""
    if name == "command":
        return CommandAttributeCopier(timeout=timeout)
    if name == "stat":
        return StatAttributeCopier()
    raise ValueError(f"Unknown attribute copier: {name}")
