"""Run result model and its YAML report."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from ruamel.yaml import YAML

from ..util.logging import get_logger
from ..util.timeutil import now_iso

logger = get_logger(__name__)


class RunState(str, Enum):
    """Lifecycle of a backup run."""

    START = "start"
    WALKING = "walking"
    FINALIZING = "finalizing"
    DONE = "done"


class EntryError(BaseModel):
    """A failure confined to one entry; the run carried on."""

    path: str = Field(description="Path relative to the source root")
    operation: str = Field(description="What was being attempted")
    message: str = Field(description="Error description")


class BackupResult(BaseModel):
    """Outcome of one backup run."""

    snapshot_name: Optional[str] = Field(default=None, description="Name of the new snapshot")
    snapshot_path: Optional[str] = Field(default=None, description="Final location of the new snapshot")
    previous_snapshot: Optional[str] = Field(default=None, description="Snapshot used as hard-link source")
    source: str = Field(default="", description="Backed up directory")
    dry_run: bool = Field(default=False, description="Nothing was written")
    state: RunState = Field(default=RunState.START, description="Run state")

    started_at: str = Field(default_factory=now_iso, description="Run start timestamp")
    finished_at: Optional[str] = Field(default=None, description="Run end timestamp")

    directories: int = Field(default=0, description="Directories created")
    linked_files: int = Field(default=0, description="Files hard-linked to the previous snapshot")
    copied_files: int = Field(default=0, description="Entries copied from the source")
    link_failovers: int = Field(default=0, description="Copies made because linking failed")
    ignored: int = Field(default=0, description="Entries left out by ignore rules")
    bytes_copied: int = Field(default=0, description="Bytes copied from the source")

    errors: List[EntryError] = Field(default_factory=list, description="Per-entry failures")

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, path: Path, operation: str, error: Exception) -> None:
        """Record a per-entry failure."""
        message = str(error)
        logger.warning(f"Failed to {operation} {path}: {message}")
        self.errors.append(EntryError(path=str(path), operation=operation, message=message))


def save_report(result: BackupResult, report_path: Path) -> None:
    """Write the run result as YAML."""
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.width = 120

    with open(report_path, "w") as f:
        yaml.dump(result.model_dump(mode="json"), f)

    logger.debug(f"Saved report to {report_path}")
