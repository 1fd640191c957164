"""Configuration management for backupkern."""

from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .util.paths import expand_path

DEFAULT_CONFIG_PATH = "~/backupkern.yaml"


class ConfigError(Exception):
    """Configuration file is missing, unreadable or invalid."""
    pass


class BackupConfig(BaseModel):
    """Settings for one backup run."""

    source: Path = Field(
        validation_alias=AliasChoices("source", "from"),
        description="Directory to back up"
    )
    destination: List[Path] = Field(
        validation_alias=AliasChoices("destination", "to"),
        min_length=1,
        description="Candidate base directories for snapshots; the first existing one is used"
    )
    prefix: str = Field(default="backup", min_length=1, description="Snapshot name prefix")
    ignore: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ignore", "exclude"),
        description="Paths, path prefixes or glob patterns to leave out"
    )

    compare_mode: bool = Field(default=False, description="Treat permission changes as content changes")
    attribute_copier: Literal["stat", "command"] = Field(
        default="stat",
        description="How permissions and timestamps are transferred onto copies"
    )
    command_timeout: Optional[float] = Field(
        default=None, gt=0, description="Timeout in seconds for external attribute commands"
    )
    write_report: bool = Field(default=True, description="Write a YAML run report next to each snapshot")

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional detailed log file")

    class Config:
        """Pydantic configuration."""

        validate_assignment = True

    @field_validator("source", "log_file", mode="before")
    @classmethod
    def _expand(cls, value):
        if value is None:
            return value
        return expand_path(value)

    @field_validator("destination", mode="before")
    @classmethod
    def _expand_destinations(cls, value):
        if isinstance(value, (str, Path)):
            value = [value]
        if not isinstance(value, list):
            return value
        return [expand_path(v) for v in value]

    @field_validator("ignore", mode="before")
    @classmethod
    def _flatten_ignore(cls, value):
        # Older files nest the list as `exclude: {locations: [...]}`
        if value is None:
            return []
        if isinstance(value, dict):
            return value.get("locations") or []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if "/" in value or value.startswith("."):
            raise ValueError("prefix must be a plain name")
        return value


def load_config(config_path: Optional[Union[str, Path]] = None) -> BackupConfig:
    """Load configuration from a YAML file.

    Raises:
        ConfigError: if the file is missing, unreadable, not valid YAML or
            does not describe a valid configuration.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = expand_path(config_path)

    yaml = YAML(typ="safe")
    try:
        with open(config_path, "r") as f:
            data = yaml.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config '{config_path}': {e.strerror or e}") from e
    except YAMLError as e:
        raise ConfigError(f"Malformed config '{config_path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config '{config_path}' must be a mapping of options")

    try:
        return BackupConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config '{config_path}':\n{e}") from e
