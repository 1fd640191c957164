"""Command Line Interface for backupkern."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .backup import BackupEngine, BackupError, BackupResult
from .config import DEFAULT_CONFIG_PATH, BackupConfig, ConfigError, load_config
from .util import format_duration, format_size, get_logger, iso_to_timestamp, setup_logging

console = Console()

EXIT_BACKUP_ERROR = 1
EXIT_CONFIG_ERROR = 2

MAX_LISTED_ERRORS = 10


def _show_config(config: BackupConfig) -> None:
    table = Table(title="Configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Source", str(config.source))
    table.add_row("Destination", "\n".join(str(d) for d in config.destination))
    table.add_row("Prefix", config.prefix)
    table.add_row("Ignore", "\n".join(config.ignore) or "-")
    table.add_row("Attributes", config.attribute_copier)

    console.print(table)


def _show_result(result: BackupResult) -> None:
    title = "Dry Run" if result.dry_run else f"Backup {result.snapshot_name}"
    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Location", result.snapshot_path or "-")
    table.add_row("Previous", result.previous_snapshot or "none")
    table.add_row("Directories", str(result.directories))
    table.add_row("Linked files", str(result.linked_files))
    table.add_row("Copied entries", str(result.copied_files))
    table.add_row("Copied data", format_size(result.bytes_copied))
    if result.link_failovers:
        table.add_row("Link failovers", str(result.link_failovers))
    table.add_row("Ignored", str(result.ignored))
    table.add_row("Errors", str(len(result.errors)))
    if result.finished_at:
        elapsed = iso_to_timestamp(result.finished_at) - iso_to_timestamp(result.started_at)
        table.add_row("Duration", format_duration(elapsed))

    console.print(table)

    if result.errors:
        console.print(f"[yellow]{len(result.errors)} entries could not be backed up:[/yellow]")
        for error in result.errors[:MAX_LISTED_ERRORS]:
            console.print(f"  {error.path}: {error.operation} failed: {error.message}")
        if len(result.errors) > MAX_LISTED_ERRORS:
            console.print(f"  ... and {len(result.errors) - MAX_LISTED_ERRORS} more")


@click.command()
@click.option(
    "--config", "-c", "config_path",
    default=DEFAULT_CONFIG_PATH, show_default=True, metavar="PATH",
    help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--dry-run", is_flag=True, help="Show what would be linked and copied without writing")
@click.option("--no-progress", is_flag=True, help="Do not show a progress counter")
def cli(config_path: str, verbose: bool, dry_run: bool, no_progress: bool):
    """Back up a directory into a new hard-linked snapshot."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error while reading config: {e}[/red]")
        sys.exit(EXIT_CONFIG_ERROR)

    log_file: Optional[Path] = config.log_file
    setup_logging(level="DEBUG" if verbose else config.log_level, log_file=log_file, console=console)
    logger = get_logger(__name__)

    _show_config(config)

    try:
        engine = BackupEngine(config, show_progress=not no_progress)
        result = engine.run(dry_run=dry_run)
    except BackupError as e:
        logger.debug("Backup aborted", exc_info=True)
        console.print(f"[red]Backup failed: {e}[/red]")
        sys.exit(EXIT_BACKUP_ERROR)

    _show_result(result)

    if result.success:
        console.print("[bold green]Backup completed successfully![/bold green]")
    else:
        console.print("[bold yellow]Backup completed with errors[/bold yellow]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
