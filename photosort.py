#!/usr/bin/env python3
"""
Photo Sorter CLI

Sorts photos and videos from a directory or zip archive into a
<year>/<month>/<day> tree based on their capture date.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from colorama import init, Fore, Style
from tqdm import tqdm

from photo_sorter import (
    Config,
    ConfigurationError,
    DiscoveryError,
    PhotoSorter,
    RunConfiguration,
    SortReporter,
)
from photo_sorter.config import COLLISION_POLICIES
from photo_sorter.models import OutcomeStatus, RunSummary

# Initialize colorama for cross-platform colored output
init()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Handlers installed by setup_logging, replaced on each call
_handlers = []


def setup_logging(level: str = 'INFO', log_file: Optional[Path] = None):
    """Set up console logging and an optional log file."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    _handlers.append(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    for handler in _handlers:
        root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger('exifread').setLevel(logging.ERROR)


def print_header(title: str):
    """Print a formatted header."""
    click.echo(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{title.center(60)}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}\n")


def print_success(message: str):
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}")


def print_warning(message: str):
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}")


def print_error(message: str):
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}")


def print_info(message: str):
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}")


def _build_run_config(ctx, **overrides: Any) -> RunConfiguration:
    try:
        return RunConfiguration.from_config(ctx.obj['config'], **overrides)
    except ConfigurationError as e:
        print_error(f"Invalid options: {e}")
        sys.exit(1)


def _run(run_config: RunConfiguration, progress: bool) -> RunSummary:
    """Run the pipeline with a tqdm progress bar as progress sink."""
    bar = None

    def progress_callback(current, total):
        nonlocal bar
        if bar is None:
            bar = tqdm(total=total, desc="Sorting", unit="files")
        bar.update(current - bar.n)

    try:
        return PhotoSorter(run_config, progress=progress_callback if progress else None).run()
    except DiscoveryError as e:
        print_error(f"Cannot read source: {e}")
        sys.exit(1)
    finally:
        if bar is not None:
            bar.close()


def _print_counts(summary: RunSummary):
    print_success(f"{summary.succeeded:,} of {summary.total_discovered:,} files sorted")
    print_info(f"Skipped: {summary.skipped:,}")
    if summary.failed:
        print_warning(f"Failed: {summary.failed:,}")
        for error in summary.errors[:5]:
            click.echo(f"  - {error}")
        if len(summary.errors) > 5:
            click.echo(f"  - ... and {len(summary.errors) - 5} more errors")


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.option('--logfile', type=click.Path(dir_okay=False), help='Also write the log to this file')
@click.pass_context
def cli(ctx, config, log_level, logfile):
    """Photo Sorter - organize photos and videos into dated folders."""
    try:
        config_obj = Config(config)
    except ConfigurationError as e:
        print_error(f"Failed to load configuration: {e}")
        sys.exit(1)

    errors = config_obj.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(1)

    setup_logging(log_level or config_obj.get_log_level(), logfile or config_obj.get_log_file())

    ctx.ensure_object(dict)
    ctx.obj['config'] = config_obj


@cli.command()
@click.option('--src', '-s', help='Source directory or zip archive')
@click.option('--dest', '-d', help='Destination root directory')
@click.option('--copy/--move', default=None, help='Copy files instead of moving them (override config)')
@click.option('--dry-run/--no-dry-run', default=None, help='Perform dry run (override config)')
@click.option('--collision', type=click.Choice(COLLISION_POLICIES), default=None,
              help='What to do when the destination file already exists')
@click.option('--report', '-r', type=click.Path(dir_okay=False), help='Save a JSON report to this file')
@click.option('--progress/--no-progress', default=True, help='Show a progress bar')
@click.pass_context
def sort(ctx, src, dest, copy, dry_run, collision, report, progress):
    """Sort media files into <dest>/<year>/<month>/<day>/."""

    print_header("PHOTO SORT")

    run_config = _build_run_config(
        ctx, source=src, destination=dest, copy=copy, dry_run=dry_run, collision=collision
    )
    print_info(f"{'Copying' if run_config.copy else 'Moving'} {run_config.source} -> {run_config.destination}")

    summary = _run(run_config, progress)

    if summary.dry_run:
        print_info("DRY RUN completed - no files were actually copied or moved")
    _print_counts(summary)

    reporter = SortReporter()
    if report:
        report_file = reporter.save_report(summary, Path(report))
        print_success(f"Report saved: {report_file}")

    click.echo("\n" + reporter.generate_summary_report(summary))


@cli.command()
@click.option('--src', '-s', help='Source directory or zip archive')
@click.option('--dest', '-d', help='Destination root directory')
@click.pass_context
def preview(ctx, src, dest):
    """Show where each file would go without touching anything.

    No directories are created, so a destination that cannot be created
    only shows up as a failure in a real sort run.
    """

    print_header("PHOTO SORT PREVIEW")

    run_config = _build_run_config(ctx, source=src, destination=dest, dry_run=True)
    summary = _run(run_config, progress=False)

    for outcome in summary.outcomes:
        if outcome.status is OutcomeStatus.SUCCEEDED:
            click.echo(f"  {outcome.candidate.display_name} -> {outcome.destination_path}")
        else:
            click.echo(f"  {outcome.candidate.display_name}: {outcome.status.value} ({outcome.reason})")

    _print_counts(summary)


if __name__ == '__main__':
    cli()
