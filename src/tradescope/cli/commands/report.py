"""Report generation command."""

import sys
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console

from tradescope.services.reporting import (
    FileReportStore,
    ReportingService,
    ReportStore,
    create_store,
    display_report,
)
from tradescope.system import LoggerFactory, SystemConfig, reload_system_config

console = Console()

DETAIL_LEVELS = ["summary", "standard", "full"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def load_cli_config(config_path: Optional[Path], log_level: Optional[str]) -> SystemConfig:
    """Reload system config and (re)configure logging, applying a --log-level override."""
    system_config = reload_system_config(config_path)
    if log_level:
        # click already validated the choice
        level = cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level.upper())
        system_config.logging.level = level
    LoggerFactory.configure(system_config.logging.to_logger_config())
    return system_config


def config_option(func):
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to system configuration (default: $TRADESCOPE_CONFIG or config/system.yaml)",
    )(func)


def log_level_option(func):
    return click.option(
        "--log-level",
        "-l",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        help="Set logging level",
    )(func)


@click.command("report")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--file-name", "-n", help="Display name for the report (default: the CSV file's name)")
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Store the report as JSON under this directory (overrides system.yaml)",
)
@click.option("--no-store", is_flag=True, help="Compute and display only; do not persist the report")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON instead of tables")
@click.option(
    "--detail",
    "-d",
    type=click.Choice(DETAIL_LEVELS),
    default="standard",
    show_default=True,
    help="Amount of detail in the console display",
)
@config_option
@log_level_option
def report_command(
    csv_file: Path,
    file_name: Optional[str],
    store_dir: Optional[Path],
    no_store: bool,
    as_json: bool,
    detail: str,
    config_path: Optional[Path],
    log_level: Optional[str],
):
    """
    Compute an institutional metrics report from a trade CSV.

    \b
    Examples:
        # Tables on the console, report stored per config/system.yaml
        tradescope report trades.csv

        # Everything, stored under a custom directory
        tradescope report trades.csv -d full --store-dir output/reports

        # Machine-readable output, nothing persisted
        tradescope report trades.csv --json --no-store

    \b
    Output:
        - Report tables (or JSON with --json)
        - The stored report id, usable with `tradescope show`
    """
    try:
        system_config = load_cli_config(config_path, log_level)

        store: Optional[ReportStore] = None
        if not no_store:
            store = FileReportStore(store_dir) if store_dir is not None else create_store(system_config.store)

        service = ReportingService(store=store, config=system_config.analytics)
        csv_text = csv_file.read_text(encoding="utf-8-sig")
        display_name = file_name or csv_file.name

        report_id: Optional[str] = None
        if store is None:
            report = service.generate_report(csv_text, file_name=display_name)
        else:
            # Display the stored copy
            report_id = service.submit(csv_text, file_name=display_name)
            report = store.fetch(report_id)

        if as_json:
            click.echo(report.model_dump_json(indent=2))
            if report_id is not None:
                # stderr keeps stdout a single JSON document
                click.echo(f"Report ID: {report_id}", err=True)
            sys.exit(0)

        display_report(report, detail_level=cast(Literal["summary", "standard", "full"], detail), console=console)
        if report_id is not None:
            console.print(f"[cyan]Report ID:[/cyan] [yellow]{report_id}[/yellow]")
            console.print()

        sys.exit(0)

    except Exception as e:
        console.print()
        console.print(f"[bold red]✗ Report failed:[/bold red] {e}")
        sys.exit(1)
