"""Stored report display command."""

import sys
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console

from tradescope.cli.commands.report import DETAIL_LEVELS, config_option, load_cli_config, log_level_option
from tradescope.services.reporting import FileReportStore, ReportNotFoundError, display_report

console = Console()


@click.command("show")
@click.argument("report_id")
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the report was stored under (default: store.root_path in system.yaml)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the stored JSON document")
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
def show_command(
    report_id: str,
    store_dir: Optional[Path],
    as_json: bool,
    detail: str,
    config_path: Optional[Path],
    log_level: Optional[str],
):
    """
    Display a previously stored report by id.

    \b
    Examples:
        tradescope show 3f2a9c0e6b7d4e21a8f5c1d2e3b4a596
        tradescope show 3f2a9c0e6b7d4e21a8f5c1d2e3b4a596 --store-dir output/reports -d full
    """
    try:
        system_config = load_cli_config(config_path, log_level)
        store = FileReportStore(store_dir or system_config.store.root_path)
        report = store.fetch(report_id)

        if as_json:
            click.echo(report.model_dump_json(indent=2))
            sys.exit(0)

        display_report(report, detail_level=cast(Literal["summary", "standard", "full"], detail), console=console)
        sys.exit(0)

    except ReportNotFoundError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print()
        console.print(f"[bold red]✗ Show failed:[/bold red] {e}")
        sys.exit(1)
