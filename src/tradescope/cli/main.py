"""tradescope CLI main entry point."""

import click

from tradescope import __version__
from tradescope.cli.commands import report_command, show_command


@click.group()
@click.version_option(version=__version__)
def main():
    """tradescope - Institutional metrics for trade exports"""
    pass


# Register commands
main.add_command(report_command)
main.add_command(show_command)


if __name__ == "__main__":
    main()
