"""Commands __init__ - exports all commands."""

from tradescope.cli.commands.report import report_command
from tradescope.cli.commands.show import show_command

__all__ = ["report_command", "show_command"]
