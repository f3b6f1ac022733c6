"""
Error display and exit codes for the poe2filter CLI.

All diagnostics go to stderr, so stdout stays free for the chained command.
"""

import traceback
from enum import IntEnum

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from poe2filter.core.exceptions import SyncError

err_console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for poe2filter."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Sync, network, archive or launch failure."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def handle_error(error: Exception, debug: bool = False) -> None:
    """
    Display an error with a user-friendly message.

    Args:
        error: The exception that was raised
        debug: If True, also print the full traceback
    """
    error_text = Text()
    if isinstance(error, SyncError):
        title = "[bold red]Error[/bold red]"
        error_text.append("Error: ", style="bold red")
        error_text.append(str(error))

        if error.context:
            error_text.append("\n\nContext:\n", style="dim")
            for key, value in error.context.items():
                if value is None:
                    continue
                error_text.append(f"  {key}: ", style="cyan")
                error_text.append(f"{value}\n", style="white")
    else:
        title = "[bold red]Unexpected Error[/bold red]"
        error_text.append("Unexpected error: ", style="bold red")
        error_text.append(str(error) or type(error).__name__)

    err_console.print()
    err_console.print(Panel(error_text, title=title, border_style="red", expand=False))

    if debug:
        err_console.print("\n[dim]Full traceback:[/dim]")
        err_console.print(traceback.format_exc(), markup=False, highlight=False)
    else:
        err_console.print("[dim]Run with --debug for full traceback[/dim]")
    err_console.print()
