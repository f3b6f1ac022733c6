"""
poe2filter CLI - main application entry point.

Updates item filters from their sources, then optionally replaces itself
with the command given after ``--``:

    poe2filter neversink-lite -- %command%
"""

import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.table import Table
from rich.text import Text

from poe2filter import __version__
from poe2filter.cli.argv import split_command_argv
from poe2filter.cli.errors import ExitCode, err_console, handle_error
from poe2filter.core.config import SyncConfig, load_config, load_layered_env
from poe2filter.core.launch import exec_command
from poe2filter.core.sync import ALIASES, SourceOutcome, SyncResult
from poe2filter.core.sync.service import run_sync

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="poe2filter",
    help="Keep Path of Exile 2 item filters up to date",
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

_ALIAS_HELP = ", ".join(f"{alias} ({target})" for alias, target in ALIASES.items())


def setup_logging(debug: bool = False, level_name: str = "warning") -> None:
    """
    Configure logging to stderr.

    Args:
        debug: If True, enable DEBUG level logging regardless of level_name
        level_name: Level from configuration (POE2FILTER_LOG)
    """
    level = logging.DEBUG if debug else getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def print_change(outcome: SourceOutcome) -> None:
    """
    Announce an installed source: header, optional note, blank line.

    Notes are release bodies and commit messages and are printed verbatim:
    no wrapping, markup, emoji codes or highlighting.
    """
    plain = {"markup": False, "highlight": False, "emoji": False, "soft_wrap": True}
    err_console.print(f"# {outcome.descriptor}: {outcome.watermark}", **plain)
    if outcome.note:
        err_console.print(outcome.note, **plain)
    err_console.print()


def print_summary(result: SyncResult, elapsed: float) -> None:
    """Print a one-row-per-source table of what the run did."""
    table = Table(title=f"Sync complete in {elapsed:.2f}s", box=None, title_justify="left")
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Watermark", style="dim")
    table.add_column("Files", justify="right")

    styles = {"updated": "green", "up_to_date": "blue", "no_artifact": "yellow"}
    for outcome in result.outcomes:
        status = outcome.status.value
        table.add_row(
            outcome.descriptor,
            Text(status.replace("_", " "), style=styles.get(status, "white")),
            outcome.watermark or "-",
            str(outcome.files_written),
        )

    err_console.print(table)


def _version_callback(value: bool) -> None:
    if value:
        err_console.print(f"poe2filter version {__version__}")
        raise typer.Exit()


@app.command()
def sync(
    ctx: typer.Context,
    descriptors: Annotated[
        list[str] | None,
        typer.Argument(
            help=(
                "Filter sources as github:owner/repo (latest release) or "
                f"github:owner/repo/branch (branch head). Aliases: {_ALIAS_HELP}"
            ),
            show_default=False,
        ),
    ] = None,
    clear: Annotated[
        bool,
        typer.Option(
            "--clear",
            help="Forget recorded watermarks and reinstall every source",
        ),
    ] = False,
    directory: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            help="Install into this directory instead of locating the game directory",
            file_okay=False,
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Do not print the summary table"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full tracebacks and verbose logging",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """
    Update item filters, then run the command given after --.

    Each source is checked against the watermark recorded in
    filter_watermarks.json and only downloaded when it changed.

    Examples:
        poe2filter neversink-lite
        poe2filter github:cdrg/cdr-poe2filter/main
        poe2filter --clear neversink-lite cdrg
        poe2filter neversink-lite -- %command%
    """
    command: list[str] = list((ctx.obj or {}).get("command", []))

    load_layered_env()
    try:
        config = load_config(game_dir=directory)
    except ValidationError as e:
        setup_logging(debug)
        handle_error(e, debug=debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    setup_logging(debug, config.log_level)
    logger.debug(f"Sources: {descriptors}, command: {command}")

    if descriptors or clear:
        try:
            start_time = time.time()
            result = asyncio.run(_sync(config, descriptors or [], clear))
            elapsed = time.time() - start_time
        except KeyboardInterrupt:
            err_console.print("[yellow]Interrupted, watermarks not saved[/yellow]")
            raise typer.Exit(ExitCode.SIGINT)
        except Exception as e:
            handle_error(e, debug=debug)
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        if not quiet:
            print_summary(result, elapsed)
    else:
        logger.info("No sources given, nothing to sync")

    if not command:
        logger.info("Nothing to execute provided")
        return

    try:
        exec_command(command)
    except Exception as e:
        handle_error(e, debug=debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR)


async def _sync(config: SyncConfig, descriptors: list[str], clear: bool) -> SyncResult:
    return await run_sync(config, descriptors, clear=clear, on_change=print_change)


def main() -> None:
    """Console script entry point."""
    sync_args, command = split_command_argv(sys.argv[1:])
    app(args=sync_args, prog_name="poe2filter", obj={"command": command})


__all__ = ["app", "main"]
