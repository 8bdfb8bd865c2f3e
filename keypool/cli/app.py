"""
Main CLI application.

This module defines the main Typer application and entry point.
"""

from __future__ import annotations

import os
from typing import Optional

import typer
from rich.console import Console

from keypool import __version__
from keypool.cli.commands import keys, config

# Create the main app
app = typer.Typer(
    name="keypool",
    help="Rotating API Key Pool CLI",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Add sub-commands
app.add_typer(keys.app, name="keys", help="Manage API keys for auto-switching")
app.add_typer(config.app, name="config", help="Configuration management")

console = Console()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]keypool[/] v{__version__}")
        raise typer.Exit()


# Global state for CLI options
class CLIState:
    """Global CLI state for options like quiet, debug, color and file overrides."""

    quiet: bool = False
    debug: bool = False
    no_color: bool = False
    config_file: Optional[str] = None
    pool_file: Optional[str] = None


cli_state = CLIState()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (defaults to keypool.yaml)",
    ),
    pool_file: Optional[str] = typer.Option(
        None,
        "--pool-file",
        "-p",
        help="API key pool snapshot (overrides pool.path)",
    ),
):
    """
    keypool - Rotating API Key Pool CLI

    Keeps a pool of interchangeable API keys, tracks daily usage per key,
    and switches to the least used key when one is exhausted.

    Global Options:
        --quiet, -q    Suppress non-essential output
        --debug        Enable debug logging
        --no-color     Disable colored output
    """
    from keypool.cli.ui.console import console as ui_console
    from keypool.models.config import KeyPoolConfig
    from keypool.utils.logger import setup_logging

    cli_state.quiet = quiet
    cli_state.debug = debug
    cli_state.no_color = no_color
    cli_state.config_file = config_file
    cli_state.pool_file = pool_file

    # Set environment variable for no-color (used by Rich)
    if no_color:
        os.environ["NO_COLOR"] = "1"
        ui_console.no_color = True
    ui_console.quiet = quiet

    logging_config = KeyPoolConfig.load(config_file).logging
    setup_logging(
        level="debug" if debug else logging_config.level,
        log_file=logging_config.file,
        json_format=logging_config.json_format,
    )


def main():
    """Main entry point for the CLI."""
    app()

