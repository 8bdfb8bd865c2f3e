"""
Configuration commands for keypool CLI.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel

from keypool.cli.ui.console import console

app = typer.Typer(help="Configuration management")


@app.command("show")
def config_show():
    """Show current configuration."""
    from keypool.cli.app import cli_state
    from keypool.models.config import KeyPoolConfig

    try:
        config = KeyPoolConfig.load(cli_state.config_file)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/]")
        raise typer.Exit(1)

    console.print(
        Panel.fit(
            f"[bold]Pool:[/]\n"
            f"  Snapshot: {cli_state.pool_file or config.pool.get_path()}\n"
            f"  Env Var: {config.pool.get_env_var() or '[dim]disabled[/]'}\n"
            f"\n[bold]Rotation:[/]\n"
            f"  Check Every: {config.rotation.check_interval} requests\n"
            f"  High Usage: {config.rotation.high_usage_threshold}\n"
            f"  Low Usage: {config.rotation.low_usage_threshold}\n"
            f"  Error Keywords: {', '.join(config.rotation.rotation_keywords)}\n"
            f"  Status Codes: {', '.join(str(c) for c in config.rotation.rotation_status_codes)}\n"
            f"\n[bold]LLM:[/]\n"
            f"  Model: {config.llm.model}\n"
            f"  Max Attempts: {config.llm.max_attempts}\n"
            f"\n[bold]Logging:[/]\n"
            f"  Level: {config.logging.level}",
            title="[bold blue]keypool Configuration[/]",
        )
    )


@app.command("init")
def config_init(
    config_file: str = typer.Option(
        "keypool.yaml",
        "--output",
        "-o",
        help="Output file path",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
):
    """Initialize a new configuration file."""
    from keypool.models.config import KeyPoolConfig

    config_path = Path(config_file)

    if config_path.exists() and not force:
        overwrite = typer.confirm(f"{config_file} already exists. Overwrite?")
        if not overwrite:
            console.print("[yellow]Cancelled[/]")
            return

    KeyPoolConfig.model_validate({}).save(config_path)

    console.print(f"[green]Configuration saved to {config_file}[/]")
    console.print("\n[bold]Next steps:[/]")
    console.print("1. Add your API keys:")
    console.print("   [dim]keypool keys add YOUR_KEY[/]")
    console.print("\n2. Check the pool:")
    console.print("   [dim]keypool keys status[/]")
