"""
API key pool commands for keypool CLI.
"""

from __future__ import annotations

import typer
from rich.markup import escape

from keypool.cli.ui.console import console, print_error, print_info, print_success
from keypool.utils.helpers import redact_secret

app = typer.Typer(help="Manage API keys for auto-switching")


def _build_policy():
    """Build a store and policy from the configuration and global options."""
    from keypool.cli.app import cli_state
    from keypool.core.context import ActiveCredential
    from keypool.core.policy import RotationPolicy
    from keypool.core.store import CredentialStore
    from keypool.models.config import KeyPoolConfig

    config = KeyPoolConfig.load(cli_state.config_file)
    path = cli_state.pool_file or config.pool.get_path()

    store = CredentialStore(path)
    active = ActiveCredential(env_var=config.pool.get_env_var())
    return RotationPolicy(store, active, config.rotation)


@app.command("add")
def keys_add(
    key: str = typer.Argument("", help="API key to add", show_default=False),
):
    """Add an API key to the pool."""
    from keypool.core.exceptions import InvalidCredentialError

    policy = _build_policy()

    try:
        added = policy.store.add(key)
    except InvalidCredentialError:
        print_error("Please provide an API key: keypool keys add YOUR_KEY")
        raise typer.Exit(1)

    masked = escape(redact_secret(key.strip()))
    if added:
        print_success(f"API key added (ending in {masked})")
    else:
        print_info(f"API key ending in {masked} is already in the pool")


@app.command("remove")
def keys_remove(
    index: int = typer.Argument(..., help="Position of the key (see 'keypool keys list')"),
):
    """Remove an API key from the pool."""
    policy = _build_policy()
    removed = policy.store.remove(index)

    if removed is None:
        print_error(f"No API key at position {index}")
        raise typer.Exit(1)

    print_success(f"API key removed (ending in {escape(redact_secret(removed))})")


@app.command("list")
def keys_list():
    """List configured API keys."""
    from keypool.cli.ui.panels import create_keys_table

    policy = _build_policy()
    rows = policy.store.list_credentials()

    if not rows:
        console.print("[dim]No API keys configured[/]")
        return

    console.print(create_keys_table(rows))


@app.command("status")
def keys_status():
    """Show API key usage status."""
    from keypool.cli.ui.panels import create_status_panel

    policy = _build_policy()
    console.print(create_status_panel(policy.store.stats()))


@app.command("switch")
def keys_switch():
    """Switch to the least used API key."""
    policy = _build_policy()
    selected = policy.force_rotate()

    if not selected:
        print_error("No API keys configured. Use 'keypool keys add YOUR_KEY' first.")
        raise typer.Exit(1)

    print_success(f"Switched to API key ending in {escape(redact_secret(selected))}")
