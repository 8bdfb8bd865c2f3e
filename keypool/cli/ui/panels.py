"""
Rich panels for keypool CLI.

Provides styled panels and tables for pool status and key listings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from keypool.cli.ui.console import format_count

if TYPE_CHECKING:
    from keypool.models.pool import CredentialInfo, UsageStats


def create_status_panel(stats: UsageStats) -> Panel:
    """
    Create a panel summarizing the pool.

    Args:
        stats: Usage summary from the store

    Returns:
        Rich Panel with the key count, current key, usage and reset day
    """
    content = [
        Text.from_markup(f"[bold]Keys configured:[/] {stats.keys}"),
        Text.from_markup(f"[bold]Current key:[/] [key]{escape(stats.current_key or 'none')}[/]"),
        Text.from_markup(f"[bold]Last reset:[/] {stats.last_reset.isoformat()}"),
    ]

    masked = stats.masked_usage()
    if masked:
        content.append(Text.from_markup("[bold]Usage today:[/]"))
        for key, count in masked.items():
            content.append(
                Text.from_markup(f"  [key]{escape(key)}[/]: [usage]{format_count(count, 'request')}[/]")
            )
    else:
        content.append(Text.from_markup("[bold]Usage today:[/] [dim]no requests[/]"))

    return Panel(
        Group(*content),
        title="[bold blue]API Key Status[/]",
        border_style="blue",
    )


def create_keys_table(rows: list[CredentialInfo]) -> Table:
    """
    Create a table listing every key in pool order.

    Args:
        rows: Masked credential rows from the store

    Returns:
        Rich Table with index, masked key, usage and active marker
    """
    table = Table(title="API Keys", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="key")
    table.add_column("Usage", justify="right", style="usage")
    table.add_column("Active", justify="center")

    for row in rows:
        table.add_row(
            str(row.index),
            escape(row.masked),
            str(row.usage),
            "[green]*[/]" if row.active else "",
        )

    return table
