"""
UI components for keypool CLI.

This package provides Rich-based console helpers and panels.
"""

from keypool.cli.ui.console import (
    console,
    print_error,
    print_warning,
    print_success,
    print_info,
    format_count,
)
from keypool.cli.ui.panels import (
    create_status_panel,
    create_keys_table,
)

__all__ = [
    # Console
    "console",
    "print_error",
    "print_warning",
    "print_success",
    "print_info",
    "format_count",
    # Panels
    "create_status_panel",
    "create_keys_table",
]
