"""CLI commands package."""

from keypool.cli.commands import keys, config

__all__ = ["keys", "config"]
