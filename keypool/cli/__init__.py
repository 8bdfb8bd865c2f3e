"""
CLI package for keypool.

Provides a rich command-line interface using Typer.
"""

from keypool.cli.app import app, main

__all__ = ["app", "main"]
