"""
Structured logging for keypool.

Provides a consistent logging interface with support for:
- Multiple log levels
- Structured JSON logging
- Console and file output
- Rich formatting for console
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(str, Enum):
    """Log levels for keypool."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        levels = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        return levels.get(self.value, logging.INFO)


def _rich_handler() -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def get_logger(name: str = "keypool") -> logging.Logger:
    """
    Get a logger instance.

    Loggers below the ``keypool`` namespace propagate to the root keypool
    logger, which receives a Rich console handler the first time it is asked
    for. Levels are left to :func:`setup_logging`.

    Args:
        name: Logger name (usually module name)

    Returns:
        Logger instance
    """
    root = logging.getLogger("keypool")
    if not root.handlers:
        root.addHandler(_rich_handler())
        root.setLevel(logging.INFO)

    return logging.getLogger(name)


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_file: str | Path | None = None,
    json_format: bool = False,
    console: bool = True,
) -> None:
    """
    Set up logging configuration for keypool.

    Args:
        level: Minimum log level
        log_file: Optional file path for log output
        json_format: Use JSON format for file logs
        console: Enable console output
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    root = logging.getLogger("keypool")
    root.setLevel(level.numeric)
    root.handlers.clear()

    if console:
        console_handler = _rich_handler()
        console_handler.setLevel(level.numeric)
        root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        if json_format:
            file_handler.setFormatter(JsonFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            ))

        file_handler.setLevel(level.numeric)
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def log_rotation(
    logger: logging.Logger,
    previous: str | None,
    current: str | None,
    reason: str,
) -> None:
    """
    Log a credential rotation using redacted credentials only.

    Args:
        logger: Logger to use
        previous: Credential active before the rotation
        current: Credential active after the rotation
        reason: Why the rotation happened (threshold, quota, manual)
    """
    from rich.markup import escape

    from keypool.utils.helpers import redact_secret

    before = escape(redact_secret(previous) or "none")
    after = escape(redact_secret(current) or "none")
    logger.info(f"Rotated API key ([yellow]{reason}[/]): {before} -> [cyan]{after}[/]")
