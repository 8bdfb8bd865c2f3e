"""
Utility modules for keypool.

This package provides common utilities:
- logger: Structured logging
- helpers: Helper functions
"""

from keypool.utils.logger import (
    get_logger,
    setup_logging,
    log_rotation,
    LogLevel,
)
from keypool.utils.helpers import (
    redact_secret,
    mask_credential,
    deduplicate,
    safe_get,
)

__all__ = [
    # Logger
    "get_logger",
    "setup_logging",
    "log_rotation",
    "LogLevel",
    # Helpers
    "redact_secret",
    "mask_credential",
    "deduplicate",
    "safe_get",
]
