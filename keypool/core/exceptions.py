"""
Exceptions raised by the keypool core.
"""

from __future__ import annotations


class KeyPoolError(Exception):
    """Base class for keypool errors."""


class InvalidCredentialError(KeyPoolError, ValueError):
    """Raised when a blank credential is added to the pool."""

    def __init__(self, message: str = "Credential must not be empty") -> None:
        super().__init__(message)


class NoCredentialAvailableError(KeyPoolError):
    """Raised by request executors when the pool has no credential to use."""

    def __init__(self) -> None:
        super().__init__(
            "No credentials configured. Use 'keypool keys add YOUR_KEY' first."
        )
