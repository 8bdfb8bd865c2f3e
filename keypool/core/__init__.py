"""
Core package.

This package contains the credential store, the active credential holder
and the rotation policy that together decide which API key backs the next
outbound request.
"""

from keypool.core.context import ActiveCredential
from keypool.core.exceptions import (
    KeyPoolError,
    InvalidCredentialError,
    NoCredentialAvailableError,
)
from keypool.core.policy import RotationPolicy
from keypool.core.store import CredentialStore

__all__ = [
    "ActiveCredential",
    "CredentialStore",
    "RotationPolicy",
    "KeyPoolError",
    "InvalidCredentialError",
    "NoCredentialAvailableError",
]
