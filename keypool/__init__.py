"""
keypool - Rotating API Key Pool

Keeps a pool of interchangeable API keys, tracks how much each key is used
per day, and picks the key that backs the next outbound request, moving away
from keys that are heavily used or that hit quota and rate limits.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from keypool.models.config import KeyPoolConfig
from keypool.core.context import ActiveCredential
from keypool.core.policy import RotationPolicy
from keypool.core.store import CredentialStore

__all__ = [
    "__version__",
    "KeyPoolConfig",
    "ActiveCredential",
    "CredentialStore",
    "RotationPolicy",
]
