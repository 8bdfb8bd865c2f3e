"""keypool models package."""

from keypool.models.config import (
    KeyPoolConfig,
    PoolConfig,
    RotationConfig,
    LLMConfig,
    LoggingConfig,
)
from keypool.models.pool import PoolState, UsageStats, CredentialInfo

__all__ = [
    # Config
    "KeyPoolConfig",
    "PoolConfig",
    "RotationConfig",
    "LLMConfig",
    "LoggingConfig",
    # Pool
    "PoolState",
    "UsageStats",
    "CredentialInfo",
]
