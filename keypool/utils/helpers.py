"""
Helper utilities for keypool.

Provides general-purpose helper functions for:
- Secret redaction
- List operations
- Dictionary operations
"""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

T = TypeVar("T")

REDACT_TAIL = 8


def redact_secret(value: str | None, tail: int = REDACT_TAIL) -> str | None:
    """
    Redact a secret down to its trailing characters.

    Args:
        value: Secret to redact
        tail: Number of trailing characters to keep

    Returns:
        ``"..."`` followed by the last ``tail`` characters, or None

    Example:
        >>> redact_secret("AIzaSyABCDEFGH12345678")
        '...12345678'
    """
    if not value:
        return None
    return "..." + value[-tail:]


def mask_credential(value: str, visible: int = REDACT_TAIL) -> str:
    """
    Mask a secret for listings, keeping its head and tail.

    Secrets too short to show both ends without revealing most of the
    value keep only their last four characters.

    Args:
        value: Secret to mask
        visible: Characters kept at each end

    Returns:
        Masked string such as ``AIzaSyAB...12345678``
    """
    if len(value) <= visible * 2:
        return "..." + value[-4:]
    return f"{value[:visible]}...{value[-visible:]}"


def deduplicate(items: Iterable[T]) -> list[T]:
    """
    Remove duplicates while preserving order.

    Args:
        items: Input items

    Returns:
        List with duplicates removed
    """
    seen: set = set()
    result = []

    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)

    return result


def safe_get(data: Any, *keys: str, default: Any = None) -> Any:
    """
    Read a value from an object attribute or mapping key, never raising.

    The first key that yields a non-None value wins.

    Args:
        data: Object or mapping to inspect
        *keys: Attribute / key names to try in order
        default: Value returned when nothing matched

    Returns:
        The found value or ``default``
    """
    if data is None:
        return default

    for key in keys:
        try:
            if isinstance(data, dict):
                value = data.get(key)
            else:
                value = getattr(data, key, None)
        except Exception:
            continue
        if value is not None:
            return value

    return default
