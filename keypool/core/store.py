"""
JSON-backed credential store for keypool.

The store is the single source of truth for the pool: the ordered credential
list, per-credential usage for the current day, the active index and the day
usage was last reset. Every mutation is written back to the snapshot file
before the call returns.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Callable

from pydantic import ValidationError
from rich.markup import escape

from keypool.core.exceptions import InvalidCredentialError
from keypool.models.config import DEFAULT_POOL_PATH
from keypool.models.pool import CredentialInfo, PoolState, UsageStats
from keypool.utils.helpers import mask_credential, redact_secret
from keypool.utils.logger import get_logger

logger = get_logger(__name__)


class CredentialStore:
    """
    Persistent pool of interchangeable API credentials.

    The snapshot is loaded once on construction; afterwards the in-memory
    state is authoritative and a failed write only logs a warning. Public
    operations are serialized with a re-entrant lock.

    Example:
        >>> store = CredentialStore("~/.gemini-cli-plus/api-keys.json")
        >>> store.add("AIza...first")
        True
        >>> store.record_usage(store.current())
        >>> store.select_least_used()
    """

    def __init__(
        self,
        path: str | Path | None = None,
        clock: Callable[[], date] | None = None,
    ):
        """
        Initialize the store and load the snapshot.

        Args:
            path: Snapshot file (defaults to the per-user pool file)
            clock: Returns the current calendar day; ``date.today`` by default
        """
        self.path = Path(path).expanduser() if path else DEFAULT_POOL_PATH
        self._clock = clock or date.today
        self._lock = threading.RLock()
        self._state = PoolState(last_reset=self._clock())
        self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Load the snapshot from disk.

        A missing, unreadable or malformed snapshot is replaced by an empty
        pool. Usage is then reset if the snapshot is from an earlier day.
        """
        with self._lock:
            self._state = self._read_snapshot()
            self.ensure_fresh_day()

    def _read_snapshot(self) -> PoolState:
        if not self.path.exists():
            return self._default_state()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return PoolState.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.debug(f"Discarding unreadable pool snapshot {escape(str(self.path))}: {escape(str(e))}")
            return self._default_state()

    def _default_state(self) -> PoolState:
        return PoolState(last_reset=self._clock())

    def save(self) -> bool:
        """
        Write the snapshot, replacing the previous file in one step.

        Returns:
            True if written, False if the write failed
        """
        with self._lock:
            payload = json.dumps(self._state.to_snapshot(), indent=2)
            tmp_name = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
                return True
            except OSError as e:
                logger.warning(f"Failed to save API key pool to {escape(str(self.path))}: {escape(str(e))}")
                if tmp_name:
                    with contextlib.suppress(OSError):
                        os.unlink(tmp_name)
                return False

    def ensure_fresh_day(self) -> bool:
        """
        Zero usage when the accounting day has changed.

        Idempotent; runs at the start of every public operation.

        Returns:
            True if usage was reset
        """
        with self._lock:
            today = self._clock()
            if self._state.last_reset == today:
                return False

            self._state.usage = {}
            self._state.last_reset = today
            self.save()
            logger.debug(f"Reset daily API key usage for {today.isoformat()}")
            return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current(self) -> str | None:
        """Get the active credential, or None if the pool is empty."""
        with self._lock:
            self.ensure_fresh_day()
            return self._current()

    def _current(self) -> str | None:
        if not self._state.credentials:
            return None
        return self._state.credentials[self._state.active_index]

    def credentials(self) -> list[str]:
        """Get a copy of the ordered credential list."""
        with self._lock:
            self.ensure_fresh_day()
            return list(self._state.credentials)

    @property
    def active_index(self) -> int:
        """Index of the active credential."""
        with self._lock:
            self.ensure_fresh_day()
            return self._state.active_index

    def usage_of(self, credential: str) -> int:
        """Get today's usage for a credential (0 when unseen)."""
        with self._lock:
            self.ensure_fresh_day()
            return self._state.usage.get(credential, 0)

    def has_rotation_target(self, credential: str, high: int, low: int) -> bool:
        """
        Check the threshold rule for a credential.

        Args:
            credential: Credential currently in use
            high: Usage at which ``credential`` should be rotated away from
            low: Usage below which another credential is an eligible target

        Returns:
            True if ``credential`` has reached ``high`` and another pool
            credential is still under ``low``
        """
        with self._lock:
            self.ensure_fresh_day()
            usage = self._state.usage
            if usage.get(credential, 0) < high:
                return False
            return any(
                other != credential and usage.get(other, 0) < low
                for other in self._state.credentials
            )

    def stats(self) -> UsageStats:
        """
        Get a redacted usage summary.

        Returns:
            UsageStats with the credential count, the redacted active
            credential, a copy of today's usage and the reset day
        """
        with self._lock:
            self.ensure_fresh_day()
            return UsageStats(
                keys=len(self._state.credentials),
                current_key=redact_secret(self._current()),
                usage=dict(self._state.usage),
                last_reset=self._state.last_reset,
            )

    def list_credentials(self) -> list[CredentialInfo]:
        """List every credential in pool order, masked."""
        with self._lock:
            self.ensure_fresh_day()
            return [
                CredentialInfo(
                    index=i,
                    masked=mask_credential(credential),
                    usage=self._state.usage.get(credential, 0),
                    active=i == self._state.active_index,
                )
                for i, credential in enumerate(self._state.credentials)
            ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, credential: str) -> bool:
        """
        Add a credential to the end of the pool.

        Args:
            credential: Credential value; surrounding whitespace is dropped

        Returns:
            True if added, False if it was already present

        Raises:
            InvalidCredentialError: If the credential is blank
        """
        credential = (credential or "").strip()
        if not credential:
            raise InvalidCredentialError()

        with self._lock:
            self.ensure_fresh_day()
            if credential in self._state.credentials:
                return False

            self._state.credentials.append(credential)
            self.save()
            logger.debug(f"Added API key {escape(redact_secret(credential))}")
            return True

    def remove(self, index: int) -> str | None:
        """
        Remove the credential at ``index``.

        The active index moves down with the removed slot so that it stays
        valid.

        Args:
            index: Position in the pool

        Returns:
            The removed credential, or None if ``index`` is out of range
        """
        with self._lock:
            self.ensure_fresh_day()
            if not 0 <= index < len(self._state.credentials):
                return None

            removed = self._state.credentials.pop(index)
            self._state.usage.pop(removed, None)
            if self._state.active_index >= index:
                self._state.active_index = max(0, self._state.active_index - 1)
            self.save()
            logger.debug(f"Removed API key {escape(redact_secret(removed))}")
            return removed

    def record_usage(self, credential: str | None) -> None:
        """
        Count one request against a credential.

        Credentials outside the pool are counted too, so keys supplied
        out-of-band still accumulate usage.

        Args:
            credential: Credential that served the request
        """
        if not credential:
            return

        with self._lock:
            self.ensure_fresh_day()
            usage = self._state.usage
            usage[credential] = usage.get(credential, 0) + 1
            self.save()

    def select_least_used(self) -> str | None:
        """
        Make the least used credential active.

        Ties go to the lowest index. Pools with fewer than two credentials
        are left untouched.

        Returns:
            The active credential after selection
        """
        with self._lock:
            self.ensure_fresh_day()
            credentials = self._state.credentials
            if len(credentials) <= 1:
                return self._current()

            usage = self._state.usage
            best_index = min(
                range(len(credentials)),
                key=lambda i: (usage.get(credentials[i], 0), i),
            )
            self._state.active_index = best_index
            self.save()
            return self._current()
