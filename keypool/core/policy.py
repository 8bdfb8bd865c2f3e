"""
Rotation policy for keypool.

Wraps a :class:`CredentialStore` with request lifecycle hooks. Usage is
counted when a request starts; every ``check_interval`` requests the
threshold rule decides whether to move traffic to a less used credential,
and quota or rate-limit failures rotate immediately.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from rich.markup import escape

from keypool.core.context import ActiveCredential
from keypool.core.store import CredentialStore
from keypool.models.config import RotationConfig
from keypool.utils.helpers import safe_get
from keypool.utils.logger import get_logger, log_rotation

logger = get_logger(__name__)


class RotationPolicy:
    """
    Decides when the active credential changes.

    The policy owns all writes to its :class:`ActiveCredential`. When the
    holder starts empty it is seeded with the store's current credential.

    Example:
        >>> policy = RotationPolicy(CredentialStore(), ActiveCredential())
        >>> key = policy.on_request_start()
        >>> try:
        ...     call_api(key)
        ... except Exception as e:
        ...     policy.on_request_error(e)
    """

    def __init__(
        self,
        store: CredentialStore,
        active: ActiveCredential | None = None,
        settings: RotationConfig | None = None,
    ):
        """
        Initialize the policy.

        Args:
            store: Credential store to rotate within
            active: Holder for the credential used by the next request
            settings: Cadence, thresholds and error signals
        """
        self.store = store
        self.active = active if active is not None else ActiveCredential()
        self.settings = settings or RotationConfig()
        self.request_count = 0
        self._lock = threading.Lock()

        if self.active.get() is None:
            current = self.store.current()
            if current:
                self.active.set(current)

    def active_credential(self) -> str | None:
        """Get the credential the next request should use."""
        return self.active.get()

    def on_request_start(self) -> str | None:
        """
        Account for a request that is about to be sent.

        Records usage against the active credential and, on every
        ``check_interval``-th request, applies the threshold rule.

        Returns:
            The credential to send the request with, or None if the pool
            is empty
        """
        with self._lock:
            self.request_count += 1
            count = self.request_count

        current = self.active.get()
        if not current:
            return None

        self.store.record_usage(current)

        if count % self.settings.check_interval == 0 and self.store.has_rotation_target(
            current,
            high=self.settings.high_usage_threshold,
            low=self.settings.low_usage_threshold,
        ):
            selected = self.store.select_least_used()
            if selected and selected != current:
                self.active.set(selected)
                log_rotation(logger, current, selected, "usage threshold")

        return self.active.get()

    def on_request_success(self) -> None:
        """Note a completed request; usage was already counted at start."""
        logger.debug(f"Request succeeded with API key {escape(self.active.redacted() or 'none')}")

    def on_request_error(self, error: Any) -> bool:
        """
        React to a failed request.

        Quota and rate-limit failures rotate to the least used credential
        straight away, regardless of thresholds. Anything else is ignored.

        Args:
            error: The exception or error payload reported by the executor

        Returns:
            True if the error was a quota/rate-limit signal
        """
        if not self.is_rotation_error(error):
            return False

        previous = self.active.get()
        selected = self.store.select_least_used()
        if selected:
            self.active.set(selected)
            if selected != previous:
                log_rotation(logger, previous, selected, "quota limit")
            else:
                logger.info("Quota limit hit but no other API key is available")
        return True

    def force_rotate(self) -> str | None:
        """
        Switch to the least used credential on operator request.

        Returns:
            The newly active credential, or None if the pool is empty
        """
        previous = self.active.get()
        selected = self.store.select_least_used()
        if selected:
            self.active.set(selected)
            if selected != previous:
                log_rotation(logger, previous, selected, "manual")
        return selected

    def is_rotation_error(self, error: Any) -> bool:
        """
        Check an error for quota or rate-limit signals.

        Looks at the message text and at ``status`` / ``status_code``
        attributes or keys. Mappings contribute only their ``message``
        entry; other objects are also matched by ``str(error)``. Never raises.

        Args:
            error: Exception, mapping, or any other object

        Returns:
            True if the error should trigger a rotation
        """
        if error is None:
            return False

        status = safe_get(error, "status", "status_code")
        try:
            if status is not None and int(status) in self.settings.rotation_status_codes:
                return True
        except (TypeError, ValueError):
            pass

        texts = []
        message = safe_get(error, "message")
        if isinstance(message, str):
            texts.append(message)
        # Mapping payloads are judged by their message only, not their key names
        if not isinstance(error, Mapping):
            try:
                texts.append(str(error))
            except Exception:
                pass

        haystack = " ".join(texts).lower()
        return any(keyword.lower() in haystack for keyword in self.settings.rotation_keywords)
