"""
Active credential holder.

Request-issuing code reads the credential for its next call from an
``ActiveCredential`` it is handed, instead of from a process-wide global.
The rotation policy is the only writer.
"""

from __future__ import annotations

import os
import threading

from keypool.utils.helpers import redact_secret


class ActiveCredential:
    """
    Thread-safe slot holding the credential for the next outbound request.

    When ``env_var`` is given the slot is seeded from that environment
    variable and every write is mirrored back to it, for collaborators that
    still read the key from the environment.

    Example:
        >>> active = ActiveCredential(env_var="GEMINI_API_KEY")
        >>> active.set("AIza...")
        >>> os.environ["GEMINI_API_KEY"]
        'AIza...'
    """

    def __init__(self, value: str | None = None, env_var: str | None = None):
        self.env_var = env_var or None
        self._lock = threading.Lock()
        if value is None and self.env_var:
            value = os.environ.get(self.env_var) or None
        self._value = value
        if value is not None:
            self._mirror(value)

    def get(self) -> str | None:
        """Get the active credential."""
        with self._lock:
            return self._value

    def set(self, value: str | None) -> None:
        """Replace the active credential (None clears it)."""
        with self._lock:
            self._value = value or None
            self._mirror(self._value)

    def clear(self) -> None:
        """Forget the active credential."""
        self.set(None)

    def redacted(self) -> str | None:
        """Get the active credential in redacted form for logs."""
        return redact_secret(self.get())

    def _mirror(self, value: str | None) -> None:
        if not self.env_var:
            return
        if value is None:
            os.environ.pop(self.env_var, None)
        else:
            os.environ[self.env_var] = value

    def __repr__(self) -> str:
        return f"ActiveCredential({self.redacted()!r}, env_var={self.env_var!r})"
