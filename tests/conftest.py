"""
Test configuration and fixtures.
"""

import json
import logging
from datetime import date, timedelta

import pytest

from keypool.core.store import CredentialStore


class FakeClock:
    """Controllable replacement for ``date.today``."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1) -> None:
        self.today = self.today + timedelta(days=days)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real pool file, config files and env key."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("KEYPOOL_POOL__PATH", str(tmp_path / "default-pool.json"))
    monkeypatch.setenv("KEYPOOL_POOL__ENV_VAR", "")


@pytest.fixture
def clock():
    """A clock fixed on a known day."""
    return FakeClock(date(2026, 3, 14))


@pytest.fixture
def pool_path(tmp_path):
    """Path of a pool snapshot inside the test directory."""
    return tmp_path / "pool" / "api-keys.json"


@pytest.fixture
def store(pool_path, clock):
    """An empty store using the fake clock."""
    return CredentialStore(pool_path, clock=clock)


@pytest.fixture
def write_snapshot(pool_path):
    """Write a raw snapshot to the pool path."""

    def _write(data):
        pool_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            pool_path.write_text(data, encoding="utf-8")
        else:
            pool_path.write_text(json.dumps(data), encoding="utf-8")
        return pool_path

    return _write


@pytest.fixture
def restore_keypool_logger():
    """Put the keypool logger's handlers and level back after the test."""
    root = logging.getLogger("keypool")
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
