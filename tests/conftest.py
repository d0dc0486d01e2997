"""Test fixtures and configuration."""

from datetime import datetime, timezone

import pytest

from devlog.store.config import DevlogConfig
from devlog.store.logstore import LogStore


@pytest.fixture
def fixed_now():
    """Clock frozen at 2026-03-14 09:26:53 UTC."""
    moment = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def stamp():
    """Entry prefix produced by fixed_now."""
    return "[2026-03-14 09:26:53]"


@pytest.fixture
def log_path(tmp_path):
    """Path of a log file that does not exist yet."""
    return tmp_path / "devlog" / "DEVLOG.md"


@pytest.fixture
def store(tmp_path, fixed_now):
    """LogStore in a temporary project directory, log already created."""
    store = LogStore(str(tmp_path), config=DevlogConfig(layout="nested"), now=fixed_now)
    store.ensure_exists()
    return store
