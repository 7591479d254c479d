"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest

from metrichistory.adapters.storage.in_memory import (
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
)
from metrichistory.core.history import HistoryStore
from metrichistory.core.retention import RetentionEnforcer
from metrichistory.core.settings import SettingsProvider
from tests.helpers import FakeClock


@pytest.fixture
def history_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for SQLite storage tests."""
    return str(tmp_path / "history.db")


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock frozen at NOW_MS."""
    return FakeClock()


@pytest.fixture
def history_storage() -> InMemoryHistoryStorage:
    """Fixture providing an empty in-memory history backend."""
    return InMemoryHistoryStorage()


@pytest.fixture
def settings_storage() -> InMemorySettingsStorage:
    """Fixture providing an empty in-memory settings backend."""
    return InMemorySettingsStorage()


@pytest.fixture
def settings(settings_storage: InMemorySettingsStorage) -> SettingsProvider:
    """Fixture providing a settings provider over in-memory storage."""
    return SettingsProvider(settings_storage)


@pytest.fixture
def retention(
    history_storage: InMemoryHistoryStorage,
    settings: SettingsProvider,
    clock: FakeClock,
) -> RetentionEnforcer:
    """Fixture providing a retention enforcer driven by the fake clock."""
    return RetentionEnforcer(history_storage, settings, clock)


@pytest.fixture
def store(
    history_storage: InMemoryHistoryStorage,
    retention: RetentionEnforcer,
    clock: FakeClock,
) -> HistoryStore:
    """Fixture providing a history store over in-memory storage."""
    return HistoryStore(history_storage, retention, clock)
