"""Storage adapters implementing core ports."""

from metrichistory.adapters.storage.in_memory import (
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
)
from metrichistory.adapters.storage.sqlite_history import SQLiteHistoryStorage
from metrichistory.adapters.storage.sqlite_settings import SQLiteSettingsStorage

__all__ = [
    "InMemoryHistoryStorage",
    "InMemorySettingsStorage",
    "SQLiteHistoryStorage",
    "SQLiteSettingsStorage",
]
