"""SQLite storage adapter for user settings."""

import json
import sqlite3

from metrichistory.adapters.storage.sqlite_base import SQLiteStorageBase
from metrichistory.core.exceptions import StorageFault
from metrichistory.core.models import SettingValue

_SETTINGS_SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_SELECT_SETTING = """
SELECT value FROM settings WHERE key = ?
"""

_UPSERT_SETTING = """
INSERT INTO settings (key, value) VALUES (?, ?)
ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""

_DELETE_SETTING = """
DELETE FROM settings WHERE key = ?
"""


def _decode_value(key: str, data: str) -> SettingValue:
    """Decode a JSON-encoded setting value.

    Raises:
        StorageFault: The stored text is not a JSON scalar.
    """
    try:
        value = json.loads(data)
    except json.JSONDecodeError as exc:
        raise StorageFault(f"Corrupt value stored for setting {key!r}") from exc
    if not isinstance(value, (str, int, float, bool)):
        raise StorageFault(f"Corrupt value stored for setting {key!r}")
    return value


# @tra: Adapter.SQLiteSettings.ImplementsSettingsStoragePort
class SQLiteSettingsStorage(SQLiteStorageBase):
    """SQLite implementation of SettingsStoragePort.

    Values are stored as JSON text so booleans, numbers and strings keep
    their type across a restart.
    """

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path, _SETTINGS_SCHEMA)

    async def get(self, key: str) -> SettingValue | None:
        """Return the stored value for key, or None when absent."""
        async with self.async_connection() as db:
            async with db.execute(_SELECT_SETTING, (key,)) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        return _decode_value(key, row[0])

    async def put(self, key: str, value: SettingValue) -> None:
        """Create or overwrite the value for key."""
        async with self.async_connection() as db:
            try:
                await db.execute(_UPSERT_SETTING, (key, json.dumps(value)))
                await db.commit()
            except sqlite3.Error:
                await db.rollback()
                raise

    async def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        async with self.async_connection() as db:
            try:
                await db.execute(_DELETE_SETTING, (key,))
                await db.commit()
            except sqlite3.Error:
                await db.rollback()
                raise
