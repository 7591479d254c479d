"""SQLite storage adapter for metric history."""

import sqlite3
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import aiosqlite

from metrichistory.adapters.storage.sqlite_base import SQLiteStorageBase
from metrichistory.core.models import HistoryRecord, Metric

_HISTORY_SCHEMA = """
CREATE TABLE IF NOT EXISTS history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp INTEGER NOT NULL,
    metric TEXT NOT NULL,
    value REAL NOT NULL,
    unit TEXT NOT NULL,
    label TEXT
);
CREATE INDEX IF NOT EXISTS idx_history_timestamp ON history(timestamp);
CREATE INDEX IF NOT EXISTS idx_history_metric_timestamp
    ON history(metric, timestamp);
"""

_INSERT_RECORD = """
INSERT INTO history (timestamp, metric, value, unit, label) VALUES (?, ?, ?, ?, ?)
"""

_SELECT_RANGE = """
SELECT id, timestamp, metric, value, unit, label FROM history
WHERE timestamp BETWEEN ? AND ?
ORDER BY timestamp ASC, id ASC
"""

_SELECT_RANGE_BY_METRIC = """
SELECT id, timestamp, metric, value, unit, label FROM history
WHERE metric = ? AND timestamp BETWEEN ? AND ?
ORDER BY timestamp ASC, id ASC
"""

_SELECT_BY_ID = """
SELECT id, timestamp, metric, value, unit, label FROM history WHERE id = ?
"""

_COUNT_RECORDS = """
SELECT COUNT(*) FROM history
"""

_COUNT_RECORDS_BY_METRIC = """
SELECT COUNT(*) FROM history WHERE metric = ?
"""


# @tra: Adapter.SQLiteHistory.ImplementsHistoryStoragePort
# @tra: Adapter.SQLiteHistory.PersistsAcrossInstances
class SQLiteHistoryStorage(SQLiteStorageBase):
    """SQLite implementation of HistoryStoragePort.

    Stores history records in a SQLite database using aiosqlite for
    non-blocking async operations. Uses WAL mode for file databases.

    Ids come from AUTOINCREMENT, so an id is never handed out twice even
    after the row holding it was deleted. Batches run in one transaction
    and are rolled back as a whole on failure. Records sharing a timestamp
    are returned in insertion order.
    """

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path, _HISTORY_SCHEMA)

    def _to_row(self, record: HistoryRecord) -> tuple[Any, ...]:
        return (
            record.timestamp,
            record.metric.value,
            record.value,
            record.unit,
            record.label,
        )

    def _from_row(self, row: sqlite3.Row | aiosqlite.Row) -> HistoryRecord:
        return HistoryRecord(
            id=row[0],
            timestamp=row[1],
            metric=Metric(row[2]),
            value=row[3],
            unit=row[4],
            label=row[5],
        )

    async def insert(self, record: HistoryRecord) -> HistoryRecord:
        """Persist a record and return it with its assigned id."""
        async with self.async_connection() as db:
            try:
                cursor = await db.execute(_INSERT_RECORD, self._to_row(record))
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
            return replace(record, id=cursor.lastrowid)

    async def insert_batch(
        self, records: Sequence[HistoryRecord]
    ) -> list[HistoryRecord]:
        """Persist all records in a single transaction."""
        if not records:
            return []
        stored: list[HistoryRecord] = []
        async with self.async_connection() as db:
            try:
                for record in records:
                    cursor = await db.execute(_INSERT_RECORD, self._to_row(record))
                    stored.append(replace(record, id=cursor.lastrowid))
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
        return stored

    async def query_range(
        self, start: int, end: int, metric: Metric | None = None
    ) -> list[HistoryRecord]:
        """Return records with start <= timestamp <= end, ascending by timestamp."""
        if metric is None:
            query, params = _SELECT_RANGE, (start, end)
        else:
            query, params = _SELECT_RANGE_BY_METRIC, (metric.value, start, end)
        async with self.async_connection() as db:
            async with db.execute(query, params) as cursor:
                return [self._from_row(row) async for row in cursor]

    async def delete_where(
        self, metric: Metric | None = None, before: int | None = None
    ) -> int:
        """Delete records matching metric with timestamp < before."""
        clauses: list[str] = []
        params: list[Any] = []
        if metric is not None:
            clauses.append("metric = ?")
            params.append(metric.value)
        if before is not None:
            clauses.append("timestamp < ?")
            params.append(before)
        query = "DELETE FROM history"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        async with self.async_connection() as db:
            try:
                cursor = await db.execute(query, params)
                deleted = cursor.rowcount
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
            return deleted

    async def get(self, record_id: int) -> HistoryRecord | None:
        """Return the record with the given id, or None."""
        async with self.async_connection() as db:
            async with db.execute(_SELECT_BY_ID, (record_id,)) as cursor:
                row = await cursor.fetchone()
                return self._from_row(row) if row else None

    async def count(self, metric: Metric | None = None) -> int:
        """Return total number of records, optionally for one metric."""
        if metric is None:
            query, params = _COUNT_RECORDS, ()
        else:
            query, params = _COUNT_RECORDS_BY_METRIC, (metric.value,)
        async with self.async_connection() as db:
            async with db.execute(query, params) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0
