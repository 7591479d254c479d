"""In-memory storage adapters for metric history and settings."""

import heapq
import itertools
from bisect import bisect_left, bisect_right, insort
from collections.abc import Sequence
from dataclasses import replace

from metrichistory.core.models import HistoryRecord, Metric, SettingValue


def _timestamp(record: HistoryRecord) -> int:
    return record.timestamp


class InMemoryHistoryStorage:
    """In-memory implementation of HistoryStoragePort.

    Keeps one timestamp-sorted list per metric plus an id map, so range
    queries bisect instead of scanning. Suitable for testing and for
    clients that do not need persistence across restarts.

    Records sharing a timestamp come back in insertion order within a
    metric; a query spanning metrics interleaves ties by metric.
    """

    def __init__(self) -> None:
        self._by_metric: dict[Metric, list[HistoryRecord]] = {}
        self._by_id: dict[int, HistoryRecord] = {}
        self._ids = itertools.count(1)

    async def insert(self, record: HistoryRecord) -> HistoryRecord:
        """Store a record and return it with its assigned id."""
        stored = replace(record, id=next(self._ids))
        insort(self._by_metric.setdefault(stored.metric, []), stored, key=_timestamp)
        self._by_id[stored.id] = stored  # type: ignore[index]
        return stored

    async def insert_batch(
        self, records: Sequence[HistoryRecord]
    ) -> list[HistoryRecord]:
        """Store all records; nothing here can fail halfway."""
        return [await self.insert(record) for record in records]

    def _slice(self, metric: Metric, start: int, end: int) -> list[HistoryRecord]:
        series = self._by_metric.get(metric, [])
        lo = bisect_left(series, start, key=_timestamp)
        hi = bisect_right(series, end, key=_timestamp)
        return series[lo:hi]

    async def query_range(
        self, start: int, end: int, metric: Metric | None = None
    ) -> list[HistoryRecord]:
        """Return records with start <= timestamp <= end, ascending by timestamp."""
        if metric is not None:
            return self._slice(metric, start, end)
        slices = [self._slice(m, start, end) for m in self._by_metric]
        return list(heapq.merge(*slices, key=_timestamp))

    async def delete_where(
        self, metric: Metric | None = None, before: int | None = None
    ) -> int:
        """Delete records matching metric with timestamp < before."""
        metrics = list(self._by_metric) if metric is None else [metric]
        deleted = 0
        for m in metrics:
            series = self._by_metric.get(m)
            if not series:
                continue
            if before is None:
                cut = len(series)
            else:
                cut = bisect_left(series, before, key=_timestamp)
            for record in series[:cut]:
                del self._by_id[record.id]  # type: ignore[arg-type]
            del series[:cut]
            deleted += cut
        return deleted

    async def get(self, record_id: int) -> HistoryRecord | None:
        """Return the record with the given id, or None."""
        return self._by_id.get(record_id)

    async def count(self, metric: Metric | None = None) -> int:
        """Return total number of records, optionally for one metric."""
        if metric is None:
            return len(self._by_id)
        return len(self._by_metric.get(metric, []))


class InMemorySettingsStorage:
    """In-memory implementation of SettingsStoragePort."""

    def __init__(self) -> None:
        self._values: dict[str, SettingValue] = {}

    async def get(self, key: str) -> SettingValue | None:
        """Return the stored value for key, or None when absent."""
        return self._values.get(key)

    async def put(self, key: str, value: SettingValue) -> None:
        """Create or overwrite the value for key."""
        self._values[key] = value

    async def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        self._values.pop(key, None)
