"""History store facade: serialized writes, retention, and range reads."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from metrichistory.core.exceptions import (
    PartialBatchError,
    RetentionFault,
    StorageFault,
)
from metrichistory.core.models import HistoryRecord, Metric
from metrichistory.core.ports import HistoryStoragePort
from metrichistory.core.retention import Clock, RetentionEnforcer, now_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIME_RANGE_MS = 24 * 60 * 60 * 1000


class HistoryStore:
    """Record store with write-triggered retention.

    Every operation runs under one lock, so an insert and the retention
    sweep it triggers finish before the next operation starts. Writes are
    shielded from caller cancellation: a caller may stop waiting, but the
    write and its sweep still complete.

    Storage faults from the write propagate unchanged; the store never
    retries. A sweep that fails after a successful write raises
    RetentionFault carrying the stored records.
    """

    def __init__(
        self,
        storage: HistoryStoragePort,
        retention: RetentionEnforcer,
        clock: Clock | None = None,
    ) -> None:
        self._storage = storage
        self._retention = retention
        self._clock = clock or now_ms
        self._lock: asyncio.Lock | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the operation lock (lazy to avoid event loop issues)."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def _serialized(self, func: Callable[[], Awaitable[T]]) -> T:
        async with self._get_lock():
            return await func()

    # --- Writes ---

    async def insert(self, record: HistoryRecord) -> HistoryRecord:
        """Persist one record, then sweep its metric."""

        async def run() -> HistoryRecord:
            stored = await self._storage.insert(record)
            await self._sweep_after_write([stored])
            return stored

        return await asyncio.shield(self._serialized(run))

    async def insert_batch(
        self, records: Sequence[HistoryRecord]
    ) -> list[HistoryRecord]:
        """Persist records as one unit, then sweep each distinct metric once.

        An empty batch is a no-op. When the backend reports a partial write,
        only the metrics that landed are swept and the error is re-raised.
        """
        if not records:
            return []

        async def run() -> list[HistoryRecord]:
            try:
                stored = await self._storage.insert_batch(records)
            except PartialBatchError as exc:
                logger.warning(
                    "Batch write stored %d of %d records",
                    len(exc.persisted),
                    len(records),
                )
                try:
                    await self._retention.sweep_many(r.metric for r in exc.persisted)
                except StorageFault:
                    logger.exception("Retention sweep failed after partial batch")
                raise
            await self._sweep_after_write(stored)
            return stored

        return await asyncio.shield(self._serialized(run))

    async def _sweep_after_write(self, stored: list[HistoryRecord]) -> None:
        try:
            await self._retention.sweep_many(r.metric for r in stored)
        except StorageFault as exc:
            raise RetentionFault(
                f"Stored {len(stored)} records but retention failed: {exc}", stored
            ) from exc

    async def delete_where(
        self, metric: Metric | None = None, before: int | None = None
    ) -> int:
        """Delete records of metric (all metrics when None) with timestamp < before."""
        return await asyncio.shield(
            self._serialized(lambda: self._storage.delete_where(metric, before))
        )

    async def clear(self, metric: Metric | None = None) -> int:
        """Delete every record of metric, or the whole store when None."""
        return await self.delete_where(metric=metric)

    async def enforce_retention(self, metric: Metric) -> int:
        """Run the retention sweep for metric outside of a write."""
        return await self._serialized(lambda: self._retention.sweep(metric))

    # --- Reads ---

    async def query_range(
        self, start: int, end: int, metric: Metric | None = None
    ) -> list[HistoryRecord]:
        """Return records with start <= timestamp <= end, ascending by timestamp."""
        return await self._serialized(
            lambda: self._storage.query_range(start, end, metric)
        )

    async def get(self, record_id: int) -> HistoryRecord | None:
        """Return the record with the given id, or None once evicted."""
        return await self._serialized(lambda: self._storage.get(record_id))

    async def count(self, metric: Metric | None = None) -> int:
        """Return the number of stored records."""
        return await self._serialized(lambda: self._storage.count(metric))

    async def get_history(
        self,
        metric: Metric | None = None,
        label: str | None = None,
        time_range_ms: int = DEFAULT_TIME_RANGE_MS,
    ) -> list[HistoryRecord]:
        """Return the last time_range_ms of samples, oldest first.

        Args:
            metric: Restrict to one metric. None returns every metric.
            label: Restrict to one sub-series. Filtered after the range
                query since the store indexes only metric and timestamp.
            time_range_ms: Width of the window ending now.

        Raises:
            ValueError: time_range_ms is negative.
        """
        if time_range_ms < 0:
            raise ValueError(f"time_range_ms must be >= 0, got {time_range_ms}")
        end = self._clock()
        records = await self.query_range(end - time_range_ms, end, metric)
        if label is None:
            return records
        return [r for r in records if r.label == label]
