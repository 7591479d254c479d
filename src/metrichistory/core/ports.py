"""Port interfaces for storage adapters.

These protocols define the contracts that storage adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from metrichistory.core.models import HistoryRecord, Metric, SettingValue


@runtime_checkable
class HistoryStoragePort(Protocol):
    """Port for metric history storage operations.

    Adapters implementing this protocol persist HistoryRecord samples and
    serve timestamp range queries filtered by metric.
    Examples: InMemoryHistoryStorage, SQLiteHistoryStorage.
    """

    async def insert(self, record: HistoryRecord) -> HistoryRecord:
        """Persist a record and return it with its assigned id.

        Raises:
            StorageFault: The record could not be persisted.
        """
        ...

    async def insert_batch(
        self, records: Sequence[HistoryRecord]
    ) -> list[HistoryRecord]:
        """Persist records as one logical unit.

        Returns:
            Stored copies in input order, each with a distinct id.
            An empty input returns an empty list.

        Raises:
            PartialBatchError: Only part of the batch was stored.
            StorageFault: Nothing was stored.
        """
        ...

    async def query_range(
        self, start: int, end: int, metric: Metric | None = None
    ) -> list[HistoryRecord]:
        """Return records with start <= timestamp <= end, ascending by timestamp."""
        ...

    async def delete_where(
        self, metric: Metric | None = None, before: int | None = None
    ) -> int:
        """Delete records matching metric with timestamp < before.

        A None metric matches every metric and a None bound matches every
        timestamp, so calling with no arguments clears the store.

        Returns:
            Number of deleted records.
        """
        ...

    async def get(self, record_id: int) -> HistoryRecord | None:
        """Return the record with the given id, or None."""
        ...

    async def count(self, metric: Metric | None = None) -> int:
        """Return the number of stored records."""
        ...


@runtime_checkable
class SettingsStoragePort(Protocol):
    """Port for durable key/value settings storage."""

    async def get(self, key: str) -> SettingValue | None:
        """Return the stored value for key, or None when absent."""
        ...

    async def put(self, key: str, value: SettingValue) -> None:
        """Create or overwrite the value for key."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...
