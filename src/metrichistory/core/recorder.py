"""Ingestion facade used by the polling loop."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from metrichistory.core.exceptions import RetentionFault, StorageFault
from metrichistory.core.history import HistoryStore
from metrichistory.core.ingest import records_from_connections, records_from_snapshot
from metrichistory.core.models import HistoryRecord
from metrichistory.core.notifications import ToastList
from metrichistory.core.retention import Clock, now_ms
from metrichistory.core.settings import SettingsProvider

logger = logging.getLogger(__name__)


class HistoryRecorder:
    """Writes polled snapshots to the history store when recording is enabled.

    Storage faults are logged, shown to the user as an error toast, and
    re-raised to the polling loop. Nothing is retried here: retrying a
    failed batch could store it twice.
    """

    def __init__(
        self,
        store: HistoryStore,
        settings: SettingsProvider,
        toasts: ToastList,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._toasts = toasts
        self._clock = clock or now_ms

    @property
    def enabled(self) -> bool:
        return self._settings.get("enable_metric_record") is True

    async def record(self, records: Sequence[HistoryRecord]) -> list[HistoryRecord]:
        """Store already validated records if recording is enabled."""
        if not self.enabled or not records:
            return []
        try:
            return await self._store.insert_batch(records)
        except RetentionFault as exc:
            logger.exception(
                "Cleanup failed after recording %d samples", len(exc.stored)
            )
            self._toasts.error(f"Failed to clean old metric history: {exc}")
            raise
        except StorageFault as exc:
            logger.exception("Failed to record %d history samples", len(records))
            self._toasts.error(f"Failed to save metric history: {exc}")
            raise

    async def record_snapshot(
        self, snapshot: Mapping[str, Any], timestamp: int | None = None
    ) -> list[HistoryRecord]:
        """Flatten and store a dynamic metrics snapshot."""
        ts = self._clock() if timestamp is None else timestamp
        return await self.record(records_from_snapshot(snapshot, ts))

    async def record_connections(
        self, response: Mapping[str, Any], timestamp: int | None = None
    ) -> list[HistoryRecord]:
        """Store per-protocol connection counts."""
        ts = self._clock() if timestamp is None else timestamp
        return await self.record(records_from_connections(response, ts))
