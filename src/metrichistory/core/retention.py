"""Write-triggered retention for metric history."""

import logging
import time
from collections.abc import Callable, Iterable

from metrichistory.core.models import DEFAULT_RETENTION_DAYS, MS_PER_DAY, Metric
from metrichistory.core.ports import HistoryStoragePort
from metrichistory.core.settings import SettingsProvider

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Return the wall clock in milliseconds since epoch."""
    return int(time.time() * 1000)


class RetentionEnforcer:
    """Deletes records older than the configured retention window.

    There is no background sweep: the store calls this after each write,
    once per metric the write touched. retention_days is read at call time,
    so a changed value applies from the next sweep onwards.
    """

    def __init__(
        self,
        storage: HistoryStoragePort,
        settings: SettingsProvider,
        clock: Clock | None = None,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._clock = clock or now_ms

    def retention_days(self) -> float:
        """Return the configured retention, or the default when unusable."""
        value = self._settings.get("retention_days")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_RETENTION_DAYS
        if value <= 0:
            return DEFAULT_RETENTION_DAYS
        return value

    def cutoff(self) -> int:
        """Return the timestamp below which records are evicted."""
        return self._clock() - int(self.retention_days() * MS_PER_DAY)

    async def sweep(self, metric: Metric) -> int:
        """Delete records of metric older than the retention window.

        Returns:
            Number of evicted records.
        """
        deleted = await self._storage.delete_where(metric=metric, before=self.cutoff())
        if deleted > 0:
            logger.info("Cleaned %d old records for %s", deleted, metric.value)
        return deleted

    async def sweep_many(self, metrics: Iterable[Metric]) -> dict[Metric, int]:
        """Sweep each distinct metric exactly once, in first-seen order."""
        results: dict[Metric, int] = {}
        for metric in dict.fromkeys(metrics):
            results[metric] = await self.sweep(metric)
        return results
