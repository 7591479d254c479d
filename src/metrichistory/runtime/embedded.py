"""Embedded runtime wiring the history store for a single client process."""

import logging

from metrichistory.adapters.storage.sqlite_history import SQLiteHistoryStorage
from metrichistory.adapters.storage.sqlite_settings import SQLiteSettingsStorage
from metrichistory.core.history import HistoryStore
from metrichistory.core.notifications import ToastList
from metrichistory.core.recorder import HistoryRecorder
from metrichistory.core.retention import Clock, RetentionEnforcer, now_ms
from metrichistory.core.settings import SettingsProvider

logger = logging.getLogger(__name__)


class EmbeddedRuntime:
    """Owns one set of history collaborators backed by a SQLite file.

    Construct once at startup and pass the pieces to whoever needs them.

    Example:
        ```python
        runtime = EmbeddedRuntime("monitor.db")
        await runtime.start()
        await runtime.recorder.record_snapshot(snapshot)
        cpu = await runtime.history.get_history(Metric.CPU_TOTAL)
        await runtime.close()
        ```
    """

    def __init__(self, db_path: str, clock: Clock | None = None) -> None:
        self.db_path = db_path
        self.clock = clock or now_ms
        self.history_storage = SQLiteHistoryStorage(db_path)
        self.settings_storage = SQLiteSettingsStorage(db_path)
        self.settings = SettingsProvider(self.settings_storage)
        self.retention = RetentionEnforcer(
            self.history_storage, self.settings, self.clock
        )
        self.history = HistoryStore(self.history_storage, self.retention, self.clock)
        self.toasts = ToastList(clock=self.clock)
        self.recorder = HistoryRecorder(
            self.history, self.settings, self.toasts, self.clock
        )

    async def start(self) -> None:
        """Load settings from storage."""
        await self.settings.init()
        logger.info("History runtime started on %s", self.db_path)

    async def close(self) -> None:
        """Release database connections."""
        await self.history_storage.close()
        await self.settings_storage.close()
