"""Local time-series retention store for system monitor metrics."""

import logging

from metrichistory.adapters.storage import (
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
    SQLiteHistoryStorage,
    SQLiteSettingsStorage,
)
from metrichistory.core.exceptions import (
    InvalidMetric,
    MetricHistoryError,
    PartialBatchError,
    RetentionFault,
    StorageFault,
)
from metrichistory.core.history import HistoryStore
from metrichistory.core.ingest import make_record, parse_metric, records_from_snapshot
from metrichistory.core.models import DEFAULT_SETTINGS, HistoryRecord, Metric
from metrichistory.core.notifications import ToastList
from metrichistory.core.recorder import HistoryRecorder
from metrichistory.core.retention import RetentionEnforcer
from metrichistory.core.settings import SettingsProvider
from metrichistory.runtime.embedded import EmbeddedRuntime


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the application's logging hierarchy."""
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_SETTINGS",
    "EmbeddedRuntime",
    "HistoryRecord",
    "HistoryRecorder",
    "HistoryStore",
    "InMemoryHistoryStorage",
    "InMemorySettingsStorage",
    "InvalidMetric",
    "Metric",
    "MetricHistoryError",
    "PartialBatchError",
    "RetentionEnforcer",
    "RetentionFault",
    "SQLiteHistoryStorage",
    "SQLiteSettingsStorage",
    "SettingsProvider",
    "StorageFault",
    "ToastList",
    "get_logger",
    "make_record",
    "parse_metric",
    "records_from_snapshot",
]
