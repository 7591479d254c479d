"""Core domain models for metric history data."""

from dataclasses import dataclass
from enum import Enum

MS_PER_DAY = 24 * 60 * 60 * 1000

SettingValue = str | int | float | bool


class Metric(str, Enum):
    """Closed set of metric categories the store accepts."""

    CPU_TOTAL = "cpu_total"
    CPU_TEMP = "cpu_temp"
    MEMORY_TOTAL = "memory_total"
    MEMORY_USED = "memory_used"
    MEMORY_USED_PERCENT = "memory_used_percent"
    NETWORK_IN = "network_in"
    NETWORK_OUT = "network_out"
    STORAGE_IO = "storage_io"
    STORAGE_USAGE = "storage_usage"
    STORAGE_SPACE = "storage_space"
    CONNECTIONS = "connections"


@dataclass(frozen=True)
class HistoryRecord:
    """A single observed metric sample.

    Attributes:
        timestamp: Milliseconds since epoch, assigned at observation time.
        metric: Metric category.
        value: The observed magnitude.
        unit: Display unit, stored as given.
        label: Optional sub-series discriminator (core, interface, protocol).
        id: Store-assigned identity. None until the record is persisted.
    """

    timestamp: int
    metric: Metric
    value: float
    unit: str
    label: str | None = None
    id: int | None = None


# Compiled-in defaults returned until settings are loaded.
DEFAULT_SETTINGS: dict[str, SettingValue] = {
    "enable_metric_record": False,
    "retention_days": 7,
    "refresh_interval": 2000,
}

DEFAULT_RETENTION_DAYS = 7
