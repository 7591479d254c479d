"""Helpers shared by test modules."""

from dataclasses import dataclass

from metrichistory.core.models import HistoryRecord, Metric

# Fixed "now" for deterministic retention math: 2024-01-01T00:00:00Z.
NOW_MS = 1_704_067_200_000
HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


@dataclass
class FakeClock:
    """Manually advanced millisecond clock."""

    now: int = NOW_MS

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def record(
    timestamp: int,
    metric: Metric = Metric.CPU_TOTAL,
    value: float = 1.0,
    label: str | None = None,
    unit: str = "%",
) -> HistoryRecord:
    """Build an unsaved record with sensible defaults."""
    return HistoryRecord(
        timestamp=timestamp, metric=metric, value=value, unit=unit, label=label
    )
