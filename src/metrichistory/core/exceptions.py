"""Exception types raised by the metric history store."""

from metrichistory.core.models import HistoryRecord


class MetricHistoryError(Exception):
    """Base class for metric history errors."""


class StorageFault(MetricHistoryError):
    """The durable storage backend failed to complete an operation."""


class PartialBatchError(StorageFault):
    """A batch write landed only partially.

    Attributes:
        persisted: Records that were stored, with their assigned ids.
    """

    def __init__(self, message: str, persisted: list[HistoryRecord]) -> None:
        super().__init__(message)
        self.persisted = persisted


class InvalidMetric(MetricHistoryError, ValueError):
    """A metric name outside the recognized enumeration was supplied."""

    def __init__(self, name: object) -> None:
        super().__init__(f"Unknown metric: {name!r}")
        self.name = name


class RetentionFault(StorageFault):
    """Records were stored but the retention sweep that followed failed.

    The write itself succeeded; retrying it would store the records twice.
    The next successful sweep evicts whatever this one missed.

    Attributes:
        stored: Records that were stored, with their assigned ids.
    """

    def __init__(self, message: str, stored: list[HistoryRecord]) -> None:
        super().__init__(message)
        self.stored = stored
