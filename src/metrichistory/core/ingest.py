"""Ingestion boundary: validation and snapshot flattening.

The agent reports nested snapshots keyed by device, core or interface.
These helpers turn them into validated HistoryRecord samples; the store
itself assumes its input already passed through here.
"""

import logging
import math
from collections.abc import Iterator, Mapping
from typing import Any

from metrichistory.core.exceptions import InvalidMetric
from metrichistory.core.models import HistoryRecord, Metric

logger = logging.getLogger(__name__)

# SQLite INTEGER range.
MIN_TIMESTAMP = -(2**63)
MAX_TIMESTAMP = 2**63 - 1

# Aggregate series key used by the agent for cpu and network totals.
TOTAL_KEY = "total"


def parse_metric(name: str | Metric) -> Metric:
    """Resolve a metric name against the known enumeration.

    Raises:
        InvalidMetric: name is not a recognized metric.
    """
    if isinstance(name, Metric):
        return name
    try:
        return Metric(name)
    except ValueError:
        raise InvalidMetric(name) from None


def make_record(
    metric: str | Metric,
    value: float,
    unit: str,
    timestamp: int,
    label: str | None = None,
) -> HistoryRecord:
    """Build a validated record for insertion.

    Raises:
        InvalidMetric: metric is not recognized.
        ValueError: value is not a finite number, or timestamp is not an
            integer within SQLite range.
    """
    resolved = parse_metric(metric)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Metric value must be numeric, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError(f"Metric value out of range: {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"Metric value must be finite, got {value!r}")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise ValueError(f"Timestamp must be integer milliseconds, got {timestamp!r}")
    if not MIN_TIMESTAMP <= timestamp <= MAX_TIMESTAMP:
        raise ValueError(f"Timestamp out of range: {timestamp!r}")
    return HistoryRecord(
        timestamp=timestamp,
        metric=resolved,
        value=number,
        unit=str(unit),
        label=label,
    )


def _series_label(key: str) -> str | None:
    return None if key == TOTAL_KEY else key


def _measure(
    reading: Any,
    metric: Metric,
    timestamp: int,
    label: str | None,
) -> Iterator[HistoryRecord]:
    """Yield a record for a {value, unit} reading, skipping malformed ones."""
    if not isinstance(reading, Mapping) or "value" not in reading:
        return
    try:
        yield make_record(
            metric, reading["value"], reading.get("unit", ""), timestamp, label
        )
    except ValueError:
        logger.debug("Skipping malformed %s reading: %r", metric.value, reading)


def records_from_snapshot(
    snapshot: Mapping[str, Any], timestamp: int
) -> list[HistoryRecord]:
    """Flatten a dynamic metrics snapshot into history records.

    Args:
        snapshot: Parsed agent response with optional cpu, memory, network
            and storage sections.
        timestamp: Observation time in milliseconds, shared by all records.

    Returns:
        Records for every reading present. Aggregate "total" series carry
        no label; per-core, per-interface and per-device series are
        labelled with their key.
    """
    records: list[HistoryRecord] = []

    for key, cpu in (snapshot.get("cpu") or {}).items():
        if not isinstance(cpu, Mapping):
            continue
        label = _series_label(key)
        records.extend(_measure(cpu.get("usage"), Metric.CPU_TOTAL, timestamp, label))
        records.extend(
            _measure(cpu.get("temperature"), Metric.CPU_TEMP, timestamp, label)
        )

    memory = snapshot.get("memory") or {}
    records.extend(_measure(memory.get("total"), Metric.MEMORY_TOTAL, timestamp, None))
    records.extend(_measure(memory.get("used"), Metric.MEMORY_USED, timestamp, None))
    records.extend(
        _measure(
            memory.get("used_percent"), Metric.MEMORY_USED_PERCENT, timestamp, None
        )
    )

    for key, iface in (snapshot.get("network") or {}).items():
        if not isinstance(iface, Mapping):
            continue
        label = _series_label(key)
        records.extend(
            _measure(iface.get("incoming"), Metric.NETWORK_IN, timestamp, label)
        )
        records.extend(
            _measure(iface.get("outgoing"), Metric.NETWORK_OUT, timestamp, label)
        )

    for device, disk in (snapshot.get("storage") or {}).items():
        if not isinstance(disk, Mapping):
            continue
        records.extend(
            _measure(disk.get("read"), Metric.STORAGE_IO, timestamp, f"{device}:read")
        )
        records.extend(
            _measure(
                disk.get("write"), Metric.STORAGE_IO, timestamp, f"{device}:write"
            )
        )
        records.extend(
            _measure(disk.get("used_percent"), Metric.STORAGE_USAGE, timestamp, device)
        )
        records.extend(
            _measure(disk.get("used"), Metric.STORAGE_SPACE, timestamp, device)
        )

    return records


def records_from_connections(
    response: Mapping[str, Any], timestamp: int
) -> list[HistoryRecord]:
    """Turn a connections response's per-protocol counts into records."""
    records: list[HistoryRecord] = []
    for protocol, count in (response.get("counts") or {}).items():
        try:
            records.append(
                make_record(Metric.CONNECTIONS, count, "", timestamp, protocol)
            )
        except ValueError:
            logger.debug("Skipping malformed connection count: %r", count)
    return records
