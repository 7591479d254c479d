"""BDD step definitions for retention features."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from metrichistory.adapters.storage.in_memory import (
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
)
from metrichistory.core.history import HistoryStore
from metrichistory.core.models import HistoryRecord, Metric
from metrichistory.core.retention import RetentionEnforcer
from metrichistory.core.settings import SettingsProvider
from tests.helpers import DAY_MS, HOUR_MS, NOW_MS, FakeClock, record

_UNIT_MS = {"hour": HOUR_MS, "hours": HOUR_MS, "day": DAY_MS, "days": DAY_MS}


class CountingRetention(RetentionEnforcer):
    """Counts sweeps so scenarios can assert on them."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.sweeps = 0

    async def sweep(self, metric: Metric) -> int:
        self.sweeps += 1
        return await super().sweep(metric)


@dataclass
class RetentionScenarioContext:
    """Shared state between steps in a retention scenario."""

    clock: FakeClock = field(default_factory=FakeClock)
    storage: InMemoryHistoryStorage = field(default_factory=InMemoryHistoryStorage)
    settings: SettingsProvider = field(
        default_factory=lambda: SettingsProvider(InMemorySettingsStorage())
    )
    samples: dict[str, HistoryRecord] = field(default_factory=dict)
    stored: list[HistoryRecord] = field(default_factory=list)
    deleted: list[int] = field(default_factory=list)
    retention: CountingRetention = field(init=False)
    store: HistoryStore = field(init=False)

    def __post_init__(self) -> None:
        self.retention = CountingRetention(self.storage, self.settings, self.clock)
        self.store = HistoryStore(self.storage, self.retention, self.clock)


def run_async(coro: Any) -> Any:
    """Run a coroutine synchronously."""
    return asyncio.run(coro)


@pytest.fixture
def ctx() -> RetentionScenarioContext:
    """Fresh scenario context for each test."""
    return RetentionScenarioContext()


@given(parsers.parse("the retention period is {days:d} day"))
@given(parsers.parse("the retention period is {days:d} days"))
def given_retention_period(ctx: RetentionScenarioContext, days: int) -> None:
    run_async(ctx.settings.set("retention_days", days))


@given(parsers.parse('a "{metric}" sample recorded {amount:d} {unit} ago'))
def given_sample(
    ctx: RetentionScenarioContext, metric: str, amount: int, unit: str
) -> None:
    """Store a sample directly in the backend, bypassing retention."""
    timestamp = NOW_MS - amount * _UNIT_MS[unit]
    stored = run_async(ctx.storage.insert(record(timestamp, Metric(metric))))
    ctx.samples[f"{amount} {unit}"] = stored


@when(parsers.parse('a new "{metric}" sample is written'))
def when_sample_written(ctx: RetentionScenarioContext, metric: str) -> None:
    ctx.stored.append(run_async(ctx.store.insert(record(NOW_MS, Metric(metric)))))


@when(parsers.parse('retention runs for "{metric}" twice'))
def when_retention_runs_twice(ctx: RetentionScenarioContext, metric: str) -> None:
    for _ in range(2):
        ctx.deleted.append(run_async(ctx.store.enforce_retention(Metric(metric))))


@when(
    parsers.parse(
        'a batch of {n:d} samples across "{first}" and "{second}" is written'
    )
)
def when_batch_written(
    ctx: RetentionScenarioContext, n: int, first: str, second: str
) -> None:
    metrics = [Metric(first), Metric(second)]
    batch = [record(NOW_MS, metrics[i % 2], value=float(i)) for i in range(n)]
    ctx.stored.extend(run_async(ctx.store.insert_batch(batch)))


@then(parsers.parse("the sample recorded {amount:d} {unit} ago is gone"))
def then_sample_gone(ctx: RetentionScenarioContext, amount: int, unit: str) -> None:
    sample = ctx.samples[f"{amount} {unit}"]
    assert run_async(ctx.store.get(sample.id)) is None
    assert sample not in run_async(ctx.store.query_range(0, NOW_MS))


@then(parsers.parse("the sample recorded {amount:d} {unit} ago remains"))
def then_sample_remains(
    ctx: RetentionScenarioContext, amount: int, unit: str
) -> None:
    sample = ctx.samples[f"{amount} {unit}"]
    assert sample in run_async(ctx.store.query_range(0, NOW_MS, sample.metric))


@then(parsers.parse('{count:d} "{metric}" sample remains'))
def then_count_remains(ctx: RetentionScenarioContext, count: int, metric: str) -> None:
    assert run_async(ctx.store.count(Metric(metric))) == count


@then(parsers.parse("the runs delete {first:d} and {second:d} samples"))
def then_runs_delete(ctx: RetentionScenarioContext, first: int, second: int) -> None:
    assert ctx.deleted == [first, second]


@then(parsers.parse("{count:d} retention sweeps ran"))
def then_sweeps_ran(ctx: RetentionScenarioContext, count: int) -> None:
    assert ctx.retention.sweeps == count


@then(parsers.parse("{count:d} distinct ids were assigned"))
def then_distinct_ids(ctx: RetentionScenarioContext, count: int) -> None:
    assert len({r.id for r in ctx.stored}) == count
