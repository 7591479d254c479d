"""Polling client that records agent snapshots into the history store.

Run with:
    python examples/polling_client.py http://localhost:8080 monitor.db

The agent is expected to serve its dynamic metrics at /api/dynamic and its
connection counts at /api/connections.
"""

import asyncio
import logging
import sys

import httpx

from metrichistory import EmbeddedRuntime, Metric, StorageFault, get_logger

logger = get_logger(__name__)


async def poll(base_url: str, runtime: EmbeddedRuntime) -> None:
    """Fetch snapshots every refresh_interval and record them."""
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        while True:
            try:
                dynamic = await client.get("/api/dynamic")
                dynamic.raise_for_status()
                await runtime.recorder.record_snapshot(dynamic.json())

                connections = await client.get("/api/connections")
                connections.raise_for_status()
                await runtime.recorder.record_connections(connections.json())
            except httpx.HTTPError as e:
                logger.warning("Agent unavailable: %s", e)
            except StorageFault:
                # Already reported as a toast by the recorder.
                pass

            cpu = await runtime.history.get_history(
                Metric.CPU_TOTAL, time_range_ms=60_000
            )
            if cpu:
                logger.info("cpu_total last minute: %d samples", len(cpu))

            interval_ms = runtime.settings.get("refresh_interval") or 2000
            await asyncio.sleep(float(interval_ms) / 1000)


async def main(base_url: str, db_path: str) -> None:
    runtime = EmbeddedRuntime(db_path)
    await runtime.start()
    await runtime.settings.set("enable_metric_record", True)
    try:
        await poll(base_url, runtime)
    finally:
        await runtime.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"
    path = sys.argv[2] if len(sys.argv) > 2 else "monitor.db"
    asyncio.run(main(url, path))
