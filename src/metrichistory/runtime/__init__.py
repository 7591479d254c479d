"""Runtime wiring for embedding the history store."""

from metrichistory.runtime.embedded import EmbeddedRuntime

__all__ = ["EmbeddedRuntime"]
