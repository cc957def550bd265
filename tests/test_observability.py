"""Tests for metrics hooks."""

import pytest

from core.observability import InMemoryMetrics, NullMetrics, timed


class TestMetrics:

    def test_in_memory_counters_and_snapshot(self):
        metrics = InMemoryMetrics()

        metrics.increment("stored")
        metrics.increment("stored", 4)
        metrics.observe("latency.ms", 1.5)

        snapshot = metrics.snapshot()
        assert snapshot["counters"] == {"stored": 5}
        assert snapshot["observations"] == {"latency.ms": [1.5]}

        metrics.reset()
        assert metrics.snapshot() == {"counters": {}, "observations": {}}

    def test_timed_records_duration(self):
        metrics = InMemoryMetrics()

        with timed(metrics, "op"):
            pass

        assert len(metrics.observations["op.ms"]) == 1
        assert metrics.observations["op.ms"][0] >= 0
        assert "op.errors" not in metrics.counters

    def test_timed_counts_errors_and_reraises(self):
        metrics = InMemoryMetrics()

        with pytest.raises(RuntimeError):
            with timed(metrics, "op"):
                raise RuntimeError("boom")

        assert metrics.counters["op.errors"] == 1
        assert len(metrics.observations["op.ms"]) == 1

    def test_null_metrics_and_missing_hook(self):
        with timed(NullMetrics(), "op"):
            pass
        with timed(None, "op"):
            pass
