"""Optional metrics hooks for the chunker and vector store.

Components accept any object with ``increment`` and ``observe`` methods. The
default is a no-op; ``InMemoryMetrics`` keeps counters and timings in plain
dictionaries in the same way the embedding provider keeps usage stats.
"""

import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Protocol


class MetricsHook(Protocol):
    """Receiver for counters and durations emitted around core operations."""

    def increment(self, name: str, value: int = 1) -> None:
        """Add ``value`` to the counter ``name``."""
        ...

    def observe(self, name: str, value: float) -> None:
        """Record one measurement (milliseconds for timers) under ``name``."""
        ...


class NullMetrics:
    """Metrics hook that discards everything."""

    def increment(self, name: str, value: int = 1) -> None:
        pass

    def observe(self, name: str, value: float) -> None:
        pass


class InMemoryMetrics:
    """Metrics hook that accumulates values in memory."""

    def __init__(self):
        self.counters: Dict[str, int] = defaultdict(int)
        self.observations: Dict[str, List[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1) -> None:
        self.counters[name] += value

    def observe(self, name: str, value: float) -> None:
        self.observations[name].append(value)

    def snapshot(self) -> Dict[str, Dict]:
        """Copy of the current counters and observations."""
        return {
            "counters": dict(self.counters),
            "observations": {k: list(v) for k, v in self.observations.items()},
        }

    def reset(self) -> None:
        self.counters.clear()
        self.observations.clear()


@contextmanager
def timed(metrics: Optional[MetricsHook], name: str) -> Iterator[None]:
    """Record the wall time of the enclosed block as ``<name>.ms``.

    Failures are counted under ``<name>.errors`` and re-raised.
    """
    start = time.perf_counter()
    try:
        yield
    except Exception:
        if metrics is not None:
            metrics.increment(f"{name}.errors")
        raise
    finally:
        if metrics is not None:
            metrics.observe(f"{name}.ms", (time.perf_counter() - start) * 1000)
