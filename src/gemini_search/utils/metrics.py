"""
Lightweight in-memory metrics for observability.

Counts answer engine calls and retries and records latencies for the
lifetime of one CLI invocation.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ClassVar, Iterator


@dataclass
class TimingStats:
    """Statistics for timing measurements."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        """Average latency in milliseconds."""
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, duration_ms: float) -> None:
        """Record a timing measurement."""
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms, 2) if self.count > 0 else 0.0,
            "max_ms": round(self.max_ms, 2),
        }


@dataclass
class Metrics:
    """
    In-memory metrics collector.

    Example:
        >>> metrics = Metrics.get()
        >>> metrics.increment("engine_calls")
        >>> with metrics.timer("engine_latency_ms"):
        ...     text = await engine.generate(request)
        >>> print(metrics.snapshot())
    """

    _counters: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    _timings: dict[str, TimingStats] = field(
        default_factory=lambda: defaultdict(TimingStats)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    _instance: ClassVar["Metrics | None"] = None

    @classmethod
    def get(cls) -> "Metrics":
        """Get the global metrics instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset all metrics (useful for testing)."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._timings.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """
        Increment a counter.

        Args:
            name: Counter name
            value: Amount to increment (default 1)

        Returns:
            New counter value
        """
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        with self._lock:
            return self._counters.get(name, 0)

    def observe(self, name: str, duration_ms: float) -> None:
        """Record a timing observation in milliseconds."""
        with self._lock:
            self._timings[name].record(duration_ms)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Context manager timing a block of code, async bodies included."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.observe(name, duration_ms)

    def snapshot(self) -> dict:
        """Get a snapshot of all counters and timings."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {
                    name: stats.to_dict()
                    for name, stats in self._timings.items()
                },
            }


def increment_retries(count: int = 1) -> None:
    """Increment the engine retry counter."""
    Metrics.get().increment("engine_retries", count)


def observe_query_latency(duration_ms: float) -> None:
    """Record end-to-end query execution latency."""
    Metrics.get().observe("query_latency_ms", duration_ms)


@contextmanager
def time_engine_call() -> Iterator[None]:
    """Time an engine call (increments counter and records latency)."""
    Metrics.get().increment("engine_calls")
    with Metrics.get().timer("engine_latency_ms"):
        yield
