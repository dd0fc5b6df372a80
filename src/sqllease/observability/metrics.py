"""In-process metrics for lease and database activity."""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any


@dataclass
class Timing:
    """Running summary of observed values (durations in ms)."""

    samples: int = 0
    total: float = 0.0
    low: float = field(default=float("inf"))
    high: float = field(default=float("-inf"))

    def add(self, value: float) -> None:
        self.samples += 1
        self.total += value
        self.low = min(self.low, value)
        self.high = max(self.high, value)

    def summary(self) -> dict[str, Any]:
        if not self.samples:
            return {"count": 0, "total": 0.0, "min": None, "max": None, "avg": 0.0}
        return {
            "count": self.samples,
            "total": self.total,
            "min": self.low,
            "max": self.high,
            "avg": self.total / self.samples,
        }


class MetricsRegistry:
    """Lock-guarded counters and timings.

    Counter names used by the lease engine:

    - ``lease.acquire.count`` / ``lease.acquire.failed``
    - ``lease.renew.count`` / ``lease.renew.refused``
    - ``lease.release.count``
    - ``lease.sweep.deleted``

    Engines built by :func:`sqllease.db.base.create_engine` also record
    ``db.query.count`` and the ``db.query.duration_ms`` timing.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._counts: defaultdict[str, float] = defaultdict(float)
        self._timings: defaultdict[str, Timing] = defaultdict(Timing)

    def inc_counter(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counts[name] += amount

    def observe(self, name: str, value: float) -> None:
        with self._lock:
            self._timings[name].add(value)

    def get_counter(self, name: str) -> float:
        with self._lock:
            return self._counts.get(name, 0.0)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._timings.clear()

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counts),
                "histograms": {name: t.summary() for name, t in self._timings.items()},
            }


metrics = MetricsRegistry()
