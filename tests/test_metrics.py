"""
Metrics registry tests.
"""

from sqllease.observability.metrics import MetricsRegistry


def test_counters_accumulate_and_reset():
    registry = MetricsRegistry()

    registry.inc_counter("lease.acquire.count")
    registry.inc_counter("lease.sweep.deleted", 3)

    assert registry.get_counter("lease.acquire.count") == 1
    assert registry.get_counter("lease.sweep.deleted") == 3
    assert registry.get_counter("never.seen") == 0

    registry.reset()
    assert registry.snapshot() == {"counters": {}, "histograms": {}}


def test_timing_summary():
    registry = MetricsRegistry()

    for value in (4.0, 1.0, 7.0):
        registry.observe("db.query.duration_ms", value)

    summary = registry.snapshot()["histograms"]["db.query.duration_ms"]
    assert summary == {"count": 3, "total": 12.0, "min": 1.0, "max": 7.0, "avg": 4.0}
