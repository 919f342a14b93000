import random
import threading
import time

import pytest

from finance.series import BASELINE_SERIES, SeriesTicker, SyntheticSeries
from finance.schemas import TimeSeriesPoint


def test_baseline_has_eight_months():
    series = SyntheticSeries()
    assert len(series) == 8
    assert [p.month for p in series.snapshot()] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug"]
    assert series.latest() == TimeSeriesPoint("Aug", 1750000.0, 1200000.0)


def test_ticks_keep_labels_length_and_floor():
    series = SyntheticSeries(rng=random.Random(7))
    labels = [p.month for p in series.snapshot()]
    for _ in range(500):
        series.tick()
    snap = series.snapshot()
    assert len(snap) == 8
    assert [p.month for p in snap] == labels
    assert all(p.revenue >= 0 and p.expenses >= 0 for p in snap)
    assert series.ticks == 500


def test_tick_steps_are_bounded():
    series = SyntheticSeries(rng=random.Random(1))
    before = series.snapshot()
    after = series.tick()
    for old, new in zip(before, after):
        assert -62500 <= new.revenue - old.revenue <= 62500
        assert -37500 <= new.expenses - old.expenses <= 37500


def test_values_clamp_at_zero():
    series = SyntheticSeries([TimeSeriesPoint("Jan", 0.0, 0.0)], rng=random.Random(3))
    for _ in range(50):
        series.tick()
        point = series.latest()
        assert point.revenue >= 0
        assert point.expenses >= 0


def test_snapshot_is_not_modified_by_tick():
    series = SyntheticSeries(rng=random.Random(5))
    snap = series.snapshot()
    series.tick()
    assert snap == BASELINE_SERIES
    assert series.snapshot() is not snap


def test_same_seed_same_walk():
    a = SyntheticSeries(rng=random.Random(11))
    b = SyntheticSeries(rng=random.Random(11))
    assert a.tick() == b.tick()


def test_empty_series_rejected():
    with pytest.raises(ValueError):
        SyntheticSeries([])


def test_ticker_runs_and_stops():
    series = SyntheticSeries(rng=random.Random(2))
    ticker = SeriesTicker(series, interval=0.01)
    ticker.start()
    ticker.start()  # second start is a no-op
    deadline = time.time() + 2.0
    while series.ticks < 3 and time.time() < deadline:
        time.sleep(0.01)
    ticker.stop()
    assert series.ticks >= 3
    assert not ticker.running
    stopped_at = series.ticks
    time.sleep(0.05)
    assert series.ticks == stopped_at
    ticker.stop()  # stopping twice is harmless


def test_ticker_rejects_bad_interval():
    with pytest.raises(ValueError):
        SeriesTicker(SyntheticSeries(), interval=0)


class SlowSeries(SyntheticSeries):
    def tick(self):
        time.sleep(0.2)
        return super().tick()


def live_ticker_threads():
    return [t for t in threading.enumerate() if t.name == "series-ticker" and t.is_alive()]


def test_restart_during_slow_tick_leaves_one_thread():
    series = SlowSeries(rng=random.Random(4))
    ticker = SeriesTicker(series, interval=0.01)
    ticker.start()
    time.sleep(0.05)
    ticker.stop(timeout=0)
    ticker.start()
    time.sleep(0.5)
    try:
        assert len(live_ticker_threads()) == 1
    finally:
        ticker.stop()
    assert live_ticker_threads() == []
