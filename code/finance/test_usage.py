import pytest

from finance.usage import UsageStats


def test_counters_increment_by_one():
    stats = UsageStats()
    assert stats.record_simulation() == 1
    assert stats.record_simulation() == 2
    assert stats.record_export() == 1
    assert (stats.simulations, stats.exports) == (2, 1)
    assert stats.total_actions == 3


def test_counters_are_independent():
    stats = UsageStats(simulations=12, exports=5)
    stats.record_export()
    assert stats.simulations == 12
    assert stats.exports == 6


def test_negative_start_rejected():
    with pytest.raises(ValueError):
        UsageStats(simulations=-1)
