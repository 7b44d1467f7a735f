from __future__ import annotations

import pytest

from topn_stream.core.histogram import bucket_bounds, chi_square, summarize
from topn_stream.core.records import Record, SampleSlot
from topn_stream.core.sampling import reservoir_sample

from conftest import make_records


def _slots(indices):
    return [SampleSlot(Record(f"http://x/{i}", i), i) for i in indices]


def test_scenario_hundred_items_four_buckets():
    res = reservoir_sample(make_records(list(range(100))), k=10, seed=4)
    hist = summarize(res.reservoir, res.total_items_read, 4)
    assert [b.upper_bound for b in hist] == [25, 50, 75, 100]
    assert hist.total == 10
    assert hist.unassigned == []


def test_remainder_goes_to_last_bucket():
    assert bucket_bounds(103, 4) == [25, 50, 75, 103]


def test_fewer_items_than_buckets():
    assert bucket_bounds(3, 5) == [0, 0, 0, 0, 3]
    hist = summarize(_slots([0, 1, 2]), 3, 5)
    assert [b.count for b in hist] == [1, 0, 0, 0, 2]


@pytest.mark.parametrize("total,count", [(1, 1), (10, 3), (97, 10), (1000, 7), (5, 5)])
def test_ranges_cover_without_gaps_or_overlaps(total, count):
    hist = summarize([], total, count)
    ranges = hist.ranges()
    assert len(ranges) == count
    assert ranges[0][0] == 0
    assert ranges[-1][1] == total - 1
    for (_, hi1), (lo2, _) in zip(ranges, ranges[1:]):
        assert lo2 == hi1 + 1
    assert sum(max(hi - lo + 1, 0) for lo, hi in ranges) == total
    bounds = [b.upper_bound for b in hist]
    assert bounds == sorted(bounds)


def test_index_equal_to_upper_bound_stays_in_that_bucket():
    hist = summarize(_slots([0, 24, 25, 49, 50, 99]), 100, 4)
    assert [b.count for b in hist] == [3, 2, 1, 0]
    assert hist.ranges() == [(0, 25), (26, 50), (51, 75), (76, 99)]


def test_single_slot_on_first_boundary():
    hist = summarize(_slots([25]), 100, 4)
    assert hist[0].count == 1


def test_every_slot_counted_once():
    res = reservoir_sample(make_records(list(range(12345))), k=50, seed=8)
    hist = summarize(res.reservoir, res.total_items_read, 9)
    assert hist.total == 50


def test_out_of_range_slot_is_reported_not_dropped():
    slots = _slots([1, 5]) + [SampleSlot(Record("http://bad", 0), 10), SampleSlot(Record("http://neg", 0), -1)]
    hist = summarize(slots, 10, 2)
    assert hist.total == 2
    assert [s.record.key for s in hist.unassigned] == ["http://bad", "http://neg"]


def test_chi_square_is_near_zero_for_even_sample():
    hist = summarize(_slots([5, 15, 25, 35]), 40, 4)
    assert [b.count for b in hist] == [1, 1, 1, 1]
    assert chi_square(hist) < 0.05


def test_chi_square_flags_skew():
    hist = summarize(_slots(range(10)), 1000, 4)
    assert [b.count for b in hist] == [10, 0, 0, 0]
    assert chi_square(hist) > 25


def test_invalid_bucket_count():
    with pytest.raises(ValueError):
        summarize([], 10, 0)
