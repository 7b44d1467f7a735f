"""Arrival-order histogram of a reservoir, used to audit sampling uniformity.

Bucket ``b`` has upper bound ``(b + 1) * (total_items_read // bucket_count)``; the
last one absorbs the remainder so its bound is exactly ``total_items_read``.
Each arrival index goes to the first bucket whose upper bound is >= the index,
so bucket ``b`` holds the indices in ``(previous bound, own bound]`` (the first
one starts at 0), clipped to the valid range ``[0, total_items_read)``. A sample
drawn without bias spreads its arrival indices roughly in proportion to
bucket width.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from .records import Bucket, SampleSlot

logger = logging.getLogger(__name__)


@dataclass
class Histogram:
    buckets: List[Bucket]
    total_items_read: int
    unassigned: List[SampleSlot] = field(default_factory=list)

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    def __len__(self) -> int:
        return len(self.buckets)

    def __getitem__(self, index: int) -> Bucket:
        return self.buckets[index]

    @property
    def total(self) -> int:
        return sum(b.count for b in self.buckets)

    def ranges(self) -> List[tuple[int, int]]:
        """Inclusive ``(first, last)`` arrival indices per bucket; empty when first > last."""
        out = []
        lo = 0
        for b in self.buckets:
            out.append((lo, min(b.upper_bound, self.total_items_read - 1)))
            lo = b.upper_bound + 1
        return out


def bucket_bounds(total_items_read: int, bucket_count: int) -> List[int]:
    if bucket_count <= 0:
        raise ValueError(f"bucket_count must be positive, got {bucket_count}")
    if total_items_read < 0:
        raise ValueError(f"total_items_read must be >= 0, got {total_items_read}")
    width = total_items_read // bucket_count
    bounds = [width * (b + 1) for b in range(bucket_count - 1)]
    bounds.append(total_items_read)
    return bounds


def _find_bucket(buckets: List[Bucket], arrival_index: int, total_items_read: int) -> Optional[Bucket]:
    if not 0 <= arrival_index < total_items_read:
        return None
    for b in buckets:
        if arrival_index <= b.upper_bound:
            return b
    return None


def summarize(reservoir: Iterable[SampleSlot], total_items_read: int, bucket_count: int) -> Histogram:
    buckets = [Bucket(upper_bound=ub) for ub in bucket_bounds(total_items_read, bucket_count)]
    hist = Histogram(buckets=buckets, total_items_read=total_items_read)
    for slot in reservoir:
        bucket = _find_bucket(buckets, slot.arrival_index, total_items_read)
        if bucket is None:
            hist.unassigned.append(slot)
            logger.error(
                "histogram_unassigned arrival_index=%s total_items_read=%s key=%s",
                slot.arrival_index,
                total_items_read,
                slot.record.key,
            )
            continue
        bucket.count += 1
    return hist


def chi_square(hist: Histogram) -> float:
    """Pearson statistic against width-proportional expected counts."""
    n = hist.total
    total = hist.total_items_read
    if n == 0 or total == 0:
        return 0.0
    stat = 0.0
    for (lo, hi), bucket in zip(hist.ranges(), hist.buckets):
        width = hi - lo + 1
        if width <= 0:
            continue
        expected = n * width / total
        stat += (bucket.count - expected) ** 2 / expected
    return stat


__all__ = ["Histogram", "bucket_bounds", "summarize", "chi_square"]
