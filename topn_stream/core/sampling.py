"""Single-pass reservoir sampling (Algorithm R) with arrival-index tracking.

The first ``k`` records seed the reservoir. Record ``i`` (zero-based, ``i >= k``)
then draws ``r`` uniformly from ``[0, i]`` inclusive and replaces slot ``r``
when ``r < k``. After ``i + 1`` records every one of them sits in the reservoir
with probability ``k / (i + 1)``.

Draws use :meth:`random.Random.randint`, which is built on ``getrandbits`` with
rejection sampling. It stays exactly uniform for ranges of any width, so
streams longer than 2**32 (or 2**64) records need no special handling.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .errors import InsufficientStreamError
from .records import Record, SampleSlot


@dataclass
class SampleResult:
    reservoir: List[SampleSlot]
    total_items_read: int
    replacements: int = 0

    def by_arrival(self) -> List[SampleSlot]:
        return sorted(self.reservoir, key=lambda s: s.arrival_index)

    def __len__(self) -> int:
        return len(self.reservoir)


@dataclass
class ReservoirSampler:
    """Fixed-size uniform sample of a record stream.

    Args:
        size: reservoir capacity ``N``; must be > 0.
        rng: random source; a fresh :class:`random.Random` seeded with ``seed``
            when omitted.
        seed: seed for the default random source.
    """

    size: int
    seed: Optional[int] = None
    rng: Optional[random.Random] = None
    _slots: List[SampleSlot] = field(default_factory=list, init=False, repr=False)
    items_read: int = field(default=0, init=False)
    replacements: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.rng is None:
            self.rng = random.Random(self.seed)

    @property
    def is_full(self) -> bool:
        return len(self._slots) >= self.size

    def offer(self, record: Record) -> bool:
        """Consider one record; returns True when it entered the reservoir."""
        i = self.items_read
        self.items_read += 1
        if i < self.size:
            self._slots.append(SampleSlot(record, i))
            return True
        r = self.rng.randint(0, i)
        if r < self.size:
            self._slots[r] = SampleSlot(record, i)
            self.replacements += 1
            return True
        return False

    def snapshot(self) -> List[SampleSlot]:
        return list(self._slots)

    def result(self) -> SampleResult:
        if not self.is_full:
            exc = InsufficientStreamError(self.size, self.items_read)
            exc.partial = self.snapshot()
            raise exc
        return SampleResult(
            reservoir=self.snapshot(),
            total_items_read=self.items_read,
            replacements=self.replacements,
        )

    def run(self, source: Iterable[Record]) -> SampleResult:
        for record in source:
            self.offer(record)
        return self.result()


def reservoir_sample(records: Iterable[Record], k: int, seed: Optional[int] = None) -> SampleResult:
    return ReservoirSampler(size=k, seed=seed).run(records)


__all__ = ["ReservoirSampler", "SampleResult", "reservoir_sample"]
