"""Exact Top-N selection over a stream in bounded memory.

Records are pulled in fixed-size batches. After each batch the new records are
appended to the running accumulator, the whole accumulator is re-ordered and
then cut back to ``result_count`` entries. Re-sorting the full accumulator is
more work than merging, but it keeps one simple property true after every
batch: the accumulator is exactly the ordered Top-N of everything consumed so
far, so a partial result is always a valid answer for the prefix.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator, List

from .records import Record, SortOrder, sort_records


def iter_batches(records: Iterable[Record], batch_size: int) -> Iterator[List[Record]]:
    """Yield consecutive lists of at most ``batch_size`` records."""
    it = iter(records)
    while True:
        batch = list(islice(it, batch_size))
        if not batch:
            return
        yield batch


class BatchTopNSelector:
    def __init__(self, result_count: int, sort_order: SortOrder = SortOrder.DESC) -> None:
        if result_count <= 0:
            raise ValueError(f"result_count must be positive, got {result_count}")
        self.result_count = result_count
        self.sort_order = sort_order
        self._acc: List[Record] = []
        self.records_seen = 0
        self.batches = 0

    def accumulate(self, batch: Iterable[Record]) -> None:
        before = len(self._acc)
        self._acc.extend(batch)
        self.records_seen += len(self._acc) - before
        self.batches += 1
        sort_records(self._acc, self.sort_order)
        del self._acc[self.result_count:]

    def consume(self, records: Iterable[Record], batch_size: int) -> None:
        """Drain ``records`` through :meth:`accumulate` in ``batch_size`` chunks."""
        for batch in iter_batches(records, batch_size):
            self.accumulate(batch)

    def snapshot(self) -> List[Record]:
        return list(self._acc)

    def finalize(self) -> List[Record]:
        return self.snapshot()

    def __len__(self) -> int:
        return len(self._acc)

    def __repr__(self) -> str:
        return (
            f"BatchTopNSelector(result_count={self.result_count}, "
            f"order={self.sort_order.value}, held={len(self._acc)}, "
            f"seen={self.records_seen}, batches={self.batches})"
        )


__all__ = ["BatchTopNSelector", "iter_batches"]
