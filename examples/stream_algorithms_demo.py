"""
Quick demo of the two selection strategies:
- Exact Top-N via bounded-memory batching
- Reservoir Sampling (Algorithm R) with an arrival-order histogram
This is a lightweight educational example.
"""
from __future__ import annotations

import random
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from topn_stream.core.histogram import chi_square, summarize
from topn_stream.core.records import Record, SortOrder
from topn_stream.core.sampling import reservoir_sample
from topn_stream.core.topn import BatchTopNSelector
from topn_stream.report.console import format_histogram, format_topn


def synthetic_stream(n: int, seed: int = 42):
    rnd = random.Random(seed)
    for i in range(n):
        yield Record(key=f"http://api.tech.com/item/{i}", value=rnd.randint(0, 1_000_000))


if __name__ == "__main__":
    # Top-N
    selector = BatchTopNSelector(result_count=5, sort_order=SortOrder.DESC)
    selector.consume(synthetic_stream(10_000), batch_size=1_000)
    print("Top 5:")
    print("\n".join(format_topn(selector.finalize(), verbose=True)))

    # Reservoir
    res = reservoir_sample(synthetic_stream(10_000), k=200, seed=7)
    hist = summarize(res.reservoir, res.total_items_read, bucket_count=10)
    print()
    print("\n".join(format_histogram(hist)))
    print("replacements:", res.replacements, "chi2:", round(chi_square(hist), 3))
