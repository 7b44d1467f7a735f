from __future__ import annotations

from typing import List, Sequence

from ..core.histogram import Histogram, chi_square
from ..core.records import Record, SampleSlot

BAR_WIDTH = 40


def format_topn(records: Sequence[Record], verbose: bool = False) -> List[str]:
    if not verbose:
        return [r.key for r in records]
    lines: List[str] = []
    previous = records[0].value if records else 0
    for i, r in enumerate(records):
        lines.append(f"[{i}]  key = {r.key}, value = {r.value}  (delta = {r.value - previous})")
        previous = r.value
    return lines


def format_sample(slots: Sequence[SampleSlot], verbose: bool = False) -> List[str]:
    ordered = sorted(slots, key=lambda s: s.arrival_index)
    if not verbose:
        return [s.record.key for s in ordered]
    return [
        f"[{i}]  key = {s.record.key}, arrival = {s.arrival_index}, value = {s.record.value}"
        for i, s in enumerate(ordered)
    ]


def format_histogram(hist: Histogram) -> List[str]:
    peak = max((b.count for b in hist), default=0)
    lines = [f"Arrival histogram ({len(hist)} buckets over {hist.total_items_read} items)"]
    for (lo, hi), b in zip(hist.ranges(), hist):
        bar = "#" * (round(b.count / peak * BAR_WIDTH) if peak else 0)
        lines.append(f"[{lo:>12}, {hi:>12}]  {b.count:>8}  {bar}")
    lines.append(f"chi-square = {chi_square(hist):.3f} (df = {max(len(hist) - 1, 0)})")
    if hist.unassigned:
        lines.append(f"UNASSIGNED slots: {len(hist.unassigned)}")
    return lines


__all__ = ["format_topn", "format_sample", "format_histogram"]
