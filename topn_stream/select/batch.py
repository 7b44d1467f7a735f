from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.config import Mode, RunConfig
from ..core.errors import ConfigurationError, TopNError
from ..core.logging import setup_logging
from ..core.records import Record
from ..core.topn import BatchTopNSelector
from ..ingest.source import open_source


@dataclass
class BatchReport:
    records: List[Record] = field(default_factory=list)
    records_read: int = 0
    batches: int = 0
    elapsed_ms: int = 0


def _now_ms() -> int:
    return int(time.time() * 1000)


def select_top_n(records: Iterable[Record], config: RunConfig) -> BatchReport:
    """Run the batch selector over ``records``; errors carry the partial result."""
    if config.mode is not Mode.BATCH:
        raise ConfigurationError(f"batch selection needs mode=batch, got {config.mode.value}")
    config.validate()
    selector = BatchTopNSelector(config.result_count, config.sort_order)
    before = _now_ms()
    try:
        selector.consume(records, config.batch_size)
    except TopNError as exc:
        exc.partial = selector.snapshot()
        raise
    return BatchReport(
        records=selector.finalize(),
        records_read=selector.records_seen,
        batches=selector.batches,
        elapsed_ms=_now_ms() - before,
    )


def run_batch_select(input_path: str | Path, config: RunConfig, require_url: bool = True,
                     log_level: Optional[str] = None) -> BatchReport:
    log = setup_logging("topn_stream", level=log_level)
    log.info(f"batch_start input={input_path} n={config.result_count} order={config.sort_order.value} batch_size={config.batch_size}")
    with open_source(input_path, require_url=require_url) as source:
        try:
            report = select_top_n(source, config)
        except TopNError as exc:
            log.error(f"batch_failed lines_read={source.lines_read} error={exc}")
            raise
    log.info(f"batch_loaded records={report.records_read} batches={report.batches} elapsed_ms={report.elapsed_ms}")
    if len(report.records) < config.result_count:
        log.warning(f"batch_short_result requested={config.result_count} available={len(report.records)}")
    return report
