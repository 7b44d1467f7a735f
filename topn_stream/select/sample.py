from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..core.config import Mode, RunConfig
from ..core.errors import ConfigurationError, TopNError
from ..core.histogram import Histogram, chi_square, summarize
from ..core.logging import setup_logging
from ..core.records import Record
from ..core.sampling import ReservoirSampler, SampleResult
from ..ingest.source import open_source


@dataclass
class SampleReport:
    result: SampleResult
    histogram: Histogram
    elapsed_ms: int = 0


def _now_ms() -> int:
    return int(time.time() * 1000)


def sample_records(records: Iterable[Record], config: RunConfig) -> SampleReport:
    """Reservoir-sample ``records`` and bucket the survivors by arrival index."""
    if config.mode is not Mode.SAMPLING:
        raise ConfigurationError(f"sampling needs mode=sampling, got {config.mode.value}")
    config.validate()
    sampler = ReservoirSampler(size=config.result_count, seed=config.seed)
    before = _now_ms()
    try:
        result = sampler.run(records)
    except TopNError as exc:
        if exc.partial is None:
            exc.partial = sampler.snapshot()
        raise
    histogram = summarize(result.reservoir, result.total_items_read, config.bucket_count)
    return SampleReport(result=result, histogram=histogram, elapsed_ms=_now_ms() - before)


def run_sample_select(input_path: str | Path, config: RunConfig, require_url: bool = True,
                      log_level: Optional[str] = None) -> SampleReport:
    log = setup_logging("topn_stream", level=log_level)
    log.info(f"sample_start input={input_path} n={config.result_count} buckets={config.bucket_count} seed={config.seed}")
    with open_source(input_path, require_url=require_url) as source:
        try:
            report = sample_records(source, config)
        except TopNError as exc:
            log.error(f"sample_failed lines_read={source.lines_read} error={exc}")
            raise
    res = report.result
    log.info(f"sample_done items={res.total_items_read} replacements={res.replacements} elapsed_ms={report.elapsed_ms}")
    log.info(f"sample_histogram chi_square={chi_square(report.histogram):.3f} unassigned={len(report.histogram.unassigned)}")
    return report
