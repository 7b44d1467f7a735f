from __future__ import annotations

import json
import sys
import time
from pathlib import Path
from typing import Any, List, NoReturn, Optional, Tuple

import click

from .core.config import Mode, RunConfig, Settings, ensure_dirs, load_settings
from .core.errors import ConfigurationError, TopNError
from .core.records import Record, SampleSlot
from .ingest.generate import generate_test_data
from .report.console import format_histogram, format_sample, format_topn
from .select.batch import run_batch_select
from .select.sample import run_sample_select


def _fail(exc: Exception, partial: Optional[List[Any]] = None, verbose: bool = False) -> NoReturn:
    click.echo(f"Error: {exc}", err=True)
    if partial:
        click.echo(f"Partial result at failure ({len(partial)} items):", err=True)
        if isinstance(partial[0], SampleSlot):
            lines = format_sample(partial, verbose=verbose)
        else:
            lines = format_topn([r for r in partial if isinstance(r, Record)], verbose=verbose)
        for line in lines:
            click.echo(line, err=True)
    sys.exit(1)


def _build_config(**overrides) -> Tuple[Settings, RunConfig]:
    try:
        s = load_settings()
        return s, RunConfig.from_settings(s, **overrides)
    except ConfigurationError as e:
        _fail(e)


@click.group()
def cli() -> None:
    """Bounded-memory Top-N and reservoir sampling over (key, value) streams."""


@cli.command()
def scaffold() -> None:
    """Create runtime directories (logs, data) from .env."""
    s = load_settings()
    ensure_dirs(s)
    click.echo("Project directories ensured under: %s" % s.project_root)


@cli.command()
@click.argument("input_path", metavar="INPUT")
@click.option("-n", "--count", "count", type=int, default=None, help="Number of results (default: TOPN_RESULT_COUNT)")
@click.option("--order", "order", type=click.Choice(["asc", "desc"]), default=None, help="Sort order (default: TOPN_SORT_ORDER)")
@click.option("--batch-size", "batch_size", type=int, default=None, help="Records per batch (default: TOPN_BATCH_SIZE)")
@click.option("--any-key", "any_key", is_flag=True, default=False, help="Accept keys that are not URLs")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print values and deltas")
@click.option("--log-level", "log_level", default=None, help="Override LOG_LEVEL")
def top(input_path: str, count: int | None, order: str | None, batch_size: int | None, any_key: bool, verbose: bool, log_level: str | None) -> None:
    """Exact Top-N of INPUT ('-' for stdin) via bounded-memory batching."""
    s, config = _build_config(mode=Mode.BATCH, result_count=count, sort_order=order, batch_size=batch_size)
    try:
        report = run_batch_select(input_path, config, require_url=s.require_url_keys and not any_key, log_level=log_level)
    except TopNError as e:
        _fail(e, e.partial, verbose)
    except OSError as e:
        _fail(e)
    click.echo(f"Top {config.result_count} Items")
    for line in format_topn(report.records, verbose=verbose):
        click.echo(line)


@cli.command()
@click.argument("input_path", metavar="INPUT")
@click.option("-n", "--count", "count", type=int, default=None, help="Reservoir size (default: TOPN_RESULT_COUNT)")
@click.option("--buckets", "buckets", type=int, default=None, help="Histogram buckets (default: TOPN_BUCKET_COUNT)")
@click.option("--seed", "seed", type=int, default=None, help="Random seed (default: TOPN_SEED or OS entropy)")
@click.option("--any-key", "any_key", is_flag=True, default=False, help="Accept keys that are not URLs")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print values and arrival indices")
@click.option("--log-level", "log_level", default=None, help="Override LOG_LEVEL")
def sample(input_path: str, count: int | None, buckets: int | None, seed: int | None, any_key: bool, verbose: bool, log_level: str | None) -> None:
    """Uniform reservoir sample of INPUT ('-' for stdin) plus arrival histogram."""
    s, config = _build_config(mode=Mode.SAMPLING, result_count=count, bucket_count=buckets, seed=seed)
    try:
        report = run_sample_select(input_path, config, require_url=s.require_url_keys and not any_key, log_level=log_level)
    except TopNError as e:
        _fail(e, e.partial, verbose)
    except OSError as e:
        _fail(e)
    click.echo(f"Sample of {config.result_count} Items from {report.result.total_items_read}")
    for line in format_sample(report.result.reservoir, verbose=verbose):
        click.echo(line)
    for line in format_histogram(report.histogram):
        click.echo(line)


@cli.command()
@click.argument("lines", type=int)
@click.option("-o", "--output", "output_path", default=None, help="Output file (default: DATA_DIR/test_data_<ts>.txt)")
@click.option("--seed", "seed", type=int, default=None, help="Random seed")
def generate(lines: int, output_path: str | None, seed: int | None) -> None:
    """Write LINES random '<url> <value>' records to a test data file."""
    try:
        if output_path is None:
            s = load_settings()
            ensure_dirs(s)
            output_path = str(Path(s.data_dir) / f"test_data_{int(time.time())}.txt")
        res = generate_test_data(output_path, lines, seed=seed)
    except (ConfigurationError, OSError) as e:
        _fail(e)
    click.echo(json.dumps(res, ensure_ascii=False))


if __name__ == "__main__":
    cli()
