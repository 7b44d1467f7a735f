from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import List

import pytest

from topn_stream.core.records import Record, SortOrder, sort_records


@pytest.fixture(autouse=True)
def project_root(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "project"
    monkeypatch.setenv("PROJECT_ROOT", str(root))
    for name in ("LOG_DIR", "DATA_DIR", "LOG_LEVEL", "TOPN_RESULT_COUNT", "TOPN_BATCH_SIZE",
                 "TOPN_BUCKET_COUNT", "TOPN_SORT_ORDER", "TOPN_SEED", "TOPN_REQUIRE_URL_KEYS"):
        monkeypatch.delenv(name, raising=False)
    yield root
    logger = logging.getLogger("topn_stream")
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
    logger.propagate = True


def make_records(values: List[int], prefix: str = "http://x/") -> List[Record]:
    return [Record(key=f"{prefix}{i}", value=v) for i, v in enumerate(values)]


def ordered(records, order: SortOrder) -> List[Record]:
    out = list(records)
    sort_records(out, order)
    return out


def is_ordered(records: List[Record], order: SortOrder) -> bool:
    values = [r.value for r in records]
    if order.descending:
        return all(a >= b for a, b in zip(values, values[1:]))
    return all(a <= b for a, b in zip(values, values[1:]))


@pytest.fixture
def random_records() -> List[Record]:
    rnd = random.Random(1234)
    return make_records([rnd.randint(-1000, 1000) for _ in range(500)])


@pytest.fixture
def input_file(tmp_path) -> Path:
    p = tmp_path / "input.txt"
    p.write_text(
        "http://a.example/1 5\n"
        "http://a.example/2 9\n"
        "http://a.example/3 1\n"
        "http://a.example/4 7\n",
        encoding="utf-8",
    )
    return p
