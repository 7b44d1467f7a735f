from __future__ import annotations

import random
import time
from pathlib import Path
from typing import Dict, Optional

from ..core.errors import ConfigurationError
from ..core.records import INT64_MAX

URL_TEMPLATE = "http://api.tech.com/item/{item} {value}\n"


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_test_data(path: str | Path, num_lines: int, seed: Optional[int] = None) -> Dict[str, object]:
    """Write ``num_lines`` random ``<url> <value>`` lines to ``path``.

    Both numbers are uniform over ``[0, 2**63)``.
    """
    if num_lines < 0:
        raise ConfigurationError(f"num_lines must be >= 0, got {num_lines}")
    rnd = random.Random(seed)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    before = _now_ms()
    with out.open("w", encoding="utf-8") as f:
        for _ in range(num_lines):
            f.write(URL_TEMPLATE.format(item=rnd.randint(0, INT64_MAX), value=rnd.randint(0, INT64_MAX)))
    return {"path": str(out), "lines": num_lines, "elapsed_ms": _now_ms() - before}
