from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import load_settings, ensure_dirs


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(name: str = "topn_stream", level: Optional[str] = None) -> logging.Logger:
    s = load_settings()
    ensure_dirs(s)
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or s.log_level).upper(), logging.INFO))
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    # stderr; stdout carries the report
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(JsonLineFormatter())
    logger.addHandler(sh)

    # file handler
    log_file = Path(s.log_dir) / f"{name}.log"
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(JsonLineFormatter())
    logger.addHandler(fh)

    logger.propagate = False
    return logger
