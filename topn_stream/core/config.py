from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigurationError
from .records import SortOrder


ROOT = Path(__file__).resolve().parents[2]


def _load_env_file(env_path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    if not env_path.exists():
        return data
    for line in env_path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#") or "=" not in s:
            continue
        k, v = s.split("=", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        # simple ${PROJECT_ROOT} expansion
        if "${PROJECT_ROOT}" in v:
            v = v.replace("${PROJECT_ROOT}", os.environ.get("PROJECT_ROOT", "project"))
        data[k] = v
    return data


def _ensure_env_loaded() -> None:
    # one-time soft load
    env_path = ROOT / ".env"
    loaded = _load_env_file(env_path)
    for k, v in loaded.items():
        os.environ.setdefault(k, v)


def _abs(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    return (ROOT / p).resolve()


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return _parse_int(name, raw)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Mode(str, Enum):
    BATCH = "batch"
    SAMPLING = "sampling"


@dataclass
class Settings:
    project_root: Path
    log_dir: Path
    data_dir: Path
    log_level: str = "INFO"
    result_count: int = 10
    # mode-specific values stay raw until a run in that mode asks for them
    batch_size: str = "100000"
    bucket_count: str = "10"
    sort_order: str = "desc"
    seed: Optional[int] = None
    require_url_keys: bool = True


def load_settings() -> Settings:
    _ensure_env_loaded()
    project_root = _abs(os.environ.get("PROJECT_ROOT", "project"))
    logs = _abs(os.environ.get("LOG_DIR", f"{project_root}/logs"))
    data = _abs(os.environ.get("DATA_DIR", f"{project_root}/data"))
    seed_raw = os.environ.get("TOPN_SEED")
    return Settings(
        project_root=project_root,
        log_dir=logs,
        data_dir=data,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        result_count=_env_int("TOPN_RESULT_COUNT", 10),
        batch_size=(os.environ.get("TOPN_BATCH_SIZE") or "100000").strip(),
        bucket_count=(os.environ.get("TOPN_BUCKET_COUNT") or "10").strip(),
        sort_order=(os.environ.get("TOPN_SORT_ORDER") or "desc").strip().lower(),
        seed=_env_int("TOPN_SEED", 0) if seed_raw else None,
        require_url_keys=_env_flag("TOPN_REQUIRE_URL_KEYS", True),
    )


def ensure_dirs(s: Settings) -> None:
    for p in [s.project_root, s.log_dir, s.data_dir]:
        p.mkdir(parents=True, exist_ok=True)


def _check_positive(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")


@dataclass(frozen=True)
class RunConfig:
    """Immutable per-run configuration handed to the selection engine.

    Built once at startup (usually via :meth:`from_settings`) and validated
    before the first record is read. Nothing below the CLI looks at the
    environment; everything a run needs is carried here.
    """

    result_count: int
    mode: Mode = Mode.BATCH
    sort_order: SortOrder = SortOrder.DESC
    batch_size: int = 100_000
    bucket_count: int = 10
    seed: Optional[int] = None

    @classmethod
    def from_settings(cls, s: Settings, **overrides) -> "RunConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        try:
            values["mode"] = Mode(values.get("mode", Mode.BATCH))
        except ValueError:
            raise ConfigurationError(f"unknown mode: {values.get('mode')!r}") from None
        values.setdefault("result_count", s.result_count)
        values.setdefault("seed", s.seed)
        if values["mode"] is Mode.BATCH:
            if "batch_size" not in values:
                values["batch_size"] = _parse_int("TOPN_BATCH_SIZE", s.batch_size)
            values["sort_order"] = SortOrder.parse(values.get("sort_order", s.sort_order))
        else:
            if "bucket_count" not in values:
                values["bucket_count"] = _parse_int("TOPN_BUCKET_COUNT", s.bucket_count)
            if "sort_order" in values:
                values["sort_order"] = SortOrder.parse(values["sort_order"])
        return cls(**values).validate()

    def validate(self) -> "RunConfig":
        if not isinstance(self.mode, Mode):
            raise ConfigurationError(f"unknown mode: {self.mode!r}")
        if not isinstance(self.sort_order, SortOrder):
            raise ConfigurationError(f"unknown sort order: {self.sort_order!r}")
        _check_positive("result_count", self.result_count)
        if self.mode is Mode.BATCH:
            _check_positive("batch_size", self.batch_size)
        else:
            _check_positive("bucket_count", self.bucket_count)
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer, got {self.seed!r}")
        return self

