# === FILE: link_scout/config.py ===
"""
Loading and validation of LinkScout configuration.
Pydantic describes the schema; YAML or JSON files feed it.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["CrawlConfig", "RankConfig", "Settings", "load_config", "override"]

#: hard ceiling on visited URLs; guards against query-string crawler traps
DEFAULT_MAX_PAGES = 10_000


class CrawlConfig(BaseModel):
    """Options consumed by the crawl engine and its fetcher."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    concurrency: int = Field(10, gt=0, description="Maximum simultaneous fetches.")
    timeout: float = Field(10.0, gt=0, description="Per-fetch timeout (seconds).")
    max_depth: int = Field(0, ge=0, description="Maximum link depth, 0 = unlimited.")
    max_pages: int = Field(DEFAULT_MAX_PAGES, ge=1, description="Safety cap on visited URLs.")
    user_agent: str = Field("LinkScout/1.0", min_length=1, description="User-Agent header.")
    max_redirects: int = Field(10, ge=0, le=10, description="Redirect hop cap (at most 10).")
    check_robots: bool = Field(True, description="Consult robots.txt (indexability tool).")

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


class RankConfig(BaseModel):
    """PageRank power-iteration settings."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    damping_factor: float = Field(0.85, gt=0, le=1, description="Damping factor d in (0, 1].")
    max_iterations: int = Field(100, gt=0, description="Iteration ceiling.")
    tolerance: float = Field(1e-6, gt=0, description="L1 convergence threshold.")


class Settings(BaseModel):
    """Top-level configuration file layout: ``crawl`` and ``rank`` sections."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    rank: RankConfig = Field(default_factory=RankConfig)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> Settings:
    """
    Read YAML or JSON and return validated :class:`Settings`.

    With ``path=None`` the file ``configs/default.yaml`` is used when present,
    otherwise built-in defaults. An explicit path that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return Settings()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return Settings(**data)


def override(model: BaseModel, **changes: Any) -> Any:
    """Return a re-validated copy of *model* with non-None *changes* applied."""
    updates: Dict[str, Any] = {k: v for k, v in changes.items() if v is not None}
    if not updates:
        return model
    return type(model).model_validate({**model.model_dump(), **updates})
