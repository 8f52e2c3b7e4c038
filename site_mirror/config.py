# === FILE: site_mirror/config.py ===
"""
Loading and validation of the SiteMirror configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from site_mirror.extractor import HtmlMatch
from site_mirror.frontier import DEFAULT_BUDGET
from site_mirror.urls import validate_seed
from site_mirror.writer import CollisionPolicy

DEFAULT_SEED_URL = "https://example.com"


class MirrorConfig(BaseModel):
    """Configuration of a single mirror run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: str = Field(DEFAULT_SEED_URL, validate_default=True, description="URL the crawl starts from.")
    output_dir: Path = Field(Path("output"), description="Root of the mirrored tree.")
    max_requests: int = Field(DEFAULT_BUDGET, ge=1, description="Hard cap on requests per crawl.")
    concurrency: int = Field(8, ge=1, description="Number of concurrent fetch workers.")
    timeout: float = Field(15.0, gt=0, description="Timeout for one request (seconds).")
    user_agent: str = Field("SiteMirrorBot/1.0", min_length=1, description="User-Agent header.")
    retry_times: int = Field(2, ge=0, description="Retries on 5xx/429 and connection errors.")
    retry_backoff: float = Field(1.0, ge=0, description="First retry delay (seconds), doubled per attempt.")
    html_match: HtmlMatch = Field(HtmlMatch.LOOSE, description="How anchors are judged to be pages.")
    on_collision: CollisionPolicy = Field(
        CollisionPolicy.OVERWRITE, description="Handling of two URLs with the same file name."
    )

    @field_validator("seed_url", mode="before")
    def _check_seed(cls, v: Any) -> Any:
        if isinstance(v, str):
            # SeedInvalid is a ValueError, pydantic reports it as a ValidationError
            return validate_seed(v.strip())
        return v


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


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> MirrorConfig:
    """
    Read YAML or JSON and return a validated MirrorConfig.
    Keyword overrides whose value is not None replace values from the file.
    Without a path the defaults plus overrides are used.
    """
    data: dict[str, Any] = {}
    if path is not None:
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

    data.update({k: v for k, v in overrides.items() if v is not None})
    return MirrorConfig(**data)


__all__ = ["MirrorConfig", "load_config", "DEFAULT_SEED_URL", "ValidationError"]
