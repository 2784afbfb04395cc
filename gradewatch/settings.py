# gradewatch/settings.py
"""Run configuration.

Secrets come from the environment (a ``.env`` file is loaded by the
runner); behaviour comes from ``config/config.json``:

    {
      "grading_term": "Term 2",
      "grading_period_name_sort": false,
      "debugging_mode": false,
      "name_all_results": true,
      "store": "workers_kv",
      "scale": [{"minpercent": 90, "lettergrade": "A", "colour": "green"}, ...],
      "colors": {"green": "bold green", "red": "\\u001b[31m"}
    }
"""
from __future__ import annotations

import json
import os
import pathlib
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from gradewatch.display import check_style, normalize_colors
from gradewatch.scale import DEFAULT_SCALE, GradeScaleTier, parse_scale
from gradewatch.terms import FallbackPolicy

ROOT = pathlib.Path(__file__).resolve().parents[1]  # repo root
CONFIG_PATH = ROOT / "config" / "config.json"
DB_PATH = ROOT / "config" / "grades.db"

DEFAULT_TERM = "Term 2"

KV_ENV = ("CLOUDFLARE_ACCOUNT_ID", "CLOUDFLARE_API_KEY", "CLOUDFLARE_NAMESPACE_ID")


class ConfigError(Exception):
    """Required configuration is missing or unreadable."""


@dataclass(frozen=True)
class Settings:
    canvas_token: str
    canvas_domain: str
    grading_term: str = DEFAULT_TERM
    fallback_policy: FallbackPolicy = FallbackPolicy.END_DATE
    debugging_mode: bool = False
    name_all_results: bool = True
    scale: List[GradeScaleTier] = field(default_factory=lambda: list(DEFAULT_SCALE))
    colors: Dict[str, str] = field(default_factory=dict)
    lms: str = "canvas"
    store: str = "workers_kv"
    db_path: pathlib.Path = DB_PATH
    cf_account_id: Optional[str] = None
    cf_api_token: Optional[str] = None
    cf_namespace_id: Optional[str] = None

    def validate(self) -> "Settings":
        if not self.canvas_token:
            raise ConfigError("The CANVAS_API_KEY is not set in your .env file.")
        if not self.canvas_domain:
            raise ConfigError("The CANVAS_DOMAIN is not set in your .env file.")
        if self.store == "workers_kv" and not (self.cf_account_id and self.cf_api_token and self.cf_namespace_id):
            raise ConfigError(f"{', '.join(KV_ENV[:-1])}, and {KV_ENV[-1]} must be set in .env")
        return self

    def with_overrides(self, **changes: Any) -> "Settings":
        """Copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def read_config_file(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return data


def read_colors(raw: Any, scale: List[GradeScaleTier]) -> Dict[str, str]:
    """Colour overrides as rich styles; ANSI escapes from older configs are translated."""
    if raw is not None and not isinstance(raw, dict):
        raise ConfigError("colors must be a JSON object of colour name -> style")
    try:
        colors = normalize_colors(raw or {})
        for name in [*colors, *(tier.colour for tier in scale if tier.colour)]:
            check_style(name, colors)
    except ValueError as e:
        raise ConfigError(f"Invalid colour configuration: {e}") from e
    return colors


def load_settings(config_path: Optional[pathlib.Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    cfg = read_config_file(pathlib.Path(config_path) if config_path else CONFIG_PATH)

    scale = parse_scale(cfg["scale"]) if isinstance(cfg.get("scale"), list) else list(DEFAULT_SCALE)
    policy = FallbackPolicy.NAME_SORT if cfg.get("grading_period_name_sort") else FallbackPolicy.END_DATE
    colors = read_colors(cfg.get("colors"), scale)

    return Settings(
        canvas_token=(env.get("CANVAS_API_KEY") or "").strip(),
        canvas_domain=(env.get("CANVAS_DOMAIN") or "").strip(),
        grading_term=cfg.get("grading_term") or DEFAULT_TERM,
        fallback_policy=policy,
        debugging_mode=bool(cfg.get("debugging_mode", False)),
        name_all_results=cfg.get("name_all_results") is not False,
        scale=scale,
        colors=colors,
        lms=cfg.get("lms") or "canvas",
        store=cfg.get("store") or "workers_kv",
        db_path=pathlib.Path(cfg["db_path"]) if cfg.get("db_path") else DB_PATH,
        cf_account_id=env.get("CLOUDFLARE_ACCOUNT_ID"),
        cf_api_token=env.get("CLOUDFLARE_API_KEY"),
        cf_namespace_id=env.get("CLOUDFLARE_NAMESPACE_ID"),
    )
