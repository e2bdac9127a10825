from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_NAME = "ibancheck.yaml"
DEFAULT_LOG_MAX_LINES = 5000

_TRUE = {"1", "true", "yes", "on"}


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data or {}


def save_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")


def deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


@dataclass(frozen=True)
class Settings:
    log_dir: Optional[Path] = None
    log_console: bool = False
    log_max_lines: int = DEFAULT_LOG_MAX_LINES
    log_detail: bool = True


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def _as_positive_int(value: Any, default: int) -> int:
    try:
        val = int(value)
    except (TypeError, ValueError):
        return default
    return val if val > 0 else default


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Načte sekci ``logging`` z YAML konfigurace (bez cesty ``./ibancheck.yaml``, pokud existuje),
    pak aplikuje env overrides:
    IBANCHECK_LOG_DIR, IBANCHECK_LOG_CONSOLE, IBANCHECK_LOG_MAX_LINES, IBANCHECK_LOG_DETAIL.
    """
    cfg = load_yaml(Path(path) if path is not None else Path.cwd() / DEFAULT_CONFIG_NAME)

    log_dir = os.environ.get("IBANCHECK_LOG_DIR") or deep_get(cfg, ["logging", "dir"])
    console = os.environ.get("IBANCHECK_LOG_CONSOLE") or deep_get(cfg, ["logging", "console"])
    max_lines = os.environ.get("IBANCHECK_LOG_MAX_LINES") or deep_get(cfg, ["logging", "max_lines"])
    detail = os.environ.get("IBANCHECK_LOG_DETAIL") or deep_get(cfg, ["logging", "detail"])

    return Settings(
        log_dir=Path(log_dir) if log_dir else None,
        log_console=_as_bool(console, False),
        log_max_lines=_as_positive_int(max_lines, DEFAULT_LOG_MAX_LINES),
        log_detail=_as_bool(detail, True),
    )
