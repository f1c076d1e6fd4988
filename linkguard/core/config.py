# linkguard/core/config.py
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"

_BUILTIN_DEFAULTS: Dict[str, Any] = {
    "scan": {
        "filter": "*.xls",
        "match": r".*\[.*\].*",
        "recurse": True,
        "depth": None,
        "format_code": 2,
        "engine": "auto",
        "filter_links": False,
    },
    "logging": {"level": "WARNING"},
    "reporting": {"write_json": True, "write_html": True, "top_n": 10, "max_cycles": 25},
}


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (over or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """
    Loads linkguard/config/settings.yaml (or `path`) over built-in defaults.

    An unreadable or malformed file is logged and ignored. Missing keys keep
    their defaults.
    """
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load config %s: %s", cfg_path, e)
        return copy.deepcopy(_BUILTIN_DEFAULTS)
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", cfg_path)
        return copy.deepcopy(_BUILTIN_DEFAULTS)
    return _merge(_BUILTIN_DEFAULTS, raw)


def cfg_get(cfg: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Safely fetch a dotted-path value from nested dict configs."""
    if not path:
        return default
    cur: Any = cfg
    for key in str(path).split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur.get(key)
    return cur
