from __future__ import annotations

import json
from typing import Any, Dict

from loguru import logger

from rc_toolbox.core.paths import settings_path

DEFAULT_SETTINGS: Dict[str, Any] = {
    "log_level": "INFO",
    "exports": ["html", "text", "pdf", "json", "excel"],
}


def _checked(stored: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(stored)
    if not isinstance(out.get("log_level", ""), str):
        logger.warning(f"Ignoring settings log_level {out['log_level']!r}: expected a level name")
        out.pop("log_level")
    exports = out.get("exports", [])
    if not isinstance(exports, list) or not all(isinstance(k, str) for k in exports):
        logger.warning(f"Ignoring settings exports {exports!r}: expected a list of export kinds")
        out.pop("exports")
    return out


def load_settings() -> Dict[str, Any]:
    """User settings merged over DEFAULT_SETTINGS. A broken file or entry falls back to defaults."""
    data = dict(DEFAULT_SETTINGS)
    p = settings_path()
    if not p.exists():
        return data
    try:
        stored = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable settings file {p}: {e}")
        return data
    if not isinstance(stored, dict):
        logger.warning(f"Ignoring settings file {p}: expected a JSON object")
        return data
    data.update(_checked(stored))
    return data
