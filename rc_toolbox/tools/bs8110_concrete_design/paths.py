from __future__ import annotations

import hashlib
import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from rc_toolbox.core.paths import runs_dir

from .constants import TOOL_ID


def create_run_dir(tool_id: str = TOOL_ID, input_hash: str | None = None) -> Path:
    """Run directory for one calc package.

    Location:
      <user data>/<tool_id>/runs/YYYYMMDD_HHMMSS_<short_hash>/

    The short hash is the input hash prefix plus a per-process random pair,
    so two runs of the same inputs in the same second do not collide.
    """
    root = runs_dir(tool_id)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    seed = f"{ts}:{os.getpid()}:{time.time_ns()}"
    rand = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:8]

    short = f"{str(input_hash)[:6]}{rand[:2]}" if input_hash else rand

    run_dir = root / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir


def _normalize(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, float):
        # stable float repr across platforms
        return float(f"{v:.12g}")
    if isinstance(v, dict):
        return {str(k): _normalize(v[k]) for k in sorted(v.keys())}
    if isinstance(v, (list, tuple)):
        return [_normalize(x) for x in v]
    return v


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic input hash over normalized, sorted keys (nested span lists included)."""
    payload = json.dumps(_normalize(inputs), sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
