from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from loguru import logger as _logger


def get_run_logger(run_dir: Path, tool_id: str, input_hash: Optional[str] = None) -> Tuple[Any, int]:
    """Run-scoped logger writing to <run_dir>/run.log.

    The application-level sinks (core.logging) stay in place; this adds a
    sink filtered to records bound to this tool and run directory.

    Returns:
      (bound logger, sink_id) - pass sink_id to remove_run_logger_sink when done.
    """
    run_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_dir / "run.log"

    bound = _logger.bind(tool_id=tool_id, run_dir=str(run_dir), input_hash=input_hash or "")
    sink_id = _logger.add(
        str(log_path),
        level="DEBUG",
        enqueue=False,
        backtrace=True,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[tool_id]} | {message}",
        filter=lambda r: r["extra"].get("tool_id") == tool_id and r["extra"].get("run_dir") == str(run_dir),
    )
    return bound, int(sink_id)


def remove_run_logger_sink(sink_id: Optional[int]) -> None:
    """Remove a sink created by get_run_logger (no-op for None)."""
    if sink_id is None:
        return
    try:
        _logger.remove(sink_id)
    except ValueError:
        # already removed (e.g. by a global logger.remove())
        pass
