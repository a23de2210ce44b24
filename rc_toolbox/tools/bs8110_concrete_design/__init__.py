from __future__ import annotations

from .tool import TOOL

__all__ = ["TOOL"]
