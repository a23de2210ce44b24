from __future__ import annotations
import importlib
import pkgutil
from typing import Dict

from loguru import logger

from .tool_base import DesignTool

TOOLS_PKG = "rc_toolbox.tools"


def discover_tools() -> Dict[str, DesignTool]:
    """
    Design tools under rc_toolbox.tools.*, keyed by meta.id.

    Each package exports `TOOL` from its __init__ and declares at least one
    design module. Packages that fail to import are logged and skipped.
    """
    found: Dict[str, DesignTool] = {}
    pkg = importlib.import_module(TOOLS_PKG)
    for m in pkgutil.iter_modules(pkg.__path__):
        mod_name = f"{TOOLS_PKG}.{m.name}"
        try:
            mod = importlib.import_module(mod_name)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        tool = getattr(mod, "TOOL", None)
        if tool is None or not getattr(tool, "MODULES", None):
            logger.warning(f"Module {mod_name} exports no design tool; skipping.")
            continue
        if tool.meta.id in found:
            logger.warning(f"Duplicate tool id {tool.meta.id!r} in {mod_name}; keeping the first.")
            continue
        found[tool.meta.id] = tool
    # stable ordering
    return dict(sorted(found.items(), key=lambda kv: (kv[1].meta.category.lower(), kv[1].meta.name.lower())))


def find_tool(tool_id: str) -> DesignTool:
    tools = discover_tools()
    try:
        return tools[tool_id]
    except KeyError:
        raise KeyError(f"Unknown tool id {tool_id!r}; available: {', '.join(tools) or 'none'}") from None
