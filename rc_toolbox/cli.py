from __future__ import annotations

"""Command-line entry point (console script `rc-toolbox`)."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from rc_toolbox.core.loader import discover_tools, find_tool
from rc_toolbox.core.logging import configure_logging
from rc_toolbox.core.settings import load_settings

DEFAULT_TOOL = "bs8110_concrete_design"


def _cmd_list(args: argparse.Namespace) -> int:
    for tool in discover_tools().values():
        m = tool.meta
        print(f"{m.id}  v{m.version}  [{m.category}]  {m.name} ({m.code_basis})")
        print(f"    modules: {', '.join(tool.MODULES)}")
    return 0


def _cmd_defaults(args: argparse.Namespace) -> int:
    tool = find_tool(args.tool)
    print(json.dumps(tool.default_inputs(args.module), indent=2))
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    tool = find_tool(args.tool)
    inputs = {}
    if args.inputs:
        p = Path(args.inputs)
        try:
            inputs = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Cannot read inputs file {p}: {e}")
            return 2
        if not isinstance(inputs, dict):
            logger.error(f"Inputs file {p} must hold a JSON object")
            return 2
    results = tool.run_batch({**inputs, "module": args.module})
    if not results.get("ok"):
        print(results.get("error", "Run failed"), file=sys.stderr)
        return 2
    if args.text:
        print(results["text_report"])
    else:
        print(json.dumps(results, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rc-toolbox", description="BS 8110-1:1997 reinforced concrete design")
    ap.add_argument("--tool", default=DEFAULT_TOOL, help="Tool id (see `list`)")
    ap.add_argument("--log-level", default=None, help="Console log level (overrides settings)")
    sub = ap.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List installed tools and their modules")
    p_list.set_defaults(func=_cmd_list)

    p_def = sub.add_parser("defaults", help="Print a module's default inputs as JSON")
    p_def.add_argument("module")
    p_def.set_defaults(func=_cmd_defaults)

    p_run = sub.add_parser("run", help="Run a design and write the calc package")
    p_run.add_argument("module")
    p_run.add_argument("--inputs", help="JSON file with module inputs (defaults fill the rest)")
    p_run.add_argument("--text", action="store_true", help="Print the text report instead of results JSON")
    p_run.set_defaults(func=_cmd_run)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(args.log_level or settings.get("log_level", "INFO"))
    try:
        return int(args.func(args))
    except (KeyError, ValueError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
