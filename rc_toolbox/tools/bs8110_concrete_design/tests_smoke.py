from __future__ import annotations

import json
import os
from pathlib import Path
import shutil
import tempfile

from .tool import TOOL

REQUIRED = ["report.html", "report.txt", "report.pdf", "calc_trace.json", "results.json", "results.xlsx", "run.log"]


def _assert_artifacts(run_dir: Path) -> None:
    missing = [f for f in REQUIRED if not (run_dir / f).exists()]
    assert not missing, f"Missing artifacts in {run_dir}: {missing}"


def test_smoke_all_modules():
    tmp = Path(tempfile.mkdtemp(prefix="rctoolbox_localappdata_"))
    previous = os.environ.get("LOCALAPPDATA")
    try:
        os.environ["LOCALAPPDATA"] = str(tmp)  # force outputs to temp

        for module in ("beam", "continuous_beam", "slab"):
            r = TOOL.run_batch({"module": module, **TOOL.default_inputs(module)})
            assert r["ok"] is True, r.get("error")
            assert r["design_valid"] is True
            rd = Path(r["run_dir"])
            assert tmp in rd.parents
            _assert_artifacts(rd)

            stored = json.loads((rd / "results.json").read_text(encoding="utf-8"))
            assert stored["input_hash"] == r["input_hash"]
            trace = json.loads((rd / "calc_trace.json").read_text(encoding="utf-8"))
            assert trace["meta"]["module"] == module
            assert trace["meta"]["code_basis"] == "BS 8110-1:1997"
            assert "Batch run complete" in (rd / "run.log").read_text(encoding="utf-8")

        # same inputs, same hash
        a = TOOL.run_batch({"module": "beam", "span_m": 7.0})
        b = TOOL.run_batch({"module": "beam", "span_m": 7.0})
        assert a["input_hash"] == b["input_hash"]

        failing = TOOL.run_batch({"module": "beam", "width_mm": 150.0, "effective_depth_mm": 200.0,
                                  "dead_load_kn_m": 30.0, "live_load_kn_m": 20.0})
        assert failing["ok"] is True
        assert failing["design_valid"] is False
        assert failing["advisory"]["advice"]

        unknown = TOOL.run_batch({"module": "column"})
        assert unknown["ok"] is False and unknown["run_dir"] is None

        invalid = TOOL.run_batch({"module": "slab", "short_span_m": -4.0})
        assert invalid["ok"] is False and invalid["run_dir"] is None

    finally:
        if previous is None:
            os.environ.pop("LOCALAPPDATA", None)
        else:
            os.environ["LOCALAPPDATA"] = previous
        shutil.rmtree(tmp, ignore_errors=True)


if __name__ == "__main__":
    test_smoke_all_modules()
    print("tests_smoke.py: PASS")
