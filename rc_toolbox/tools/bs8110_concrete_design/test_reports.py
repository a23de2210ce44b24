from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import load_workbook

from .calc_trace import CalcTrace
from .exports import export_all
from .models import ContinuousBeamInputs, SpanInput
from .report_renderer import render_report_html
from .report_text import render_text
from .tool import TOOL


def _trace(module: str, inputs=None) -> CalcTrace:
    sol = TOOL.solve(module, inputs if inputs is not None else TOOL.default_inputs(module))
    tr = CalcTrace.new(
        tool_id="bs8110_concrete_design",
        tool_version="test",
        module=module,
        inputs=sol.inputs.model_dump(mode="json"),
        input_hash="testhash",
        units_system="SI (kN, m, mm, N/mm²)",
        code_basis="BS 8110-1:1997",
        defaults=TOOL.default_inputs(module),
    )
    tr.steps = list(sol.result.steps)
    tr.summary = sol.result.summary.model_dump(mode="json")
    if module == "continuous_beam":
        tr.tables["spans"] = [sr.model_dump(mode="json") for sr in sol.result.span_results]
    if sol.advisory is not None:
        tr.advisory = sol.advisory.model_dump(mode="json")
    tr.text_report = sol.text_report
    return tr


def test_beam_text_report_sections() -> None:
    text = TOOL.solve("beam", {}).text_report
    for heading in ("SECTION A", "SECTION B", "SECTION C", "SECTION D", "SECTION E", "SECTION F", "SECTION G"):
        assert heading in text
    assert "Ultimate Load: w = 1.4(15) + 1.6(10) = 37.00 kN/m" in text
    assert "Provide: 4T20 (1256 mm² provided)" in text
    assert "Provide: T8@337mm c/c" in text
    assert "DESIGN ADEQUATE" in text
    assert "All calculations comply with BS 8110-1:1997" in text
    assert "DESIGN ADVISORY" not in text


def test_failing_beam_text_has_advisory() -> None:
    sol = TOOL.solve("beam", {"width_mm": 150.0, "effective_depth_mm": 200.0, "dead_load_kn_m": 30.0, "live_load_kn_m": 20.0})
    text = sol.text_report
    assert "DESIGN INADEQUATE" in text
    assert "DESIGN ADVISORY" in text
    assert "Recommended actions:" in text
    assert "1. [P1]" in text


def test_slab_text_report() -> None:
    text = TOOL.solve("slab", {}).text_report
    assert "TWO-WAY SLAB DESIGN TO BS 8110-1:1997" in text
    assert "Panel: Interior Panel" in text
    assert "Long Span Steel:" in text

    one_way = TOOL.solve("slab", {"slab_type": "one-way"}).text_report
    assert "Distribution Steel:" in one_way


def test_continuous_text_is_step_blocks() -> None:
    sol = TOOL.solve("continuous_beam", {})
    text = sol.text_report
    assert text.startswith(sol.result.steps[0].title)
    assert all(st.title in text for st in sol.result.steps)
    assert text.count("  Result: ") == len(sol.result.steps)

    bad = ContinuousBeamInputs(
        spans=[SpanInput(length_m=8.0, dead_load_kn_m=40.0, live_load_kn_m=30.0)] * 2,
        width_mm=250.0,
        effective_depth_mm=350.0,
        beam_depth_mm=400.0,
    )
    failing = TOOL.solve("continuous_beam", bad)
    assert failing.advisory is not None
    assert "DESIGN ADVISORY" in failing.text_report


def test_render_text_unknown_module() -> None:
    with pytest.raises(ValueError):
        render_text("column", None)


def test_html_report_content() -> None:
    html_text = render_report_html(_trace("continuous_beam"))
    assert html_text.rstrip().endswith("</html>")
    assert "Continuous Beam Design to BS 8110-1:1997" in html_text
    assert "DESIGN ADEQUATE" in html_text
    assert "<h2>Span Results</h2>" in html_text
    assert "Step 1" in html_text
    assert "<h2>Design Advisory</h2>" not in html_text


def test_html_report_lists_advice() -> None:
    tr = _trace(
        "beam", {"width_mm": 150.0, "effective_depth_mm": 200.0, "dead_load_kn_m": 30.0, "live_load_kn_m": 20.0}
    )
    html_text = render_report_html(tr)
    assert "<h2>Design Advisory</h2>" in html_text
    assert "DESIGN INADEQUATE" in html_text


def test_export_all_writes_package(tmp_path: Path) -> None:
    tr = _trace("continuous_beam")
    outputs = export_all(tr, tmp_path, {"ok": True, "design_valid": True})
    for name in ("report.html", "report.txt", "report.pdf", "calc_trace.json", "results.json", "results.xlsx"):
        assert (tmp_path / name).exists(), name
    assert set(outputs) == {"html", "text", "pdf", "calc_trace", "results", "excel"}

    wb = load_workbook(tmp_path / "results.xlsx")
    assert wb.sheetnames == ["Inputs", "Assumptions", "Steps", "Spans", "Summary", "Advisory"]
    assert wb["Spans"].max_row == 3
    assert (tmp_path / "report.txt").read_text(encoding="utf-8") == tr.text_report


def test_export_subset_and_unknown_kind(tmp_path: Path) -> None:
    tr = _trace("slab")
    outputs = export_all(tr, tmp_path, {"ok": True}, kinds=["html", "json"])
    assert set(outputs) == {"html", "calc_trace", "results"}
    assert not (tmp_path / "report.pdf").exists()
    with pytest.raises(ValueError):
        export_all(tr, tmp_path, {"ok": True}, kinds=["docx"])
