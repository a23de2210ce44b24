from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .calc_trace import CalcTrace, dump_trace_json
from .report_renderer import MODULE_TITLES, render_report_html

EXPORT_KINDS = ("html", "text", "pdf", "json", "excel")


def _autosize(ws):
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            val = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, max((len(line) for line in val.splitlines()), default=0))
        ws.column_dimensions[col_letter].width = min(80, max(10, max_len + 2))


def _cell(v: Any) -> Any:
    if isinstance(v, (dict, list)):
        return json.dumps(v, ensure_ascii=False)
    return v


def export_html(trace: CalcTrace, out_dir: Path) -> Path:
    p = out_dir / "report.html"
    p.write_text(render_report_html(trace), encoding="utf-8")
    return p


def export_text(trace: CalcTrace, out_dir: Path) -> Path:
    p = out_dir / "report.txt"
    p.write_text(trace.text_report, encoding="utf-8")
    return p


def export_pdf(trace: CalcTrace, out_dir: Path) -> Path:
    """
    Summary PDF: verdict, key outputs and advice. Full detail is in report.html.
    """
    p = out_dir / "report.pdf"
    c = canvas.Canvas(str(p), pagesize=letter)
    w, h = letter
    y = h - 72

    def line(text: str, font: str = "Helvetica", size: int = 9, indent: int = 84, step: int = 12) -> None:
        nonlocal y
        if y < 72:
            c.showPage()
            y = h - 72
        c.setFont(font, size)
        c.drawString(indent, y, text)
        y -= step

    summary = trace.summary or {}
    title = MODULE_TITLES.get(trace.meta.module, trace.meta.module)
    line(f"{title} Design to {trace.meta.code_basis or ''} - Calculation Package (Summary)", "Helvetica-Bold", 14, 72, 24)
    line(f"Tool: {trace.meta.tool_id} v{trace.meta.tool_version}", size=10, indent=72, step=14)
    line(f"Input hash: {trace.meta.input_hash}", size=10, indent=72, step=14)
    line(f"Generated: {trace.meta.timestamp}", size=10, indent=72, step=22)
    line("Note: Full step-by-step calcs are provided in report.html (offline).", indent=72, step=18)

    verdict = "DESIGN ADEQUATE" if summary.get("design_valid") else "DESIGN INADEQUATE"
    line(verdict, "Helvetica-Bold", 12, 72, 18)
    for reason in summary.get("failure_reasons") or []:
        line(f"- {reason}")

    y -= 6
    line("Key outputs:", "Helvetica-Bold", 10, 72, 14)
    for k, v in summary.items():
        if k in ("failure_reasons", "failures", "suggestions"):
            continue
        if isinstance(v, float):
            v = f"{v:.4g}"
        line(f"{k}: {v}")

    advice = (trace.advisory or {}).get("advice") or []
    if advice:
        y -= 6
        line("Design advisory:", "Helvetica-Bold", 10, 72, 14)
        for a in advice:
            line(f"[P{a['priority']}] {a['action']}")
            line(a["reason"], indent=96)

    c.showPage()
    c.save()
    return p


def export_json(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    p1 = out_dir / "calc_trace.json"
    dump_trace_json(trace, p1)

    p2 = out_dir / "results.json"
    p2.write_text(json.dumps(results, indent=2, ensure_ascii=False), encoding="utf-8")
    return {"calc_trace": p1, "results": p2}


def export_excel(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Path:
    wb = Workbook()

    # Inputs sheet
    ws = wb.active
    ws.title = "Inputs"
    ws.append(["id", "label", "value", "units", "source", "notes"])
    for i in trace.inputs:
        ws.append([i.id, i.label, _cell(i.value), i.units, i.source, i.notes])
    _autosize(ws)

    ws2 = wb.create_sheet("Assumptions")
    ws2.append(["id", "text"])
    for a in trace.assumptions:
        ws2.append([a.id, a.text])
    _autosize(ws2)

    ws3 = wb.create_sheet("Steps")
    ws3.append(["#", "title", "reference", "formula", "substitution", "result", "explanation", "status"])
    for n, s in enumerate(trace.steps, start=1):
        ws3.append([n, s.title, s.reference, s.formula, s.substitution, s.result, s.explanation, s.status])
    _autosize(ws3)

    # Per-span results (continuous beams only)
    ws4 = wb.create_sheet("Spans")
    spans = trace.tables.get("spans") or []
    if spans:
        headers = list(spans[0].keys())
        ws4.append(headers)
        for row in spans:
            ws4.append([_cell(row[k]) for k in headers])
    else:
        ws4.append(["No per-span results for this module"])
    _autosize(ws4)

    ws5 = wb.create_sheet("Summary")
    ws5.append(["key", "value"])
    for k, v in (trace.summary or {}).items():
        ws5.append([k, _cell(v)])
    ws5.append([])
    ws5.append(["ok", results.get("ok")])
    ws5.append(["design_valid", results.get("design_valid")])
    _autosize(ws5)

    ws6 = wb.create_sheet("Advisory")
    ws6.append(["priority", "action", "reason", "effectiveness", "category"])
    for a in (trace.advisory or {}).get("advice") or []:
        ws6.append([a["priority"], a["action"], a["reason"], a["effectiveness"], a["category"]])
    _autosize(ws6)

    p = out_dir / "results.xlsx"
    wb.save(p)
    return p


def export_all(
    trace: CalcTrace,
    out_dir: Path,
    results: Dict[str, Any],
    kinds: Optional[Iterable[str]] = None,
) -> Dict[str, Path]:
    """Write the calc package. `kinds` restricts the artifacts (settings 'exports')."""
    selected = set(EXPORT_KINDS if kinds is None else kinds)
    unknown = selected - set(EXPORT_KINDS)
    if unknown:
        raise ValueError(f"Unknown export kind(s): {sorted(unknown)}")

    outputs: Dict[str, Path] = {}
    if "html" in selected:
        outputs["html"] = export_html(trace, out_dir)
    if "text" in selected:
        outputs["text"] = export_text(trace, out_dir)
    if "pdf" in selected:
        outputs["pdf"] = export_pdf(trace, out_dir)
    if "json" in selected:
        outputs.update(export_json(trace, out_dir, results))
    if "excel" in selected:
        outputs["excel"] = export_excel(trace, out_dir, results)
    return outputs
