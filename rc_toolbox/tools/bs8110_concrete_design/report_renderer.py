from __future__ import annotations

import html
from typing import Any, Dict, List

from .calc_trace import CalcTrace

MODULE_TITLES = {
    "beam": "Simply Supported Beam",
    "continuous_beam": "Continuous Beam",
    "slab": "Slab",
}

_STATUS_TAGS = {"safe": "pass", "review": "warn", "unsafe": "fail"}

# one rule per class used in the markup below
_CSS = """
body{font-family:Arial,sans-serif; color:#111; margin:0;}
.page{max-width:1050px; margin:20px auto; padding:0 16px 30px;}
h1{font-size:19px; margin:0 0 4px;}
h2{font-size:15px; margin:20px 0 8px; border-bottom:1px solid #ccc;}
.meta, .small, .ref{color:#555; font-size:12px;}
table{border-collapse:collapse; width:100%; font-size:12px;}
th, td{border:1px solid #ccc; padding:4px 7px; text-align:left; vertical-align:top;}
.box{border:1px solid #ccc; background:#f7f7f7; padding:8px 10px; margin:8px 0;}
.eq{font-family:Consolas,monospace; white-space:pre-wrap;}
.result{font-weight:600; white-space:pre-wrap;}
.step{page-break-inside:avoid;}
.step-header{display:flex; gap:10px; align-items:baseline;}
.verdict{font-weight:700;} .pass{color:#0b6b0b;} .fail{color:#b00020;} .warn{color:#8a5a00;}
.tag{font-size:11px; border:1px solid currentColor; border-radius:8px; padding:1px 7px;}
"""


def _h(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def _fmt(v: Any) -> str:
    if isinstance(v, bool):
        return "Yes" if v else "No"
    if isinstance(v, float):
        return f"{v:.4g}" if abs(v) < 1 else f"{v:.2f}"
    if isinstance(v, list):
        return "; ".join(str(x) for x in v) if v and not isinstance(v[0], dict) else f"{len(v)} item(s)"
    return str(v)


def _table(headers: List[str], rows: List[List[Any]]) -> str:
    out = ["<table><thead><tr>"]
    out.extend(f"<th>{_h(c)}</th>" for c in headers)
    out.append("</tr></thead><tbody>")
    for r in rows:
        out.append("<tr>" + "".join(f"<td>{_h(c)}</td>" for c in r) + "</tr>")
    out.append("</tbody></table>")
    return "".join(out)


def render_report_html(trace: CalcTrace) -> str:
    meta = trace.meta
    title = f"{MODULE_TITLES.get(meta.module, meta.module)} Design to {meta.code_basis or ''} — Calculation Package"
    summary: Dict[str, Any] = trace.summary or {}
    valid = bool(summary.get("design_valid"))

    parts = []
    parts.append("<!doctype html><html><head><meta charset='utf-8'/>")
    parts.append(f"<title>{_h(title)}</title>")
    parts.append("<style>" + _CSS + "</style></head><body>")
    parts.append("<div class='page'>")
    parts.append(f"<h1>{_h(title)}</h1>")
    parts.append(
        "<div class='meta'>"
        f"Tool: {_h(meta.tool_id)} v{_h(meta.tool_version)} | Report version: {_h(meta.report_version)} | "
        f"Timestamp: {_h(meta.timestamp)} | Units: {_h(meta.units_system)} | Input hash: {_h(meta.input_hash)}"
        "</div>"
    )

    # Verdict
    parts.append("<h2>Summary</h2>")
    parts.append("<div class='box'>")
    parts.append(
        f"<div class='verdict {'pass' if valid else 'fail'}'>DESIGN {'ADEQUATE' if valid else 'INADEQUATE'}</div>"
    )
    if summary.get("failure_reasons"):
        parts.append("<ul>")
        for r in summary["failure_reasons"]:
            parts.append(f"<li>{_h(r)}</li>")
        parts.append("</ul>")
    rows = [
        [k, _fmt(v)]
        for k, v in summary.items()
        if k not in ("failure_reasons", "failures", "suggestions") and v is not None
    ]
    parts.append(_table(["Quantity", "Value"], rows))
    parts.append("</div>")

    # Inputs
    parts.append("<h2>Inputs</h2>")
    parts.append(
        _table(
            ["ID", "Label", "Value", "Units", "Source"],
            [[i.id, i.label, _fmt(i.value), i.units, i.source] for i in trace.inputs],
        )
    )

    parts.append("<h2>Assumptions &amp; Limitations</h2>")
    if trace.assumptions:
        parts.append("<ul>")
        for a in trace.assumptions:
            parts.append(f"<li>{_h(a.id)} — {_h(a.text)}</li>")
        parts.append("</ul>")
    else:
        parts.append("<div class='small'>None recorded.</div>")

    # Steps
    parts.append("<h2>Calculations</h2>")
    for st in trace.steps:
        parts.append("<div class='step'>")
        parts.append("<div class='step-header'>")
        parts.append(f"<div><strong>{_h(st.title)}</strong></div>")
        if st.reference:
            parts.append(f"<div class='ref'>[{_h(st.reference)}]</div>")
        if st.status:
            parts.append(f"<span class='tag {_STATUS_TAGS[st.status]}'>{_h(st.status.upper())}</span>")
        parts.append("</div>")
        parts.append("<div class='box'>")
        if st.formula:
            parts.append(f"<div class='eq'>{_h(st.formula)}</div>")
        if st.substitution:
            parts.append(f"<div class='eq'>{_h(st.substitution)}</div>")
        parts.append(f"<div class='result'>{_h(st.result)}</div>")
        if st.explanation:
            parts.append(f"<div class='small'>{_h(st.explanation)}</div>")
        parts.append("</div></div>")

    spans = trace.tables.get("spans")
    if spans:
        parts.append("<h2>Span Results</h2>")
        headers = list(spans[0].keys())
        parts.append(_table(headers, [[_fmt(s[k]) for k in headers] for s in spans]))

    if trace.advisory and trace.advisory.get("advice"):
        parts.append("<h2>Design Advisory</h2>")
        failures = trace.advisory.get("failures") or []
        if failures:
            parts.append("<ul>")
            for f in failures:
                parts.append(
                    f"<li><span class='tag fail'>FAIL</span> {_h(f['description'])} "
                    f"({_h(_fmt(f['current_value']))} vs limit {_h(_fmt(f['limit_value']))} {_h(f.get('unit', ''))})</li>"
                )
            parts.append("</ul>")
        parts.append(
            _table(
                ["Priority", "Action", "Reason", "Effectiveness", "Category"],
                [[a["priority"], a["action"], a["reason"], a["effectiveness"], a["category"]] for a in trace.advisory["advice"]],
            )
        )

    parts.append("<div class='meta'>")
    parts.append(f"Generated by {_h(meta.tool_id)} v{_h(meta.tool_version)} | Input hash: {_h(meta.input_hash)}")
    parts.append("</div>")

    parts.append("</div></body></html>")
    return "".join(parts)
