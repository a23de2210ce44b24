from __future__ import annotations

"""Plain-text design reports (the "copy as text" format)."""

from typing import List, Optional

from .constants import CODE_BASIS
from .models import AdvisoryResult, BeamResult, ContinuousBeamResult, DesignAdvice, SlabResult, TwoWaySlabSummary

RULE = "=" * 60


def _pass(ok: bool) -> str:
    return "PASS" if ok else "FAIL"


def _closing(lines: List[str], design_valid: bool, failure_reasons: List[str]) -> None:
    lines.append("SECTION G — FINAL DESIGN SUMMARY")
    if failure_reasons:
        for reason in failure_reasons:
            lines.append(f"- {reason}")
    else:
        lines.append("All design checks satisfied")
    lines.append("")
    lines.append(RULE)
    lines.append(f"DESIGN {'ADEQUATE' if design_valid else 'INADEQUATE'}")
    lines.append(f"All calculations comply with {CODE_BASIS}")


def _advice_lines(advice: List[DesignAdvice]) -> List[str]:
    return [
        f"{i}. [P{a.priority}] {a.action} ({a.effectiveness} effectiveness, {a.category})\n   {a.reason}"
        for i, a in enumerate(advice, start=1)
    ]


def render_advisory_text(advisory: Optional[AdvisoryResult]) -> str:
    """Advisory block; empty when there is nothing to advise."""
    if advisory is None or not advisory.advice:
        return ""
    lines = ["", RULE, "DESIGN ADVISORY", RULE]
    if advisory.failures:
        lines.append("Failed checks:")
        for f in advisory.failures:
            unit = f" {f.unit}" if f.unit else ""
            lines.append(f"- {f.description} ({f.current_value:.4g}{unit} > {f.limit_value:.4g}{unit})")
        lines.append("")
    lines.append("Recommended actions:")
    lines.extend(_advice_lines(advisory.advice))
    return "\n".join(lines)


def render_beam_text(result: BeamResult, advisory: Optional[AdvisoryResult] = None) -> str:
    s = result.summary
    lines: List[str] = [RULE, f"SIMPLY SUPPORTED BEAM DESIGN TO {CODE_BASIS}", RULE, ""]

    lines.append("SECTION A — LOADING")
    lines.append(f"Dead Load: Gk = {s.dead_load_kn_m:g} kN/m")
    lines.append(f"Live Load: Qk = {s.live_load_kn_m:g} kN/m")
    lines.append(
        f"Ultimate Load: w = 1.4({s.dead_load_kn_m:g}) + 1.6({s.live_load_kn_m:g}) = {s.ultimate_load_kn_m:.2f} kN/m"
    )
    lines.append("")

    lines.append("SECTION B — DESIGN MOMENT & SHEAR")
    lines.append(f"Ultimate Moment: M = wL²/8 = {s.ultimate_moment_knm:.2f} kNm")
    lines.append(f"Ultimate Shear: V = wL/2 = {s.shear_force_kn:.2f} kN")
    lines.append("")

    lines.append("SECTION C — SECTION CLASSIFICATION")
    lines.append(f"K = {s.k_value:.4f}, K' = {s.k_prime:g}")
    lines.append(f"Section is {'DOUBLY' if s.is_doubly_reinforced else 'SINGLY'} REINFORCED")
    lines.append("")

    lines.append("SECTION D — BENDING DESIGN")
    lines.append(f"Lever Arm: z = {s.lever_arm_mm:.1f} mm")
    lines.append(f"Tension Steel: As = {s.tension_steel_mm2:.0f} mm²")
    if s.compression_steel_mm2 > 0:
        lines.append(f"Compression Steel: As' = {s.compression_steel_mm2:.0f} mm²")
    lines.append(f"Provide: {s.bar_suggestion}")
    if s.compression_bar_suggestion:
        lines.append(f"Provide (compression): {s.compression_bar_suggestion}")
    lines.append("")

    lines.append("SECTION E — SHEAR DESIGN")
    lines.append(f"v = {s.shear_stress_n_mm2:.2f} N/mm², vc = {s.vc_n_mm2:.2f} N/mm²")
    lines.append(f"Provide: T{s.link_dia_mm}@{s.link_spacing_mm}mm c/c")
    lines.append("")

    lines.append("SECTION F — DEFLECTION CHECK")
    lines.append(f"Actual L/d = {s.actual_span_depth_ratio:.1f}")
    lines.append(f"Allowable L/d = {s.allowable_span_depth_ratio:.1f}")
    lines.append(f"Status: {_pass(s.deflection_status == 'safe')}")
    lines.append("")

    _closing(lines, s.design_valid, s.failure_reasons)
    return "\n".join(lines) + render_advisory_text(advisory)


def render_slab_text(result: SlabResult, advisory: Optional[AdvisoryResult] = None) -> str:
    s = result.summary
    two_way = isinstance(s, TwoWaySlabSummary)
    lines: List[str] = [RULE, f"{s.slab_type.upper()} DESIGN TO {CODE_BASIS}", RULE, ""]

    lines.append("SECTION A — SLAB DECLARATION")
    lines.append(f"Type: {s.slab_type}")
    lines.append(f"Panel: {s.panel_type}")
    lines.append(f"Span Ratio: ly/lx = {s.span_ratio:.2f}")
    lines.append("")

    lines.append("SECTION B — LOADING")
    lines.append(f"Dead Load: Gk = {s.dead_load_kn_m2:g} kN/m²")
    lines.append(f"Live Load: Qk = {s.live_load_kn_m2:g} kN/m²")
    lines.append(f"Ultimate Load: n = {s.ultimate_load_kn_m2:.2f} kN/m²")
    lines.append("")

    lines.append("SECTION C — DESIGN MOMENTS")
    lines.append(f"Short Span M+ = {s.short_span_moment_knm:.2f} kNm/m")
    if two_way:
        lines.append(f"Long Span M+ = {s.long_span_moment_knm:.2f} kNm/m")
    elif s.negative_moment_knm > 0:
        lines.append(f"Support M- = {s.negative_moment_knm:.2f} kNm/m")
    lines.append("")

    lines.append("SECTION D — BENDING DESIGN")
    lines.append(f"K (short) = {s.k_short:.4f}")
    if two_way:
        lines.append(f"K (long) = {s.k_long:.4f}")
    lines.append(f"Short Span Steel: {s.short_span_bar_suggestion}")
    if two_way:
        lines.append(f"Long Span Steel: {s.long_span_bar_suggestion}")
    else:
        lines.append(f"Distribution Steel: {s.distribution_bar_suggestion}")
    lines.append("")

    lines.append("SECTION E — SHEAR CHECK")
    lines.append(f"v = {s.shear_stress_n_mm2:.3f} N/mm², vc = {s.permissible_shear_n_mm2:.3f} N/mm²")
    lines.append(f"Status: {_pass(s.shear_status == 'safe')}")
    lines.append("")

    lines.append("SECTION F — DEFLECTION CHECK")
    lines.append(f"Actual L/d = {s.actual_span_depth_ratio:.1f}")
    lines.append(f"Allowable L/d = {s.allowable_span_depth_ratio:.1f}")
    lines.append(f"Status: {_pass(s.deflection_status == 'safe')}")
    lines.append("")

    _closing(lines, s.design_valid, s.failure_reasons)
    return "\n".join(lines) + render_advisory_text(advisory)


def render_continuous_text(result: ContinuousBeamResult, advisory: Optional[AdvisoryResult] = None) -> str:
    """Step-by-step listing, one block per step."""
    blocks: List[str] = []
    for step in result.steps:
        content = step.title
        if step.reference:
            content += f" [{step.reference}]"
        content += "\n"
        if step.formula:
            content += f"  Formula: {step.formula}\n"
        if step.substitution:
            content += f"  {step.substitution}\n"
        content += f"  Result: {step.result}"
        if step.explanation:
            content += f"\n  Note: {step.explanation}"
        if step.status:
            content += f"\n  Status: {step.status.upper()}"
        blocks.append(content)
    text = "\n\n".join(blocks)
    if advisory is None and result.summary.suggestions:
        advisory = AdvisoryResult(
            overall_status="failed",
            failures=result.summary.failures,
            advice=result.summary.suggestions,
        )
    return text + render_advisory_text(advisory)


def render_text(module: str, result, advisory: Optional[AdvisoryResult] = None) -> str:
    if module == "beam":
        return render_beam_text(result, advisory)
    if module == "slab":
        return render_slab_text(result, advisory)
    if module == "continuous_beam":
        return render_continuous_text(result, advisory)
    raise ValueError(f"Unknown module: {module!r}")
