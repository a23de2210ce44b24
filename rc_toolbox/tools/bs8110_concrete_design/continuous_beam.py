from __future__ import annotations

"""Continuous beam design by the BS 8110 Table 3.5 coefficient method (2-5 spans).

Support and span moments use the average span and the average ultimate load
for every coefficient. The method is only valid for approximately equal spans
under substantially uniform load, so an applicability step reports when the
inputs fall outside Cl. 3.4.3. Shears use each span's own load and length.
"""

from dataclasses import dataclass
from typing import List

from loguru import logger

from .advisory import suggest_continuous_beam_remedies
from .calc_trace import StepLog
from .coefficients import continuous_beam_coefficients
from .constants import (
    CONCRETE_DENSITY_KN_M3,
    CONTINUOUS_BASIC_SPAN_DEPTH,
    CONTINUOUS_BEAM_MAX_BARS,
    FAILURE_REASONS,
    GAMMA_DEAD,
    GAMMA_LIVE,
    INVALID_SPAN_COUNT_REASON,
    K_PRIME,
    MAX_SPANS,
    MIN_SPANS,
    SPAN_VARIATION_LIMIT,
)
from .formulas import (
    LinkDesign,
    concrete_shear_capacity,
    design_links,
    doubly_reinforced_steel,
    k_value,
    lever_arm,
    max_shear_stress,
    minimum_steel,
    shear_stress,
    span_depth_ratio,
    tension_modification_factor,
    tension_steel,
)
from .models import (
    ContinuousBeamInputs,
    ContinuousBeamResult,
    ContinuousBeamSummary,
    DesignFailure,
    SpanResult,
)
from .reinforcement import BarSelection, select_beam_bars


@dataclass(frozen=True)
class _SpanSteel:
    k_positive: float
    positive_steel_mm2: float
    negative_steel_mm2: float
    compression_steel_mm2: float
    tension_steel_mm2: float
    is_doubly_reinforced: bool
    shear_stress_n_mm2: float
    vc_n_mm2: float
    links: LinkDesign
    top: BarSelection
    bottom: BarSelection


def _beta(c: float) -> str:
    return f"-{c:.3f}" if c > 0.0 else "0.000"


def _design_span(
    inputs: ContinuousBeamInputs, positive_knm: float, negative_knm: float, max_shear_kn: float
) -> _SpanSteel:
    b = inputs.width_mm
    d = inputs.effective_depth_mm
    fcu = inputs.fcu_n_mm2
    fy = inputs.fy_n_mm2

    k_pos = k_value(positive_knm, b, d, fcu)
    doubly = k_pos > K_PRIME
    if doubly:
        dr = doubly_reinforced_steel(positive_knm, b, d, fcu, fy, inputs.cover_mm)
        as_pos = dr.tension_steel_mm2
        asc = dr.compression_steel_mm2
    else:
        as_pos = tension_steel(positive_knm, fy, lever_arm(d, k_pos))
        asc = 0.0

    k_neg = k_value(negative_knm, b, d, fcu)
    as_neg = tension_steel(negative_knm, fy, lever_arm(d, min(k_neg, K_PRIME)))

    min_steel = minimum_steel(b, d)
    As = max(as_pos, as_neg, min_steel)

    v = shear_stress(max_shear_kn, b, d)
    vc = concrete_shear_capacity(As, b, d, fcu)
    links = design_links(v, vc, b, d, fy)

    return _SpanSteel(
        k_positive=k_pos,
        positive_steel_mm2=as_pos,
        negative_steel_mm2=as_neg,
        compression_steel_mm2=asc,
        tension_steel_mm2=As,
        is_doubly_reinforced=doubly,
        shear_stress_n_mm2=v,
        vc_n_mm2=vc,
        links=links,
        top=select_beam_bars(max(as_neg, min_steel), CONTINUOUS_BEAM_MAX_BARS),
        bottom=select_beam_bars(max(as_pos, min_steel), CONTINUOUS_BEAM_MAX_BARS),
    )


def calculate_continuous_beam_design(inputs: ContinuousBeamInputs) -> ContinuousBeamResult:
    log = StepLog()
    n = len(inputs.spans)

    if n < MIN_SPANS or n > MAX_SPANS:
        log.add(
            "Error",
            f"Continuous beam analysis supports {MIN_SPANS}-{MAX_SPANS} spans. You entered {n} spans.",
            status="unsafe",
        )
        logger.debug(f"Continuous beam rejected: {n} spans")
        return ContinuousBeamResult(
            steps=log.steps,
            span_results=[],
            summary=ContinuousBeamSummary(
                number_of_spans=n,
                design_valid=False,
                failure_reasons=[INVALID_SPAN_COUNT_REASON],
            ),
        )

    b = inputs.width_mm
    d = inputs.effective_depth_mm
    h = inputs.beam_depth_mm
    fcu = inputs.fcu_n_mm2
    fy = inputs.fy_n_mm2
    failures: List[DesignFailure] = []

    log.add(
        "CONTINUOUS BEAM DECLARATION",
        (
            f"Number of Spans: {n}\n"
            f"Beam Section: {b:g}mm × {h:g}mm\n"
            f"Effective Depth: {d:g}mm\n"
            f"Concrete: C{fcu:g}, Steel: Grade {fy:g}"
        ),
        explanation="Design in accordance with BS 8110-1:1997 Table 3.5",
        status="safe",
        reference="BS8110 Table 3.5",
    )

    # Step 1: ultimate loads
    self_weight = (b / 1000.0) * (h / 1000.0) * CONCRETE_DENSITY_KN_M3 if inputs.include_self_weight else 0.0
    loads: List[float] = []
    lines: List[str] = []
    for i, span in enumerate(inputs.spans, start=1):
        w = GAMMA_DEAD * (span.dead_load_kn_m + self_weight) + GAMMA_LIVE * span.live_load_kn_m
        loads.append(w)
        lines.append(
            f"Span {i}: w = 1.4 × ({span.dead_load_kn_m:g} + {self_weight:.2f}) + 1.6 × {span.live_load_kn_m:g} = {w:.2f} kN/m"
        )
    log.add(
        "Step 1: Ultimate Design Loads",
        f"Self-weight: {self_weight:.2f} kN/m\nUltimate loads calculated for all spans",
        formula="w = 1.4(Gk + SW) + 1.6Qk",
        substitution="\n".join(lines),
        reference="BS8110 Cl. 2.4.3",
    )

    # Table 3.5 conditions
    lengths = [s.length_m for s in inputs.spans]
    variation = (max(lengths) - min(lengths)) / max(lengths)
    spans_ok = variation <= SPAN_VARIATION_LIMIT
    loads_ok = all(s.live_load_kn_m <= s.dead_load_kn_m + self_weight for s in inputs.spans)
    log.check(
        "Step 1a: Table 3.5 Applicability",
        "Coefficient method applicable" if spans_ok and loads_ok else "Coefficient method outside its conditions",
        passed=spans_ok and loads_ok,
        fail_status="review",
        formula="(Lmax - Lmin)/Lmax ≤ 15%, Qk ≤ Gk",
        substitution=f"Span variation = {variation * 100.0:.1f}%, Qk ≤ Gk on all spans: {'yes' if loads_ok else 'no'}",
        explanation=(
            "Moments use the average span and average load for every coefficient; "
            "markedly unequal spans or loads need a full elastic analysis"
        ),
        reference="BS8110 Cl. 3.4.3",
    )

    coeffs = continuous_beam_coefficients(n)
    avg_span = sum(lengths) / n
    avg_load = sum(loads) / n
    wl2 = avg_load * avg_span * avg_span

    # Step 2: support moments
    support_moments = [c * wl2 for c in coeffs.support]
    log.add(
        "Step 2: Support Moments",
        "Support Moments:\n" + "\n".join(f"  Support {i}: {m:.2f} kNm" for i, m in enumerate(support_moments)),
        formula="M = β × w × L²",
        substitution=f"Using BS8110 Table 3.5 coefficients for {n}-span beam:\n"
        + "\n".join(
            f"Support {i}: β = {_beta(c)}, M = {c:.3f} × {avg_load:.2f} × {avg_span:.2f}²"
            for i, c in enumerate(coeffs.support)
        ),
        explanation="Average span and average load applied to every coefficient (equal-span approximation)",
        reference="BS8110 Table 3.5",
    )

    # Step 3: span moments
    span_moments = [c * wl2 for c in coeffs.midspan]
    log.add(
        "Step 3: Span Moments",
        "Mid-span Moments:\n" + "\n".join(f"  Span {i}: {m:.2f} kNm" for i, m in enumerate(span_moments, start=1)),
        formula="M = β × w × L²",
        substitution="\n".join(
            f"Span {i}: β = {c:.3f}, M = {c:.3f} × {avg_load:.2f} × {avg_span:.2f}²"
            for i, c in enumerate(coeffs.midspan, start=1)
        ),
        reference="BS8110 Table 3.5",
    )

    # Step 4: shears, per span load and length
    shears = [
        (coeffs.shear_left[i] * loads[i] * lengths[i], coeffs.shear_right[i] * loads[i] * lengths[i])
        for i in range(n)
    ]
    log.add(
        "Step 4: Shear Forces",
        "Shear Forces:\n"
        + "\n".join(
            f"  Span {i}: Left = {left:.2f} kN, Right = {right:.2f} kN" for i, (left, right) in enumerate(shears, start=1)
        ),
        formula="V = β × w × L",
        reference="BS8110 Table 3.5",
    )

    # Step 5: governing moment
    governing = max(span_moments + support_moments)
    K = k_value(governing, b, d, fcu)
    moment_ok = K <= K_PRIME
    if not moment_ok:
        failures.append(
            DesignFailure(kind="moment", description=FAILURE_REASONS["moment"], current_value=K, limit_value=K_PRIME)
        )
    log.check(
        "Step 5: Critical Moment Check",
        f"K = {K:.4f}",
        passed=moment_ok,
        formula=f"K = M / (bd²fcu) ≤ K' = {K_PRIME}",
        substitution=f"Max moment = {governing:.2f} kNm\nK = {governing:.2f} × 10⁶ / ({b:g} × {d:g}² × {fcu:g})",
        explanation=(
            "K ≤ K' → Singly reinforced section adequate ✓"
            if moment_ok
            else "K > K' → Section dimensions inadequate for singly reinforced design"
        ),
        reference="BS8110 Cl. 3.4.4.4",
    )

    # Step 6: per-span reinforcement
    span_results: List[SpanResult] = []
    designs: List[_SpanSteel] = []
    for i in range(n):
        left_m = support_moments[i]
        right_m = support_moments[i + 1]
        left_v, right_v = shears[i]
        sd = _design_span(inputs, span_moments[i], max(left_m, right_m), max(left_v, right_v))
        designs.append(sd)
        span_results.append(
            SpanResult(
                span_index=i + 1,
                length_m=lengths[i],
                ultimate_load_kn_m=loads[i],
                positive_moment_knm=span_moments[i],
                negative_moment_left_knm=left_m,
                negative_moment_right_knm=right_m,
                shear_left_kn=left_v,
                shear_right_kn=right_v,
                k_positive=sd.k_positive,
                tension_steel_mm2=sd.tension_steel_mm2,
                compression_steel_mm2=sd.compression_steel_mm2,
                is_doubly_reinforced=sd.is_doubly_reinforced,
                shear_stress_n_mm2=sd.shear_stress_n_mm2,
                vc_n_mm2=sd.vc_n_mm2,
                link_dia_mm=sd.links.dia_mm,
                link_spacing_mm=sd.links.spacing_mm,
                link_status=sd.links.status,
                top_steel=sd.top.text,
                bottom_steel=sd.bottom.text,
            )
        )

    link_review = any(sd.links.status == "review" for sd in designs)
    bars_review = any(not (sd.top.adequate and sd.bottom.adequate) for sd in designs)
    blocks = []
    for sr, sd in zip(span_results, designs):
        block = (
            f"Span {sr.span_index}: As = {sr.tension_steel_mm2:.0f} mm² → "
            f"{select_beam_bars(sr.tension_steel_mm2, CONTINUOUS_BEAM_MAX_BARS).text}\n"
            f"  Top: {sr.top_steel}, Bottom: {sr.bottom_steel}\n"
            f"  Links: T{sr.link_dia_mm}@{sr.link_spacing_mm}mm c/c"
        )
        if sd.links.status == "review":
            block += " (default T12@100 - verify by hand)"
        if sd.is_doubly_reinforced:
            block += f"\n  Doubly reinforced: As' = {sr.compression_steel_mm2:.0f} mm²"
        blocks.append(block)
    log.add(
        "Step 6: Reinforcement Design",
        "\n\n".join(blocks),
        status="review" if link_review or bars_review else None,
        reference="BS8110 Cl. 3.4.4.4",
    )

    # Step 7: shear verification
    max_shear = max(v for pair in shears for v in pair)
    v = shear_stress(max_shear, b, d)
    v_max = max_shear_stress(fcu)
    shear_ok = v < v_max
    if not shear_ok:
        failures.append(
            DesignFailure(
                kind="shear", description=FAILURE_REASONS["shear"], current_value=v, limit_value=v_max, unit="N/mm²"
            )
        )
    log.check(
        "Step 7: Shear Verification",
        f"v = {v:.2f} N/mm²\nvmax = {v_max:.2f} N/mm²",
        passed=shear_ok,
        formula="v = V / (bd) < 0.8√fcu or 5 N/mm²",
        substitution=f"Maximum shear = {max_shear:.2f} kN\nv = {max_shear * 1000.0:.0f} / ({b:g} × {d:g})",
        reference="BS8110 Cl. 3.4.5",
    )

    # Step 8: deflection, governed by the span with the largest sagging moment
    g = max(range(n), key=lambda i: span_moments[i])
    gd = designs[g]
    as_req = max(gd.positive_steel_mm2, minimum_steel(b, d))
    mf = tension_modification_factor(span_moments[g], b, d, fy, as_req)
    basic = CONTINUOUS_BASIC_SPAN_DEPTH
    allowable = basic * mf
    actual = span_depth_ratio(avg_span, d)
    deflection_ok = actual <= allowable
    if not deflection_ok:
        failures.append(
            DesignFailure(
                kind="deflection", description=FAILURE_REASONS["deflection"], current_value=actual, limit_value=allowable
            )
        )
    log.check(
        "Step 8: Deflection Check",
        f"Actual span/d = {actual:.1f}\nAllowable span/d = {allowable:.1f}",
        passed=deflection_ok,
        formula="Actual span/d ≤ Basic ratio × Modification factor",
        substitution=(
            f"Basic ratio = {basic:g} (continuous beam)\n"
            f"Modification factor = {mf:.2f} (span {g + 1}: As = {as_req:.0f} mm², fs = 2fy·As/(3bd))\n"
            f"Allowable span/d = {allowable:.1f}"
        ),
        explanation=(
            "Actual ≤ Allowable → Deflection satisfactory ✓" if deflection_ok else "Actual > Allowable → Increase beam depth"
        ),
        reference="BS8110 Cl. 3.4.6",
    )

    # Step 9: summary of steel
    max_tension = max(sr.tension_steel_mm2 for sr in span_results)
    max_compression = max(sr.compression_steel_mm2 for sr in span_results)
    bar_text = select_beam_bars(max_tension, CONTINUOUS_BEAM_MAX_BARS).text
    compression_line = (
        f"Maximum Compression Steel: {max_compression:.0f} mm² → "
        f"{select_beam_bars(max_compression, CONTINUOUS_BEAM_MAX_BARS).text}"
        if max_compression > 0.0
        else "No compression steel required"
    )
    log.add(
        "Step 9: Reinforcement Summary",
        f"Maximum Tension Steel: {max_tension:.0f} mm² → {bar_text}\n"
        f"{compression_line}\n"
        "Shear Links: See individual span results above",
        reference="BS8110 Cl. 3.12",
    )

    design_valid = moment_ok and shear_ok and deflection_ok
    suggestions = [] if design_valid else suggest_continuous_beam_remedies(failures, inputs)

    summary = ContinuousBeamSummary(
        number_of_spans=n,
        width_mm=b,
        effective_depth_mm=d,
        beam_depth_mm=h,
        fcu_n_mm2=fcu,
        fy_n_mm2=fy,
        self_weight_kn_m=self_weight,
        average_span_m=avg_span,
        average_ultimate_load_kn_m=avg_load,
        max_positive_moment_knm=max(span_moments),
        max_negative_moment_knm=max(support_moments),
        governing_moment_knm=governing,
        k_value=K,
        lever_arm_mm=lever_arm(d, min(K, K_PRIME)),
        moment_status="safe" if moment_ok else "unsafe",
        max_shear_kn=max_shear,
        shear_stress_n_mm2=v,
        vc_n_mm2=concrete_shear_capacity(max_tension, b, d, fcu),
        max_shear_stress_n_mm2=v_max,
        shear_status="safe" if shear_ok else "unsafe",
        max_tension_steel_mm2=max_tension,
        max_compression_steel_mm2=max_compression,
        bar_suggestion=bar_text,
        basic_span_depth_ratio=basic,
        modification_factor=mf,
        allowable_span_depth_ratio=allowable,
        actual_span_depth_ratio=actual,
        deflection_status="safe" if deflection_ok else "unsafe",
        design_valid=design_valid,
        failures=failures,
        failure_reasons=[f.description for f in failures],
        suggestions=suggestions,
    )
    logger.debug(
        f"Continuous beam ({n} spans): Mmax={governing:.2f} kNm K={K:.4f} v={v:.2f} N/mm² "
        f"L/d={actual:.1f}/{allowable:.1f} valid={design_valid}"
    )
    return ContinuousBeamResult(steps=log.steps, span_results=span_results, summary=summary)
