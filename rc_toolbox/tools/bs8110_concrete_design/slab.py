from __future__ import annotations

"""Solid slab design per metre strip (BS 8110-1:1997, Cl. 3.5).

ly/lx > 2 always designs one-way, whatever slab type was declared.
One-way panels use the support-condition coefficients; two-way panels use
the interpolated Table 3.14 coefficients for the panel's edge continuity.
"""

from dataclasses import dataclass
from typing import List

from loguru import logger

from .calc_trace import StepLog
from .coefficients import basic_span_depth_ratio, one_way_coefficients, two_way_coefficients
from .constants import (
    FAILURE_REASONS,
    K_PRIME,
    ONE_WAY_RATIO_LIMIT,
    SLAB_BAR_DIAMETER_MM,
    SLAB_STRIP_WIDTH_MM,
)
from .formulas import (
    concrete_shear_capacity,
    k_value,
    lever_arm,
    minimum_steel,
    shear_stress,
    span_depth_ratio,
    tension_modification_factor,
    tension_steel,
    ultimate_load,
)
from .models import OneWaySlabSummary, SlabInputs, SlabResult, TwoWaySlabSummary
from .reinforcement import select_slab_bars

PANEL_LABELS = {
    "interior": "Interior Panel",
    "edge": "Edge Panel",
    "corner": "Corner Panel",
    "cantilever": "Cantilever Panel",
}


@dataclass(frozen=True)
class _Checks:
    shear_force_kn: float
    shear_stress: float
    vc: float
    shear_safe: bool
    basic_ratio: float
    tension_mf: float
    allowable: float
    actual: float
    deflection_safe: bool


def _shear_and_deflection(
    log: StepLog,
    inputs: SlabInputs,
    n: float,
    d: float,
    design_moment: float,
    as_req: float,
    *,
    shear_title: str,
    deflection_title: str,
) -> _Checks:
    """Shear at 0.5·n·lx against vc, then span/depth on the short span. Shared by both paths."""
    b = SLAB_STRIP_WIDTH_MM
    lx = inputs.short_span_m

    V = 0.5 * n * lx
    v = shear_stress(V, b, d)
    vc = concrete_shear_capacity(as_req, b, d, inputs.fcu_n_mm2)
    shear_safe = v <= vc
    log.check(
        shear_title,
        f"v = {v:.3f} N/mm²\nvc = {vc:.3f} N/mm²",
        passed=shear_safe,
        formula="v = V / (bd) ≤ vc",
        substitution=(
            f"V = 0.5 × {n:.2f} × {lx:g} = {V:.2f} kN\n"
            f"v = {V * 1000:.0f} / ({b:.0f} × {d:.0f})"
        ),
        explanation=(
            "v < vc → Shear capacity adequate ✓"
            if shear_safe
            else "v > vc → Increase depth or provide shear reinforcement"
        ),
        reference="BS8110 Cl. 3.4.5",
    )

    basic = basic_span_depth_ratio(inputs.support_condition)
    mf = tension_modification_factor(design_moment, b, d, inputs.fy_n_mm2, as_req)
    allowable = basic * mf
    actual = span_depth_ratio(lx, d)
    deflection_safe = actual <= allowable
    log.check(
        deflection_title,
        f"Actual span/d = {actual:.1f}\nAllowable span/d = {allowable:.1f}",
        passed=deflection_safe,
        formula="Actual span/d ≤ Basic ratio × Modification factor",
        substitution=(
            f"Basic span/depth ratio = {basic:g} ({inputs.support_condition})\n"
            f"Tension modification factor = {mf:.2f}\n"
            f"Allowable span/d = {basic:g} × {mf:.2f} = {allowable:.1f}"
        ),
        explanation=(
            "Actual ≤ Allowable → Deflection satisfactory ✓"
            if deflection_safe
            else "Actual > Allowable → Increase slab depth"
        ),
        reference="BS8110 Cl. 3.4.6",
    )
    return _Checks(
        shear_force_kn=V,
        shear_stress=v,
        vc=vc,
        shear_safe=shear_safe,
        basic_ratio=basic,
        tension_mf=mf,
        allowable=allowable,
        actual=actual,
        deflection_safe=deflection_safe,
    )


def _k_check(log: StepLog, title: str, label: str, M: float, d: float, fcu: float) -> float:
    K = k_value(M, SLAB_STRIP_WIDTH_MM, d, fcu)
    ok = K <= K_PRIME
    log.check(
        title,
        f"{label} = {K:.4f}",
        passed=ok,
        formula="K = M / (bd²fcu)",
        substitution=f"K = {M:.2f} × 10⁶ / (1000 × {d:.0f}² × {fcu:g})",
        explanation=(
            f"K = {K:.4f} ≤ K' = {K_PRIME} → Singly reinforced ✓"
            if ok
            else f"K = {K:.4f} > K' = {K_PRIME} → Increase depth"
        ),
        reference="BS8110 Cl. 3.4.4.4",
    )
    return K


def _failure_reasons(k_ok: bool, checks: _Checks) -> List[str]:
    reasons: List[str] = []
    if not k_ok:
        reasons.append(FAILURE_REASONS["k-value"])
    if not checks.shear_safe:
        reasons.append(FAILURE_REASONS["shear"])
    if not checks.deflection_safe:
        reasons.append(FAILURE_REASONS["deflection"])
    return reasons


def calculate_slab_design(inputs: SlabInputs) -> SlabResult:
    lx = inputs.short_span_m
    ly = inputs.long_span_m
    h = inputs.slab_thickness_mm
    fcu = inputs.fcu_n_mm2
    fy = inputs.fy_n_mm2
    b = SLAB_STRIP_WIDTH_MM
    bar = SLAB_BAR_DIAMETER_MM

    d_short = h - inputs.cover_mm - bar / 2.0
    d_long = d_short - bar

    ratio = ly / lx
    one_way = ratio > ONE_WAY_RATIO_LIMIT or inputs.slab_type == "one-way"
    panel = PANEL_LABELS[inputs.panel_type]

    log = StepLog()
    log.add(
        "SLAB DECLARATION",
        (
            f"Type: {'ONE-WAY SLAB' if one_way else 'TWO-WAY SLAB'}\n"
            f"Panel: {panel}\n"
            f"Short Edge: {inputs.short_edge_continuity}\n"
            f"Long Edge: {inputs.long_edge_continuity}"
        ),
        explanation="This slab design is in accordance with BS 8110-1:1997",
        status="safe",
        reference="Table 3.12" if one_way else "Tables 3.14 & 3.15",
    )
    if ratio > ONE_WAY_RATIO_LIMIT:
        ratio_result = f"ly/lx = {ratio:.2f} > 2 → Design as ONE-WAY slab"
        if inputs.slab_type == "two-way":
            ratio_result += " (declared two-way overridden)"
    elif one_way:
        ratio_result = f"ly/lx = {ratio:.2f} ≤ 2, declared one-way → Design as ONE-WAY slab"
    else:
        ratio_result = f"ly/lx = {ratio:.2f} ≤ 2 → Design as TWO-WAY slab"
    log.add(
        "Step 1: Span Ratio Verification",
        ratio_result,
        formula="ly/lx ratio determines slab type",
        substitution=f"ly/lx = {ly:.2f} / {lx:.2f} = {ratio:.3f}",
        status="safe",
        reference="BS8110 Cl. 3.5.3.3",
    )

    n = ultimate_load(inputs.dead_load_kn_m2, inputs.live_load_kn_m2)
    log.add(
        "Step 2: Ultimate Design Load",
        f"n = {n:.2f} kN/m²",
        formula="n = γf,dead × Gk + γf,live × Qk",
        substitution=f"n = 1.4 × {inputs.dead_load_kn_m2:g} + 1.6 × {inputs.live_load_kn_m2:g}",
        reference="BS8110 Cl. 2.4.3",
    )
    log.add(
        "Step 3: Effective Depth Calculation",
        f"d (short span) = {d_short:.0f} mm\nd (long span) = {d_long:.0f} mm (second layer)",
        formula="d = h - cover - φ/2",
        substitution=f"d = {h:g} - {inputs.cover_mm:g} - {bar:g}/2",
        reference="BS8110 Cl. 3.4.4.1",
    )

    min_steel = minimum_steel(b, h)

    if one_way:
        # ----------------------------
        # One-way
        # ----------------------------
        coeffs = one_way_coefficients(inputs.support_condition)
        log.add(
            "Step 4: Moment Coefficients (One-Way Slab)",
            f"Positive moment coefficient: {coeffs.positive:g}\nNegative moment coefficient: {coeffs.negative:g}",
            formula="Coefficients by support condition",
            reference="BS8110 Table 3.12",
        )

        m_pos = coeffs.positive * n * lx**2
        m_neg = coeffs.negative * n * lx**2
        M = max(m_pos, m_neg)
        log.add(
            "Step 5: Design Moments",
            (
                f"M⁺ (mid-span) = {m_pos:.2f} kNm/m\nM⁻ (support) = {m_neg:.2f} kNm/m\n"
                f"Design moment = {M:.2f} kNm/m"
            ),
            formula="M = β × n × lx²",
            substitution=(
                f"M⁺ = {coeffs.positive:g} × {n:.2f} × {lx:g}²\n"
                f"M⁻ = {coeffs.negative:g} × {n:.2f} × {lx:g}²"
            ),
            explanation="Main steel is designed for the larger of the span and support moments",
        )

        K = _k_check(log, "Step 6: K-value Check", "K", M, d_short, fcu)
        k_ok = K <= K_PRIME

        z = lever_arm(d_short, K)
        log.add(
            "Step 7: Lever Arm",
            f"z = {z:.1f} mm",
            formula="z = d(0.5 + √(0.25 - K/0.9)) ≤ 0.95d",
            reference="BS8110 Cl. 3.4.4.4",
        )

        As = tension_steel(M, fy, z)
        log.add(
            "Step 8: Required Steel Area",
            f"As = {As:.0f} mm²/m",
            formula="As = M / (0.87fy × z)",
            substitution=f"As = {M:.2f} × 10⁶ / (0.87 × {fy:g} × {z:.1f})",
            reference="BS8110 Cl. 3.4.4.4",
        )

        steel_ok = As >= min_steel
        log.check(
            "Step 9: Minimum Steel Check",
            f"As,min = {min_steel:.0f} mm²/m",
            passed=steel_ok,
            fail_status="review",
            formula="As,min = 0.13%bh",
            substitution=f"As,min = 0.0013 × 1000 × {h:g}",
            explanation=f"As = {As:.0f} > As,min ✓" if steel_ok else f"Use As,min = {min_steel:.0f} mm²/m",
            reference="BS8110 Cl. 3.12.5.3",
        )
        As = max(As, min_steel)
        dist_steel = min_steel
        main_bars = select_slab_bars(As)
        dist_bars = select_slab_bars(dist_steel)

        checks = _shear_and_deflection(
            log,
            inputs,
            n,
            d_short,
            M,
            As,
            shear_title="Step 10: Shear Check",
            deflection_title="Step 11: Deflection Check",
        )
        log.add(
            "Step 12: Reinforcement Provision",
            f"Main Steel (Short Span): {main_bars.text}\nDistribution Steel: {dist_bars.text}",
            status="safe" if main_bars.adequate and dist_bars.adequate else "review",
        )

        valid = k_ok and checks.shear_safe and checks.deflection_safe
        summary = OneWaySlabSummary(
            slab_type="One-Way Slab",
            panel_type=panel,
            dead_load_kn_m2=inputs.dead_load_kn_m2,
            live_load_kn_m2=inputs.live_load_kn_m2,
            span_ratio=ratio,
            ultimate_load_kn_m2=n,
            effective_depth_short_mm=d_short,
            short_span_moment_knm=m_pos,
            k_short=K,
            lever_arm_short_mm=z,
            min_steel_mm2=min_steel,
            short_span_steel_mm2=As,
            short_span_bar_suggestion=main_bars.text,
            shear_force_kn=checks.shear_force_kn,
            shear_stress_n_mm2=checks.shear_stress,
            permissible_shear_n_mm2=checks.vc,
            shear_status="safe" if checks.shear_safe else "unsafe",
            basic_span_depth_ratio=checks.basic_ratio,
            tension_modification_factor=checks.tension_mf,
            allowable_span_depth_ratio=checks.allowable,
            actual_span_depth_ratio=checks.actual,
            deflection_status="safe" if checks.deflection_safe else "unsafe",
            design_valid=valid,
            failure_reasons=_failure_reasons(k_ok, checks),
            support_condition=inputs.support_condition,
            positive_coefficient=coeffs.positive,
            negative_coefficient=coeffs.negative,
            negative_moment_knm=m_neg,
            design_moment_knm=M,
            distribution_steel_mm2=dist_steel,
            distribution_bar_suggestion=dist_bars.text,
        )
        logger.debug(f"One-way slab: M={M:.2f} kNm/m K={K:.4f} As={As:.0f} mm²/m valid={valid}")
        return SlabResult(steps=log.steps, summary=summary)

    # ----------------------------
    # Two-way
    # ----------------------------
    log.add(
        "Step 4: Two-Way Slab Declaration",
        f"This slab is designed as a {panel.lower()} in accordance with BS 8110 Tables 3.14 and 3.15.",
        status="safe",
    )
    c = two_way_coefficients(
        ratio,
        panel_type=inputs.panel_type,
        short_edge=inputs.short_edge_continuity,
        long_edge=inputs.long_edge_continuity,
        support_condition=inputs.support_condition,
    )
    log.add(
        "Step 5: Moment Coefficients",
        (
            f"βsx⁻ (negative, short) = {c.bsx_neg:.4f}\n"
            f"βsx⁺ (positive, short) = {c.bsx_pos:.4f}\n"
            f"βsy⁻ (negative, long) = {c.bsy_neg:.4f}\n"
            f"βsy⁺ (positive, long) = {c.bsy_pos:.4f}"
        ),
        formula=f"Coefficients from BS8110 {c.table_name}",
        substitution=f"For ly/lx = {ratio:.3f}, using linear interpolation:",
        reference="BS8110 Table 3.14",
    )

    nlx2 = n * lx**2
    msx_pos = c.bsx_pos * nlx2
    msx_neg = c.bsx_neg * nlx2
    msy_pos = c.bsy_pos * nlx2
    msy_neg = c.bsy_neg * nlx2
    log.add(
        "Step 6: Design Moments",
        (
            f"Msx⁺ = {msx_pos:.2f} kNm/m\nMsx⁻ = {msx_neg:.2f} kNm/m\n"
            f"Msy⁺ = {msy_pos:.2f} kNm/m\nMsy⁻ = {msy_neg:.2f} kNm/m"
        ),
        formula="M = β × n × lx²",
        substitution=(
            f"Short span positive: {c.bsx_pos:.4f} × {n:.2f} × {lx:g}²\n"
            f"Short span negative: {c.bsx_neg:.4f} × {n:.2f} × {lx:g}²\n"
            f"Long span positive: {c.bsy_pos:.4f} × {n:.2f} × {lx:g}²\n"
            f"Long span negative: {c.bsy_neg:.4f} × {n:.2f} × {lx:g}²"
        ),
    )

    k_short = _k_check(log, "Step 7: K-value Check - Short Span", "Ksx", msx_pos, d_short, fcu)
    z_short = lever_arm(d_short, k_short)
    log.add(
        "Step 8: Lever Arm - Short Span",
        f"zsx = {z_short:.1f} mm",
        formula="z = d(0.5 + √(0.25 - K/0.9)) ≤ 0.95d",
        reference="BS8110 Cl. 3.4.4.4",
    )
    as_short = tension_steel(msx_pos, fy, z_short)
    log.add(
        "Step 9: Steel Area - Short Span",
        f"Asx = {as_short:.0f} mm²/m",
        formula="Asx = Msx / (0.87fy × z)",
        substitution=f"Asx = {msx_pos:.2f} × 10⁶ / (0.87 × {fy:g} × {z_short:.1f})",
        reference="BS8110 Cl. 3.4.4.4",
    )

    k_long = _k_check(log, "Step 10: K-value Check - Long Span", "Ksy", msy_pos, d_long, fcu)
    z_long = lever_arm(d_long, k_long)
    log.add(
        "Step 11: Lever Arm - Long Span",
        f"zsy = {z_long:.1f} mm",
        formula="z = d(0.5 + √(0.25 - K/0.9)) ≤ 0.95d",
    )
    as_long = tension_steel(msy_pos, fy, z_long)
    log.add(
        "Step 12: Steel Area - Long Span",
        f"Asy = {as_long:.0f} mm²/m",
        formula="Asy = Msy / (0.87fy × z)",
        substitution=f"Asy = {msy_pos:.2f} × 10⁶ / (0.87 × {fy:g} × {z_long:.1f})",
    )

    short_ok = as_short >= min_steel
    long_ok = as_long >= min_steel
    log.check(
        "Step 13: Minimum Steel Check",
        f"As,min = {min_steel:.0f} mm²/m",
        passed=short_ok and long_ok,
        fail_status="review",
        formula="As,min = 0.13%bh",
        substitution=f"As,min = 0.0013 × 1000 × {h:g}",
        explanation=f"Short span: {'✓' if short_ok else 'Use min'}, Long span: {'✓' if long_ok else 'Use min'}",
        reference="BS8110 Cl. 3.12.5.3",
    )
    as_short = max(as_short, min_steel)
    as_long = max(as_long, min_steel)
    short_bars = select_slab_bars(as_short)
    long_bars = select_slab_bars(as_long)

    checks = _shear_and_deflection(
        log,
        inputs,
        n,
        d_short,
        msx_pos,
        as_short,
        shear_title="Step 14: Shear Check",
        deflection_title="Step 15: Deflection Check",
    )
    log.add(
        "Step 16: Reinforcement Provision",
        f"Short Span (Bottom Layer): {short_bars.text}\nLong Span (Top Layer): {long_bars.text}",
        explanation="Short span bars placed as bottom layer for greater effective depth",
        status="safe" if short_bars.adequate and long_bars.adequate else "review",
    )

    k_ok = k_short <= K_PRIME and k_long <= K_PRIME
    valid = k_ok and checks.shear_safe and checks.deflection_safe
    summary = TwoWaySlabSummary(
        slab_type="Two-Way Slab",
        panel_type=panel,
        dead_load_kn_m2=inputs.dead_load_kn_m2,
        live_load_kn_m2=inputs.live_load_kn_m2,
        span_ratio=ratio,
        ultimate_load_kn_m2=n,
        effective_depth_short_mm=d_short,
        short_span_moment_knm=msx_pos,
        k_short=k_short,
        lever_arm_short_mm=z_short,
        min_steel_mm2=min_steel,
        short_span_steel_mm2=as_short,
        short_span_bar_suggestion=short_bars.text,
        shear_force_kn=checks.shear_force_kn,
        shear_stress_n_mm2=checks.shear_stress,
        permissible_shear_n_mm2=checks.vc,
        shear_status="safe" if checks.shear_safe else "unsafe",
        basic_span_depth_ratio=checks.basic_ratio,
        tension_modification_factor=checks.tension_mf,
        allowable_span_depth_ratio=checks.allowable,
        actual_span_depth_ratio=checks.actual,
        deflection_status="safe" if checks.deflection_safe else "unsafe",
        design_valid=valid,
        failure_reasons=_failure_reasons(k_ok, checks),
        coefficient_table=c.table_name,
        bsx_neg=c.bsx_neg,
        bsx_pos=c.bsx_pos,
        bsy_neg=c.bsy_neg,
        bsy_pos=c.bsy_pos,
        negative_short_moment_knm=msx_neg,
        long_span_moment_knm=msy_pos,
        negative_long_moment_knm=msy_neg,
        effective_depth_long_mm=d_long,
        k_long=k_long,
        lever_arm_long_mm=z_long,
        long_span_steel_mm2=as_long,
        long_span_bar_suggestion=long_bars.text,
    )
    logger.debug(
        f"Two-way slab ({c.table_name}): Msx={msx_pos:.2f} Msy={msy_pos:.2f} kNm/m "
        f"Asx={as_short:.0f} Asy={as_long:.0f} mm²/m valid={valid}"
    )
    return SlabResult(steps=log.steps, summary=summary)
