from __future__ import annotations

"""Simply supported beam design (BS 8110-1:1997, Cl. 3.4)."""

from typing import List

from loguru import logger

from .calc_trace import StepLog
from .coefficients import basic_span_depth_ratio
from .constants import (
    BEAM_MAX_BARS,
    FAILURE_REASONS,
    K_PRIME,
    LEVER_ARM_MAX_RATIO,
    NOMINAL_LINK_DIAMETER_MM,
    NOMINAL_MAIN_BAR_DIAMETER_MM,
)
from .formulas import (
    compression_modification_factor,
    concrete_shear_capacity,
    critical_shear,
    design_links,
    doubly_reinforced_steel,
    k_value,
    lever_arm,
    max_shear_stress,
    maximum_steel,
    minimum_steel,
    shear_stress,
    simply_supported_moment,
    simply_supported_shear,
    span_depth_ratio,
    tension_modification_factor,
    tension_steel,
    ultimate_load,
)
from .models import BeamInputs, BeamResult, BeamSummary
from .reinforcement import select_beam_bars


def calculate_beam_design(inputs: BeamInputs) -> BeamResult:
    """Run the full design procedure for one simply supported span.

    Every check failure is recorded as a step status and folded into
    `design_valid`; nothing here raises for finite positive inputs.
    """
    L = inputs.span_m
    gk = inputs.dead_load_kn_m
    qk = inputs.live_load_kn_m
    fcu = inputs.fcu_n_mm2
    fy = inputs.fy_n_mm2
    b = inputs.width_mm
    d = inputs.effective_depth_mm
    cover = inputs.cover_mm

    log = StepLog()

    # 1. Ultimate load
    w = ultimate_load(gk, qk)
    log.add(
        "Step 1: Ultimate Design Load (BS8110 Cl. 2.4.3)",
        f"w = {w:.2f} kN/m",
        formula="w = 1.4Gk + 1.6Qk",
        substitution=f"w = 1.4 × {gk:g} + 1.6 × {qk:g}",
        explanation="Applying partial safety factors for dead (1.4) and live (1.6) loads",
        reference="BS8110 Cl. 2.4.3",
    )

    # 2. Ultimate moment
    M = simply_supported_moment(w, L)
    M_nmm = M * 1e6
    log.add(
        "Step 2: Ultimate Bending Moment",
        f"M = {M:.2f} kN·m = {M_nmm:.2e} N·mm",
        formula="M = wL²/8 (for simply supported beam with UDL)",
        substitution=f"M = {w:.2f} × {L:g}² / 8",
        explanation="Maximum moment at mid-span for simply supported beam",
    )

    # 3. K-value
    K = k_value(M, b, d, fcu)
    log.add(
        "Step 3: K Value (BS8110 Cl. 3.4.4.4)",
        f"K = {K:.4f}",
        formula="K = M / (bd²fcu)",
        substitution=f"K = {M_nmm:.2e} / ({b:g} × {d:g}² × {fcu:g})",
        explanation="Dimensionless parameter to determine beam type",
        reference="BS8110 Cl. 3.4.4.4",
    )

    # 4. Singly / doubly
    doubly = K > K_PRIME
    log.check(
        "Step 4: Check Beam Type",
        "Doubly Reinforced Beam Required" if doubly else "Singly Reinforced Beam",
        passed=not doubly,
        fail_status="review",
        formula=f"Compare K with K' = {K_PRIME}",
        substitution=f"K = {K:.4f} {'>' if doubly else '≤'} K' = {K_PRIME}",
        explanation=(
            "K > K': Compression reinforcement needed to resist excess moment"
            if doubly
            else "K ≤ K': Section adequate for singly reinforced design"
        ),
    )

    # 5. Lever arm
    k_for_z = K_PRIME if doubly else K
    z = lever_arm(d, k_for_z)
    log.add(
        "Step 5: Lever Arm (BS8110 Cl. 3.4.4.4)",
        f"z = {z:.1f} mm (z/d = {z / d:.3f})",
        formula="z = d[0.5 + √(0.25 - K/0.9)] ≤ 0.95d",
        substitution=f"z = {d:g}[0.5 + √(0.25 - {k_for_z:.4f}/0.9)]",
        explanation=f"Lever arm limited to {LEVER_ARM_MAX_RATIO}d maximum",
        reference="BS8110 Cl. 3.4.4.4",
    )

    # 6. Steel areas
    limiting_moment = None
    compression_steel = 0.0
    if doubly:
        dr = doubly_reinforced_steel(M, b, d, fcu, fy, cover)
        limiting_moment = dr.limiting_moment_knm
        compression_steel = dr.compression_steel_mm2
        required_steel = dr.tension_steel_mm2
        log.add(
            "Step 6a: Limiting Moment",
            f"M' = {limiting_moment:.2f} kN·m",
            formula="M' = K'bd²fcu",
            substitution=f"M' = {K_PRIME} × {b:g} × {d:g}² × {fcu:g}",
        )
        log.add(
            "Step 6b: Compression Steel Area",
            f"As' = {compression_steel:.0f} mm²",
            formula="As' = (M - M') / [0.87fy(d - d')]",
            substitution=(
                f"As' = ({M_nmm:.2e} - {limiting_moment * 1e6:.2e}) / "
                f"[0.87 × {fy:g} × ({d:g} - {dr.d_prime_mm:g})]"
            ),
            explanation=f"d' = cover + 10 = {dr.d_prime_mm:g} mm",
        )
        log.add(
            "Step 6c: Tension Steel Area",
            f"As = {required_steel:.0f} mm²",
            formula="As = M'/(0.87fy·z) + As'",
            substitution=(
                f"As = {limiting_moment * 1e6:.2e}/(0.87 × {fy:g} × {z:.1f}) + {compression_steel:.0f}"
            ),
        )
    else:
        required_steel = tension_steel(M, fy, z)
        log.add(
            "Step 6: Tension Steel Area (BS8110 Cl. 3.4.4.4)",
            f"As = {required_steel:.0f} mm²",
            formula="As = M / (0.87fy·z)",
            substitution=f"As = {M_nmm:.2e} / (0.87 × {fy:g} × {z:.1f})",
            explanation="Required area of tension reinforcement",
            reference="BS8110 Cl. 3.4.4.4",
        )

    # 7. Minimum and maximum steel
    min_steel = minimum_steel(b, d)
    max_steel = maximum_steel(b, d)
    minimum_governs = required_steel < min_steel
    minimum_steel_ok = not minimum_governs
    log.check(
        "Step 7: Minimum Steel Check (BS8110 Cl. 3.12.5.3)",
        f"As,min = {min_steel:.0f} mm²",
        passed=minimum_steel_ok,
        formula="As,min = 0.13%bh ≈ 0.13%bd",
        substitution=f"As,min = 0.0013 × {b:g} × {d:g}",
        explanation=(
            f"As = {required_steel:.0f} mm² < As,min = {min_steel:.0f} mm² - Minimum steel governs"
            if minimum_governs
            else f"As = {required_steel:.0f} mm² ≥ As,min = {min_steel:.0f} mm² ✓"
        ),
        reference="BS8110 Cl. 3.12.5.3",
    )
    As = max(required_steel, min_steel)
    steel_limits_ok = As <= max_steel
    log.check(
        "Step 7b: Maximum Steel Check (BS8110 Cl. 3.12.6.1)",
        f"As,max = {max_steel:.0f} mm²",
        passed=steel_limits_ok,
        formula="As ≤ 4%bd",
        substitution=f"As = {As:.0f} mm² vs 0.04 × {b:g} × {d:g} = {max_steel:.0f} mm²",
        explanation=(
            "Reinforcement within practical limits ✓"
            if steel_limits_ok
            else "Reinforcement exceeds 4% - increase section size"
        ),
        reference="BS8110 Cl. 3.12.6.1",
    )

    # 8. Shear force
    V = simply_supported_shear(w, L)
    log.add(
        "Step 8: Shear Force",
        f"V = {V:.2f} kN",
        formula="V = wL/2",
        substitution=f"V = {w:.2f} × {L:g} / 2",
    )

    # 9. Critical section at d from the support face
    Vd = critical_shear(V, w, d)
    log.add(
        "Step 9: Critical Section Shear",
        f"Vd = {Vd:.2f} kN",
        formula="Vd = V - w·d",
        substitution=f"Vd = {V:.2f} - {w:.2f} × {d / 1000.0:.3f}",
        explanation="Shear at distance d from the face of support",
        reference="BS8110 Cl. 3.4.5.10",
    )

    # 10. Shear stress vs vmax and vc
    v = shear_stress(Vd, b, d)
    v_max = max_shear_stress(fcu)
    vc = concrete_shear_capacity(As, b, d, fcu)
    shear_safe = v < v_max
    log.add(
        "Step 10: Shear Stress (BS8110 Cl. 3.4.5.2)",
        f"v = {v:.3f} N/mm²",
        formula="v = V / (bd)",
        substitution=f"v = {Vd * 1000.0:.0f} / ({b:g} × {d:g})",
        reference="BS8110 Cl. 3.4.5.2",
    )
    log.check(
        "Step 10a: Maximum Shear Check",
        "Shear stress OK" if shear_safe else "Section inadequate - increase size",
        passed=shear_safe,
        formula="v < 0.8√fcu and v < 5 N/mm²",
        substitution=f"v = {v:.2f} vs vmax = min(0.8√{fcu:g}, 5) = {v_max:.2f} N/mm²",
        reference="BS8110 Cl. 3.4.5.2",
    )
    log.add(
        "Step 10b: Concrete Shear Resistance (Table 3.8)",
        f"vc = {vc:.3f} N/mm²",
        formula="vc = (0.79/γm) × (100As/bd)^(1/3) × (400/d)^(1/4) × (fcu/25)^(1/3)",
        substitution=f"100As/bd = {100.0 * As / (b * d):.3f}, γm = 1.25",
        reference="BS8110 Table 3.8",
    )

    # 11. Links
    links = design_links(v, vc, b, d, fy)
    if links.status == "nominal":
        link_note = "v ≤ vc: nominal links only"
        link_status = "safe"
    elif links.status == "designed":
        link_note = f"Asv/sv = b(v - vc)/(0.87fy) = {links.asv_over_sv:.3f} mm²/mm"
        link_status = "safe"
    else:
        link_note = (
            "No 8/10/12 mm two-leg link fits 75 mm ≤ sv ≤ 0.75d; "
            "T12@100 adopted as a default - verify by hand"
        )
        link_status = "review"
    log.add(
        "Step 11: Shear Link Design (BS8110 Table 3.7)",
        f"Provide T{links.dia_mm}@{links.spacing_mm}mm c/c" + (" (nominal)" if links.status == "nominal" else ""),
        formula="Asv/sv ≥ b(v - vc)/(0.87fy), sv ≤ 0.75d",
        substitution=f"v = {v:.3f} N/mm², vc = {vc:.3f} N/mm²",
        explanation=link_note,
        status=link_status,
        reference="BS8110 Table 3.7",
    )

    # 13 is computed first: the compression factor needs the provided area
    bars = select_beam_bars(As, BEAM_MAX_BARS)
    comp_bars = select_beam_bars(compression_steel, BEAM_MAX_BARS) if compression_steel > 0.0 else None

    # 12. Deflection
    basic = basic_span_depth_ratio("simply-supported")
    tension_mf = tension_modification_factor(M, b, d, fy, As)
    compression_mf = 1.0
    if comp_bars is not None:
        asc_prov = comp_bars.provided_mm2 if comp_bars.adequate else compression_steel
        compression_mf = compression_modification_factor(asc_prov, compression_steel)
    allowable = basic * tension_mf * compression_mf
    actual = span_depth_ratio(L, d)
    deflection_safe = actual <= allowable
    log.check(
        "Step 12: Deflection Check (BS8110 Cl. 3.4.6)",
        f"Actual L/d = {actual:.1f}, Allowable L/d = {allowable:.1f}",
        passed=deflection_safe,
        formula="Actual span/d ≤ Basic ratio × Tension MF × Compression MF",
        substitution=(
            f"Basic = {basic:g} (simply supported), tension MF = {tension_mf:.2f}"
            + (f", compression MF = {compression_mf:.2f}" if doubly else "")
        ),
        explanation=(
            "Actual ≤ Allowable → Deflection satisfactory ✓"
            if deflection_safe
            else "Actual > Allowable → Increase beam depth"
        ),
        reference="BS8110 Cl. 3.4.6",
    )

    log.add(
        "Step 13: Reinforcement Selection",
        f"Tension: {bars.text}" + (f" | Compression: {comp_bars.text}" if comp_bars is not None else ""),
        explanation="Select bars to provide area ≥ As required",
        status="safe" if bars.adequate else "review",
    )

    design_valid = minimum_steel_ok and steel_limits_ok and shear_safe and deflection_safe
    failure_reasons: List[str] = []
    if not minimum_steel_ok:
        failure_reasons.append(FAILURE_REASONS["minimum-steel"])
    if not steel_limits_ok:
        failure_reasons.append(FAILURE_REASONS["reinforcement"])
    if not shear_safe:
        failure_reasons.append(FAILURE_REASONS["shear"])
    if not deflection_safe:
        failure_reasons.append(FAILURE_REASONS["deflection"])

    if not shear_safe:
        shear_status = "unsafe"
    elif links.status == "review":
        shear_status = "review"
    else:
        shear_status = "safe"

    summary = BeamSummary(
        span_m=L,
        dead_load_kn_m=gk,
        live_load_kn_m=qk,
        width_mm=b,
        effective_depth_mm=d,
        overall_depth_mm=d + cover + NOMINAL_LINK_DIAMETER_MM + NOMINAL_MAIN_BAR_DIAMETER_MM / 2.0,
        cover_mm=cover,
        fcu_n_mm2=fcu,
        fy_n_mm2=fy,
        ultimate_load_kn_m=w,
        ultimate_moment_knm=M,
        shear_force_kn=V,
        critical_shear_kn=Vd,
        k_value=K,
        k_prime=K_PRIME,
        is_doubly_reinforced=doubly,
        lever_arm_mm=z,
        limiting_moment_knm=limiting_moment,
        required_tension_steel_mm2=required_steel,
        tension_steel_mm2=As,
        compression_steel_mm2=compression_steel,
        min_steel_mm2=min_steel,
        max_steel_mm2=max_steel,
        minimum_steel_governs=minimum_governs,
        minimum_steel_ok=minimum_steel_ok,
        steel_limits_ok=steel_limits_ok,
        bar_suggestion=bars.text,
        provided_steel_mm2=bars.provided_mm2,
        compression_bar_suggestion=comp_bars.text if comp_bars is not None else None,
        shear_stress_n_mm2=v,
        vc_n_mm2=vc,
        max_shear_stress_n_mm2=v_max,
        link_dia_mm=links.dia_mm,
        link_spacing_mm=links.spacing_mm,
        link_status=links.status,
        shear_status=shear_status,
        basic_span_depth_ratio=basic,
        tension_modification_factor=tension_mf,
        compression_modification_factor=compression_mf,
        allowable_span_depth_ratio=allowable,
        actual_span_depth_ratio=actual,
        deflection_status="safe" if deflection_safe else "unsafe",
        design_valid=design_valid,
        failure_reasons=failure_reasons,
    )
    logger.debug(
        f"Beam design: M={M:.2f} kNm K={K:.4f} As={As:.0f} mm² v={v:.3f} N/mm² "
        f"L/d={actual:.1f}/{allowable:.1f} valid={design_valid}"
    )
    return BeamResult(steps=log.steps, summary=summary)
