from __future__ import annotations

"""Design advisory: turns failed checks into ranked remediation actions.

Beam and slab analyzers take a flat parameter set; the continuous-beam
generator takes already-typed failures plus the beam inputs. All three
rank their output through `rank_advice`.
"""

import math
from typing import Iterable, List, Literal, Sequence

from pydantic import BaseModel, ConfigDict

from .constants import DIMENSION_STEP_MM, K_PRIME, MAX_STEEL_RATIO
from .formulas import round_up_to
from .models import (
    AdvisoryResult,
    BeamInputs,
    BeamResult,
    ContinuousBeamInputs,
    DesignAdvice,
    DesignFailure,
    SlabInputs,
    SlabResult,
    TwoWaySlabSummary,
)

BEAM_ADVICE_LIMIT = 6
SLAB_ADVICE_LIMIT = 5
CONTINUOUS_ADVICE_LIMIT = 5


class BeamAdvisoryParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    k_value: float
    k_prime: float
    shear_stress_n_mm2: float
    max_shear_stress_n_mm2: float
    actual_span_depth_ratio: float
    allowable_span_depth_ratio: float
    tension_steel_mm2: float
    width_mm: float
    depth_mm: float
    effective_depth_mm: float
    span_m: float
    fcu_n_mm2: float
    fy_n_mm2: float


class SlabAdvisoryParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    k_value: float
    k_prime: float
    shear_stress_n_mm2: float
    permissible_shear_n_mm2: float
    actual_span_depth_ratio: float
    allowable_span_depth_ratio: float
    thickness_mm: float
    short_span_m: float
    long_span_m: float
    fcu_n_mm2: float
    slab_type: Literal["one-way", "two-way"]


def _step_up(value: float) -> int:
    """Next whole mm, then up to the 25 mm dimension step."""
    return round_up_to(math.ceil(value), DIMENSION_STEP_MM)


def rank_advice(advice: Iterable[DesignAdvice], limit: int) -> List[DesignAdvice]:
    """Drop repeated actions (first wins), sort by priority (stable), keep the top `limit`."""
    seen = set()
    unique: List[DesignAdvice] = []
    for a in advice:
        if a.action in seen:
            continue
        seen.add(a.action)
        unique.append(a)
    return sorted(unique, key=lambda a: a.priority)[:limit]


def _result(failures: List[DesignFailure], advice: List[DesignAdvice], limit: int) -> AdvisoryResult:
    return AdvisoryResult(
        overall_status="passed" if not failures else "failed",
        failures=failures,
        advice=rank_advice(advice, limit),
    )


# ----------------------------
# Beam
# ----------------------------
def analyze_beam_design(p: BeamAdvisoryParams) -> AdvisoryResult:
    failures: List[DesignFailure] = []
    advice: List[DesignAdvice] = []

    if p.k_value > p.k_prime:
        failures.append(
            DesignFailure(
                kind="k-value",
                description="K-value exceeds K' limit - section inadequate for bending",
                current_value=p.k_value,
                limit_value=p.k_prime,
            )
        )
        depth = _step_up(p.depth_mm * math.sqrt(p.k_value / p.k_prime) * 1.1)
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase beam depth from {p.depth_mm:g}mm to {depth}mm",
                reason=f"Current K = {p.k_value:.4f} exceeds K' = {p.k_prime:g}. Deeper section reduces K value.",
                effectiveness="high",
                category="geometry",
            )
        )
        advice.append(
            DesignAdvice(
                priority=2,
                action=f"Increase beam width from {p.width_mm:g}mm to {_step_up(p.width_mm * 1.3)}mm",
                reason="Wider section provides more moment resistance without changing depth",
                effectiveness="medium",
                category="geometry",
            )
        )
        if p.fcu_n_mm2 < 40:
            advice.append(
                DesignAdvice(
                    priority=4,
                    action=f"Increase concrete grade from C{p.fcu_n_mm2:g} to C{min(p.fcu_n_mm2 + 10, 50):g}",
                    reason="Higher concrete strength increases moment capacity",
                    effectiveness="medium",
                    category="material",
                )
            )

    if p.shear_stress_n_mm2 > p.max_shear_stress_n_mm2:
        failures.append(
            DesignFailure(
                kind="shear",
                description="Shear stress exceeds maximum permissible value",
                current_value=p.shear_stress_n_mm2,
                limit_value=p.max_shear_stress_n_mm2,
                unit="N/mm²",
            )
        )
        width = _step_up(p.width_mm * (p.shear_stress_n_mm2 / p.max_shear_stress_n_mm2) * 1.1)
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase beam width from {p.width_mm:g}mm to {width}mm",
                reason=(
                    f"Shear stress {p.shear_stress_n_mm2:.2f} N/mm² exceeds limit "
                    f"{p.max_shear_stress_n_mm2:.2f} N/mm²"
                ),
                effectiveness="high",
                category="geometry",
            )
        )
        advice.append(
            DesignAdvice(
                priority=2,
                action="Increase beam depth to reduce shear stress",
                reason="Larger cross-section area reduces shear stress",
                effectiveness="high",
                category="geometry",
            )
        )

    if p.actual_span_depth_ratio > p.allowable_span_depth_ratio:
        failures.append(
            DesignFailure(
                kind="deflection",
                description="Span/depth ratio exceeds allowable limit",
                current_value=p.actual_span_depth_ratio,
                limit_value=p.allowable_span_depth_ratio,
            )
        )
        required_d = _step_up(p.span_m * 1000.0 / p.allowable_span_depth_ratio)
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase effective depth from {p.effective_depth_mm:g}mm to {required_d}mm",
                reason=(
                    f"Actual span/d = {p.actual_span_depth_ratio:.1f} exceeds allowable "
                    f"{p.allowable_span_depth_ratio:.1f}"
                ),
                effectiveness="high",
                category="geometry",
            )
        )
        advice.append(
            DesignAdvice(
                priority=3,
                action="Add compression reinforcement to increase stiffness",
                reason="Compression steel increases the tension modification factor",
                effectiveness="medium",
                category="reinforcement",
            )
        )
        if p.span_m > 6:
            advice.append(
                DesignAdvice(
                    priority=4,
                    action=f"Consider reducing span from {p.span_m:g}m by adding intermediate support",
                    reason="Shorter spans significantly reduce deflection requirements",
                    effectiveness="high",
                    category="layout",
                )
            )

    max_steel = MAX_STEEL_RATIO * p.width_mm * p.effective_depth_mm
    if p.tension_steel_mm2 > max_steel:
        failures.append(
            DesignFailure(
                kind="reinforcement",
                description="Required reinforcement exceeds maximum practical limits",
                current_value=p.tension_steel_mm2,
                limit_value=max_steel,
                unit="mm²",
            )
        )
        advice.append(
            DesignAdvice(
                priority=1,
                action="Increase beam dimensions to reduce steel requirement",
                reason=f"Steel area {p.tension_steel_mm2:.0f} mm² exceeds practical limit",
                effectiveness="high",
                category="geometry",
            )
        )
        if p.fy_n_mm2 < 500:
            advice.append(
                DesignAdvice(
                    priority=3,
                    action="Consider using higher grade steel (Grade 500)",
                    reason="Higher strength steel reduces required area",
                    effectiveness="low",
                    category="material",
                )
            )

    return _result(failures, advice, BEAM_ADVICE_LIMIT)


# ----------------------------
# Slab
# ----------------------------
def analyze_slab_design(p: SlabAdvisoryParams) -> AdvisoryResult:
    failures: List[DesignFailure] = []
    advice: List[DesignAdvice] = []

    if p.k_value > p.k_prime:
        failures.append(
            DesignFailure(
                kind="k-value",
                description="K-value exceeds limit - slab too thin for applied moment",
                current_value=p.k_value,
                limit_value=p.k_prime,
            )
        )
        thickness = _step_up(p.thickness_mm * math.sqrt(p.k_value / p.k_prime) * 1.15)
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase slab thickness from {p.thickness_mm:g}mm to {thickness}mm",
                reason=f"K = {p.k_value:.4f} exceeds K' = {p.k_prime:g}",
                effectiveness="high",
                category="geometry",
            )
        )
        if p.fcu_n_mm2 < 35:
            advice.append(
                DesignAdvice(
                    priority=3,
                    action=f"Increase concrete grade from C{p.fcu_n_mm2:g} to C{min(p.fcu_n_mm2 + 5, 40):g}",
                    reason="Higher concrete strength increases moment capacity",
                    effectiveness="medium",
                    category="material",
                )
            )

    if p.shear_stress_n_mm2 > p.permissible_shear_n_mm2:
        failures.append(
            DesignFailure(
                kind="shear",
                description="Shear stress exceeds permissible limit",
                current_value=p.shear_stress_n_mm2,
                limit_value=p.permissible_shear_n_mm2,
                unit="N/mm²",
            )
        )
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase slab thickness from {p.thickness_mm:g}mm to {_step_up(p.thickness_mm * 1.2)}mm",
                reason=(
                    f"v = {p.shear_stress_n_mm2:.3f} N/mm² exceeds vc = {p.permissible_shear_n_mm2:.3f} N/mm²"
                ),
                effectiveness="high",
                category="geometry",
            )
        )
        advice.append(
            DesignAdvice(
                priority=4,
                action="Consider providing drop panels at columns",
                reason="Drop panels increase shear capacity at critical locations",
                effectiveness="high",
                category="layout",
            )
        )

    if p.actual_span_depth_ratio > p.allowable_span_depth_ratio:
        failures.append(
            DesignFailure(
                kind="deflection",
                description="Span/depth ratio exceeds limit",
                current_value=p.actual_span_depth_ratio,
                limit_value=p.allowable_span_depth_ratio,
            )
        )
        advice.append(
            DesignAdvice(
                priority=1,
                action=f"Increase slab thickness from {p.thickness_mm:g}mm to {_step_up(p.thickness_mm * 1.25)}mm",
                reason=(
                    f"Span/d = {p.actual_span_depth_ratio:.1f} exceeds allowable {p.allowable_span_depth_ratio:.1f}"
                ),
                effectiveness="high",
                category="geometry",
            )
        )
        if p.slab_type == "one-way" and p.long_span_m / p.short_span_m > 1.5:
            advice.append(
                DesignAdvice(
                    priority=2,
                    action="Consider two-way slab design by adding edge beams",
                    reason="Two-way action distributes load more efficiently",
                    effectiveness="high",
                    category="layout",
                )
            )
        advice.append(
            DesignAdvice(
                priority=3,
                action="Reduce panel size by adding supporting beams",
                reason="Shorter spans reduce deflection requirements",
                effectiveness="high",
                category="layout",
            )
        )

    return _result(failures, advice, SLAB_ADVICE_LIMIT)


# ----------------------------
# Continuous beam
# ----------------------------
def suggest_continuous_beam_remedies(
    failures: Sequence[DesignFailure], inputs: ContinuousBeamInputs
) -> List[DesignAdvice]:
    h = inputs.beam_depth_mm
    b = inputs.width_mm
    fcu = inputs.fcu_n_mm2
    advice: List[DesignAdvice] = []

    def deeper(factor: float) -> str:
        return f"Increase beam depth from {h:g}mm to {_step_up(h * factor)}mm"

    def wider(factor: float) -> str:
        return f"Increase beam width from {b:g}mm to {_step_up(b * factor)}mm"

    grade = f"Increase concrete grade from C{fcu:g} to C{min(fcu + 10, 50):g}"

    for f in failures:
        over = (f.current_value / f.limit_value - 1.0) * 100.0 if f.limit_value else 0.0
        if f.kind in ("moment", "k-value"):
            advice += [
                DesignAdvice(priority=1, action=deeper(1.2), reason=f"Moment capacity exceeded by {over:.0f}%",
                             effectiveness="high", category="geometry"),
                DesignAdvice(priority=2, action=wider(1.15), reason="Wider section provides more moment resistance",
                             effectiveness="medium", category="geometry"),
                DesignAdvice(priority=4, action=grade, reason="Higher concrete strength increases moment capacity",
                             effectiveness="medium", category="material"),
            ]
        elif f.kind == "shear":
            advice += [
                DesignAdvice(
                    priority=1,
                    action=deeper(1.15),
                    reason=f"Shear stress {f.current_value:.2f} N/mm² exceeds limit {f.limit_value:.2f} N/mm²",
                    effectiveness="high",
                    category="geometry",
                ),
                DesignAdvice(priority=2, action=wider(1.2), reason="Wider section reduces shear stress",
                             effectiveness="high", category="geometry"),
            ]
        elif f.kind == "deflection":
            advice += [
                DesignAdvice(priority=1, action=deeper(1.25), reason=f"Span/depth ratio exceeded by {over:.0f}%",
                             effectiveness="high", category="geometry"),
                DesignAdvice(
                    priority=3,
                    action="Add compression reinforcement to increase stiffness",
                    reason="Compression steel increases allowable span/depth ratio",
                    effectiveness="medium",
                    category="reinforcement",
                ),
            ]
        elif f.kind == "reinforcement":
            advice += [
                DesignAdvice(
                    priority=1,
                    action=deeper(1.3),
                    reason="Required steel exceeds practical limits - deeper section reduces steel requirement",
                    effectiveness="high",
                    category="geometry",
                ),
                DesignAdvice(priority=2, action=grade, reason="Higher concrete grade allows higher K value",
                             effectiveness="medium", category="material"),
                DesignAdvice(priority=5, action="Reduce span by adding intermediate support",
                             reason="Shorter spans significantly reduce moments", effectiveness="high",
                             category="layout"),
            ]

    return rank_advice(advice, CONTINUOUS_ADVICE_LIMIT)


# ----------------------------
# Engine output -> analyzer parameters
# ----------------------------
def beam_advisory_params(inputs: BeamInputs, result: BeamResult) -> BeamAdvisoryParams:
    s = result.summary
    return BeamAdvisoryParams(
        k_value=s.k_value,
        k_prime=s.k_prime,
        shear_stress_n_mm2=s.shear_stress_n_mm2,
        max_shear_stress_n_mm2=s.max_shear_stress_n_mm2,
        actual_span_depth_ratio=s.actual_span_depth_ratio,
        allowable_span_depth_ratio=s.allowable_span_depth_ratio,
        tension_steel_mm2=s.tension_steel_mm2,
        width_mm=inputs.width_mm,
        depth_mm=s.overall_depth_mm,
        effective_depth_mm=inputs.effective_depth_mm,
        span_m=inputs.span_m,
        fcu_n_mm2=inputs.fcu_n_mm2,
        fy_n_mm2=inputs.fy_n_mm2,
    )


def slab_advisory_params(inputs: SlabInputs, result: SlabResult) -> SlabAdvisoryParams:
    s = result.summary
    k = max(s.k_short, s.k_long) if isinstance(s, TwoWaySlabSummary) else s.k_short
    return SlabAdvisoryParams(
        k_value=k,
        k_prime=K_PRIME,
        shear_stress_n_mm2=s.shear_stress_n_mm2,
        permissible_shear_n_mm2=s.permissible_shear_n_mm2,
        actual_span_depth_ratio=s.actual_span_depth_ratio,
        allowable_span_depth_ratio=s.allowable_span_depth_ratio,
        thickness_mm=inputs.slab_thickness_mm,
        short_span_m=inputs.short_span_m,
        long_span_m=inputs.long_span_m,
        fcu_n_mm2=inputs.fcu_n_mm2,
        slab_type=s.design_path,
    )
