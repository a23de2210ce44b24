from __future__ import annotations

"""Section and material formulas (BS 8110-1:1997).

Units used throughout:
  loads      kN/m (beams) or kN/m² (slabs)
  spans      m
  moments    kNm (converted to N·mm inside where the clause is in N, mm)
  dimensions mm
  stresses   N/mm²
  areas      mm² (or mm²/m for slab strips)

Every function is pure. None raises for finite positive inputs.
"""

import math
from dataclasses import dataclass
from typing import Literal

from .constants import (
    COMPRESSION_BAR_RADIUS_MM,
    COMPRESSION_MOD_MAX,
    GAMMA_DEAD,
    GAMMA_LIVE,
    GAMMA_M_SHEAR,
    K_PRIME,
    LEVER_ARM_MAX_RATIO,
    LINK_DIAMETERS_MM,
    LINK_FALLBACK,
    LINK_MAX_SPACING_RATIO,
    LINK_MIN_SPACING_MM,
    LINK_NOMINAL_MAX_SPACING_MM,
    MAX_STEEL_RATIO,
    MIN_STEEL_RATIO,
    SHEAR_STRESS_ABS_MAX,
    SHEAR_STRESS_FCU_FACTOR,
    STEEL_STRESS_FACTOR,
    TENSION_MOD_MAX,
    TENSION_MOD_MIN,
    VC_COEFFICIENT,
    VC_DEPTH_FACTOR_MIN,
    VC_STEEL_RATIO_CAP,
)

LinkStatus = Literal["nominal", "designed", "review"]


# ----------------------------
# Loads and actions
# ----------------------------
def ultimate_load(dead: float, live: float) -> float:
    """w = 1.4Gk + 1.6Qk (Cl. 2.4.3)."""
    return GAMMA_DEAD * dead + GAMMA_LIVE * live


def simply_supported_moment(w_kn_m: float, span_m: float) -> float:
    return w_kn_m * span_m**2 / 8.0


def simply_supported_shear(w_kn_m: float, span_m: float) -> float:
    return w_kn_m * span_m / 2.0


def critical_shear(v_kn: float, w_kn_m: float, d_mm: float) -> float:
    """Shear at distance d from the support face: Vd = V - w·d. Never below zero."""
    return max(v_kn - w_kn_m * d_mm / 1000.0, 0.0)


# ----------------------------
# Bending (Cl. 3.4.4.4)
# ----------------------------
def k_value(moment_knm: float, b_mm: float, d_mm: float, fcu: float) -> float:
    return moment_knm * 1e6 / (b_mm * d_mm**2 * fcu)


def lever_arm(d_mm: float, k: float) -> float:
    """z = d[0.5 + sqrt(0.25 - K/0.9)] <= 0.95d.

    For K > 0.225 the radicand would be negative; it is clamped at zero (z = 0.5d).
    Such a K is far above K' so the caller has already failed the classification check.
    """
    radicand = max(0.25 - k / 0.9, 0.0)
    return min(0.5 + math.sqrt(radicand), LEVER_ARM_MAX_RATIO) * d_mm


def tension_steel(moment_knm: float, fy: float, z_mm: float) -> float:
    """As = M / (0.87 fy z)."""
    if moment_knm <= 0.0:
        return 0.0
    return moment_knm * 1e6 / (STEEL_STRESS_FACTOR * fy * z_mm)


@dataclass(frozen=True)
class DoublyReinforcedSteel:
    limiting_moment_knm: float
    d_prime_mm: float
    lever_arm_mm: float
    compression_steel_mm2: float
    tension_steel_mm2: float


def doubly_reinforced_steel(
    moment_knm: float, b_mm: float, d_mm: float, fcu: float, fy: float, cover_mm: float
) -> DoublyReinforcedSteel:
    """M' = K'bd²fcu; As' = (M - M')/(0.87fy(d - d')); As = M'/(0.87fy z) + As'."""
    m_limit_nmm = K_PRIME * b_mm * d_mm**2 * fcu
    d_prime = cover_mm + COMPRESSION_BAR_RADIUS_MM
    z = lever_arm(d_mm, K_PRIME)
    excess = max(moment_knm * 1e6 - m_limit_nmm, 0.0)
    asc = excess / (STEEL_STRESS_FACTOR * fy * (d_mm - d_prime))
    ast = m_limit_nmm / (STEEL_STRESS_FACTOR * fy * z) + asc
    return DoublyReinforcedSteel(
        limiting_moment_knm=m_limit_nmm / 1e6,
        d_prime_mm=d_prime,
        lever_arm_mm=z,
        compression_steel_mm2=asc,
        tension_steel_mm2=ast,
    )


def minimum_steel(b_mm: float, h_mm: float) -> float:
    """0.13% bh for high yield steel (Table 3.25)."""
    return MIN_STEEL_RATIO * b_mm * h_mm


def maximum_steel(b_mm: float, h_mm: float) -> float:
    """4% of the gross section (Cl. 3.12.6.1)."""
    return MAX_STEEL_RATIO * b_mm * h_mm


# ----------------------------
# Shear (Cl. 3.4.5)
# ----------------------------
def shear_stress(v_kn: float, b_mm: float, d_mm: float) -> float:
    return v_kn * 1000.0 / (b_mm * d_mm)


def max_shear_stress(fcu: float) -> float:
    return min(SHEAR_STRESS_FCU_FACTOR * math.sqrt(fcu), SHEAR_STRESS_ABS_MAX)


def concrete_shear_capacity(as_mm2: float, b_mm: float, d_mm: float, fcu: float) -> float:
    """Table 3.8 expression for vc."""
    steel_ratio = min(100.0 * max(as_mm2, 0.0) / (b_mm * d_mm), VC_STEEL_RATIO_CAP)
    depth_factor = max((400.0 / d_mm) ** 0.25, VC_DEPTH_FACTOR_MIN)
    grade_factor = min((fcu / 25.0) ** (1.0 / 3.0), 1.0)
    return VC_COEFFICIENT * steel_ratio ** (1.0 / 3.0) * depth_factor * grade_factor / GAMMA_M_SHEAR


@dataclass(frozen=True)
class LinkDesign:
    dia_mm: int
    spacing_mm: int
    status: LinkStatus
    asv_over_sv: float = 0.0


def design_links(v: float, vc: float, b_mm: float, d_mm: float, fy: float) -> LinkDesign:
    """Two-leg links for v - vc (Table 3.7).

    The fallback T12@100 is a policy choice, flagged as 'review'.
    """
    max_spacing = int(math.floor(LINK_MAX_SPACING_RATIO * d_mm))
    excess = v - vc
    if excess <= 0.0:
        return LinkDesign(
            dia_mm=LINK_DIAMETERS_MM[0],
            spacing_mm=min(LINK_NOMINAL_MAX_SPACING_MM, max_spacing),
            status="nominal",
        )

    asv_over_sv = b_mm * excess / (STEEL_STRESS_FACTOR * fy)
    for dia in LINK_DIAMETERS_MM:
        asv = 2.0 * math.pi * (dia / 2.0) ** 2
        spacing = min(int(math.floor(asv / asv_over_sv)), max_spacing)
        if spacing >= LINK_MIN_SPACING_MM:
            return LinkDesign(dia_mm=dia, spacing_mm=spacing, status="designed", asv_over_sv=asv_over_sv)

    dia, spacing = LINK_FALLBACK
    return LinkDesign(dia_mm=dia, spacing_mm=spacing, status="review", asv_over_sv=asv_over_sv)


# ----------------------------
# Deflection (Cl. 3.4.6)
# ----------------------------
def service_stress(fy: float, as_mm2: float, b_mm: float, d_mm: float) -> float:
    """Approximate service stress fs = 2 fy As / (3bd)."""
    return 2.0 * fy * as_mm2 / (3.0 * b_mm * d_mm)


def tension_modification_factor(moment_knm: float, b_mm: float, d_mm: float, fy: float, as_mm2: float) -> float:
    """0.55 + (477 - fs)/(120(0.9 + M/bd²)), within [0.55, 2.0]."""
    fs = service_stress(fy, as_mm2, b_mm, d_mm)
    m_bd2 = max(moment_knm, 0.0) * 1e6 / (b_mm * d_mm**2)
    factor = 0.55 + (477.0 - fs) / (120.0 * (0.9 + m_bd2))
    return min(max(factor, TENSION_MOD_MIN), TENSION_MOD_MAX)


def compression_modification_factor(asc_prov_mm2: float, asc_req_mm2: float) -> float:
    if asc_prov_mm2 <= 0.0 or asc_req_mm2 <= 0.0:
        return 1.0
    return min(1.0 + asc_prov_mm2 / (3.0 * asc_req_mm2), COMPRESSION_MOD_MAX)


def span_depth_ratio(span_m: float, d_mm: float) -> float:
    return span_m * 1000.0 / d_mm


def round_up_to(value: float, step: int) -> int:
    """Round a dimension up to the next multiple of step (25 mm for member sizes)."""
    return int(math.ceil(value / step) * step)
