from __future__ import annotations

"""Design constants for BS 8110-1:1997 (single canonical set used by every engine)."""

from types import MappingProxyType

TOOL_ID = "bs8110_concrete_design"
TOOL_VERSION = "1.0.0"
REPORT_VERSION = "1.0"
CODE_BASIS = "BS 8110-1:1997"
UNITS_SYSTEM = "SI (kN, m, mm, N/mm²)"

# Partial safety factors for loads (Cl. 2.4.3, Table 2.1)
GAMMA_DEAD = 1.4
GAMMA_LIVE = 1.6

# Section classification (Cl. 3.4.4.4), redistribution <= 10%
K_PRIME = 0.156
LEVER_ARM_MAX_RATIO = 0.95

# Design strength of reinforcement: 0.87 fy (gamma_m = 1.15)
STEEL_STRESS_FACTOR = 0.87

# Reinforcement limits (Cl. 3.12.5.3, Cl. 3.12.6.1)
MIN_STEEL_RATIO = 0.0013
MAX_STEEL_RATIO = 0.04

# Shear (Cl. 3.4.5.2, Table 3.8)
VC_COEFFICIENT = 0.79
GAMMA_M_SHEAR = 1.25
SHEAR_STRESS_ABS_MAX = 5.0
SHEAR_STRESS_FCU_FACTOR = 0.8
VC_STEEL_RATIO_CAP = 3.0
VC_DEPTH_FACTOR_MIN = 0.67

# Links
LINK_DIAMETERS_MM = (8, 10, 12)
LINK_MIN_SPACING_MM = 75
LINK_NOMINAL_MAX_SPACING_MM = 300
LINK_MAX_SPACING_RATIO = 0.75
LINK_FALLBACK = (12, 100)

# Doubly reinforced sections: d' = cover + assumed bar radius
COMPRESSION_BAR_RADIUS_MM = 10.0

# Deflection (Cl. 3.4.6)
TENSION_MOD_MIN = 0.55
TENSION_MOD_MAX = 2.0
COMPRESSION_MOD_MAX = 1.5

# Slabs: 10 mm bars assumed for effective depth, short span bars in the outer layer
SLAB_BAR_DIAMETER_MM = 10.0
SLAB_STRIP_WIDTH_MM = 1000.0
ONE_WAY_RATIO_LIMIT = 2.0

# Continuous beams (Table 3.5 method)
MIN_SPANS = 2
MAX_SPANS = 5
CONCRETE_DENSITY_KN_M3 = 25.0
CONTINUOUS_BASIC_SPAN_DEPTH = 26.0
# Table 3.5 applicability (Cl. 3.4.3): span variation and Qk <= Gk
SPAN_VARIATION_LIMIT = 0.15

# Bar call-outs
BEAM_MAX_BARS = 4
CONTINUOUS_BEAM_MAX_BARS = 5

# Advisory rounding step for recommended dimensions (mm)
DIMENSION_STEP_MM = 25

# Overall depth implied by d for beams: h = d + cover + link + bar/2
NOMINAL_LINK_DIAMETER_MM = 10.0
NOMINAL_MAIN_BAR_DIAMETER_MM = 20.0

# Summary wording for failed checks, keyed by failure kind
FAILURE_REASONS = MappingProxyType(
    {
        "moment": "Excessive bending moment - K value exceeds limit",
        "k-value": "Excessive bending moment - K value exceeds limit",
        "shear": "Excessive shear stress exceeds maximum permissible",
        "deflection": "Deflection limit exceeded - span/depth ratio too high",
        "reinforcement": "Required reinforcement exceeds practical limits",
        "minimum-steel": "Required tension steel below minimum - section over-sized for the load",
    }
)
INVALID_SPAN_COUNT_REASON = "Invalid number of spans"
