from __future__ import annotations

"""BS 8110 coefficient tables.

All tables are module-level immutable data (tuples wrapped in MappingProxyType)
and are never mutated after import.

- Table 3.5: continuous beams, equal spans, uniform load (moment + shear)
- Table 3.12 (one-way slabs) as a positive/negative coefficient pair per support
- Table 3.9: basic span/effective depth ratios
- Table 3.14: two-way slab bending moment coefficients
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

import numpy as np

from .constants import CONTINUOUS_BASIC_SPAN_DEPTH


# ----------------------------
# Continuous beams (Table 3.5)
# ----------------------------
@dataclass(frozen=True)
class ContinuousBeamCoefficients:
    support: Tuple[float, ...]   # n_spans + 1 entries, hogging (magnitude)
    midspan: Tuple[float, ...]   # n_spans entries, sagging
    shear_left: Tuple[float, ...]
    shear_right: Tuple[float, ...]


CONTINUOUS_BEAM_COEFFICIENTS: Mapping[int, ContinuousBeamCoefficients] = MappingProxyType(
    {
        2: ContinuousBeamCoefficients(
            support=(0.0, 0.125, 0.0),
            midspan=(0.070, 0.070),
            shear_left=(0.375, 0.625),
            shear_right=(0.625, 0.375),
        ),
        3: ContinuousBeamCoefficients(
            support=(0.0, 0.100, 0.100, 0.0),
            midspan=(0.080, 0.025, 0.080),
            shear_left=(0.400, 0.500, 0.600),
            shear_right=(0.600, 0.500, 0.400),
        ),
        4: ContinuousBeamCoefficients(
            support=(0.0, 0.107, 0.071, 0.107, 0.0),
            midspan=(0.077, 0.036, 0.036, 0.077),
            shear_left=(0.393, 0.536, 0.464, 0.607),
            shear_right=(0.607, 0.464, 0.536, 0.393),
        ),
        5: ContinuousBeamCoefficients(
            support=(0.0, 0.105, 0.079, 0.079, 0.105, 0.0),
            midspan=(0.078, 0.033, 0.046, 0.033, 0.078),
            shear_left=(0.395, 0.526, 0.500, 0.474, 0.605),
            shear_right=(0.605, 0.474, 0.500, 0.526, 0.395),
        ),
    }
)


def continuous_beam_coefficients(n_spans: int) -> ContinuousBeamCoefficients:
    try:
        return CONTINUOUS_BEAM_COEFFICIENTS[n_spans]
    except KeyError:
        raise ValueError(f"No Table 3.5 coefficients for {n_spans} spans (supported: 2-5).") from None


# ----------------------------
# One-way slabs
# ----------------------------
@dataclass(frozen=True)
class OneWayCoefficients:
    positive: float
    negative: float


# One canonical set: wL²/8, wL²/11, wL²/16 (span) with wL²/12 (support), wL²/2.
ONE_WAY_COEFFICIENTS: Mapping[str, OneWayCoefficients] = MappingProxyType(
    {
        "simply-supported": OneWayCoefficients(positive=0.125, negative=0.0),
        "continuous-one-end": OneWayCoefficients(positive=0.090, negative=0.090),
        "continuous-both-ends": OneWayCoefficients(positive=0.063, negative=0.083),
        "cantilever": OneWayCoefficients(positive=0.0, negative=0.500),
    }
)

# Table 3.9
BASIC_SPAN_DEPTH_RATIOS: Mapping[str, float] = MappingProxyType(
    {
        "cantilever": 7.0,
        "simply-supported": 20.0,
        "continuous-one-end": CONTINUOUS_BASIC_SPAN_DEPTH,
        "continuous-both-ends": CONTINUOUS_BASIC_SPAN_DEPTH,
        "continuous": CONTINUOUS_BASIC_SPAN_DEPTH,
    }
)


def one_way_coefficients(support_condition: str) -> OneWayCoefficients:
    return ONE_WAY_COEFFICIENTS.get(support_condition, ONE_WAY_COEFFICIENTS["simply-supported"])


def basic_span_depth_ratio(support_condition: str) -> float:
    return BASIC_SPAN_DEPTH_RATIOS.get(support_condition, BASIC_SPAN_DEPTH_RATIOS["simply-supported"])


# ----------------------------
# Two-way slabs (Table 3.14)
# ----------------------------
SPAN_RATIOS: Tuple[float, ...] = (1.0, 1.1, 1.2, 1.3, 1.4, 1.5, 1.75, 2.0)


@dataclass(frozen=True)
class TwoWayTable:
    name: str
    bsx_neg: Tuple[float, ...]
    bsx_pos: Tuple[float, ...]
    bsy_neg: Tuple[float, ...]
    bsy_pos: Tuple[float, ...]


SIMPLY_SUPPORTED_TABLE = TwoWayTable(
    name="Table 3.14 - Simply Supported (No restraint at corners)",
    bsx_neg=(0.0,) * 8,
    bsx_pos=(0.062, 0.074, 0.084, 0.093, 0.099, 0.104, 0.113, 0.118),
    bsy_neg=(0.0,) * 8,
    bsy_pos=(0.062, 0.061, 0.059, 0.055, 0.051, 0.046, 0.037, 0.029),
)

TWO_WAY_TABLES: Mapping[str, TwoWayTable] = MappingProxyType(
    {
        "interior": TwoWayTable(
            name="Table 3.14 - Interior Panel (All edges continuous)",
            bsx_neg=(0.031, 0.037, 0.042, 0.046, 0.050, 0.053, 0.059, 0.063),
            bsx_pos=(0.024, 0.028, 0.032, 0.035, 0.037, 0.040, 0.044, 0.048),
            bsy_neg=(0.031, 0.030, 0.029, 0.028, 0.027, 0.026, 0.024, 0.022),
            bsy_pos=(0.024, 0.023, 0.022, 0.021, 0.020, 0.019, 0.017, 0.015),
        ),
        "edge-short": TwoWayTable(
            name="Table 3.14 - Edge Panel (Short edge discontinuous)",
            bsx_neg=(0.039, 0.044, 0.049, 0.053, 0.057, 0.060, 0.065, 0.069),
            bsx_pos=(0.030, 0.034, 0.037, 0.040, 0.043, 0.045, 0.049, 0.052),
            bsy_neg=(0.039, 0.037, 0.036, 0.034, 0.033, 0.031, 0.028, 0.025),
            bsy_pos=(0.030, 0.028, 0.027, 0.026, 0.025, 0.024, 0.021, 0.019),
        ),
        "edge-long": TwoWayTable(
            name="Table 3.14 - Edge Panel (Long edge discontinuous)",
            bsx_neg=(0.039, 0.046, 0.052, 0.057, 0.062, 0.066, 0.073, 0.078),
            bsx_pos=(0.030, 0.035, 0.039, 0.043, 0.046, 0.049, 0.055, 0.059),
            bsy_neg=(0.039,) * 8,
            bsy_pos=(0.030,) * 8,
        ),
        "corner": TwoWayTable(
            name="Table 3.14 - Corner Panel (Two adjacent edges discontinuous)",
            bsx_neg=(0.047, 0.053, 0.059, 0.064, 0.068, 0.072, 0.079, 0.085),
            bsx_pos=(0.036, 0.040, 0.044, 0.048, 0.051, 0.054, 0.059, 0.064),
            bsy_neg=(0.047, 0.045, 0.044, 0.042, 0.040, 0.039, 0.034, 0.030),
            bsy_pos=(0.036, 0.034, 0.033, 0.031, 0.030, 0.028, 0.025, 0.022),
        ),
        "simply-supported": SIMPLY_SUPPORTED_TABLE,
    }
)


@dataclass(frozen=True)
class TwoWayCoefficients:
    bsx_neg: float
    bsx_pos: float
    bsy_neg: float
    bsy_pos: float
    table_name: str


def interpolate_coefficient(ratio: float, values: Sequence[float]) -> float:
    """Linear interpolation over SPAN_RATIOS.

    Exact at the breakpoints; clamped to the first/last value outside [1.0, 2.0].
    """
    if len(values) != len(SPAN_RATIOS):
        raise ValueError(f"Expected {len(SPAN_RATIOS)} coefficient values, got {len(values)}.")
    # np.interp clamps to the end values (no extrapolation)
    return float(np.interp(float(ratio), SPAN_RATIOS, values))


def select_two_way_table(panel_type: str, short_edge: str, long_edge: str) -> str:
    """Table key by panel type and edge continuity, checked in this order."""
    if panel_type == "interior" or (short_edge == "continuous" and long_edge == "continuous"):
        return "interior"
    if panel_type == "corner" or (short_edge == "discontinuous" and long_edge == "discontinuous"):
        return "corner"
    if short_edge == "discontinuous":
        return "edge-short"
    return "edge-long"


def two_way_coefficients(
    span_ratio: float,
    *,
    panel_type: str,
    short_edge: str,
    long_edge: str,
    support_condition: str,
) -> TwoWayCoefficients:
    if support_condition == "simply-supported":
        table = SIMPLY_SUPPORTED_TABLE
    else:
        table = TWO_WAY_TABLES[select_two_way_table(panel_type, short_edge, long_edge)]
    return TwoWayCoefficients(
        bsx_neg=interpolate_coefficient(span_ratio, table.bsx_neg),
        bsx_pos=interpolate_coefficient(span_ratio, table.bsx_pos),
        bsy_neg=interpolate_coefficient(span_ratio, table.bsy_neg),
        bsy_pos=interpolate_coefficient(span_ratio, table.bsy_pos),
        table_name=table.name,
    )
