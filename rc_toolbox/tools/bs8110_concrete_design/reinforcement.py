from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import BEAM_MAX_BARS

# (diameter mm, area per bar mm²)
BEAM_BARS: Tuple[Tuple[int, int], ...] = (
    (12, 113),
    (16, 201),
    (20, 314),
    (25, 491),
    (32, 804),
)

SLAB_BAR_DIAMETERS_MM: Tuple[int, ...] = (8, 10, 12, 16)
SLAB_BAR_SPACINGS_MM: Tuple[int, ...] = (125, 150, 200, 250)


def _mesh_area(dia: int, spacing: int) -> int:
    return int(round(math.pi * dia**2 / 4.0 * 1000.0 / spacing))


# (diameter, spacing, mm²/m) ordered by provided area so the first adequate entry is the lightest
SLAB_MESHES: Tuple[Tuple[int, int, int], ...] = tuple(
    sorted(
        ((d, s, _mesh_area(d, s)) for d in SLAB_BAR_DIAMETERS_MM for s in SLAB_BAR_SPACINGS_MM),
        key=lambda m: (m[2], m[0]),
    )
)

BEAM_FALLBACK = "Use 2 layers or larger bars"
SLAB_FALLBACK = "Use larger bars or 2 layers"


@dataclass(frozen=True)
class BarSelection:
    text: str
    adequate: bool
    provided_mm2: float = 0.0
    dia_mm: Optional[int] = None
    count: Optional[int] = None
    spacing_mm: Optional[int] = None


def select_beam_bars(area_mm2: float, max_bars: int = BEAM_MAX_BARS) -> BarSelection:
    """Bar group with the least provided area, at most max_bars bars.

    Ties go to fewer bars. 314 mm² gives 1T20 (exact) rather than 3T12 or 2T16.
    """
    need = max(float(area_mm2), 0.0)
    best: Optional[Tuple[int, int, int]] = None  # (provided, count, dia)
    for dia, bar_area in BEAM_BARS:
        count = max(int(math.ceil(need / bar_area - 1e-9)), 1)
        if count > max_bars:
            continue
        candidate = (count * bar_area, count, dia)
        if best is None or candidate < best:
            best = candidate
    if best is None:
        return BarSelection(text=BEAM_FALLBACK, adequate=False)
    provided, count, dia = best
    return BarSelection(
        text=f"{count}T{dia} ({provided} mm² provided)",
        adequate=True,
        provided_mm2=float(provided),
        dia_mm=dia,
        count=count,
    )


def select_slab_bars(area_mm2_per_m: float) -> BarSelection:
    need = max(float(area_mm2_per_m), 0.0)
    for dia, spacing, area in SLAB_MESHES:
        if area >= need:
            return BarSelection(
                text=f"T{dia}@{spacing}mm c/c ({area} mm²/m provided)",
                adequate=True,
                provided_mm2=float(area),
                dia_mm=dia,
                spacing_mm=spacing,
            )
    return BarSelection(text=SLAB_FALLBACK, adequate=False)
