from __future__ import annotations

import pytest
from pydantic import ValidationError

from .constants import FAILURE_REASONS
from .models import OneWaySlabSummary, SlabInputs, TwoWaySlabSummary
from .slab import calculate_slab_design


def test_default_two_way_interior_panel() -> None:
    r = calculate_slab_design(SlabInputs())
    s = r.summary
    assert isinstance(s, TwoWaySlabSummary)
    assert s.design_path == "two-way"
    assert s.slab_type == "Two-Way Slab"
    assert s.panel_type == "Interior Panel"
    assert s.span_ratio == pytest.approx(1.25)
    assert s.ultimate_load_kn_m2 == pytest.approx(11.0)

    assert s.bsx_pos == pytest.approx(0.0335)
    assert s.short_span_moment_knm == pytest.approx(0.0335 * 11.0 * 16.0)
    assert s.effective_depth_short_mm == pytest.approx(145.0)
    assert s.effective_depth_long_mm == pytest.approx(135.0)
    assert s.k_short < 0.156 and s.k_long < 0.156

    # both directions governed by 0.13%bh
    assert s.min_steel_mm2 == pytest.approx(227.5)
    assert s.short_span_steel_mm2 == pytest.approx(227.5)
    assert s.long_span_steel_mm2 == pytest.approx(227.5)
    assert s.short_span_bar_suggestion == "T8@200mm c/c (251 mm²/m provided)"

    assert s.shear_force_kn == pytest.approx(22.0)
    assert s.shear_stress_n_mm2 == pytest.approx(0.1517, abs=1e-3)
    assert s.permissible_shear_n_mm2 == pytest.approx(0.439, abs=0.005)
    assert s.shear_status == "safe"

    assert s.actual_span_depth_ratio == pytest.approx(27.6, abs=0.05)
    # light steel keeps fs low, so the factor sits at its cap
    assert s.tension_modification_factor == pytest.approx(2.0)
    assert s.allowable_span_depth_ratio == pytest.approx(52.0)
    assert s.deflection_status == "safe"

    assert r.design_valid
    assert s.failure_reasons == []
    assert r.steps[-1].title == "Step 16: Reinforcement Provision"


def test_long_panel_overrides_declared_two_way() -> None:
    r = calculate_slab_design(SlabInputs(short_span_m=3.0, long_span_m=7.0))
    s = r.summary
    assert isinstance(s, OneWaySlabSummary)
    assert s.design_path == "one-way"
    assert s.slab_type == "One-Way Slab"
    step1 = next(st for st in r.steps if st.title.startswith("Step 1:"))
    assert "declared two-way overridden" in step1.result
    assert r.steps[0].reference == "Table 3.12"


def test_declared_one_way_is_honoured() -> None:
    r = calculate_slab_design(SlabInputs(slab_type="one-way"))
    s = r.summary
    assert s.design_path == "one-way"
    assert s.positive_coefficient == pytest.approx(0.063)
    assert s.negative_coefficient == pytest.approx(0.083)
    # support moment governs for continuous-both-ends
    assert s.design_moment_knm == pytest.approx(s.negative_moment_knm)
    assert s.distribution_steel_mm2 == pytest.approx(s.min_steel_mm2)
    assert r.steps[-1].title == "Step 12: Reinforcement Provision"


def test_cantilever_designs_for_support_moment() -> None:
    r = calculate_slab_design(
        SlabInputs(
            slab_type="one-way",
            panel_type="cantilever",
            support_condition="cantilever",
            short_span_m=1.5,
            long_span_m=5.0,
        )
    )
    s = r.summary
    assert s.panel_type == "Cantilever Panel"
    assert s.short_span_moment_knm == 0.0
    assert s.design_moment_knm == pytest.approx(0.5 * 11.0 * 1.5**2)
    assert s.design_moment_knm > 0
    assert s.basic_span_depth_ratio == 7.0


def test_thin_slab_fails_deflection() -> None:
    r = calculate_slab_design(
        SlabInputs(short_span_m=6.0, long_span_m=6.5, slab_thickness_mm=120.0, dead_load_kn_m2=10.0, live_load_kn_m2=5.0)
    )
    s = r.summary
    assert not r.design_valid
    assert s.deflection_status == "unsafe"
    assert FAILURE_REASONS["deflection"] in s.failure_reasons
    deflection = next(st for st in r.steps if st.title == "Step 15: Deflection Check")
    assert deflection.is_check and not deflection.check_passed


def test_corner_panel_uses_its_own_table() -> None:
    interior = calculate_slab_design(SlabInputs()).summary
    corner = calculate_slab_design(
        SlabInputs(panel_type="corner", short_edge_continuity="discontinuous", long_edge_continuity="discontinuous")
    ).summary
    assert corner.panel_type == "Corner Panel"
    assert corner.coefficient_table != interior.coefficient_table
    assert corner.bsx_pos > interior.bsx_pos


def test_invalid_slab_inputs() -> None:
    with pytest.raises(ValidationError):
        SlabInputs(short_span_m=0.0)
    with pytest.raises(ValidationError):
        SlabInputs(panel_type="floating")
    with pytest.raises(ValidationError):
        SlabInputs(dead_load_kn_m2=-1.0)
