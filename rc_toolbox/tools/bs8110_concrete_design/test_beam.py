from __future__ import annotations

import pytest
from pydantic import ValidationError

from .beam import calculate_beam_design
from .constants import FAILURE_REASONS
from .models import BeamInputs


def test_default_beam_scenario() -> None:
    r = calculate_beam_design(BeamInputs())
    s = r.summary
    assert s.ultimate_load_kn_m == pytest.approx(37.0)
    assert s.ultimate_moment_knm == pytest.approx(166.5)
    assert s.k_value == pytest.approx(0.09136, abs=1e-4)
    assert not s.is_doubly_reinforced
    assert s.lever_arm_mm == pytest.approx(398.4, abs=0.2)
    assert s.tension_steel_mm2 == pytest.approx(1044.3, abs=1.0)
    assert s.bar_suggestion == "4T20 (1256 mm² provided)"
    assert s.provided_steel_mm2 == 1256.0

    assert s.shear_force_kn == pytest.approx(111.0)
    assert s.critical_shear_kn == pytest.approx(94.35)
    assert s.shear_stress_n_mm2 == pytest.approx(0.699, abs=1e-3)
    assert (s.link_dia_mm, s.link_spacing_mm, s.link_status) == (8, 337, "designed")
    assert s.shear_status == "safe"

    assert s.tension_modification_factor == pytest.approx(1.636, abs=0.005)
    assert s.actual_span_depth_ratio == pytest.approx(13.33, abs=0.01)
    assert s.allowable_span_depth_ratio == pytest.approx(32.73, abs=0.1)
    assert s.deflection_status == "safe"

    assert s.minimum_steel_ok and s.steel_limits_ok
    assert r.design_valid
    assert s.failure_reasons == []
    assert s.overall_depth_mm == pytest.approx(505.0)


def test_steps_are_ordered_and_titled() -> None:
    r = calculate_beam_design(BeamInputs())
    titles = [st.title for st in r.steps]
    assert titles[0].startswith("Step 1: Ultimate Design Load")
    assert titles[-1] == "Step 13: Reinforcement Selection"
    assert "Step 6: Tension Steel Area (BS8110 Cl. 3.4.4.4)" in titles
    assert not any(t.startswith("Step 6a") for t in titles)
    checks = [st for st in r.steps if st.is_check]
    assert all(st.check_passed for st in checks)


def test_calculation_is_deterministic() -> None:
    inputs = BeamInputs(span_m=7.2, dead_load_kn_m=18.5, live_load_kn_m=12.0)
    assert calculate_beam_design(inputs) == calculate_beam_design(inputs)


def test_k_decreases_with_effective_depth() -> None:
    ks = [calculate_beam_design(BeamInputs(effective_depth_mm=d)).summary.k_value for d in (350, 450, 550, 650)]
    assert all(a > b for a, b in zip(ks, ks[1:]))


def test_minimum_steel_floor() -> None:
    r = calculate_beam_design(BeamInputs(span_m=2.0, dead_load_kn_m=1.0, live_load_kn_m=0.0))
    s = r.summary
    assert s.minimum_steel_governs
    assert s.tension_steel_mm2 == pytest.approx(0.0013 * 300 * 450)
    assert s.tension_steel_mm2 >= s.min_steel_mm2
    assert not s.minimum_steel_ok
    assert next(st for st in r.steps if st.title.startswith("Step 7:")).status == "unsafe"
    assert not r.design_valid
    assert FAILURE_REASONS["minimum-steel"] in s.failure_reasons
    # the section still carries its other checks
    assert s.shear_status == "safe" and s.deflection_status == "safe"


def test_doubly_reinforced_beam_still_valid() -> None:
    r = calculate_beam_design(BeamInputs(span_m=8.0, dead_load_kn_m=25.0, live_load_kn_m=15.0))
    s = r.summary
    assert s.is_doubly_reinforced
    assert s.k_value > s.k_prime
    assert s.limiting_moment_knm == pytest.approx(0.156 * 300 * 450**2 * 30 / 1e6)
    assert s.compression_steel_mm2 > 0
    assert s.tension_steel_mm2 > s.compression_steel_mm2
    assert s.compression_bar_suggestion is not None
    assert s.compression_modification_factor > 1.0
    titles = [st.title for st in r.steps]
    assert "Step 6b: Compression Steel Area" in titles
    beam_type = next(st for st in r.steps if st.title == "Step 4: Check Beam Type")
    assert beam_type.status == "review"
    assert r.design_valid


def test_overloaded_small_section_fails() -> None:
    r = calculate_beam_design(
        BeamInputs(span_m=6.0, dead_load_kn_m=30.0, live_load_kn_m=20.0, width_mm=150.0, effective_depth_mm=200.0)
    )
    s = r.summary
    assert not r.design_valid
    assert not s.steel_limits_ok
    assert FAILURE_REASONS["reinforcement"] in s.failure_reasons
    assert s.bar_suggestion == "Use 2 layers or larger bars"


def test_invalid_inputs_rejected() -> None:
    with pytest.raises(ValidationError):
        BeamInputs(span_m=0.0)
    with pytest.raises(ValidationError):
        BeamInputs(width_mm=-300.0)
    with pytest.raises(ValidationError):
        BeamInputs(unknown_field=1.0)
