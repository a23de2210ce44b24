from __future__ import annotations

import math

import pytest

from .calc_trace import CalcTrace, StepLog
from .coefficients import (
    SIMPLY_SUPPORTED_TABLE,
    TWO_WAY_TABLES,
    basic_span_depth_ratio,
    continuous_beam_coefficients,
    interpolate_coefficient,
    one_way_coefficients,
    select_two_way_table,
    two_way_coefficients,
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
    round_up_to,
    service_stress,
    tension_modification_factor,
    tension_steel,
    ultimate_load,
)
from .paths import compute_input_hash
from .reinforcement import BEAM_FALLBACK, SLAB_FALLBACK, SLAB_MESHES, select_beam_bars, select_slab_bars


def test_input_hash_deterministic() -> None:
    a = {"b": 2.0, "a": 1.0}
    b = {"a": 1.0, "b": 2.0}
    assert compute_input_hash(a) == compute_input_hash(b)


def test_input_hash_covers_nested_spans() -> None:
    a = {"spans": [{"length_m": 6.0, "dead_load_kn_m": 20.0}], "module": "continuous_beam"}
    b = {"module": "continuous_beam", "spans": [{"dead_load_kn_m": 20.0, "length_m": 6.0}]}
    c = {"module": "continuous_beam", "spans": [{"dead_load_kn_m": 20.0, "length_m": 6.5}]}
    assert compute_input_hash(a) == compute_input_hash(b)
    assert compute_input_hash(a) != compute_input_hash(c)
    assert len(compute_input_hash(a)) == 12


def test_ultimate_load() -> None:
    assert ultimate_load(15.0, 10.0) == pytest.approx(37.0)
    assert ultimate_load(0.0, 0.0) == 0.0


def test_critical_shear_never_negative() -> None:
    assert critical_shear(111.0, 37.0, 450.0) == pytest.approx(94.35)
    assert critical_shear(5.0, 37.0, 450.0) == 0.0


def test_lever_arm_cap_and_clamp() -> None:
    # small K hits the 0.95d cap
    assert lever_arm(450.0, 0.01) == pytest.approx(0.95 * 450.0)
    assert lever_arm(450.0, 0.0914) == pytest.approx(398.4, abs=0.2)
    # radicand clamped at zero -> z = 0.5d, never NaN
    z = lever_arm(450.0, 0.5)
    assert not math.isnan(z)
    assert z == pytest.approx(225.0)


def test_k_value_decreases_with_depth() -> None:
    ks = [k_value(166.5, 300.0, d, 30.0) for d in (300.0, 400.0, 500.0, 600.0)]
    assert all(a > b for a, b in zip(ks, ks[1:]))


def test_tension_steel_zero_moment() -> None:
    assert tension_steel(0.0, 460.0, 400.0) == 0.0


def test_doubly_reinforced_steel() -> None:
    dr = doubly_reinforced_steel(472.0, 300.0, 450.0, 30.0, 460.0, 35.0)
    assert dr.d_prime_mm == pytest.approx(45.0)
    assert dr.limiting_moment_knm == pytest.approx(0.156 * 300 * 450**2 * 30 / 1e6)
    assert dr.compression_steel_mm2 > 0
    assert dr.tension_steel_mm2 > dr.compression_steel_mm2


def test_max_shear_stress() -> None:
    assert max_shear_stress(30.0) == pytest.approx(0.8 * math.sqrt(30.0))
    assert max_shear_stress(50.0) == pytest.approx(5.0)


def test_concrete_shear_capacity_caps() -> None:
    # grade factor capped at 1.0 above C25, steel ratio capped at 3%
    assert concrete_shear_capacity(1044.3, 300.0, 450.0, 30.0) == pytest.approx(0.563, abs=0.002)
    assert concrete_shear_capacity(1e6, 300.0, 450.0, 30.0) == concrete_shear_capacity(4050.0, 300.0, 450.0, 30.0)


def test_design_links() -> None:
    nominal = design_links(0.4, 0.5, 300.0, 450.0, 460.0)
    assert nominal.status == "nominal"
    assert nominal.spacing_mm == 300

    designed = design_links(0.699, 0.563, 300.0, 450.0, 460.0)
    assert designed.status == "designed"
    assert designed.dia_mm == 8
    assert designed.spacing_mm == 337

    fallback = design_links(9.0, 0.5, 300.0, 450.0, 460.0)
    assert fallback.status == "review"
    assert (fallback.dia_mm, fallback.spacing_mm) == (12, 100)


def test_service_stress_and_tension_factor() -> None:
    # fs = 2 × 460 × 1044 / (3 × 300 × 450)
    assert service_stress(460.0, 1044.0, 300.0, 450.0) == pytest.approx(2.3716, abs=1e-3)
    # 0.55 + (477 - 2.37) / (120 × (0.9 + 2.741))
    assert tension_modification_factor(166.5, 300.0, 450.0, 460.0, 1044.0) == pytest.approx(1.6364, abs=1e-3)
    # more steel at the same moment raises fs and lowers the factor
    assert tension_modification_factor(166.5, 300.0, 450.0, 460.0, 3000.0) < tension_modification_factor(
        166.5, 300.0, 450.0, 460.0, 1044.0
    )


def test_modification_factors_bounded() -> None:
    assert tension_modification_factor(1000.0, 300.0, 300.0, 460.0, 200000.0) == pytest.approx(0.55)
    assert tension_modification_factor(0.1, 300.0, 450.0, 250.0, 10.0) == pytest.approx(2.0)
    assert compression_modification_factor(0.0, 100.0) == 1.0
    assert compression_modification_factor(10000.0, 100.0) == pytest.approx(1.5)


def test_round_up_to() -> None:
    assert round_up_to(623, 25) == 625
    assert round_up_to(600, 25) == 600


def test_beam_bar_selection() -> None:
    assert select_beam_bars(1044.3).text == "4T20 (1256 mm² provided)"
    # exact match wins, ties go to fewer bars
    assert select_beam_bars(314.0).text == "1T20 (314 mm² provided)"
    five = select_beam_bars(751.0, max_bars=5)
    assert (five.count, five.dia_mm) == (1, 32)
    big = select_beam_bars(5000.0)
    assert not big.adequate
    assert big.text == BEAM_FALLBACK


def test_slab_bar_selection() -> None:
    sel = select_slab_bars(227.5)
    assert sel.text == "T8@200mm c/c (251 mm²/m provided)"
    assert select_slab_bars(0.0).provided_mm2 == min(m[2] for m in SLAB_MESHES)
    assert select_slab_bars(5000.0).text == SLAB_FALLBACK


def test_continuous_beam_coefficients() -> None:
    c2 = continuous_beam_coefficients(2)
    assert c2.support == (0.0, 0.125, 0.0)
    assert c2.midspan == (0.070, 0.070)
    for n in (2, 3, 4, 5):
        c = continuous_beam_coefficients(n)
        assert len(c.support) == n + 1
        assert len(c.midspan) == n
    with pytest.raises(ValueError):
        continuous_beam_coefficients(6)


def test_one_way_coefficients() -> None:
    assert one_way_coefficients("continuous-both-ends").positive == pytest.approx(0.063)
    assert one_way_coefficients("continuous-both-ends").negative == pytest.approx(0.083)
    assert one_way_coefficients("cantilever").positive == 0.0
    assert basic_span_depth_ratio("cantilever") == 7.0
    assert basic_span_depth_ratio("simply-supported") == 20.0
    assert basic_span_depth_ratio("continuous-one-end") == 26.0


def test_interpolation_breakpoints_and_clamping() -> None:
    values = TWO_WAY_TABLES["interior"].bsx_pos
    assert interpolate_coefficient(1.0, values) == pytest.approx(0.024)
    assert interpolate_coefficient(1.5, values) == pytest.approx(0.040)
    assert interpolate_coefficient(1.25, values) == pytest.approx(0.0335)
    assert interpolate_coefficient(0.8, values) == pytest.approx(0.024)
    assert interpolate_coefficient(2.7, values) == pytest.approx(0.048)
    with pytest.raises(ValueError):
        interpolate_coefficient(1.2, values[:4])


def test_two_way_table_selection() -> None:
    assert select_two_way_table("interior", "discontinuous", "discontinuous") == "interior"
    assert select_two_way_table("edge", "continuous", "continuous") == "interior"
    assert select_two_way_table("corner", "continuous", "discontinuous") == "corner"
    assert select_two_way_table("edge", "discontinuous", "continuous") == "edge-short"
    assert select_two_way_table("edge", "continuous", "discontinuous") == "edge-long"

    ss = two_way_coefficients(
        1.0, panel_type="interior", short_edge="continuous", long_edge="continuous", support_condition="simply-supported"
    )
    assert ss.table_name == SIMPLY_SUPPORTED_TABLE.name
    assert ss.bsx_neg == 0.0
    assert ss.bsx_pos == pytest.approx(0.062)


def test_step_log() -> None:
    log = StepLog()
    log.add("Step 1", "w = 37.00 kN/m", formula="w = 1.4Gk + 1.6Qk")
    log.check("Step 2", "ok", passed=False, fail_status="review")
    steps = log.steps
    assert len(log) == 2
    assert steps[0].status is None and not steps[0].is_check
    assert steps[1].is_check and steps[1].check_passed is False and steps[1].status == "review"
    steps.clear()
    assert len(log) == 2
    with pytest.raises(ValueError):
        log.add("", "x")


def test_calc_trace_inputs_tagged() -> None:
    tr = CalcTrace.new(
        tool_id="t",
        tool_version="test",
        module="beam",
        inputs={"span_m": 6.0, "width_mm": 250.0, "fcu_n_mm2": 30.0},
        input_hash="h",
        units_system="SI",
        defaults={"span_m": 6.0, "width_mm": 300.0},
    )
    by_id = {i.id: i for i in tr.inputs}
    assert by_id["span_m"].source == "default"
    assert by_id["width_mm"].source == "user"
    assert by_id["span_m"].units == "m"
    assert by_id["fcu_n_mm2"].units == "N/mm²"
    assert by_id["width_mm"].label == "width"
