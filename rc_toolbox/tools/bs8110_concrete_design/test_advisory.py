from __future__ import annotations

import pytest

from .advisory import (
    BeamAdvisoryParams,
    SlabAdvisoryParams,
    analyze_beam_design,
    analyze_slab_design,
    beam_advisory_params,
    rank_advice,
    slab_advisory_params,
    suggest_continuous_beam_remedies,
)
from .beam import calculate_beam_design
from .models import BeamInputs, ContinuousBeamInputs, DesignAdvice, DesignFailure, SlabInputs
from .slab import calculate_slab_design


def _beam_params(**overrides) -> BeamAdvisoryParams:
    base = dict(
        k_value=0.09,
        k_prime=0.156,
        shear_stress_n_mm2=0.7,
        max_shear_stress_n_mm2=4.38,
        actual_span_depth_ratio=13.3,
        allowable_span_depth_ratio=21.2,
        tension_steel_mm2=1044.0,
        width_mm=300.0,
        depth_mm=500.0,
        effective_depth_mm=450.0,
        span_m=6.0,
        fcu_n_mm2=30.0,
        fy_n_mm2=460.0,
    )
    base.update(overrides)
    return BeamAdvisoryParams(**base)


def _slab_params(**overrides) -> SlabAdvisoryParams:
    base = dict(
        k_value=0.03,
        k_prime=0.156,
        shear_stress_n_mm2=0.15,
        permissible_shear_n_mm2=0.44,
        actual_span_depth_ratio=27.6,
        allowable_span_depth_ratio=50.0,
        thickness_mm=175.0,
        short_span_m=4.0,
        long_span_m=5.0,
        fcu_n_mm2=30.0,
        slab_type="two-way",
    )
    base.update(overrides)
    return SlabAdvisoryParams(**base)


def _advice(priority: int, action: str) -> DesignAdvice:
    return DesignAdvice(priority=priority, action=action, reason="r", effectiveness="high", category="geometry")


def test_rank_advice_dedupes_sorts_and_truncates() -> None:
    items = [_advice(3, "c"), _advice(1, "a"), _advice(2, "b"), _advice(1, "c"), _advice(1, "d")]
    ranked = rank_advice(items, limit=3)
    assert [a.action for a in ranked] == ["a", "d", "b"]
    # first occurrence of a repeated action wins
    assert next(a for a in rank_advice(items, limit=10) if a.action == "c").priority == 3


def test_passing_beam_has_no_advice() -> None:
    adv = analyze_beam_design(_beam_params())
    assert adv.overall_status == "passed"
    assert adv.failures == []
    assert adv.advice == []


def test_beam_k_failure_advice() -> None:
    adv = analyze_beam_design(_beam_params(k_value=0.2))
    assert adv.overall_status == "failed"
    assert [f.kind for f in adv.failures] == ["k-value"]
    actions = [a.action for a in adv.advice]
    assert actions[0] == "Increase beam depth from 500mm to 625mm"
    assert "Increase beam width from 300mm to 400mm" in actions
    assert "Increase concrete grade from C30 to C40" in actions


def test_beam_multiple_failures_are_capped() -> None:
    adv = analyze_beam_design(
        _beam_params(
            k_value=0.3,
            shear_stress_n_mm2=6.0,
            actual_span_depth_ratio=30.0,
            tension_steel_mm2=20000.0,
            span_m=8.0,
        )
    )
    assert {f.kind for f in adv.failures} == {"k-value", "shear", "deflection", "reinforcement"}
    assert len(adv.advice) == 6
    priorities = [a.priority for a in adv.advice]
    assert priorities == sorted(priorities)
    assert all(p == 1 for p in priorities[:4])


def test_beam_long_span_suggests_support() -> None:
    adv = analyze_beam_design(_beam_params(actual_span_depth_ratio=30.0, span_m=8.0))
    actions = [a.action for a in adv.advice]
    assert "Consider reducing span from 8m by adding intermediate support" in actions
    assert "Add compression reinforcement to increase stiffness" in actions


def test_slab_k_failure_and_grade() -> None:
    adv = analyze_slab_design(_slab_params(k_value=0.2, thickness_mm=150.0))
    actions = [a.action for a in adv.advice]
    # 150 × √(0.2/0.156) × 1.15 = 195.3 → 200
    assert actions[0] == "Increase slab thickness from 150mm to 200mm"
    assert "Increase concrete grade from C30 to C35" in actions


def test_slab_repeated_thickness_action_deduplicated() -> None:
    # shear (×1.2) and deflection (×1.25) on 200 mm both step up to 250 mm
    adv = analyze_slab_design(
        _slab_params(thickness_mm=200.0, shear_stress_n_mm2=0.6, actual_span_depth_ratio=60.0)
    )
    actions = [a.action for a in adv.advice]
    assert actions.count("Increase slab thickness from 200mm to 250mm") == 1
    assert "Consider providing drop panels at columns" in actions
    assert "Reduce panel size by adding supporting beams" in actions


def test_one_way_slab_deflection_suggests_edge_beams() -> None:
    adv = analyze_slab_design(
        _slab_params(slab_type="one-way", short_span_m=3.0, long_span_m=7.0, actual_span_depth_ratio=60.0)
    )
    assert "Consider two-way slab design by adding edge beams" in [a.action for a in adv.advice]


def test_continuous_remedies_by_failure_kind() -> None:
    inputs = ContinuousBeamInputs(width_mm=250.0, beam_depth_mm=400.0)
    failures = [
        DesignFailure(kind="moment", description="K exceeded", current_value=0.3, limit_value=0.156),
        DesignFailure(kind="shear", description="v exceeded", current_value=6.1, limit_value=4.38, unit="N/mm²"),
    ]
    advice = suggest_continuous_beam_remedies(failures, inputs)
    actions = [a.action for a in advice]
    assert len(advice) <= 5
    assert actions[0] == "Increase beam depth from 400mm to 500mm"
    assert "Increase beam width from 250mm to 300mm" in actions
    assert [a.priority for a in advice] == sorted(a.priority for a in advice)

    reinf = suggest_continuous_beam_remedies(
        [DesignFailure(kind="reinforcement", description="x", current_value=9000.0, limit_value=4000.0)], inputs
    )
    assert reinf[-1].action == "Reduce span by adding intermediate support"
    assert suggest_continuous_beam_remedies([], inputs) == []


def test_engine_results_feed_analyzers() -> None:
    beam_inputs = BeamInputs()
    bp = beam_advisory_params(beam_inputs, calculate_beam_design(beam_inputs))
    assert bp.depth_mm == pytest.approx(505.0)
    assert analyze_beam_design(bp).overall_status == "passed"

    slab_inputs = SlabInputs()
    sp = slab_advisory_params(slab_inputs, calculate_slab_design(slab_inputs))
    assert sp.slab_type == "two-way"
    assert sp.k_prime == pytest.approx(0.156)
    assert analyze_slab_design(sp).overall_status == "passed"
