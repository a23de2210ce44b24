from __future__ import annotations

import pytest

from .constants import INVALID_SPAN_COUNT_REASON
from .continuous_beam import calculate_continuous_beam_design
from .models import ContinuousBeamInputs, SpanInput


def _spans(n: int, length: float = 6.0, gk: float = 20.0, qk: float = 10.0):
    return [SpanInput(length_m=length, dead_load_kn_m=gk, live_load_kn_m=qk) for _ in range(n)]


def test_default_two_span_beam() -> None:
    r = calculate_continuous_beam_design(ContinuousBeamInputs())
    s = r.summary
    assert s.number_of_spans == 2
    assert s.self_weight_kn_m == pytest.approx(3.75)
    assert s.average_ultimate_load_kn_m == pytest.approx(49.25)
    assert s.max_negative_moment_knm == pytest.approx(221.6, abs=0.1)
    assert s.max_positive_moment_knm == pytest.approx(124.1, abs=0.1)
    assert s.governing_moment_knm == pytest.approx(s.max_negative_moment_knm)
    assert s.k_value == pytest.approx(0.1216, abs=1e-3)
    assert s.moment_status == "safe"

    assert s.max_shear_kn == pytest.approx(184.7, abs=0.1)
    assert s.shear_stress_n_mm2 == pytest.approx(1.368, abs=0.005)
    assert s.shear_status == "safe"

    assert s.modification_factor == pytest.approx(1.896, abs=0.01)
    assert s.allowable_span_depth_ratio == pytest.approx(49.3, abs=0.1)
    assert s.actual_span_depth_ratio == pytest.approx(13.3, abs=0.05)
    assert s.deflection_status == "safe"

    assert r.design_valid
    assert s.suggestions == []
    assert len(r.span_results) == 2
    assert r.span_results[0].bottom_steel.startswith("1T32")


def test_span_results_use_table_coefficients() -> None:
    r = calculate_continuous_beam_design(ContinuousBeamInputs(spans=_spans(3)))
    w = r.summary.average_ultimate_load_kn_m
    wl2 = w * 36.0
    first, middle, last = r.span_results
    assert first.positive_moment_knm == pytest.approx(0.080 * wl2)
    assert middle.positive_moment_knm == pytest.approx(0.025 * wl2)
    assert first.negative_moment_left_knm == 0.0
    assert first.negative_moment_right_knm == pytest.approx(0.100 * wl2)
    assert middle.shear_left_kn == pytest.approx(0.5 * w * 6.0)
    assert last.shear_right_kn == pytest.approx(0.4 * w * 6.0)
    assert [sr.span_index for sr in r.span_results] == [1, 2, 3]


@pytest.mark.parametrize("n", [0, 1, 6])
def test_invalid_span_count_is_terminal(n: int) -> None:
    r = calculate_continuous_beam_design(ContinuousBeamInputs(spans=_spans(n)))
    assert not r.design_valid
    assert r.span_results == []
    assert len(r.steps) == 1
    assert r.steps[0].title == "Error"
    assert r.steps[0].status == "unsafe"
    assert str(n) in r.steps[0].result
    assert r.summary.failure_reasons == [INVALID_SPAN_COUNT_REASON]


def test_unequal_spans_flag_applicability() -> None:
    spans = [SpanInput(length_m=5.0), SpanInput(length_m=7.0)]
    r = calculate_continuous_beam_design(ContinuousBeamInputs(spans=spans))
    step = next(st for st in r.steps if st.title.startswith("Step 1a"))
    assert step.is_check and not step.check_passed
    assert step.status == "review"


def test_self_weight_can_be_excluded() -> None:
    r = calculate_continuous_beam_design(ContinuousBeamInputs(include_self_weight=False))
    assert r.summary.self_weight_kn_m == 0.0
    assert r.summary.average_ultimate_load_kn_m == pytest.approx(1.4 * 20 + 1.6 * 10)


def test_overloaded_beam_fails_with_ranked_suggestions() -> None:
    inputs = ContinuousBeamInputs(
        spans=_spans(2, length=8.0, gk=40.0, qk=30.0),
        width_mm=250.0,
        effective_depth_mm=350.0,
        beam_depth_mm=400.0,
    )
    r = calculate_continuous_beam_design(inputs)
    s = r.summary
    assert not r.design_valid
    kinds = {f.kind for f in s.failures}
    assert {"moment", "shear"} <= kinds
    assert s.moment_status == "unsafe"
    assert s.shear_status == "unsafe"
    assert any(sr.is_doubly_reinforced for sr in r.span_results)

    assert 0 < len(s.suggestions) <= 5
    priorities = [a.priority for a in s.suggestions]
    assert priorities == sorted(priorities)
    assert s.suggestions[0].action.startswith("Increase beam depth from 400mm")
    actions = [a.action for a in s.suggestions]
    assert len(actions) == len(set(actions))


def test_deterministic() -> None:
    inputs = ContinuousBeamInputs(spans=_spans(4, length=5.5))
    assert calculate_continuous_beam_design(inputs) == calculate_continuous_beam_design(inputs)
