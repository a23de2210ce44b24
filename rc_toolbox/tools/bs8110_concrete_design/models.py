from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, confloat

from .calc_trace import CalculationStep
from .formulas import LinkStatus

CheckStatus = Literal["safe", "unsafe"]
ShearStatus = Literal["safe", "review", "unsafe"]
SupportCondition = Literal["simply-supported", "continuous-one-end", "continuous-both-ends", "cantilever"]
PanelType = Literal["interior", "edge", "corner", "cantilever"]
EdgeContinuity = Literal["continuous", "discontinuous"]


# ----------------------------
# Inputs
# ----------------------------
class BeamInputs(BaseModel):
    """
    Simply supported rectangular beam under uniform load.
    Units are SI (m, kN/m, N/mm², mm). fcu >= 20 and fy >= 250 are the caller's responsibility.
    """
    model_config = ConfigDict(extra="forbid")

    span_m: confloat(gt=0) = Field(6.0, description="Effective span L", json_schema_extra={"units": "m"})
    dead_load_kn_m: confloat(ge=0) = Field(15.0, description="Characteristic dead load Gk", json_schema_extra={"units": "kN/m"})
    live_load_kn_m: confloat(ge=0) = Field(10.0, description="Characteristic imposed load Qk", json_schema_extra={"units": "kN/m"})

    fcu_n_mm2: confloat(gt=0) = Field(30.0, description="Concrete cube strength fcu", json_schema_extra={"units": "N/mm²"})
    fy_n_mm2: confloat(gt=0) = Field(460.0, description="Reinforcement yield strength fy", json_schema_extra={"units": "N/mm²"})

    width_mm: confloat(gt=0) = Field(300.0, description="Beam width b", json_schema_extra={"units": "mm"})
    effective_depth_mm: confloat(gt=0) = Field(450.0, description="Effective depth d", json_schema_extra={"units": "mm"})
    cover_mm: confloat(gt=0) = Field(35.0, description="Nominal cover (sets d' for compression steel)", json_schema_extra={"units": "mm"})


class SpanInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    length_m: confloat(gt=0) = Field(6.0, description="Span length", json_schema_extra={"units": "m"})
    dead_load_kn_m: confloat(ge=0) = Field(20.0, description="Characteristic dead load Gk", json_schema_extra={"units": "kN/m"})
    live_load_kn_m: confloat(ge=0) = Field(10.0, description="Characteristic imposed load Qk", json_schema_extra={"units": "kN/m"})


def _default_spans() -> List[SpanInput]:
    return [SpanInput(), SpanInput()]


class ContinuousBeamInputs(BaseModel):
    """
    Continuous beam of 2-5 spans designed with the Table 3.5 coefficients.
    The span count is deliberately not constrained here; the engine reports it as a failed design.
    """
    model_config = ConfigDict(extra="forbid")

    spans: List[SpanInput] = Field(default_factory=_default_spans, description="Spans, left to right")

    fcu_n_mm2: confloat(gt=0) = Field(30.0, description="Concrete cube strength fcu", json_schema_extra={"units": "N/mm²"})
    fy_n_mm2: confloat(gt=0) = Field(460.0, description="Reinforcement yield strength fy", json_schema_extra={"units": "N/mm²"})

    width_mm: confloat(gt=0) = Field(300.0, description="Beam width b", json_schema_extra={"units": "mm"})
    effective_depth_mm: confloat(gt=0) = Field(450.0, description="Effective depth d", json_schema_extra={"units": "mm"})
    cover_mm: confloat(gt=0) = Field(35.0, description="Nominal cover", json_schema_extra={"units": "mm"})
    beam_depth_mm: confloat(gt=0) = Field(500.0, description="Overall depth h (self-weight)", json_schema_extra={"units": "mm"})

    include_self_weight: bool = Field(True, description="Add 25 kN/m³ self-weight to every span's dead load")


class SlabInputs(BaseModel):
    """
    Solid slab panel, designed per metre strip.
    slab_type is the declared intent only; ly/lx > 2 always designs one-way.
    """
    model_config = ConfigDict(extra="forbid")

    slab_type: Literal["one-way", "two-way"] = Field("two-way", description="Declared slab type")
    panel_type: PanelType = Field("interior", description="Panel position")
    short_edge_continuity: EdgeContinuity = Field("continuous", description="Short edge continuity")
    long_edge_continuity: EdgeContinuity = Field("continuous", description="Long edge continuity")

    short_span_m: confloat(gt=0) = Field(4.0, description="Short span lx", json_schema_extra={"units": "m"})
    long_span_m: confloat(gt=0) = Field(5.0, description="Long span ly", json_schema_extra={"units": "m"})
    dead_load_kn_m2: confloat(ge=0) = Field(5.0, description="Characteristic dead load Gk", json_schema_extra={"units": "kN/m²"})
    live_load_kn_m2: confloat(ge=0) = Field(2.5, description="Characteristic imposed load Qk", json_schema_extra={"units": "kN/m²"})

    fcu_n_mm2: confloat(gt=0) = Field(30.0, description="Concrete cube strength fcu", json_schema_extra={"units": "N/mm²"})
    fy_n_mm2: confloat(gt=0) = Field(460.0, description="Reinforcement yield strength fy", json_schema_extra={"units": "N/mm²"})

    slab_thickness_mm: confloat(gt=0) = Field(175.0, description="Overall slab thickness h", json_schema_extra={"units": "mm"})
    cover_mm: confloat(gt=0) = Field(25.0, description="Cover to main bars", json_schema_extra={"units": "mm"})

    support_condition: SupportCondition = Field("continuous-both-ends", description="One-way coefficients and basic span/depth ratio")


# ----------------------------
# Advisory records
# ----------------------------
FailureKind = Literal["k-value", "moment", "shear", "deflection", "reinforcement"]


class DesignFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    description: str
    current_value: float
    limit_value: float
    unit: str = ""


class DesignAdvice(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: int
    action: str
    reason: str
    effectiveness: Literal["high", "medium", "low"]
    category: Literal["geometry", "material", "layout", "reinforcement"]


class AdvisoryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_status: Literal["passed", "failed"]
    failures: List[DesignFailure] = Field(default_factory=list)
    advice: List[DesignAdvice] = Field(default_factory=list)


# ----------------------------
# Beam results
# ----------------------------
class BeamSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    # echo of the governing inputs (reports need them)
    span_m: float
    dead_load_kn_m: float
    live_load_kn_m: float
    width_mm: float
    effective_depth_mm: float
    overall_depth_mm: float
    cover_mm: float
    fcu_n_mm2: float
    fy_n_mm2: float

    ultimate_load_kn_m: float
    ultimate_moment_knm: float
    shear_force_kn: float
    critical_shear_kn: float

    k_value: float
    k_prime: float
    is_doubly_reinforced: bool
    lever_arm_mm: float
    limiting_moment_knm: Optional[float] = None

    required_tension_steel_mm2: float
    tension_steel_mm2: float
    compression_steel_mm2: float
    min_steel_mm2: float
    max_steel_mm2: float
    minimum_steel_governs: bool
    minimum_steel_ok: bool
    steel_limits_ok: bool
    bar_suggestion: str
    provided_steel_mm2: float
    compression_bar_suggestion: Optional[str] = None

    shear_stress_n_mm2: float
    vc_n_mm2: float
    max_shear_stress_n_mm2: float
    link_dia_mm: int
    link_spacing_mm: int
    link_status: LinkStatus
    shear_status: ShearStatus

    basic_span_depth_ratio: float
    tension_modification_factor: float
    compression_modification_factor: float
    allowable_span_depth_ratio: float
    actual_span_depth_ratio: float
    deflection_status: CheckStatus

    design_valid: bool
    failure_reasons: List[str] = Field(default_factory=list)


class BeamResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: List[CalculationStep]
    summary: BeamSummary

    @property
    def design_valid(self) -> bool:
        return self.summary.design_valid


# ----------------------------
# Continuous beam results
# ----------------------------
class SpanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    span_index: int
    length_m: float
    ultimate_load_kn_m: float
    positive_moment_knm: float
    negative_moment_left_knm: float
    negative_moment_right_knm: float
    shear_left_kn: float
    shear_right_kn: float
    k_positive: float
    tension_steel_mm2: float
    compression_steel_mm2: float
    is_doubly_reinforced: bool
    shear_stress_n_mm2: float
    vc_n_mm2: float
    link_dia_mm: int
    link_spacing_mm: int
    link_status: LinkStatus
    top_steel: str
    bottom_steel: str


class ContinuousBeamSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    number_of_spans: int
    width_mm: float = 0.0
    effective_depth_mm: float = 0.0
    beam_depth_mm: float = 0.0
    fcu_n_mm2: float = 0.0
    fy_n_mm2: float = 0.0

    self_weight_kn_m: float = 0.0
    average_span_m: float = 0.0
    average_ultimate_load_kn_m: float = 0.0

    max_positive_moment_knm: float = 0.0
    max_negative_moment_knm: float = 0.0
    governing_moment_knm: float = 0.0
    k_value: float = 0.0
    lever_arm_mm: float = 0.0
    moment_status: CheckStatus = "unsafe"

    max_shear_kn: float = 0.0
    shear_stress_n_mm2: float = 0.0
    vc_n_mm2: float = 0.0
    max_shear_stress_n_mm2: float = 0.0
    shear_status: CheckStatus = "unsafe"

    max_tension_steel_mm2: float = 0.0
    max_compression_steel_mm2: float = 0.0
    bar_suggestion: str = ""

    basic_span_depth_ratio: float = 0.0
    modification_factor: float = 0.0
    allowable_span_depth_ratio: float = 0.0
    actual_span_depth_ratio: float = 0.0
    deflection_status: CheckStatus = "unsafe"

    design_valid: bool = False
    failures: List[DesignFailure] = Field(default_factory=list)
    failure_reasons: List[str] = Field(default_factory=list)
    suggestions: List[DesignAdvice] = Field(default_factory=list)


class ContinuousBeamResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: List[CalculationStep]
    span_results: List[SpanResult]
    summary: ContinuousBeamSummary

    @property
    def design_valid(self) -> bool:
        return self.summary.design_valid


# ----------------------------
# Slab results
# ----------------------------
class _SlabSummaryBase(BaseModel):
    """Fields every slab design path reports."""
    model_config = ConfigDict(frozen=True)

    slab_type: Literal["One-Way Slab", "Two-Way Slab"]
    panel_type: str
    dead_load_kn_m2: float
    live_load_kn_m2: float
    span_ratio: float

    ultimate_load_kn_m2: float
    effective_depth_short_mm: float
    short_span_moment_knm: float
    k_short: float
    lever_arm_short_mm: float
    min_steel_mm2: float
    short_span_steel_mm2: float
    short_span_bar_suggestion: str

    shear_force_kn: float
    shear_stress_n_mm2: float
    permissible_shear_n_mm2: float
    shear_status: CheckStatus

    basic_span_depth_ratio: float
    tension_modification_factor: float
    allowable_span_depth_ratio: float
    actual_span_depth_ratio: float
    deflection_status: CheckStatus

    design_valid: bool
    failure_reasons: List[str] = Field(default_factory=list)


class OneWaySlabSummary(_SlabSummaryBase):
    design_path: Literal["one-way"] = "one-way"

    support_condition: SupportCondition
    positive_coefficient: float
    negative_coefficient: float
    negative_moment_knm: float
    design_moment_knm: float
    distribution_steel_mm2: float
    distribution_bar_suggestion: str


class TwoWaySlabSummary(_SlabSummaryBase):
    design_path: Literal["two-way"] = "two-way"

    coefficient_table: str
    bsx_neg: float
    bsx_pos: float
    bsy_neg: float
    bsy_pos: float
    negative_short_moment_knm: float
    long_span_moment_knm: float
    negative_long_moment_knm: float
    effective_depth_long_mm: float
    k_long: float
    lever_arm_long_mm: float
    long_span_steel_mm2: float
    long_span_bar_suggestion: str


SlabSummary = Annotated[Union[OneWaySlabSummary, TwoWaySlabSummary], Field(discriminator="design_path")]


class SlabResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: List[CalculationStep]
    summary: SlabSummary

    @property
    def design_valid(self) -> bool:
        return self.summary.design_valid
