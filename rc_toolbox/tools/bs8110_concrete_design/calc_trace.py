from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

StepStatus = Literal["safe", "review", "unsafe"]


class CalculationStep(BaseModel):
    """One entry of the design audit trail. Immutable once created."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str
    formula: Optional[str] = None
    substitution: Optional[str] = None
    result: str
    explanation: Optional[str] = None
    is_check: bool = False
    check_passed: Optional[bool] = None
    status: Optional[StepStatus] = None
    reference: Optional[str] = None


class StepLog:
    """Append-only builder for the steps of one calculation call."""

    def __init__(self) -> None:
        self._steps: List[CalculationStep] = []

    def add(
        self,
        title: str,
        result: str,
        *,
        formula: Optional[str] = None,
        substitution: Optional[str] = None,
        explanation: Optional[str] = None,
        status: Optional[StepStatus] = None,
        reference: Optional[str] = None,
    ) -> CalculationStep:
        if not title:
            raise ValueError("StepLog.add requires a non-empty title.")
        step = CalculationStep(
            title=title,
            formula=formula,
            substitution=substitution,
            result=result,
            explanation=explanation,
            status=status,
            reference=reference,
        )
        self._steps.append(step)
        return step

    def check(
        self,
        title: str,
        result: str,
        *,
        passed: bool,
        formula: Optional[str] = None,
        substitution: Optional[str] = None,
        explanation: Optional[str] = None,
        fail_status: StepStatus = "unsafe",
        reference: Optional[str] = None,
    ) -> CalculationStep:
        """Append a pass/fail step; the status is 'safe' or fail_status."""
        step = CalculationStep(
            title=title,
            formula=formula,
            substitution=substitution,
            result=result,
            explanation=explanation,
            is_check=True,
            check_passed=bool(passed),
            status="safe" if passed else fail_status,
            reference=reference,
        )
        self._steps.append(step)
        return step

    @property
    def steps(self) -> List[CalculationStep]:
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)


# ----------------------------
# Run record (calc package)
# ----------------------------
class TraceMeta(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tool_id: str
    tool_version: str
    report_version: str
    module: str
    timestamp: str
    units_system: str
    input_hash: str
    code_basis: Optional[str] = None


class TraceInput(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    label: str
    value: Any
    units: str
    source: str  # user/default
    notes: str = ""


class Assumption(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    text: str


class CalcTrace(BaseModel):
    """Authoritative record of one run.

    All exports (HTML/text/PDF/Excel/JSON) are rendered from this object.
    """

    model_config = ConfigDict(extra="forbid")
    meta: TraceMeta
    inputs: List[TraceInput] = Field(default_factory=list)
    assumptions: List[Assumption] = Field(default_factory=list)
    steps: List[CalculationStep] = Field(default_factory=list)
    tables: Dict[str, Any] = Field(default_factory=dict)
    summary: Dict[str, Any] = Field(default_factory=dict)
    advisory: Optional[Dict[str, Any]] = None
    text_report: str = ""

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        module: str,
        inputs: Dict[str, Any],
        input_hash: str,
        units_system: str,
        report_version: str = "1.0",
        code_basis: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> "CalcTrace":
        """New trace with an input listing. Inputs equal to `defaults` are tagged 'default'."""
        meta = TraceMeta(
            tool_id=str(tool_id),
            tool_version=str(tool_version),
            report_version=str(report_version),
            module=str(module),
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system=str(units_system),
            input_hash=str(input_hash),
            code_basis=code_basis,
        )
        dflt = defaults or {}
        trace_inputs: List[TraceInput] = []
        for k in sorted(inputs.keys()):
            v = inputs[k]
            trace_inputs.append(
                TraceInput(
                    id=str(k),
                    label=_default_label(k),
                    value=v,
                    units=_infer_units(k),
                    source="default" if k in dflt and dflt[k] == v else "user",
                )
            )
        return cls(meta=meta, inputs=trace_inputs)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def dump_trace_json(trace: CalcTrace, path: Path) -> None:
    path.write_text(json.dumps(trace.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")


_UNIT_SUFFIXES = (
    ("_kn_m2", "kN/m²"),
    ("_kn_m", "kN/m"),
    ("_n_mm2", "N/mm²"),
    ("_mm2", "mm²"),
    ("_knm", "kNm"),
    ("_kn", "kN"),
    ("_mm", "mm"),
    ("_m", "m"),
)


def _default_label(key: str) -> str:
    label = key
    for suffix, _ in _UNIT_SUFFIXES:
        if key.endswith(suffix):
            label = key[: -len(suffix)]
            break
    return label.replace("_", " ")


def _infer_units(key: str) -> str:
    # suffix convention keeps reports readable without hard-coding every field
    for suffix, units in _UNIT_SUFFIXES:
        if key.endswith(suffix):
            return units
    return "-"
