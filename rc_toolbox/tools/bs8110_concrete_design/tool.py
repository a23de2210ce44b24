from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from loguru import logger
from pydantic import BaseModel

from rc_toolbox.core.schema_utils import validate_inputs
from rc_toolbox.core.settings import load_settings
from rc_toolbox.core.tool_base import ToolMeta

from .advisory import analyze_beam_design, analyze_slab_design, beam_advisory_params, slab_advisory_params
from .beam import calculate_beam_design
from .calc_trace import Assumption, CalcTrace
from .constants import CODE_BASIS, REPORT_VERSION, TOOL_ID, TOOL_VERSION, UNITS_SYSTEM
from .continuous_beam import calculate_continuous_beam_design
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import (
    AdvisoryResult,
    BeamInputs,
    BeamResult,
    ContinuousBeamInputs,
    ContinuousBeamResult,
    SlabInputs,
    SlabResult,
)
from .paths import compute_input_hash, create_run_dir
from .report_text import render_text
from .slab import calculate_slab_design

DesignResult = Union[BeamResult, ContinuousBeamResult, SlabResult]

_COMMON_ASSUMPTIONS = [
    "Partial safety factors 1.4 (dead) and 1.6 (imposed); design steel stress 0.87fy.",
    "K' = 0.156 (moment redistribution not exceeding 10%); lever arm limited to 0.95d.",
    "Minimum tension steel 0.13%bh for high yield bars (Table 3.25).",
    "Service stress for the tension modification factor taken as fs = 2fy·As/(3bd).",
]

_MODULE_ASSUMPTIONS: Dict[str, List[str]] = {
    "beam": [
        "Simply supported rectangular section under uniformly distributed load.",
        "Compression steel centroid at d' = cover + 10 mm; overall depth taken as d + cover + 20 mm.",
        "Shear links are two-leg; spacing not above 0.75d, with a T12@100 fallback flagged for review.",
    ],
    "continuous_beam": [
        "Table 3.5 coefficients applied to the average span and average ultimate load (applicability checked in Step 1a).",
        "Self-weight from the overall depth at 25 kN/m³ when enabled.",
        "Basic span/effective depth ratio 26 (continuous) with the tension modification factor of the governing span.",
    ],
    "slab": [
        "Design per 1 m strip with 10 mm bars; long-span bars in the inner layer.",
        "ly/lx > 2 is designed as one-way regardless of the declared slab type.",
        "Two-way moments from Table 3.14 coefficients interpolated linearly in ly/lx, clamped to 1.0-2.0.",
        "No shear reinforcement is designed for slabs; v must not exceed vc.",
    ],
}


@dataclass(frozen=True)
class Solution:
    module: str
    inputs: BaseModel
    result: DesignResult
    advisory: Optional[AdvisoryResult]
    text_report: str


class BS8110ConcreteDesignTool:
    """BS 8110-1:1997 reinforced concrete design.

    - solve(): validate, compute and advise; no file I/O.
    - run_batch(): the same plus the full calc package in a fresh run directory.
    """

    meta = ToolMeta(
        id=TOOL_ID,
        name="BS 8110 Concrete Design",
        category="Concrete",
        version=TOOL_VERSION,
        code_basis=CODE_BASIS,
        description=(
            "Simply supported beams, continuous beams (2-5 spans) and one-way/two-way slabs to "
            "BS 8110-1:1997 with step-by-step calc packages and design advice."
        ),
    )

    MODULES: Mapping[str, Type[BaseModel]] = {
        "beam": BeamInputs,
        "continuous_beam": ContinuousBeamInputs,
        "slab": SlabInputs,
    }

    def _model(self, module: str) -> Type[BaseModel]:
        try:
            return self.MODULES[module]
        except KeyError:
            raise ValueError(f"Unknown module {module!r}; expected one of {sorted(self.MODULES)}") from None

    def default_inputs(self, module: str) -> Dict[str, Any]:
        return self._model(module)().model_dump()

    def solve(self, module: str, inputs: Union[BaseModel, Dict[str, Any]]) -> Solution:
        model_cls = self._model(module)
        model = inputs if isinstance(inputs, model_cls) else model_cls.model_validate(inputs)

        advisory: Optional[AdvisoryResult] = None
        if module == "beam":
            result: DesignResult = calculate_beam_design(model)
            advisory = analyze_beam_design(beam_advisory_params(model, result))
        elif module == "slab":
            result = calculate_slab_design(model)
            advisory = analyze_slab_design(slab_advisory_params(model, result))
        else:
            result = calculate_continuous_beam_design(model)
            s = result.summary
            if s.failures:
                advisory = AdvisoryResult(overall_status="failed", failures=s.failures, advice=s.suggestions)

        return Solution(
            module=module,
            inputs=model,
            result=result,
            advisory=advisory,
            text_report=render_text(module, result, advisory),
        )

    # ------------------------------
    # Batch calculation API (headless)
    # ------------------------------
    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Run one design module and write the calc package.

        `inputs["module"]` selects the module; the remaining keys are that module's inputs.
        Never raises: failures come back as {"ok": False, "error", "traceback"}.
        """
        raw = dict(inputs)
        module = str(raw.pop("module", ""))
        try:
            model_cls = self._model(module)
        except ValueError as e:
            logger.error(str(e))
            return {"ok": False, "run_dir": None, "input_hash": None, "error": str(e), "traceback": traceback.format_exc()}

        inputs_norm, err = validate_inputs(model_cls, raw)
        if err:
            logger.error(f"Invalid {module} inputs:\n{err}")
            return {"ok": False, "run_dir": None, "input_hash": None, "error": err, "traceback": ""}

        input_hash = compute_input_hash({"module": module, **inputs_norm})
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, _log_sink = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info(f"Starting {module} batch run")
            log.info(f"Inputs (validated): {inputs_norm}")

            with logger.contextualize(tool_id=self.meta.id, run_dir=str(run_dir), input_hash=input_hash):
                solution = self.solve(module, inputs_norm)
            result = solution.result

            trace = CalcTrace.new(
                tool_id=self.meta.id,
                tool_version=self.meta.version,
                report_version=REPORT_VERSION,
                module=module,
                units_system=UNITS_SYSTEM,
                code_basis=self.meta.code_basis,
                inputs=inputs_norm,
                input_hash=input_hash,
                defaults=self.default_inputs(module),
            )
            trace.assumptions.extend(
                Assumption(id=f"A{i}", text=t)
                for i, t in enumerate(_COMMON_ASSUMPTIONS + _MODULE_ASSUMPTIONS[module], start=1)
            )
            trace.steps = list(result.steps)
            trace.summary = result.summary.model_dump(mode="json")
            if isinstance(result, ContinuousBeamResult):
                trace.tables["spans"] = [sr.model_dump(mode="json") for sr in result.span_results]
            if solution.advisory is not None:
                trace.advisory = solution.advisory.model_dump(mode="json")
            trace.text_report = solution.text_report

            results: Dict[str, Any] = {
                "ok": True,
                "module": module,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "design_valid": result.design_valid,
                "failure_reasons": list(result.summary.failure_reasons),
                "summary": trace.summary,
                "advisory": trace.advisory,
                "text_report": solution.text_report,
            }
            log.info(f"Design {'ADEQUATE' if result.design_valid else 'INADEQUATE'}")

            kinds = load_settings().get("exports")
            out_paths = export_all(trace, run_dir, results, kinds=kinds)
            results["outputs"] = {k: str(v) for k, v in out_paths.items()}
            results["outputs"]["log"] = str(run_dir / "run.log")

            log.info("Batch run complete")
            return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(_log_sink)


TOOL = BS8110ConcreteDesignTool()
