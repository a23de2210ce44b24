from __future__ import annotations

import json

import pytest
from loguru import logger

from rc_toolbox.core.loader import discover_tools, find_tool
from rc_toolbox.core.paths import runs_dir, settings_path
from rc_toolbox.core.schema_utils import validate_inputs
from rc_toolbox.core.settings import DEFAULT_SETTINGS, load_settings
from rc_toolbox.tools.bs8110_concrete_design.models import BeamInputs, ContinuousBeamInputs


@pytest.fixture(autouse=True)
def _isolated_user_data(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    yield
    logger.remove()


def test_discover_tools_keyed_by_id() -> None:
    tools = discover_tools()
    assert "bs8110_concrete_design" in tools
    tool = tools["bs8110_concrete_design"]
    assert tool.meta.code_basis == "BS 8110-1:1997"
    assert set(tool.MODULES) == {"beam", "continuous_beam", "slab"}


def test_find_tool_unknown_lists_available() -> None:
    with pytest.raises(KeyError) as exc:
        find_tool("bs5950_steel")
    assert "bs8110_concrete_design" in str(exc.value)


def test_validate_inputs_fills_defaults() -> None:
    data, err = validate_inputs(BeamInputs, {"span_m": 7.5})
    assert err is None
    assert data["span_m"] == 7.5
    assert data["width_mm"] == BeamInputs().width_mm


def test_validate_inputs_reports_field_and_value() -> None:
    data, err = validate_inputs(BeamInputs, {"span_m": -2.0})
    assert data == {}
    assert err.startswith("span_m: ")
    assert "(got -2.0)" in err

    _, nested = validate_inputs(ContinuousBeamInputs, {"spans": [{"length_m": 5.0}, {"length_m": 0.0}]})
    assert nested.startswith("spans.1.length_m: ")


def test_load_settings_defaults_and_overrides() -> None:
    assert load_settings() == DEFAULT_SETTINGS

    settings_path().write_text(json.dumps({"log_level": "DEBUG", "exports": ["html"]}), encoding="utf-8")
    assert load_settings() == {"log_level": "DEBUG", "exports": ["html"]}


def test_load_settings_rejects_bad_entries() -> None:
    settings_path().write_text(json.dumps({"log_level": 10, "exports": "pdf"}), encoding="utf-8")
    assert load_settings() == DEFAULT_SETTINGS

    settings_path().write_text("{not json", encoding="utf-8")
    assert load_settings() == DEFAULT_SETTINGS


def test_runs_dir_under_user_data(tmp_path) -> None:
    p = runs_dir("bs8110_concrete_design")
    assert p.is_dir()
    assert tmp_path in p.parents
    assert p.name == "runs"
