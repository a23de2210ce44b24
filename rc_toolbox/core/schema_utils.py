from __future__ import annotations
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError


def describe_errors(e: ValidationError) -> str:
    """One `field.path: message (got value)` line per failed field."""
    lines = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        line = f"{loc}: {err.get('msg')}"
        if err.get("type") != "missing" and "input" in err:
            line += f" (got {err['input']!r})"
        lines.append(line)
    return "\n".join(lines)


def validate_inputs(model: Type[BaseModel], raw: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Returns (validated_dict, error_message). Defaults from `model` fill missing keys.
    """
    try:
        return model.model_validate(raw).model_dump(), None
    except ValidationError as e:
        return {}, describe_errors(e)
