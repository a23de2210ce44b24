from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Protocol, Type, Union

from pydantic import BaseModel


@dataclass(frozen=True)
class ToolMeta:
    id: str
    name: str
    category: str
    version: str
    code_basis: str
    description: str


class DesignTool(Protocol):
    """
    Design tool contract.

    One pydantic input model per design module in `MODULES`:
      - default_inputs(module) gives the model defaults as a plain dict
      - solve(module, inputs) computes without touching the filesystem
      - run_batch(inputs) writes the calc package; inputs["module"] picks the module
    """
    meta: ToolMeta
    MODULES: Mapping[str, Type[BaseModel]]

    def default_inputs(self, module: str) -> Dict[str, Any]:
        ...

    def solve(self, module: str, inputs: Union[BaseModel, Dict[str, Any]]) -> Any:
        ...

    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...
