# file: onnx2graph/importer/node.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Union

import numpy as np
import onnx_ir as ir
from onnx_ir import AttributeType as IRAttrType

from onnx2graph.core import Output
from onnx2graph.importer.diagnostics import Diagnostics
from onnx2graph.importer.exceptions import OnnxImportError

if TYPE_CHECKING:  # pragma: no cover
    from onnx2graph.importer.graph import Graph, Subgraph


@dataclass(frozen=True)
class Omitted:
    """An optional operator input left empty in the model."""

    position: int


OptionalInput = Union[Output, Omitted]

_MISSING = object()


def is_omitted(value: OptionalInput) -> bool:
    return isinstance(value, Omitted)


class ImportNode:
    """View of one ONNX node with its inputs already imported."""

    def __init__(self, ir_node: ir.Node, graph: "Graph"):
        self._node = ir_node
        self._graph = graph
        self._inputs: List[OptionalInput] = [
            self._resolve_input(i, v) for i, v in enumerate(ir_node.inputs)
        ]

    def _resolve_input(self, position: int, value: ir.Value | None) -> OptionalInput:
        if value is None or not value.name:
            return Omitted(position)
        return self._graph.get_ng_value(value.name)

    # ---------- identity ----------
    @property
    def op_type(self) -> str:
        return self._node.op_type

    @property
    def domain(self) -> str:
        return self._node.domain or ""

    @property
    def name(self) -> str:
        if self._node.name:
            return self._node.name
        outs = [v.name for v in self._node.outputs if v is not None and v.name]
        return outs[0] if outs else self.op_type

    @property
    def opset_version(self) -> int:
        return self._graph.opset_version(self.domain)

    @property
    def diagnostics(self) -> Diagnostics:
        return self._graph.diagnostics

    @property
    def output_names(self) -> List[str]:
        return [v.name if v is not None else "" for v in self._node.outputs]

    # ---------- inputs ----------
    def get_ng_inputs(self) -> List[OptionalInput]:
        return list(self._inputs)

    def get_ng_input(self, i: int) -> Output:
        """A mandatory input; raises if it is missing or omitted."""
        if i >= len(self._inputs) or is_omitted(self._inputs[i]):
            raise OnnxImportError(f"{self.op_type} node '{self.name}' is missing input {i}")
        return self._inputs[i]  # type: ignore[return-value]

    # ---------- attributes ----------
    def has_attribute(self, name: str) -> bool:
        return name in self._node.attributes

    def get_attribute_value(self, name: str, default: Any = _MISSING) -> Any:
        attr = self._node.attributes.get(name)
        if attr is None:
            if default is _MISSING:
                raise OnnxImportError(
                    f"{self.op_type} node '{self.name}' has no attribute '{name}'"
                )
            return default
        return self._convert_attribute(attr)

    def _convert_attribute(self, attr: ir.Attr) -> Any:
        kind = attr.type
        value = attr.value
        if kind == IRAttrType.GRAPH:
            return self._graph.make_subgraph(value)
        if kind == IRAttrType.TENSOR:
            return np.asarray(value.numpy())
        if kind == IRAttrType.INT:
            return int(value)
        if kind == IRAttrType.FLOAT:
            return float(value)
        if kind == IRAttrType.STRING:
            return value if isinstance(value, str) else bytes(value).decode("utf-8")
        if kind == IRAttrType.INTS:
            return [int(v) for v in value]
        if kind == IRAttrType.FLOATS:
            return [float(v) for v in value]
        if kind == IRAttrType.STRINGS:
            return [v if isinstance(v, str) else bytes(v).decode("utf-8") for v in value]
        if kind == IRAttrType.GRAPHS:
            return [self._graph.make_subgraph(g) for g in value]
        raise OnnxImportError(
            f"{self.op_type} node '{self.name}': unsupported attribute type {kind} "
            f"for '{attr.name}'"
        )

    def get_subgraph(self, name: str) -> "Subgraph":
        from onnx2graph.importer.graph import Subgraph

        value = self.get_attribute_value(name)
        if not isinstance(value, Subgraph):
            raise OnnxImportError(
                f"{self.op_type} node '{self.name}': attribute '{name}' is not a graph"
            )
        return value

    def __repr__(self) -> str:
        return f"<ImportNode {self.op_type} {self.name}>"
