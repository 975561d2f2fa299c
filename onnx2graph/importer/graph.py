# file: onnx2graph/importer/graph.py

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import onnx_ir as ir

from onnx2graph.core import Constant, Function, Output, Parameter
from onnx2graph.core.shapes import to_partial_shape
from onnx2graph.importer.diagnostics import Diagnostics
from onnx2graph.importer.exceptions import OnnxImportError
from onnx2graph.importer.node import ImportNode
from onnx2graph.importer.registry import get_converter

logger = logging.getLogger("onnx2graph.importer.graph")


def _value_dtype(value: ir.Value) -> np.dtype:
    dtype = value.dtype
    if dtype is None:
        raise OnnxImportError(f"Value '{value.name}' has no element type")
    return np.dtype(dtype.numpy())


def _value_shape(value: ir.Value):
    shape = value.shape
    return None if shape is None else to_partial_shape(list(shape))


class Graph:
    """
    Imports an ``onnx_ir.Graph`` into the target IR.

    Graph inputs become :class:`Parameter` nodes, initializers become
    :class:`Constant` nodes and every ONNX node is handed to the converter
    registered for its op type and opset. Imported values are tracked by ONNX
    value name.
    """

    def __init__(
        self,
        ir_graph: ir.Graph,
        *,
        opset_imports: Mapping[str, int],
        diagnostics: Optional[Diagnostics] = None,
    ):
        self._ir_graph = ir_graph
        self._opset_imports: Dict[str, int] = dict(opset_imports)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.name = ir_graph.name or "graph"
        self._values: Dict[str, Output] = {}
        self._parameters: List[Parameter] = []
        self._outputs: List[Output] = []
        self._import()

    # ---------- import ----------
    def _import(self) -> None:
        for name, init in self._ir_graph.initializers.items():
            tensor = init.const_value
            if tensor is None:
                raise OnnxImportError(f"Initializer '{name}' has no value")
            self._values[name] = Constant(tensor.numpy(), name=name).output(0)

        for value in self._ir_graph.inputs:
            if value.name in self._values:
                # an input with an initializer is a constant with a default
                continue
            param = Parameter(_value_dtype(value), _value_shape(value), name=value.name)
            self._parameters.append(param)
            self._values[value.name] = param.output(0)

        for ir_node in self._ir_graph:
            self._import_node(ir_node)

        self._outputs = [self.get_ng_value(v.name) for v in self._ir_graph.outputs]

    def _import_node(self, ir_node: ir.Node) -> None:
        node = ImportNode(ir_node, self)
        converter = get_converter(node.op_type, node.opset_version, node.domain)
        logger.debug(
            "Lowering %s '%s' with %s (since opset %d)",
            node.op_type,
            node.name,
            type(converter).__name__,
            converter.since_version,
        )
        results = converter.lower(node)
        for name, value in zip(node.output_names, results):
            if name:
                self._values[name] = value

    def opset_version(self, domain: str = "") -> int:
        key = "" if domain in ("", "ai.onnx") else domain
        if key not in self._opset_imports:
            raise OnnxImportError(f"Model does not import opset domain '{domain}'")
        return self._opset_imports[key]

    # ---------- values ----------
    def get_ng_value(self, name: str) -> Output:
        value = self._values.get(name)
        if value is not None:
            return value
        return self._lookup_outer(name)

    def _lookup_outer(self, name: str) -> Output:
        raise OnnxImportError(f"Value '{name}' is not produced by any node of '{self.name}'")

    def make_subgraph(self, ir_graph: ir.Graph) -> "Subgraph":
        return Subgraph(ir_graph, parent=self)

    # ---------- results ----------
    def get_ng_parameters(self) -> List[Parameter]:
        return list(self._parameters)

    def get_ng_outputs(self) -> List[Output]:
        return list(self._outputs)

    def to_function(self) -> Function:
        return Function(self._outputs, self._parameters, name=self.name)


class Subgraph(Graph):
    """
    Graph attribute of a node (e.g. a ``Loop`` body).

    Names not produced inside the subgraph are looked up in the enclosing
    graph; each non-constant capture becomes a fresh :class:`Parameter`
    listed in :attr:`outer_inputs` so the owning op can bind it.
    """

    def __init__(self, ir_graph: ir.Graph, *, parent: Graph):
        self._parent = parent
        self._outer_inputs: List[Tuple[Parameter, Output]] = []
        super().__init__(
            ir_graph,
            opset_imports=parent._opset_imports,
            diagnostics=parent.diagnostics,
        )

    @property
    def outer_inputs(self) -> List[Tuple[Parameter, Output]]:
        return list(self._outer_inputs)

    def _lookup_outer(self, name: str) -> Output:
        outer = self._parent.get_ng_value(name)
        if outer.node.is_constant():
            # constants need no binding and stay visible to pattern matching
            self._values[name] = outer
            return outer
        param = Parameter(outer.element_type, outer.partial_shape, name=name)
        self._outer_inputs.append((param, outer))
        self._values[name] = param.output(0)
        logger.debug("Subgraph '%s' captures outer value '%s'", self.name, name)
        return param.output(0)
