# file: onnx2graph/importer/ops/elementwise.py

from __future__ import annotations

from typing import List

from onnx2graph.core import LogicalNot, Output
from onnx2graph.core.ops import make_binary
from onnx2graph.importer.node import ImportNode
from onnx2graph.importer.registry import OpConverter, register_op

# ONNX op type -> target IR op type
_BINARY = {
    "Add": "Add",
    "Sub": "Subtract",
    "Mul": "Multiply",
    "Div": "Divide",
    "Less": "Less",
    "Greater": "Greater",
    "Equal": "Equal",
    "And": "LogicalAnd",
    "Or": "LogicalOr",
}


class BinaryConverter(OpConverter):
    def lower(self, node: ImportNode) -> List[Output]:
        lhs, rhs = node.get_ng_input(0), node.get_ng_input(1)
        return [make_binary(_BINARY[node.op_type], lhs, rhs)]


def _register_binary(onnx_op: str) -> None:
    register_op(
        op_type=onnx_op,
        since_version=1,
        onnx_doc=f"https://onnx.ai/onnx/operators/onnx__{onnx_op}.html",
        component=onnx_op.lower(),
        testcases=[],
    )(type(f"{onnx_op}Converter", (BinaryConverter,), {}))


for _op in _BINARY:
    _register_binary(_op)


@register_op(
    op_type="Not",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Not.html",
    component="not",
    testcases=[],
)
class NotConverter(OpConverter):
    def lower(self, node: ImportNode) -> List[Output]:
        return [LogicalNot(node.get_ng_input(0)).output(0)]
