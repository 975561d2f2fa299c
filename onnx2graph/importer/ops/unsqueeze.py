# file: onnx2graph/importer/ops/unsqueeze.py

from __future__ import annotations

from typing import List

import numpy as np

from onnx2graph.core import Constant, Output, Unsqueeze
from onnx2graph.importer.exceptions import check_valid_node
from onnx2graph.importer.node import ImportNode, is_omitted
from onnx2graph.importer.registry import OpConverter, register_op


@register_op(
    op_type="Unsqueeze",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Unsqueeze.html",
    component="unsqueeze",
    testcases=[],
)
class UnsqueezeAttributeConverter(OpConverter):
    """Opset 1-12: axes given as an attribute."""

    def lower(self, node: ImportNode) -> List[Output]:
        axes = node.get_attribute_value("axes")
        axes_const = Constant(np.asarray(axes, dtype=np.int64)).output(0)
        return [Unsqueeze(node.get_ng_input(0), axes_const).output(0)]


@register_op(
    op_type="Unsqueeze",
    since_version=13,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Unsqueeze.html",
    component="unsqueeze",
    testcases=[],
)
class UnsqueezeInputConverter(OpConverter):
    """Opset 13+: axes given as a second (constant) input."""

    def lower(self, node: ImportNode) -> List[Output]:
        inputs = node.get_ng_inputs()
        check_valid_node(
            node,
            len(inputs) >= 2 and not is_omitted(inputs[1]),
            "Unsqueeze requires an axes input",
        )
        axes = node.get_ng_input(1)
        check_valid_node(
            node, axes.node.is_constant(), "Unsqueeze axes must be a constant input"
        )
        return [Unsqueeze(node.get_ng_input(0), axes).output(0)]
