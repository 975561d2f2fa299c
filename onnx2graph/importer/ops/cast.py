# file: onnx2graph/importer/ops/cast.py

from __future__ import annotations

from typing import List

import numpy as np
import onnx_ir as ir

from onnx2graph.core import Convert, Output
from onnx2graph.importer.node import ImportNode
from onnx2graph.importer.registry import OpConverter, register_op


@register_op(
    op_type="Cast",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Cast.html",
    component="cast",
    testcases=[],
)
class CastConverter(OpConverter):
    def lower(self, node: ImportNode) -> List[Output]:
        to = ir.DataType(node.get_attribute_value("to"))
        value = node.get_ng_input(0)
        target = np.dtype(to.numpy())
        if value.element_type == target:
            return [value]
        return [Convert(value, target).output(0)]
