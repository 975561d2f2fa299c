# file: onnx2graph/importer/ops/constant.py

from __future__ import annotations

from typing import List

import numpy as np

from onnx2graph.core import Constant, Output
from onnx2graph.importer.exceptions import check_valid_node
from onnx2graph.importer.node import ImportNode
from onnx2graph.importer.registry import OpConverter, register_op

# attribute name -> dtype of the scalar/list forms
_VALUE_ATTRIBUTES = {
    "value_float": np.float32,
    "value_floats": np.float32,
    "value_int": np.int64,
    "value_ints": np.int64,
}


@register_op(
    op_type="Constant",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Constant.html",
    component="constant",
    testcases=[],
)
class ConstantConverter(OpConverter):
    def lower(self, node: ImportNode) -> List[Output]:
        present = [
            a for a in ("value", *_VALUE_ATTRIBUTES) if node.has_attribute(a)
        ]
        check_valid_node(
            node,
            len(present) == 1,
            "Constant needs exactly one value attribute, got ",
            present,
            actual=len(present),
            required=1,
        )
        attr = present[0]
        value = node.get_attribute_value(attr)
        if attr != "value":
            value = np.asarray(value, dtype=_VALUE_ATTRIBUTES[attr])
        return [Constant(value, name=node.output_names[0] or None).output(0)]
