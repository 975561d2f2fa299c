# file: onnx2graph/importer/ops/identity.py

from __future__ import annotations

from typing import List

import numpy as np

from onnx2graph.core import Constant, LogicalOr, Output
from onnx2graph.importer.node import ImportNode
from onnx2graph.importer.registry import OpConverter, register_op


def boolean_identity(value: Output) -> Output:
    """``value OR false``: an explicit node standing for a boolean Identity."""
    logical_zero = Constant.create(np.bool_, (), [False]).output(0)
    return LogicalOr(value, logical_zero).output(0)


@register_op(
    op_type="Identity",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Identity.html",
    component="identity",
    testcases=[],
)
class IdentityConverter(OpConverter):
    """
    Forward the input. Booleans get a ``LogicalOr(x, false)`` node so a loop
    body that echoes its condition stays recognisable after import.
    """

    def lower(self, node: ImportNode) -> List[Output]:
        value = node.get_ng_input(0)
        if value.element_type == np.bool_:
            return [boolean_identity(value)]
        return [value]
