# file: onnx2graph/core/ops.py

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from .node import Constant, Node, Output
from .shapes import broadcast_shapes, unsqueeze_shape

_BOOL = np.dtype(np.bool_)


class _BinaryElementwise(Node):
    """Two-input op with numpy-style broadcasting."""

    def __init__(self, lhs: Output, rhs: Output, *, name: Optional[str] = None):
        super().__init__((lhs, rhs), name=name)
        if lhs.element_type != rhs.element_type:
            raise TypeError(
                f"{self.op_type} operands must share an element type, got "
                f"{lhs.element_type} and {rhs.element_type}"
            )
        self._check_operand_type(lhs.element_type)
        shape = broadcast_shapes(lhs.partial_shape, rhs.partial_shape)
        self._set_output(0, self._result_type(lhs.element_type), shape)

    def _check_operand_type(self, dtype: np.dtype) -> None:
        return None

    def _result_type(self, dtype: np.dtype) -> np.dtype:
        return dtype


class _BinaryArithmetic(_BinaryElementwise):
    def _check_operand_type(self, dtype: np.dtype) -> None:
        if dtype == _BOOL:
            raise TypeError(f"{self.op_type} does not accept boolean operands")


class Add(_BinaryArithmetic):
    op_type = "Add"


class Subtract(_BinaryArithmetic):
    op_type = "Subtract"


class Multiply(_BinaryArithmetic):
    op_type = "Multiply"


class Divide(_BinaryArithmetic):
    op_type = "Divide"


class _BinaryComparison(_BinaryElementwise):
    def _result_type(self, dtype: np.dtype) -> np.dtype:
        return _BOOL


class Less(_BinaryComparison):
    op_type = "Less"


class Greater(_BinaryComparison):
    op_type = "Greater"


class Equal(_BinaryComparison):
    op_type = "Equal"


class _BinaryLogical(_BinaryElementwise):
    def _check_operand_type(self, dtype: np.dtype) -> None:
        if dtype != _BOOL:
            raise TypeError(f"{self.op_type} expects boolean operands, got {dtype}")


class LogicalAnd(_BinaryLogical):
    op_type = "LogicalAnd"


class LogicalOr(_BinaryLogical):
    op_type = "LogicalOr"


class LogicalNot(Node):
    op_type = "LogicalNot"

    def __init__(self, data: Output, *, name: Optional[str] = None):
        super().__init__((data,), name=name)
        if data.element_type != _BOOL:
            raise TypeError(f"LogicalNot expects a boolean operand, got {data.element_type}")
        self._set_output(0, _BOOL, data.partial_shape)


class Unsqueeze(Node):
    """Insert size-1 axes; ``axes`` must be a constant."""

    op_type = "Unsqueeze"

    def __init__(self, data: Output, axes: Output, *, name: Optional[str] = None):
        super().__init__((data, axes), name=name)
        axes_node = axes.node
        if not isinstance(axes_node, Constant):
            raise ValueError("Unsqueeze axes must be a constant")
        if not np.issubdtype(axes_node.value.dtype, np.integer):
            raise TypeError(f"Unsqueeze axes must be integers, got {axes_node.value.dtype}")
        self.axes: tuple[int, ...] = tuple(axes_node.cast_vector(np.int64))
        self._set_output(
            0, data.element_type, unsqueeze_shape(data.partial_shape, self.axes)
        )


class Convert(Node):
    op_type = "Convert"

    def __init__(self, data: Output, destination_type: Any, *, name: Optional[str] = None):
        super().__init__((data,), name=name)
        self.destination_type = np.dtype(destination_type)
        self._set_output(0, self.destination_type, data.partial_shape)


BINARY_OPS: dict[str, type[_BinaryElementwise]] = {
    cls.op_type: cls
    for cls in (
        Add,
        Subtract,
        Multiply,
        Divide,
        Less,
        Greater,
        Equal,
        LogicalAnd,
        LogicalOr,
    )
}


def make_binary(op_type: str, lhs: Output, rhs: Output) -> Output:
    return BINARY_OPS[op_type](lhs, rhs).output(0)


def unsqueeze(data: Output, axes: Sequence[int]) -> Output:
    axes_const = Constant(np.asarray(list(axes), dtype=np.int64))
    return Unsqueeze(data, axes_const.output(0)).output(0)
