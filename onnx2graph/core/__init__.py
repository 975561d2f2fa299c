# file: onnx2graph/core/__init__.py
"""Target computation-graph IR produced by the ONNX importer."""

from .function import Function
from .loop import (
    BodyOutputDescription,
    ConcatOutputDescription,
    InvariantInputDescription,
    Loop,
    MergedInputDescription,
    SpecialBodyPorts,
)
from .node import Constant, Node, Output, Parameter
from .ops import (
    Add,
    Convert,
    Divide,
    Equal,
    Greater,
    Less,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    Multiply,
    Subtract,
    Unsqueeze,
)
from .pretty import format_function
from .shapes import PartialShape, is_scalar, is_static

__all__ = [
    "Add",
    "BodyOutputDescription",
    "ConcatOutputDescription",
    "Constant",
    "Convert",
    "Divide",
    "Equal",
    "Function",
    "Greater",
    "InvariantInputDescription",
    "Less",
    "LogicalAnd",
    "LogicalNot",
    "LogicalOr",
    "Loop",
    "MergedInputDescription",
    "Multiply",
    "Node",
    "Output",
    "Parameter",
    "PartialShape",
    "SpecialBodyPorts",
    "Subtract",
    "Unsqueeze",
    "format_function",
    "is_scalar",
    "is_static",
]
