# file: onnx2graph/importer/exceptions.py

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover
    from onnx2graph.importer.node import ImportNode


class OnnxImportError(Exception):
    """Base class for errors raised while importing an ONNX model."""


class NodeValidationFailure(OnnxImportError, ValueError):
    """A node does not satisfy the structural requirements of its converter."""

    def __init__(
        self,
        message: str,
        *,
        node_name: str = "",
        op_type: str = "",
        actual: Any = None,
        required: Any = None,
    ):
        self.node_name = node_name
        self.op_type = op_type
        self.actual = actual
        self.required = required
        where = f"{op_type} node '{node_name}'" if op_type else f"node '{node_name}'"
        super().__init__(f"Check failed for {where}: {message}")


class UnsupportedOperatorError(OnnxImportError, NotImplementedError):
    def __init__(self, op_type: str, domain: str = "", opset: Optional[int] = None):
        self.op_type = op_type
        self.domain = domain
        self.opset = opset
        qual = f"{domain}.{op_type}" if domain else op_type
        suffix = f" at opset {opset}" if opset is not None else ""
        super().__init__(f"No converter registered for '{qual}'{suffix}")


def check_valid_node(
    node: "ImportNode",
    condition: bool,
    *message_parts: Any,
    actual: Any = None,
    required: Any = None,
) -> None:
    """Raise :class:`NodeValidationFailure` built from ``message_parts`` unless ``condition``."""
    if condition:
        return
    raise NodeValidationFailure(
        "".join(str(p) for p in message_parts),
        node_name=node.name,
        op_type=node.op_type,
        actual=actual,
        required=required,
    )
