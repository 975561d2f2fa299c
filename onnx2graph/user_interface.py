# file: onnx2graph/user_interface.py

from __future__ import annotations

import logging
import os
from typing import Optional, Union

import onnx
import onnx_ir as ir

from onnx2graph.core import Function
from onnx2graph.importer.diagnostics import Diagnostics
from onnx2graph.importer.exceptions import OnnxImportError
from onnx2graph.importer.graph import Graph

logger = logging.getLogger("onnx2graph.user_interface")

PathLikeStr = Union[str, "os.PathLike[str]"]
ModelLike = Union[onnx.ModelProto, ir.Model, PathLikeStr]


def _to_ir_model(model: ModelLike) -> ir.Model:
    if isinstance(model, ir.Model):
        return model
    if isinstance(model, onnx.ModelProto):
        return ir.serde.deserialize_model(model)
    if isinstance(model, (str, os.PathLike)):
        return ir.serde.deserialize_model(onnx.load(os.fspath(model)))
    raise TypeError(f"Cannot import a model from {type(model).__name__}")


def import_onnx(
    model: ModelLike,
    *,
    diagnostics: Optional[Diagnostics] = None,
) -> Function:
    """
    Imports an ONNX model into the target graph IR.

    Args:
        model: An ``onnx.ModelProto``, an ``onnx_ir.Model`` or a path to a
            serialized model.
        diagnostics: Optional collector receiving non-fatal findings (for
            example loop conditions imported with a best-effort
            substitution). A fresh one is used when omitted; the findings are
            logged either way.

    Returns:
        A :class:`~onnx2graph.core.Function` whose parameters are the model's
        non-initializer inputs and whose results are the model's outputs.

    Raises:
        NodeValidationFailure: A node violates the structural requirements of
            its converter (e.g. a Loop body with too few inputs).
        UnsupportedOperatorError: No converter exists for an op at the
            model's opset.
    """
    ir_model = _to_ir_model(model)
    opsets = dict(ir_model.opset_imports)
    if "" not in opsets:
        if "ai.onnx" not in opsets:
            raise OnnxImportError("Model does not import the default ONNX opset")
        opsets[""] = opsets["ai.onnx"]
    logger.info(
        "Importing graph '%s' (opset %d, %d nodes)",
        ir_model.graph.name,
        opsets[""],
        len(ir_model.graph),
    )
    graph = Graph(ir_model.graph, opset_imports=opsets, diagnostics=diagnostics)
    if len(graph.diagnostics):
        logger.info("Import finished with %d diagnostic(s)", len(graph.diagnostics))
    return graph.to_function()
