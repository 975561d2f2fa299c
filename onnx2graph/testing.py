# file: onnx2graph/testing.py
"""
Small ONNX model factories shared by converter testcases and the test suite.

Every factory returns an ``onnx.ModelProto`` built with ``onnx.helper``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import onnx
from onnx import TensorProto, helper, numpy_helper

DEFAULT_OPSET = 17
# runtimes lag behind the newest IR version onnx.helper would stamp
IR_VERSION = 8

BODY_CONDITIONS = ("identity", "less", "constant_true", "or_self")


def _vi(name: str, elem_type: int, shape: Optional[Sequence] = ()):
    return helper.make_tensor_value_info(name, elem_type, shape)


def _const_node(name: str, value) -> onnx.NodeProto:
    return helper.make_node(
        "Constant",
        inputs=[],
        outputs=[name],
        value=numpy_helper.from_array(np.asarray(value), name=name),
    )


def make_counter_body(
    *,
    scan_rank: int = 1,
    condition: str = "identity",
    limit_name: str = "limit",
    opset: int = DEFAULT_OPSET,
) -> onnx.GraphProto:
    """
    Loop body counting an int64 up by one per iteration.

    Inputs ``(iter_num, cond_in, i_in)``; outputs ``(cond_out, i_out, scan_out)``.
    ``scan_out`` is ``i_out * 2`` (rank 0) or ``[i_out]`` (rank 1).
    ``condition`` picks how ``cond_out`` is computed; ``"less"`` compares
    against ``limit_name`` from the enclosing graph.
    """
    if condition not in BODY_CONDITIONS:
        raise ValueError(f"Unknown body condition {condition!r}")
    nodes = [
        _const_node("one", np.int64(1)),
        helper.make_node("Add", ["i_in", "one"], ["i_out"]),
    ]
    if condition == "identity":
        nodes.append(helper.make_node("Identity", ["cond_in"], ["cond_out"]))
    elif condition == "less":
        nodes.append(helper.make_node("Less", ["i_out", limit_name], ["cond_out"]))
    elif condition == "constant_true":
        nodes.append(_const_node("cond_out", np.bool_(True)))
    else:
        nodes.append(helper.make_node("Or", ["cond_in", "cond_in"], ["cond_out"]))

    if scan_rank == 0:
        nodes.append(_const_node("two", np.int64(2)))
        nodes.append(helper.make_node("Mul", ["i_out", "two"], ["scan_out"]))
    elif scan_rank == 1:
        if opset >= 13:
            nodes.append(_const_node("axes", np.asarray([0], dtype=np.int64)))
            nodes.append(helper.make_node("Unsqueeze", ["i_out", "axes"], ["scan_out"]))
        else:
            nodes.append(helper.make_node("Unsqueeze", ["i_out"], ["scan_out"], axes=[0]))
    else:
        raise ValueError(f"scan_rank must be 0 or 1, got {scan_rank}")

    return helper.make_graph(
        nodes,
        "counter_body",
        inputs=[
            _vi("iter_num", TensorProto.INT64),
            _vi("cond_in", TensorProto.BOOL),
            _vi("i_in", TensorProto.INT64),
        ],
        outputs=[
            _vi("cond_out", TensorProto.BOOL),
            _vi("i_out", TensorProto.INT64),
            _vi("scan_out", TensorProto.INT64, [1] if scan_rank == 1 else []),
        ],
    )


def make_loop_model(
    body: onnx.GraphProto,
    *,
    loop_inputs: Sequence[str],
    loop_outputs: Sequence[str],
    graph_inputs: Sequence[onnx.ValueInfoProto],
    graph_outputs: Optional[Sequence[onnx.ValueInfoProto]] = None,
    initializers: Sequence[onnx.TensorProto] = (),
    opset: int = DEFAULT_OPSET,
    name: str = "loop_model",
) -> onnx.ModelProto:
    """
    Wrap ``body`` in a single ``Loop`` node named ``loop``.

    Graph outputs default to the element type of the matching body output
    with an unknown shape.
    """
    loop = helper.make_node(
        "Loop", list(loop_inputs), list(loop_outputs), name="loop", body=body
    )
    if graph_outputs is None:
        graph_outputs = [
            helper.make_tensor_value_info(
                name, body.output[i + 1].type.tensor_type.elem_type, None
            )
            for i, name in enumerate(loop_outputs)
        ]
    graph = helper.make_graph(
        [loop],
        name,
        inputs=list(graph_inputs),
        outputs=list(graph_outputs),
        initializer=list(initializers),
    )
    return helper.make_model(
        graph, opset_imports=[helper.make_opsetid("", opset)], ir_version=IR_VERSION
    )


def _counter_outputs(scan_rank: int) -> list[onnx.ValueInfoProto]:
    return [
        _vi("i_final", TensorProto.INT64),
        _vi("i_scan", TensorProto.INT64, [None] * (scan_rank + 1)),
    ]


def make_counter_loop_model(
    *,
    trip_count: Optional[int] = 4,
    scan_rank: int = 1,
    condition: str = "identity",
    entry_condition: Optional[bool] = True,
    opset: int = DEFAULT_OPSET,
) -> onnx.ModelProto:
    """
    ``i_final, i_scan = Loop(M, cond, i0)`` around :func:`make_counter_body`.

    ``trip_count=None`` leaves ``M`` out, ``entry_condition=None`` leaves
    ``cond`` out. ``condition="less"`` adds a graph input ``limit``.
    """
    initializers = []
    if trip_count is not None:
        initializers.append(numpy_helper.from_array(np.asarray(trip_count, dtype=np.int64), "M"))
    if entry_condition is not None:
        initializers.append(numpy_helper.from_array(np.asarray(entry_condition), "cond"))
    graph_inputs = [_vi("i0", TensorProto.INT64)]
    if condition == "less":
        graph_inputs.append(_vi("limit", TensorProto.INT64))
    return make_loop_model(
        make_counter_body(scan_rank=scan_rank, condition=condition, opset=opset),
        loop_inputs=[
            "M" if trip_count is not None else "",
            "cond" if entry_condition is not None else "",
            "i0",
        ],
        loop_outputs=["i_final", "i_scan"],
        graph_inputs=graph_inputs,
        graph_outputs=_counter_outputs(scan_rank),
        initializers=initializers,
        opset=opset,
        name="counter_loop",
    )


def make_false_entry_loop_model(opset: int = DEFAULT_OPSET) -> onnx.ModelProto:
    """A loop whose constant entry condition is false: it never runs."""
    body = helper.make_graph(
        [
            helper.make_node("Identity", ["cond_in"], ["cond_out"]),
            helper.make_node("Add", ["x_in", "x_in"], ["x_out"]),
            helper.make_node("Mul", ["x_in", "x_in"], ["x_sq"]),
        ],
        "false_entry_body",
        inputs=[
            _vi("iter_num", TensorProto.INT64),
            _vi("cond_in", TensorProto.BOOL),
            _vi("x_in", TensorProto.FLOAT, [2]),
        ],
        outputs=[
            _vi("cond_out", TensorProto.BOOL),
            _vi("x_out", TensorProto.FLOAT, [2]),
            _vi("x_sq", TensorProto.FLOAT, [2]),
        ],
    )
    return make_loop_model(
        body,
        loop_inputs=["M", "cond", "x"],
        loop_outputs=["x_final", "x_scan"],
        graph_inputs=[_vi("x", TensorProto.FLOAT, [2])],
        initializers=[
            numpy_helper.from_array(np.asarray(3, dtype=np.int64), "M"),
            numpy_helper.from_array(np.asarray(False), "cond"),
        ],
        opset=opset,
        name="false_entry_loop",
    )


def make_dynamic_condition_loop_model(opset: int = DEFAULT_OPSET) -> onnx.ModelProto:
    """Unbounded counter that stops once it reaches the outer ``limit`` input."""
    return make_counter_loop_model(
        trip_count=None, scan_rank=1, condition="less", opset=opset
    )
