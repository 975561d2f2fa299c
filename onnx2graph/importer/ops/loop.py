# file: onnx2graph/importer/ops/loop.py

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from onnx2graph.core import (
    Constant,
    Function,
    Loop,
    Output,
    Parameter,
    SpecialBodyPorts,
    format_function,
)
from onnx2graph.core.ops import unsqueeze
from onnx2graph.core.shapes import is_scalar
from onnx2graph.importer.diagnostics import Diagnostics
from onnx2graph.importer.exceptions import check_valid_node
from onnx2graph.importer.graph import Subgraph
from onnx2graph.importer.node import ImportNode, Omitted, OptionalInput, is_omitted
from onnx2graph.importer.registry import OpConverter, register_op
from onnx2graph.testing import (
    make_counter_loop_model,
    make_dynamic_condition_loop_model,
    make_false_entry_loop_model,
)

logger = logging.getLogger("onnx2graph.importer.ops.loop")

DEBUG = bool(int(os.getenv("ONNX2GRAPH_LOOP_DEBUG", "0")))

CONCAT_AXIS = 0

# trip count used when the model leaves it out: governed by the condition only
UNBOUNDED_TRIP_COUNT = -1

UNSUPPORTED_ENTRY_CONDITION = (
    "non-constant entry condition is not supported; the loop is entered unconditionally"
)
UNSUPPORTED_BODY_CONDITION = (
    "unsupported non-identity, non-constant condition body; "
    "the condition output is replaced with true"
)


def _literal_true() -> Output:
    return Constant.create(np.bool_, (), [True]).output(0)


@dataclass(frozen=True)
class ZeroIteration:
    """The loop provably runs no iteration; ``outputs`` replace its results."""

    outputs: Tuple[Output, ...]


# ------------------------------------------------------------------------------
# Optional inputs
# ------------------------------------------------------------------------------


def resolve_trip_count(trip_count: OptionalInput) -> Output:
    if is_omitted(trip_count):
        return Constant.create(np.int64, (), [UNBOUNDED_TRIP_COUNT]).output(0)
    return trip_count  # type: ignore[return-value]


def resolve_entry_condition(
    condition: OptionalInput,
    carried: Sequence[Output],
    diagnostics: Diagnostics,
    *,
    node_name: str = "",
) -> Output | ZeroIteration:
    """
    Resolve the entry condition to a literal ``true`` unless it is a constant
    ``false``, in which case the initial values are returned twice: once as
    final values and once as (empty) scan outputs.
    """
    if is_omitted(condition):
        return _literal_true()
    value = condition.node.as_constant_bool()  # type: ignore[union-attr]
    if value is True:
        return _literal_true()
    if value is False:
        return ZeroIteration(tuple(carried) + tuple(carried))
    diagnostics.warn(UNSUPPORTED_ENTRY_CONDITION, op_type="Loop", node_name=node_name)
    return _literal_true()


# ------------------------------------------------------------------------------
# Body signature
# ------------------------------------------------------------------------------


def validate_body_signature(
    node: ImportNode,
    body_inputs: Sequence[Parameter],
    body_outputs: Sequence[Output],
    num_carried: int,
) -> None:
    check_valid_node(
        node,
        len(body_inputs) >= num_carried + 2,
        "The provided loop body graph inputs size (",
        len(body_inputs),
        ") is less than the sum of loop carried dependencies and two mandatory inputs (",
        num_carried + 2,
        ")",
        actual=len(body_inputs),
        required=num_carried + 2,
    )
    check_valid_node(
        node,
        len(body_outputs) >= num_carried + 1,
        "The provided loop body graph outputs size (",
        len(body_outputs),
        ") is less than the number of loop carried dependencies plus the condition (",
        num_carried + 1,
        ")",
        actual=len(body_outputs),
        required=num_carried + 1,
    )


def normalize_scan_outputs(
    body_outputs: Sequence[Output], num_carried: int
) -> Tuple[Output, ...]:
    """Give every statically scalar scan output a leading axis to concatenate on."""
    adapted = list(body_outputs[: num_carried + 1])
    for value in body_outputs[num_carried + 1 :]:
        if is_scalar(value.partial_shape):
            value = unsqueeze(value, [CONCAT_AXIS])
        adapted.append(value)
    return tuple(adapted)


# ------------------------------------------------------------------------------
# Termination condition
# ------------------------------------------------------------------------------


def is_termination_condition_always_true(body_out_cond: Output) -> bool:
    """
    True when the body condition output is ``LogicalOr(x, false)``.

    That is how a boolean Identity is imported: the body forwards the
    condition it received, which is true on every iteration that runs.
    """
    node = body_out_cond.node
    if node.kind() != "LogicalOr":
        return False
    return node.input(1).node.as_constant_bool() is False


def prove_termination_condition(
    body_outputs: Sequence[Output],
    diagnostics: Diagnostics,
    *,
    node_name: str = "",
) -> Tuple[Output, ...]:
    body_cond = body_outputs[0]
    if body_cond.node.as_constant_bool() is not None:
        return tuple(body_outputs)
    if not is_termination_condition_always_true(body_cond):
        # TODO: keep the data-dependent condition once Loop can evaluate it
        diagnostics.warn(UNSUPPORTED_BODY_CONDITION, op_type="Loop", node_name=node_name)
    return (_literal_true(),) + tuple(body_outputs[1:])


# ------------------------------------------------------------------------------
# Native node
# ------------------------------------------------------------------------------


def build_loop_node(
    trip_count: Output,
    entry_condition: Output,
    body_inputs: Sequence[Parameter],
    body_outputs: Sequence[Output],
    carried: Sequence[Output],
    captures: Sequence[Tuple[Parameter, Output]] = (),
    *,
    name: str = "",
) -> Tuple[Loop, List[Output]]:
    # body_inputs[0] is the iteration number, body_inputs[1] the condition
    carried_params = list(body_inputs[2 : 2 + len(carried)])
    capture_params = [param for param, _ in captures]
    body = Function(
        body_outputs,
        [body_inputs[1]] + carried_params + capture_params,
        name=f"{name or 'loop'}_body",
    )

    loop = Loop(trip_count, entry_condition, name=name or None)
    loop.set_special_body_ports(SpecialBodyPorts(condition_input_idx=0, condition_output_idx=0))
    loop.set_function(body)
    loop.bind_iteration_counter(body_inputs[0])

    # body_outputs[0] is the condition output
    final_values: List[Output] = []
    for initial, param, result in zip(carried, carried_params, body_outputs[1:]):
        loop.set_merged_input(param, initial, result)
        final_values.append(loop.get_iter_value(result, -1))

    for param, outer in captures:
        loop.set_invariant_input(param, outer)

    scan_outputs: List[Output] = []
    for result in body_outputs[len(carried) + 1 :]:
        # start=0, stride=1, part_size=1, end=-1
        scan_outputs.append(loop.get_concatenated_slices(result, 0, 1, 1, -1, CONCAT_AXIS))

    return loop, final_values + scan_outputs


def lower_loop(node: ImportNode) -> List[Output]:
    ng_inputs = node.get_ng_inputs()
    carried: List[Output] = []
    for i, value in enumerate(ng_inputs[2:], start=2):
        check_valid_node(
            node, not is_omitted(value), "Loop carried dependency input ", i, " is missing"
        )
        carried.append(value)  # type: ignore[arg-type]

    body: Subgraph = node.get_subgraph("body")
    body_inputs = body.get_ng_parameters()
    body_outputs = body.get_ng_outputs()

    trip_count = resolve_trip_count(ng_inputs[0] if ng_inputs else Omitted(0))
    entry = resolve_entry_condition(
        ng_inputs[1] if len(ng_inputs) > 1 else Omitted(1),
        carried,
        node.diagnostics,
        node_name=node.name,
    )
    if isinstance(entry, ZeroIteration):
        logger.debug("Loop '%s' never runs; forwarding initial values", node.name)
        return list(entry.outputs)

    validate_body_signature(node, body_inputs, body_outputs, len(carried))
    adapted = normalize_scan_outputs(body_outputs, len(carried))
    adapted = prove_termination_condition(adapted, node.diagnostics, node_name=node.name)

    loop, outputs = build_loop_node(
        trip_count,
        entry,
        body_inputs,
        adapted,
        carried,
        body.outer_inputs,
        name=node.name,
    )
    if DEBUG or logger.isEnabledFor(logging.DEBUG):
        logger.debug("Loop '%s' body:\n%s", node.name, format_function(loop.function))
    return outputs


@register_op(
    op_type="Loop",
    since_version=1,
    onnx_doc="https://onnx.ai/onnx/operators/onnx__Loop.html",
    component="loop",
    testcases=[
        {
            "testcase": "loop_counter_with_scan",
            "model": lambda: make_counter_loop_model(trip_count=4),
            "expected_output_shapes": [(), (4, 1)],
        },
        {
            "testcase": "loop_scalar_scan_unbounded",
            "model": lambda: make_counter_loop_model(trip_count=None, scan_rank=0),
            "expected_output_shapes": [(), (None,)],
        },
        {
            "testcase": "loop_false_entry_condition",
            "model": make_false_entry_loop_model,
            "expected_output_shapes": [(2,), (2,)],
        },
        {
            "testcase": "loop_dynamic_condition",
            "model": make_dynamic_condition_loop_model,
            "expected_output_shapes": [(), (None, 1)],
            "expected_warnings": 1,
        },
    ],
)
class LoopConverter(OpConverter):
    """Lower ONNX ``Loop`` to the native :class:`Loop` node."""

    def lower(self, node: ImportNode) -> List[Output]:
        return lower_loop(node)
