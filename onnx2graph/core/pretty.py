# file: onnx2graph/core/pretty.py

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .function import Function
from .loop import ConcatOutputDescription, InvariantInputDescription, Loop
from .node import Constant, Node, Output
from .shapes import format_shape


# ------------------------------ helpers ------------------------------


def _indent(lines: Iterable[str], n: int = 2) -> List[str]:
    pad = " " * n
    return [pad + s for s in lines]


def _value_meta(v: Output) -> str:
    return f"{v.element_type} {format_shape(v.partial_shape)}"


def _short_tensor(arr: np.ndarray) -> str:
    if arr.ndim == 0:
        return f"scalar({arr.dtype}, {arr.item()})"
    if arr.size <= 4:
        return f"tensor({arr.dtype}, {arr.tolist()})"
    return f"tensor({arr.dtype}, shape={tuple(arr.shape)})"


def _node_lines(node: Node) -> List[str]:
    ins = ", ".join(v.name for v in node.input_values())
    head = f"{node.op_type} {node.name}({ins})"
    if isinstance(node, Constant):
        head += f" = {_short_tensor(node.value)}"
    lines = [head]
    lines.extend(_indent([f"-> {_value_meta(o)}" for o in node.outputs()], n=4))
    if isinstance(node, Loop):
        lines.extend(_indent(_loop_lines(node), n=4))
    return lines


def _loop_lines(loop: Loop) -> List[str]:
    ports = loop.special_body_ports
    lines = [
        f"special ports: condition_input={ports.condition_input_idx} "
        f"condition_output={ports.condition_output_idx}",
        f"iterations: {loop.num_iterations()}",
    ]
    for d in loop.input_descriptions:
        kind = "invariant" if isinstance(d, InvariantInputDescription) else "merged"
        lines.append(f"{kind} input #{d.input_index} -> body param {d.body_parameter_index}")
    for d in loop.output_descriptions:
        kind = "concat" if isinstance(d, ConcatOutputDescription) else "last"
        lines.append(f"{kind} output #{d.output_index} <- body result {d.body_value_index}")
    lines.append("body:")
    lines.extend(_indent(format_function(loop.function).splitlines()))
    return lines


# ----------------------------- functions ------------------------------


def format_function(fn: Function) -> str:
    """Readable dump of a function and every nested loop body."""
    out: List[str] = [f"Function '{fn.name}'"]
    sig_in = ", ".join(p.name for p in fn.parameters)
    sig_out = ", ".join(r.name for r in fn.results)
    out.append(f"  signature: ({sig_in}) -> ({sig_out})")
    nodes = [n for n in fn.get_ordered_ops()]
    out.append(f"  nodes: {len(nodes)}")
    for i, n in enumerate(nodes):
        body = _node_lines(n)
        out.append(f"    [{i}] {body[0]}")
        out.extend(_indent(body[1:], n=4))
    return "\n".join(out)
