# file: onnx2graph/core/loop.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from .function import Function
from .node import Constant, Node, Output, Parameter
from .shapes import PartialShape, merge_shapes, normalize_axis


@dataclass(frozen=True)
class SpecialBodyPorts:
    """Body slots reserved for condition signaling."""

    condition_input_idx: int = -1
    condition_output_idx: int = -1


@dataclass(frozen=True)
class MergedInputDescription:
    input_index: int
    body_parameter_index: int
    body_value_index: int


@dataclass(frozen=True)
class InvariantInputDescription:
    input_index: int
    body_parameter_index: int


@dataclass(frozen=True)
class BodyOutputDescription:
    body_value_index: int
    output_index: int
    iteration: int = -1


@dataclass(frozen=True)
class ConcatOutputDescription:
    body_value_index: int
    output_index: int
    start: int
    stride: int
    part_size: int
    end: int
    axis: int


InputDescription = Union[MergedInputDescription, InvariantInputDescription]
OutputDescription = Union[BodyOutputDescription, ConcatOutputDescription]


def _as_int_constant(value: Output) -> Optional[int]:
    node = value.node
    if isinstance(node, Constant) and node.value.size >= 1:
        return int(node.cast_vector(np.int64)[0])
    return None


class Loop(Node):
    """
    Native iteration node.

    Inputs are ``[trip_count, execution_condition, *bound values]``; outputs
    are created one at a time by :meth:`get_iter_value` and
    :meth:`get_concatenated_slices`. The body function is evaluated once per
    iteration; the special ports name the body parameter fed with the current
    condition and the body result read back as the next condition.
    """

    op_type = "Loop"

    def __init__(self, trip_count: Output, execution_condition: Output, *, name=None):
        super().__init__((trip_count, execution_condition), name=name)
        if not np.issubdtype(trip_count.element_type, np.integer):
            raise TypeError(
                f"Loop trip count must be an integer, got {trip_count.element_type}"
            )
        if execution_condition.element_type != np.bool_:
            raise TypeError(
                "Loop execution condition must be boolean, got "
                f"{execution_condition.element_type}"
            )
        self._function: Optional[Function] = None
        self._special_ports = SpecialBodyPorts()
        self._iteration_counter: Optional[Parameter] = None
        self._input_descriptions: List[InputDescription] = []
        self._output_descriptions: List[OutputDescription] = []

    # ---------- configuration ----------
    @property
    def trip_count(self) -> Output:
        return self.input(0)

    @property
    def execution_condition(self) -> Output:
        return self.input(1)

    @property
    def function(self) -> Function:
        if self._function is None:
            raise ValueError(f"{self.name}: body function is not set")
        return self._function

    def set_function(self, function: Function) -> None:
        self._check_ports(function, self._special_ports)
        self._function = function

    @property
    def special_body_ports(self) -> SpecialBodyPorts:
        return self._special_ports

    def set_special_body_ports(self, ports: SpecialBodyPorts) -> None:
        if self._function is not None:
            self._check_ports(self._function, ports)
        self._special_ports = ports

    @property
    def iteration_counter(self) -> Optional[Parameter]:
        return self._iteration_counter

    def bind_iteration_counter(self, parameter: Parameter) -> None:
        """Attach the parameter that receives the current iteration number."""
        if not np.issubdtype(parameter.element_type, np.integer):
            raise TypeError(
                f"Iteration counter must be an integer, got {parameter.element_type}"
            )
        if self._function is not None and self.function.get_parameter_index(parameter) >= 0:
            raise ValueError("Iteration counter must not be an ordinary body parameter")
        self._iteration_counter = parameter

    @staticmethod
    def _check_ports(function: Function, ports: SpecialBodyPorts) -> None:
        cin, cout = ports.condition_input_idx, ports.condition_output_idx
        if cin >= len(function.parameters):
            raise ValueError(f"Condition input port {cin} is out of range")
        if cout >= len(function.results):
            raise ValueError(f"Condition output port {cout} is out of range")
        if cout >= 0 and function.results[cout].element_type != np.bool_:
            raise TypeError("Body condition output must be boolean")

    @property
    def input_descriptions(self) -> Tuple[InputDescription, ...]:
        return tuple(self._input_descriptions)

    @property
    def output_descriptions(self) -> Tuple[OutputDescription, ...]:
        return tuple(self._output_descriptions)

    def _append_input(self, value: Output) -> int:
        self._inputs = self._inputs + (value,)
        return len(self._inputs) - 1

    def _parameter_index(self, parameter: Parameter) -> int:
        idx = self.function.get_parameter_index(parameter)
        if idx < 0:
            raise ValueError(f"{parameter!r} is not a parameter of the loop body")
        if idx == self._special_ports.condition_input_idx:
            raise ValueError(f"{parameter!r} is reserved for the loop condition")
        return idx

    def _result_index(self, value: Output) -> int:
        idx = self.function.get_result_index(value)
        if idx < 0:
            raise ValueError(f"{value!r} is not a result of the loop body")
        return idx

    def set_merged_input(self, body_parameter: Parameter, initial: Output, successive: Output) -> None:
        """Bind ``initial`` on the first iteration, ``successive`` afterwards."""
        param_idx = self._parameter_index(body_parameter)
        value_idx = self._result_index(successive)
        self._input_descriptions.append(
            MergedInputDescription(self._append_input(initial), param_idx, value_idx)
        )

    def set_invariant_input(self, body_parameter: Parameter, value: Output) -> None:
        """Bind ``value`` on every iteration."""
        param_idx = self._parameter_index(body_parameter)
        self._input_descriptions.append(
            InvariantInputDescription(self._append_input(value), param_idx)
        )

    def get_iter_value(self, body_value: Output, iteration: int = -1) -> Output:
        """Value of ``body_value`` produced on ``iteration`` (-1: the last one)."""
        if iteration != -1:
            raise ValueError("Only the last iteration value (-1) can be extracted")
        desc = BodyOutputDescription(
            self._result_index(body_value), len(self._output_descriptions), iteration
        )
        self._output_descriptions.append(desc)
        self._set_output(desc.output_index, *self._infer_iter_value(desc))
        return self.output(desc.output_index)

    def get_concatenated_slices(
        self,
        body_value: Output,
        start: int,
        stride: int,
        part_size: int,
        end: int,
        axis: int,
    ) -> Output:
        """Concatenate ``body_value`` from every iteration along ``axis``."""
        if stride != 1 or part_size != 1 or start != 0 or end != -1:
            raise ValueError(
                "Only start=0, stride=1, part_size=1, end=-1 slices are supported"
            )
        desc = ConcatOutputDescription(
            self._result_index(body_value),
            len(self._output_descriptions),
            start,
            stride,
            part_size,
            end,
            axis,
        )
        self._output_descriptions.append(desc)
        self._set_output(desc.output_index, *self._infer_concat(desc))
        return self.output(desc.output_index)

    # ---------- shape inference ----------
    def num_iterations(self) -> Optional[int]:
        """Statically known iteration count, None when it depends on data."""
        entry = self.execution_condition.node.as_constant_bool()
        if entry is False:
            return 0
        if entry is None:
            return None
        trip = _as_int_constant(self.trip_count)
        cout = self._special_ports.condition_output_idx
        if cout < 0:
            body_cond: Optional[bool] = True
        else:
            body_cond = self.function.results[cout].node.as_constant_bool()
        if body_cond is None:
            return None
        if body_cond is False:
            # the body always runs once before the condition is read back
            if trip is None:
                return None
            return 1 if trip < 0 else min(trip, 1)
        if trip is None or trip < 0:
            return None
        return trip

    def _infer_iter_value(self, desc: BodyOutputDescription) -> Tuple[np.dtype, PartialShape]:
        result = self.function.results[desc.body_value_index]
        shape = result.partial_shape
        for inp in self._input_descriptions:
            if isinstance(inp, MergedInputDescription) and inp.body_value_index == desc.body_value_index:
                shape = merge_shapes(shape, self.input(inp.input_index).partial_shape)
        return result.element_type, shape

    def _infer_concat(self, desc: ConcatOutputDescription) -> Tuple[np.dtype, PartialShape]:
        result = self.function.results[desc.body_value_index]
        shape = result.partial_shape
        if shape is None:
            return result.element_type, None
        if len(shape) == 0:
            raise ValueError(
                f"{self.name}: cannot concatenate rank-0 body value {result!r}; "
                "insert an axis first"
            )
        axis = normalize_axis(desc.axis, len(shape))
        n = self.num_iterations()
        dim = shape[axis]
        dims = list(shape)
        dims[axis] = n * dim if (n is not None and dim is not None) else None
        return result.element_type, tuple(dims)
