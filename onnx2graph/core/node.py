# file: onnx2graph/core/node.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional, Sequence, Tuple

import numpy as np

from .shapes import PartialShape, format_shape, to_partial_shape


@dataclass(frozen=True)
class Output:
    """Handle on one output port of a node."""

    node: "Node"
    index: int = 0

    def get_node(self) -> "Node":
        return self.node

    @property
    def element_type(self) -> np.dtype:
        return self.node.output_element_type(self.index)

    @property
    def partial_shape(self) -> PartialShape:
        return self.node.output_partial_shape(self.index)

    @property
    def name(self) -> str:
        if self.node.num_outputs() == 1:
            return self.node.name
        return f"{self.node.name}:{self.index}"

    def __repr__(self) -> str:
        return (
            f"<Output {self.name} {self.element_type} "
            f"{format_shape(self.partial_shape)}>"
        )


class Node:
    """
    Base class of the target graph IR.

    Subclasses set ``op_type`` and fill ``_output_specs`` with one
    ``(element_type, partial_shape)`` pair per output.
    """

    op_type: ClassVar[str] = "Node"

    def __init__(self, inputs: Sequence[Output] = (), *, name: Optional[str] = None):
        for i, v in enumerate(inputs):
            if not isinstance(v, Output):
                raise TypeError(
                    f"{self.op_type} input {i} must be an Output, got {type(v).__name__}"
                )
        self._inputs: Tuple[Output, ...] = tuple(inputs)
        self._output_specs: List[Tuple[np.dtype, PartialShape]] = []
        self._name = name

    # ---------- identity ----------
    def kind(self) -> str:
        return self.op_type

    @property
    def name(self) -> str:
        return self._name or f"{self.op_type}_{id(self):x}"

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    # ---------- inputs ----------
    def input(self, i: int) -> Output:
        return self._inputs[i]

    def input_values(self) -> Tuple[Output, ...]:
        return self._inputs

    def get_input_size(self) -> int:
        return len(self._inputs)

    # ---------- outputs ----------
    def num_outputs(self) -> int:
        return len(self._output_specs)

    def output(self, i: int = 0) -> Output:
        if not 0 <= i < self.num_outputs():
            raise IndexError(f"{self.name} has no output {i}")
        return Output(self, i)

    def outputs(self) -> List[Output]:
        return [Output(self, i) for i in range(self.num_outputs())]

    def output_element_type(self, i: int) -> np.dtype:
        return self._output_specs[i][0]

    def output_partial_shape(self, i: int) -> PartialShape:
        return self._output_specs[i][1]

    def _set_output(self, i: int, element_type: Any, shape: PartialShape) -> None:
        spec = (np.dtype(element_type), shape)
        if i == len(self._output_specs):
            self._output_specs.append(spec)
        else:
            self._output_specs[i] = spec

    # ---------- capabilities ----------
    def as_constant_bool(self) -> Optional[bool]:
        """First element of a boolean constant, None for anything else."""
        return None

    def is_constant(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"<{self.op_type} {self.name}>"


class Parameter(Node):
    op_type = "Parameter"

    def __init__(
        self,
        element_type: Any,
        partial_shape: PartialShape,
        *,
        name: Optional[str] = None,
    ):
        super().__init__((), name=name)
        self._set_output(0, element_type, partial_shape)

    @property
    def element_type(self) -> np.dtype:
        return self.output_element_type(0)

    @property
    def partial_shape(self) -> PartialShape:
        return self.output_partial_shape(0)


class Constant(Node):
    op_type = "Constant"

    def __init__(self, value: Any, *, name: Optional[str] = None):
        super().__init__((), name=name)
        arr = np.array(value)
        arr.setflags(write=False)
        self._value = arr
        self._set_output(0, arr.dtype, to_partial_shape(arr.shape))

    @classmethod
    def create(
        cls,
        element_type: Any,
        shape: Sequence[int],
        values: Sequence[Any],
        *,
        name: Optional[str] = None,
    ) -> "Constant":
        """Build a constant, broadcasting a single value over ``shape``."""
        dtype = np.dtype(element_type)
        shape = tuple(int(d) for d in shape)
        flat = np.asarray(values, dtype=dtype).reshape(-1)
        size = int(np.prod(shape)) if shape else 1
        if flat.size == 1 and size != 1:
            flat = np.full(size, flat[0], dtype=dtype)
        if flat.size != size:
            raise ValueError(
                f"Constant of shape {shape} needs {size} values, got {flat.size}"
            )
        return cls(flat.reshape(shape), name=name)

    @property
    def value(self) -> np.ndarray:
        return self._value

    def cast_vector(self, dtype: Any) -> list:
        return self._value.astype(dtype).reshape(-1).tolist()

    def is_constant(self) -> bool:
        return True

    def as_constant_bool(self) -> Optional[bool]:
        if self._value.dtype != np.bool_ or self._value.size == 0:
            return None
        return bool(self._value.reshape(-1)[0])

