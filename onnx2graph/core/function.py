# file: onnx2graph/core/function.py

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .node import Node, Output, Parameter


class Function:
    """A graph with an explicit, ordered parameter list and result list."""

    def __init__(
        self,
        results: Sequence[Output],
        parameters: Sequence[Parameter],
        *,
        name: Optional[str] = None,
    ):
        for p in parameters:
            if not isinstance(p, Parameter):
                raise TypeError(f"Function parameters must be Parameter nodes, got {p!r}")
        if len({id(p) for p in parameters}) != len(parameters):
            raise ValueError("Function parameters must be unique")
        self._results: Tuple[Output, ...] = tuple(results)
        self._parameters: Tuple[Parameter, ...] = tuple(parameters)
        self.name = name or "function"

    @property
    def results(self) -> Tuple[Output, ...]:
        return self._results

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return self._parameters

    def get_parameter_index(self, parameter: Parameter) -> int:
        for i, p in enumerate(self._parameters):
            if p is parameter:
                return i
        return -1

    def get_result_index(self, value: Output) -> int:
        for i, r in enumerate(self._results):
            if r == value:
                return i
        return -1

    def get_ordered_ops(self) -> List[Node]:
        """Nodes reachable from the results, producers before consumers."""
        ordered: List[Node] = []
        seen: set[int] = set()
        for p in self._parameters:
            seen.add(id(p))
            ordered.append(p)
        # iterative post-order DFS; loop bodies can get deep
        for root in self._results:
            stack: list[tuple[Node, bool]] = [(root.node, False)]
            while stack:
                node, expanded = stack.pop()
                if id(node) in seen:
                    continue
                if expanded:
                    seen.add(id(node))
                    ordered.append(node)
                    continue
                stack.append((node, True))
                for v in reversed(node.input_values()):
                    if id(v.node) not in seen:
                        stack.append((v.node, False))
        return ordered

    def __repr__(self) -> str:
        return (
            f"<Function {self.name} params={len(self._parameters)} "
            f"results={len(self._results)}>"
        )
